"""
SearchAggregator - full multi-source search.

Flow for one query:
    validate -> cache lookup -> concurrent fan-out to every selected source
    -> score (plus per-source bonus) -> merge (dedupe + sort) -> cache store

Remote sources additionally cache their own sub-results per (source, query):
successful lookups for ``remote_ttl``, failed ones for ``negative_ttl`` so an
unreachable site is not hit on every request.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

from network_search.application.search.fanout import BranchOutcome, FanOutExecutor
from network_search.application.search.result_aggregator import ResultAggregator
from network_search.application.search.scoring import score_items
from network_search.config import SearchSettings
from network_search.domain.entities import RankedHit, SearchResponse
from network_search.infrastructure.cache.result_cache import CacheFamily, ResultCache, make_cache_key
from network_search.infrastructure.providers.base import ContentProvider, ProviderResult
from network_search.shared.exceptions import EmptyQueryError

logger = logging.getLogger(__name__)


def validate_query(query: str | None) -> str:
    """Return the query with whitespace collapsed, or raise EmptyQueryError."""
    cleaned = " ".join((query or "").split())
    if not cleaned:
        raise EmptyQueryError(query)
    return cleaned


class SearchAggregator:
    """
    Aggregates relevance-ranked results from every configured source.

    Usage:
        aggregator = SearchAggregator(providers, ResultCache(), SearchSettings())
        response = await aggregator.aggregate("knee pain", include_remote=True)
        for hit in response.hits:
            print(hit.score, hit.title, hit.url)
    """

    def __init__(
        self,
        providers: Sequence[ContentProvider],
        cache: ResultCache,
        settings: SearchSettings | None = None,
        merger: ResultAggregator | None = None,
    ) -> None:
        self._providers = list(providers)
        self._cache = cache
        self._settings = settings or SearchSettings()
        self._merger = merger or ResultAggregator()
        self._executor = FanOutExecutor(deadline=self._settings.overall_timeout)

    @property
    def providers(self) -> list[ContentProvider]:
        return list(self._providers)

    def cache_key(self, query: str, include_remote: bool = True) -> str:
        return make_cache_key(CacheFamily.SEARCH, query, include_remote=include_remote)

    async def aggregate(self, query: str | None, include_remote: bool = True) -> SearchResponse:
        """
        Full search across sources.

        Never raises for provider trouble: an empty query yields the
        designated empty state, and total failure yields zero hits.
        """
        try:
            cleaned = validate_query(query)
        except EmptyQueryError:
            logger.debug("Empty query, returning empty state")
            return SearchResponse.empty_query(query or "")

        key = self.cache_key(cleaned, include_remote)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Search cache hit for {cleaned!r}")
            return dataclasses.replace(cached, query=cleaned, from_cache=True)

        generation = self._cache.generation
        response = await self.compute(cleaned, include_remote)
        ttl = self._settings.results_ttl
        if response.sources_failed and not response.hits:
            ttl = min(ttl, self._settings.negative_ttl)
        self._cache.set(key, response, ttl, generation=generation)
        return response

    async def compute(self, query: str, include_remote: bool = True) -> SearchResponse:
        """Run the fan-out and ranking without consulting the cache."""
        providers = self._select(include_remote)
        outcomes = await self._executor.run(providers, lambda p: self._call(p, query))

        hits: list[RankedHit] = []
        for outcome in outcomes:
            hits.extend(score_items(outcome.result.items, query, outcome.provider.source))

        ranked, stats = self._merger.merge_with_stats(hits)
        logger.info(
            f"Search {query!r}: {stats.unique_hits} hit(s) from {stats.total_input} candidate(s), "
            f"{stats.duplicates_removed} duplicate(s) removed"
        )
        return SearchResponse(
            query=query,
            hits=tuple(ranked),
            sources_failed=tuple(o.provider.name for o in outcomes if _fully_failed(o)),
        )

    def invalidate_all(self) -> int:
        return self._cache.invalidate_all()

    def _select(self, include_remote: bool) -> list[ContentProvider]:
        return [p for p in self._providers if p.source.enabled and (include_remote or not p.source.is_remote)]

    async def _call(self, provider: ContentProvider, query: str) -> ProviderResult:
        if not provider.source.is_remote:
            return await provider.search_detailed(query, timeout=self._settings.local_timeout)

        source = provider.source
        key = make_cache_key(
            CacheFamily.REMOTE,
            query,
            base_url=source.base_url,
            post_types=list(source.post_types),
            limit=source.per_call_limit,
        )

        def ttl_for(result: ProviderResult) -> float:
            if not result.ok and not result.items:
                return self._settings.negative_ttl
            return self._settings.remote_ttl

        return await self._cache.get_or_compute(
            key,
            lambda: provider.search_detailed(query, timeout=self._settings.remote_timeout),
            ttl=ttl_for,
        )


def _fully_failed(outcome: BranchOutcome) -> bool:
    return outcome.failed and not outcome.result.items
