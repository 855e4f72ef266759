"""
SuggestionAssembler - typeahead suggestions.

Same fan-out as the full search, but shallower:
- queries shorter than 2 characters return [] without touching cache or sources
- small per-source caps (2 per site per post type locally, 3 per post type remotely)
- shorter remote timeout
- compact output ({title, url, sourceName}), no score

Suggestions are deduped by URL and truncated to ``suggest_limit`` in fan-out
order. They are deliberately not relevance-sorted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from network_search.application.search.fanout import FanOutExecutor
from network_search.application.search.result_aggregator import dedupe_by_url
from network_search.config import SearchSettings
from network_search.domain.entities import Suggestion
from network_search.infrastructure.cache.result_cache import CacheFamily, ResultCache, make_cache_key
from network_search.infrastructure.providers.base import ContentProvider, ProviderResult
from network_search.infrastructure.providers.remote import SUGGEST_FIELDS, RemoteWPProvider

logger = logging.getLogger(__name__)

MIN_SUGGEST_QUERY_LENGTH = 2


class SuggestionAssembler:
    """
    Builds typeahead suggestions from every enabled source.

    Usage:
        assembler = SuggestionAssembler(providers, cache, settings)
        suggestions = await assembler.suggest("kne")
    """

    def __init__(
        self,
        providers: Sequence[ContentProvider],
        cache: ResultCache,
        settings: SearchSettings | None = None,
    ) -> None:
        self._providers = [p for p in providers if p.source.enabled]
        self._cache = cache
        self._settings = settings or SearchSettings()
        self._executor = FanOutExecutor(deadline=self._settings.overall_timeout)

    def cache_key(self, query: str) -> str:
        return make_cache_key(CacheFamily.SUGGEST, query, limit=self._settings.suggest_limit)

    async def suggest(self, query: str | None) -> list[Suggestion]:
        cleaned = " ".join((query or "").split())
        if len(cleaned) < MIN_SUGGEST_QUERY_LENGTH:
            return []

        key = self.cache_key(cleaned)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Suggest cache hit for {cleaned!r}")
            return list(cached)

        generation = self._cache.generation
        suggestions = await self.compute(cleaned)
        self._cache.set(key, tuple(suggestions), self._settings.suggest_ttl, generation=generation)
        return suggestions

    async def compute(self, query: str) -> list[Suggestion]:
        outcomes = await self._executor.run(self._providers, lambda p: self._call(p, query))

        candidates = [Suggestion.from_item(item) for outcome in outcomes for item in outcome.result.items]
        return dedupe_by_url(candidates)[: self._settings.suggest_limit]

    async def _call(self, provider: ContentProvider, query: str) -> ProviderResult:
        if isinstance(provider, RemoteWPProvider):
            return await provider.search_detailed(
                query,
                limit=self._settings.suggest_remote_per_call,
                timeout=self._settings.suggest_timeout,
                fields=SUGGEST_FIELDS,
            )
        return await provider.search_detailed(
            query,
            limit=self._settings.suggest_local_per_site,
            timeout=self._settings.local_timeout,
        )
