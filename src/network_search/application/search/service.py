"""
NetworkSearchService - the operations exposed to callers.

    aggregate(query, include_remote) -> SearchResponse
    suggest(query)                   -> list[Suggestion]
    invalidate_all()                 -> int
    handle_content_event(event)      -> bool
"""

from __future__ import annotations

import logging

import httpx

from network_search.application.search.aggregator import SearchAggregator
from network_search.application.search.invalidation import CacheInvalidator
from network_search.application.search.suggestions import SuggestionAssembler
from network_search.config import SearchSettings
from network_search.domain.entities import ContentEvent, SearchResponse, Suggestion
from network_search.infrastructure.cache.result_cache import ResultCache
from network_search.infrastructure.providers import ContentProvider, build_providers
from network_search.infrastructure.store.base import LocalContentStore

logger = logging.getLogger(__name__)


class NetworkSearchService:
    """
    Facade over aggregation, suggestions and cache invalidation.

    All parts share one ResultCache so that invalidate_all() clears every
    key family.
    """

    def __init__(
        self,
        providers: list[ContentProvider],
        cache: ResultCache,
        settings: SearchSettings | None = None,
    ) -> None:
        self._settings = settings or SearchSettings()
        self._providers = providers
        self._cache = cache
        self._aggregator = SearchAggregator(providers, cache, self._settings)
        self._suggestions = SuggestionAssembler(providers, cache, self._settings)
        self._invalidator = CacheInvalidator(cache, self._settings.watched_post_types)

    @classmethod
    def from_settings(
        cls,
        settings: SearchSettings,
        store: LocalContentStore | None = None,
        cache: ResultCache | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> NetworkSearchService:
        providers = build_providers(
            settings.sources,
            store,
            remote_timeout=settings.remote_timeout,
            client=client,
        )
        logger.info(f"Search service configured with {len(providers)} source(s): {[p.name for p in providers]}")
        if cache is None:
            cache = ResultCache(max_size=settings.cache_max_size)
        return cls(providers, cache, settings)

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def providers(self) -> list[ContentProvider]:
        return list(self._providers)

    async def aggregate(self, query: str | None, include_remote: bool = True) -> SearchResponse:
        return await self._aggregator.aggregate(query, include_remote=include_remote)

    async def suggest(self, query: str | None) -> list[Suggestion]:
        return await self._suggestions.suggest(query)

    def invalidate_all(self) -> int:
        return self._invalidator.invalidate_all()

    def handle_content_event(self, event: ContentEvent) -> bool:
        return self._invalidator.handle(event)

    async def aclose(self) -> None:
        for provider in self._providers:
            await provider.close()
