"""
Local Content Provider

Searches every public, active tenant site of the local store. For each site
and post type the indexed lookup runs first. Only when it returns no rows
at all does a direct substring scan over published titles and bodies run
instead; partial index hits are returned as they are.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

from network_search.domain.entities import LOCAL_PER_SITE_CAP, ContentItem, RawItem, SearchSource, Site
from network_search.infrastructure.providers.base import ContentProvider, ProviderResult
from network_search.infrastructure.store.base import LocalContentStore
from network_search.shared.async_utils import timeout_with_fallback
from network_search.shared.profiling import record_source_call

logger = logging.getLogger(__name__)


class LocalProvider(ContentProvider):
    """Content provider over the local multi-tenant store."""

    def __init__(self, source: SearchSource, store: LocalContentStore) -> None:
        super().__init__(source)
        self._store = store

    def per_site_limit(self, limit: int | None = None) -> int:
        """Items per site per post type; never above the hard cap."""
        cap = min(self._source.per_site_limit, LOCAL_PER_SITE_CAP)
        return cap if limit is None else max(0, min(limit, cap))

    async def search_detailed(
        self,
        query: str,
        post_types: Sequence[str] | None = None,
        limit: int | None = None,
        *,
        timeout: float | None = None,
    ) -> ProviderResult:
        def timed_out() -> ProviderResult:
            logger.warning(f"{self.name}: local search timed out after {timeout}s")
            failed = ProviderResult(source_name=self.name, attempted=1)
            failed.record_failure("timed out")
            return failed

        start = time.perf_counter()
        result = await timeout_with_fallback(
            asyncio.to_thread(self.search_sync, query, post_types, limit),
            timeout,
            fallback=timed_out,
        )
        record_source_call(self.name, (time.perf_counter() - start) * 1000, ok=result.ok)
        return result

    def search_sync(
        self,
        query: str,
        post_types: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> ProviderResult:
        """Blocking sweep over all sites; per-site failures are isolated."""
        types = list(post_types or self._source.post_types)
        per_site = self.per_site_limit(limit)
        result = ProviderResult(source_name=self.name)

        try:
            sites = self._store.list_sites(public_only=True)
        except Exception as e:
            logger.warning(f"{self.name}: could not enumerate sites: {e}")
            result.attempted = 1
            result.record_failure(e)
            return result

        for site in sites:
            result.attempted += 1
            try:
                for post_type in types:
                    for item in self._lookup(site, post_type, query, per_site):
                        result.items.append(self._to_raw_item(site, item))
            except Exception as e:
                logger.warning(f"{self.name}: site {site.site_id} ({site.name}) failed: {e}")
                result.record_failure(e)

        return result

    def _lookup(self, site: Site, post_type: str, query: str, limit: int) -> list[ContentItem]:
        if limit <= 0:
            return []
        items = self._store.search_published(site.site_id, post_type, query, limit)
        if not items:
            items = self._store.scan_published(site.site_id, post_type, query, limit)
            if items:
                logger.debug(f"{self.name}: fallback scan found {len(items)} {post_type} item(s) on site {site.site_id}")
        return [item for item in items if item.is_published][:limit]

    @staticmethod
    def _to_raw_item(site: Site, item: ContentItem) -> RawItem:
        return RawItem(
            title=item.title,
            url=item.permalink,
            source_name=site.name,
            source_url=site.home_url,
            modified_at=item.modified_at,
        )
