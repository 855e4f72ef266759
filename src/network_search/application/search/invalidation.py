"""
Cache invalidation on content mutation.

The local store reports create/update/delete/status-change events. Any
relevant event clears every cache family (search, suggest, remote, sitemap)
in one pass; clearing only one family would leave the others stale.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from network_search.domain.entities import ContentEvent, ContentEventKind
from network_search.infrastructure.cache.result_cache import ResultCache

logger = logging.getLogger(__name__)


class CacheInvalidator:
    """
    Decides whether a content event invalidates, and does it.

    Only watched post types count (pages by default). A status change only
    counts when it moves content into or out of ``publish``.
    """

    def __init__(self, cache: ResultCache, watched_post_types: Iterable[str] = ("page",)) -> None:
        self._cache = cache
        self._watched = frozenset(watched_post_types)

    def is_relevant(self, event: ContentEvent) -> bool:
        if self._watched and event.post_type not in self._watched:
            return False
        if event.kind is ContentEventKind.STATUS_CHANGED:
            return event.touches_published
        return True

    def invalidate_all(self) -> int:
        return self._cache.invalidate_all()

    def handle(self, event: ContentEvent) -> bool:
        """Apply one event. Returns True if the cache was cleared."""
        if not self.is_relevant(event):
            logger.debug(f"Ignoring content event {event.kind.value} for {event.post_type!r}")
            return False
        cleared = self.invalidate_all()
        logger.info(
            f"Content {event.kind.value} ({event.post_type} #{event.post_id}) invalidated {cleared} cache entries"
        )
        return True

    __call__ = handle
