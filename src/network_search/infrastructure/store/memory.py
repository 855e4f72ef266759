"""
In-memory multi-tenant content store.

Backs the local provider in tests, demos and single-process deployments.
The indexed lookup works on whole-word tokens, the way a keyword index
does: a query fragment such as "ortho" will not hit "Orthopedics" there,
which is exactly the gap the substring scan covers.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timezone

from network_search.domain.entities import (
    PUBLISH_STATUS,
    ContentEvent,
    ContentEventKind,
    ContentItem,
    Site,
)

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)

ContentListener = Callable[[ContentEvent], None]


def tokenize(text: str) -> set[str]:
    return {token.lower() for token in _TOKEN_RE.findall(text)}


class InMemoryContentStore:
    """
    Thread-safe in-memory implementation of ``LocalContentStore``.

    Mutations notify registered listeners with a ``ContentEvent`` so the
    search cache can be invalidated.

    Example:
        store = InMemoryContentStore()
        store.add_site(Site(1, "Knee Education", "https://knee.example.com"))
        store.add_item(ContentItem(1, 1, "page", "Knee Pain", "https://knee.example.com/pain/", now))
        store.search_published(1, "page", "knee", limit=10)
    """

    def __init__(self, sites: Iterable[Site] = (), items: Iterable[ContentItem] = ()) -> None:
        self._lock = threading.RLock()
        self._sites: dict[int, Site] = {}
        self._items: dict[tuple[int, int], ContentItem] = {}
        self._tokens: dict[tuple[int, int], set[str]] = {}
        self._listeners: list[ContentListener] = []
        for site in sites:
            self.add_site(site)
        for item in items:
            self._put(item)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: ContentListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: ContentEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_site(self, site: Site) -> None:
        with self._lock:
            self._sites[site.site_id] = site

    def _put(self, item: ContentItem) -> ContentItem | None:
        key = (item.site_id, item.item_id)
        with self._lock:
            if item.site_id not in self._sites:
                msg = f"Unknown site_id {item.site_id}"
                raise KeyError(msg)
            previous = self._items.get(key)
            self._items[key] = item
            self._tokens[key] = tokenize(f"{item.title} {item.body}")
        return previous

    def add_item(self, item: ContentItem) -> None:
        previous = self._put(item)
        kind = ContentEventKind.CREATED if previous is None else ContentEventKind.UPDATED
        self._emit(ContentEvent(kind=kind, post_type=item.post_type, post_id=item.item_id, new_status=item.status))

    def update_item(self, site_id: int, item_id: int, **changes) -> ContentItem:
        """Update fields of an item; a status change emits STATUS_CHANGED."""
        with self._lock:
            current = self._items[(site_id, item_id)]
            changes.setdefault("modified_at", datetime.now(timezone.utc))
            updated = replace(current, **changes)
            self._put(updated)

        if updated.status != current.status:
            event = ContentEvent(
                kind=ContentEventKind.STATUS_CHANGED,
                post_type=updated.post_type,
                post_id=item_id,
                old_status=current.status,
                new_status=updated.status,
            )
        else:
            event = ContentEvent(
                kind=ContentEventKind.UPDATED,
                post_type=updated.post_type,
                post_id=item_id,
                new_status=updated.status,
            )
        self._emit(event)
        return updated

    def delete_item(self, site_id: int, item_id: int) -> None:
        with self._lock:
            item = self._items.pop((site_id, item_id))
            self._tokens.pop((site_id, item_id), None)
        self._emit(
            ContentEvent(kind=ContentEventKind.DELETED, post_type=item.post_type, post_id=item_id, old_status=item.status)
        )

    # ------------------------------------------------------------------
    # LocalContentStore
    # ------------------------------------------------------------------

    def list_sites(self, public_only: bool = True) -> list[Site]:
        with self._lock:
            sites = sorted(self._sites.values(), key=lambda s: s.site_id)
        return [s for s in sites if s.is_active and (s.public or not public_only)]

    def _published(self, site_id: int, post_type: str) -> list[tuple[ContentItem, set[str]]]:
        with self._lock:
            return [
                (item, self._tokens[key])
                for key, item in self._items.items()
                if item.site_id == site_id and item.post_type == post_type and item.status == PUBLISH_STATUS
            ]

    def search_published(self, site_id: int, post_type: str, query: str, limit: int) -> list[ContentItem]:
        terms = tokenize(query)
        if not terms or limit <= 0:
            return []
        matches = [item for item, tokens in self._published(site_id, post_type) if terms <= tokens]
        matches.sort(key=lambda i: i.modified_at, reverse=True)
        return matches[:limit]

    def scan_published(self, site_id: int, post_type: str, pattern: str, limit: int) -> list[ContentItem]:
        needle = pattern.lower()
        if not needle or limit <= 0:
            return []
        matches = [
            item
            for item, _ in self._published(site_id, post_type)
            if needle in item.title.lower() or needle in item.body.lower()
        ]
        matches.sort(key=lambda i: i.title)
        return matches[:limit]

    def list_published(self, site_id: int, post_type: str) -> list[ContentItem]:
        items = [item for item, _ in self._published(site_id, post_type)]
        items.sort(key=lambda i: i.title)
        return items
