"""
Local content store contract.

The local store is multi-tenant: every call names its tenant explicitly via
``site_id``, so there is no ambient "current site" to switch and restore.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from network_search.domain.entities import ContentItem, Site


@runtime_checkable
class LocalContentStore(Protocol):
    """What the local provider and the sitemap builder need from the store."""

    def list_sites(self, public_only: bool = True) -> list[Site]:
        """Tenant sites that are active (not archived/spam/deleted), optionally public only."""
        ...

    def search_published(self, site_id: int, post_type: str, query: str, limit: int) -> list[ContentItem]:
        """Indexed lookup of published items matching ``query``."""
        ...

    def scan_published(self, site_id: int, post_type: str, pattern: str, limit: int) -> list[ContentItem]:
        """Direct case-insensitive substring scan over titles and bodies, ordered by title."""
        ...

    def list_published(self, site_id: int, post_type: str) -> list[ContentItem]:
        """Every published item of a type, ordered by title."""
        ...
