"""
Domain Entities: local content store records and mutation events.

These mirror what the local multi-tenant store exposes: tenant sites,
published content items, and the create/update/delete/status-change events
the store emits when content mutates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

PUBLISH_STATUS = "publish"


@dataclass(frozen=True, slots=True)
class Site:
    """One tenant site of the local store."""

    site_id: int
    name: str
    home_url: str
    public: bool = True
    archived: bool = False
    spam: bool = False
    deleted: bool = False
    mature: bool = False

    @property
    def is_active(self) -> bool:
        return not (self.archived or self.spam or self.deleted)


@dataclass(frozen=True, slots=True)
class ContentItem:
    """One content item (page, post, ...) in a tenant site."""

    item_id: int
    site_id: int
    post_type: str
    title: str
    permalink: str
    modified_at: datetime
    body: str = ""
    status: str = PUBLISH_STATUS
    parent_id: int = 0

    @property
    def is_published(self) -> bool:
        return self.status == PUBLISH_STATUS


@dataclass
class PageNode:
    """A page in a site's hierarchical page tree."""

    item_id: int
    title: str
    url: str
    children: list[PageNode] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.item_id,
            "title": self.title,
            "url": self.url,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class SiteTree:
    """All published pages of one site, arranged by parent."""

    site_name: str
    site_url: str
    pages: list[PageNode] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "siteName": self.site_name,
            "siteUrl": self.site_url,
            "pages": [page.to_dict() for page in self.pages],
        }


class ContentEventKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"


@dataclass(frozen=True, slots=True)
class ContentEvent:
    """A content mutation reported by the local store."""

    kind: ContentEventKind
    post_type: str
    post_id: int | None = None
    old_status: str | None = None
    new_status: str | None = None

    @property
    def touches_published(self) -> bool:
        """Whether a status change moved content into or out of publish."""
        return PUBLISH_STATUS in (self.old_status, self.new_status)
