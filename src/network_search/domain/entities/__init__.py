"""
Domain Entities

Core business objects for network search.
"""

from __future__ import annotations

from .content import (
    PUBLISH_STATUS,
    ContentEvent,
    ContentEventKind,
    ContentItem,
    PageNode,
    Site,
    SiteTree,
)
from .hit import RankedHit, RawItem, ResponseStatus, SearchResponse, Suggestion
from .source import (
    DEFAULT_POST_TYPES,
    LOCAL_PER_SITE_CAP,
    REMOTE_PER_CALL_CAP,
    SearchSource,
    SourceKind,
)

__all__ = [
    # Search sources
    "SearchSource",
    "SourceKind",
    "DEFAULT_POST_TYPES",
    "LOCAL_PER_SITE_CAP",
    "REMOTE_PER_CALL_CAP",
    # Results
    "RawItem",
    "RankedHit",
    "Suggestion",
    "SearchResponse",
    "ResponseStatus",
    # Local store records
    "Site",
    "ContentItem",
    "PageNode",
    "SiteTree",
    "ContentEvent",
    "ContentEventKind",
    "PUBLISH_STATUS",
]
