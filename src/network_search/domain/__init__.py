"""
Domain Layer - Core business logic for network search.

Pure entities with no I/O: sources, hits, suggestions, and local store records.
"""

from .entities import (
    ContentEvent,
    ContentItem,
    RankedHit,
    RawItem,
    SearchResponse,
    SearchSource,
    Site,
    SourceKind,
    Suggestion,
)

__all__ = [
    "SearchSource",
    "SourceKind",
    "RawItem",
    "RankedHit",
    "Suggestion",
    "SearchResponse",
    "Site",
    "ContentItem",
    "ContentEvent",
]
