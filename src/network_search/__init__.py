"""
Network Search - aggregated search across a multi-tenant site network.

Fans a query out to the local content store and to remote WordPress sites,
scores titles against the query, merges and dedupes by URL, and caches the
result. A shallower path serves typeahead suggestions.

Usage:
    from network_search import NetworkSearchService, SearchSettings
    from network_search.infrastructure.store import InMemoryContentStore

    settings = SearchSettings.from_dict({
        "sources": [
            {"type": "local", "post_types": ["page"]},
            {"type": "remote_wp", "base_url": "https://footeducation.com", "score_bonus": 60},
        ],
    })
    service = NetworkSearchService.from_settings(settings, store=InMemoryContentStore())

    response = await service.aggregate("knee pain")
    for hit in response.hits:
        print(f"{hit.score} {hit.title} ({hit.source_name})")
"""

from .application.search import NetworkSearchService
from .config import SearchSettings
from .domain.entities import RankedHit, RawItem, SearchResponse, SearchSource, SourceKind, Suggestion

__version__ = "0.1.0"

__all__ = [
    "NetworkSearchService",
    "SearchSettings",
    "SearchSource",
    "SourceKind",
    "RawItem",
    "RankedHit",
    "Suggestion",
    "SearchResponse",
]
