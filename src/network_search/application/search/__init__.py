"""
Search application services.

- scoring: title relevance ladder
- result_aggregator: URL dedupe and ranking
- aggregator: full multi-source search with caching
- suggestions: typeahead assembler
- invalidation: content-event driven cache clearing
- service: facade exposing the caller operations
"""

from .aggregator import SearchAggregator, validate_query
from .fanout import BranchOutcome, FanOutExecutor
from .invalidation import CacheInvalidator
from .result_aggregator import MergeStats, ResultAggregator, dedupe_by_url, merge
from .scoring import score, score_item, score_items
from .service import NetworkSearchService
from .suggestions import MIN_SUGGEST_QUERY_LENGTH, SuggestionAssembler

__all__ = [
    "score",
    "score_item",
    "score_items",
    "ResultAggregator",
    "MergeStats",
    "dedupe_by_url",
    "merge",
    "FanOutExecutor",
    "BranchOutcome",
    "SearchAggregator",
    "validate_query",
    "SuggestionAssembler",
    "MIN_SUGGEST_QUERY_LENGTH",
    "CacheInvalidator",
    "NetworkSearchService",
]
