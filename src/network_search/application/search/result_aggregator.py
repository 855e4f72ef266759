"""
ResultAggregator - Multi-Source Result Merging and Ranking

Merges hits from every source into one list:
1. Deduplication by exact URL string (first occurrence wins)
2. Stable sort by score desc, then modified time desc

Architecture Decision:
    ResultAggregator operates on RankedHit objects.
    It does NOT make provider calls - purely processes existing results.

    URLs are compared verbatim. "http://a/x" and "https://a/x/" are two
    different results; fan-out order is source registration order, so the
    first-registered source's copy of a duplicate survives.

Example:
    >>> aggregator = ResultAggregator()
    >>> ranked, stats = aggregator.merge_with_stats(hits)
    >>> stats.duplicates_removed
    1
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from network_search.domain.entities import RankedHit


class _HasUrl(Protocol):
    @property
    def url(self) -> str: ...


U = TypeVar("U", bound=_HasUrl)


@dataclass
class MergeStats:
    """Statistics from one merge."""

    total_input: int = 0
    unique_hits: int = 0
    duplicates_removed: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_input": self.total_input,
            "unique_hits": self.unique_hits,
            "duplicates_removed": self.duplicates_removed,
            "by_source": self.by_source,
        }


def dedupe_by_url(items: Iterable[U]) -> list[U]:
    """Keep the first item for every distinct URL, preserving order."""
    seen: set[str] = set()
    unique: list[U] = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    return unique


class ResultAggregator:
    """
    Deduplicates and ranks hits from multiple sources.

    Usage:
        aggregator = ResultAggregator()
        ranked = aggregator.merge(local_hits + remote_hits)
    """

    def merge(self, hits: Iterable[RankedHit]) -> list[RankedHit]:
        """Dedupe by URL, then sort by (score desc, modified desc)."""
        ranked, _ = self.merge_with_stats(hits)
        return ranked

    def merge_with_stats(self, hits: Iterable[RankedHit]) -> tuple[list[RankedHit], MergeStats]:
        hit_list = list(hits)
        stats = MergeStats(total_input=len(hit_list))
        for hit in hit_list:
            stats.by_source[hit.source_name] = stats.by_source.get(hit.source_name, 0) + 1

        unique = dedupe_by_url(hit_list)
        stats.unique_hits = len(unique)
        stats.duplicates_removed = stats.total_input - stats.unique_hits

        # sorted() is stable: equal keys keep post-dedupe order
        return sorted(unique, key=lambda h: h.sort_key()), stats


def merge(hits: Iterable[RankedHit]) -> list[RankedHit]:
    """Module-level convenience wrapper around ``ResultAggregator.merge``."""
    return ResultAggregator().merge(hits)
