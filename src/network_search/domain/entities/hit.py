"""
Domain Entities: RawItem, RankedHit, Suggestion, SearchResponse

Pure domain entities. Providers produce RawItem; the scorer wraps each in a
RankedHit; the suggestion path projects hits to the compact Suggestion shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class RawItem:
    """One candidate result before ranking. Immutable once created."""

    title: str
    url: str
    source_name: str
    source_url: str
    modified_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "sourceName": self.source_name,
            "sourceUrl": self.source_url,
            "modifiedAt": self.modified_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class RankedHit:
    """
    RawItem plus a non-negative relevance score.

    Ordering key is ``(score desc, modified_at desc)``; see ``sort_key``.
    """

    item: RawItem
    score: int = 0

    def __post_init__(self) -> None:
        if self.score < 0:
            msg = f"score must be >= 0, got {self.score}"
            raise ValueError(msg)

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def url(self) -> str:
        return self.item.url

    @property
    def source_name(self) -> str:
        return self.item.source_name

    @property
    def source_url(self) -> str:
        return self.item.source_url

    @property
    def modified_at(self) -> datetime:
        return self.item.modified_at

    def sort_key(self) -> tuple[int, float]:
        """Ascending sort on this key yields score desc, then modified desc."""
        return (-self.score, -_timestamp(self.item.modified_at))

    def to_suggestion(self) -> Suggestion:
        return Suggestion(title=self.item.title, url=self.item.url, source_name=self.item.source_name)

    def to_dict(self) -> dict[str, Any]:
        data = self.item.to_dict()
        data["score"] = self.score
        return data


@dataclass(frozen=True, slots=True)
class Suggestion:
    """Compact typeahead projection: no score, no modified time."""

    title: str
    url: str
    source_name: str

    @classmethod
    def from_item(cls, item: RawItem) -> Suggestion:
        return cls(title=item.title, url=item.url, source_name=item.source_name)

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url, "sourceName": self.source_name}


class ResponseStatus(str, Enum):
    OK = "ok"
    EMPTY_QUERY = "empty_query"


@dataclass(frozen=True)
class SearchResponse:
    """
    Result of one aggregate() call.

    An empty or whitespace-only query is not an error: it yields
    ``status=EMPTY_QUERY`` with no hits. Total provider failure yields
    ``status=OK`` with ``total == 0``.
    """

    query: str
    hits: tuple[RankedHit, ...] = ()
    status: ResponseStatus = ResponseStatus.OK
    from_cache: bool = False
    sources_failed: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.hits)

    @property
    def is_empty_query(self) -> bool:
        return self.status is ResponseStatus.EMPTY_QUERY

    @classmethod
    def empty_query(cls, query: str = "") -> SearchResponse:
        return cls(query=query, status=ResponseStatus.EMPTY_QUERY)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "status": self.status.value,
            "total": self.total,
            "sourcesFailed": list(self.sources_failed),
            "hits": [hit.to_dict() for hit in self.hits],
        }


def _timestamp(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()
