"""
Content Provider contract.

Every provider answers ``search(query, post_types, limit)`` with a list of
RawItem and never raises past that boundary: failures become an empty
contribution plus a logged warning. ``search_detailed`` additionally reports
which parts failed, so callers can apply negative caching.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass, field

from network_search.domain.entities import RawItem, SearchSource


@dataclass
class ProviderResult:
    """Items from one provider call plus failure bookkeeping."""

    source_name: str
    items: list[RawItem] = field(default_factory=list)
    attempted: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True unless every attempted lookup failed."""
        return self.attempted == 0 or self.failed < self.attempted

    def record_failure(self, error: BaseException | str) -> None:
        self.failed += 1
        self.errors.append(str(error))


class ContentProvider(abc.ABC):
    """Polymorphic search capability over one configured source."""

    def __init__(self, source: SearchSource) -> None:
        self._source = source

    @property
    def source(self) -> SearchSource:
        return self._source

    @property
    def name(self) -> str:
        return self._source.name

    async def search(
        self,
        query: str,
        post_types: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[RawItem]:
        """Search this source. Never raises; returns [] on failure."""
        result = await self.search_detailed(query, post_types, limit)
        return result.items

    @abc.abstractmethod
    async def search_detailed(
        self,
        query: str,
        post_types: Sequence[str] | None = None,
        limit: int | None = None,
        *,
        timeout: float | None = None,
    ) -> ProviderResult:
        """Search this source and report per-lookup failures. Never raises."""

    async def close(self) -> None:  # noqa: B027
        """Release resources held by the provider."""
