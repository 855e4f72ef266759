"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from network_search.config import SearchSettings
from network_search.domain.entities import ContentItem, RawItem, SearchSource, Site
from network_search.infrastructure.cache.result_cache import ResultCache
from network_search.infrastructure.providers.base import ContentProvider, ProviderResult
from network_search.infrastructure.store.memory import InMemoryContentStore
from network_search.shared import profiling

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================
# Test doubles
# ============================================================


class FakeTimer:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticProvider(ContentProvider):
    """Provider returning canned items; records every call."""

    def __init__(
        self,
        source: SearchSource,
        items: Iterable[RawItem] = (),
        *,
        error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        super().__init__(source)
        self._items = list(items)
        self._error = error
        self._delay = delay
        self.calls: list[tuple[str, int | None]] = []

    async def search_detailed(
        self,
        query: str,
        post_types: Sequence[str] | None = None,
        limit: int | None = None,
        *,
        timeout: float | None = None,
    ) -> ProviderResult:
        self.calls.append((query, limit))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        items = self._items if limit is None else self._items[:limit]
        return ProviderResult(source_name=self.name, items=list(items), attempted=1)


def make_item(
    title: str,
    url: str,
    *,
    source_name: str = "local",
    source_url: str = "https://local.example.com",
    minutes_ago: int = 0,
) -> RawItem:
    return RawItem(
        title=title,
        url=url,
        source_name=source_name,
        source_url=source_url,
        modified_at=BASE_TIME - timedelta(minutes=minutes_ago),
    )


def mock_response(status_code: int = 200, json_data=None, json_error: Exception | None = None) -> MagicMock:
    """Stand-in for an httpx.Response."""
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


# ============================================================
# Environment Fixtures
# ============================================================


@pytest.fixture(autouse=True)
def reset_profiling():
    """Profiling metrics are process-global; isolate every test."""
    profiling.reset_metrics()
    yield
    profiling.reset_metrics()


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def cache(fake_timer) -> ResultCache:
    return ResultCache(max_size=256, timer=fake_timer)


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings(
        sources=(SearchSource.local(),),
        allowed_origins=("https://footeducation.com",),
    )


# ============================================================
# Local store
# ============================================================


@pytest.fixture
def sites() -> list[Site]:
    return [
        Site(1, "Knee Education", "https://knee.example.com"),
        Site(2, "Foot Care", "https://foot.example.com"),
        Site(3, "Staff Only", "https://staff.example.com", public=False),
        Site(4, "Old Clinic", "https://old.example.com", archived=True),
    ]


@pytest.fixture
def content_items() -> list[ContentItem]:
    return [
        ContentItem(10, 1, "page", "Knee Pain", "https://knee.example.com/knee-pain/", BASE_TIME, body="Pain in the knee."),
        ContentItem(
            11, 1, "page", "Knee Replacement", "https://knee.example.com/replacement/", BASE_TIME - timedelta(days=1)
        ),
        ContentItem(12, 1, "page", "Orthopedics FAQ", "https://knee.example.com/faq/", BASE_TIME, parent_id=10),
        ContentItem(13, 1, "page", "Knee Draft", "https://knee.example.com/draft/", BASE_TIME, status="draft"),
        ContentItem(14, 1, "post", "Knee News", "https://knee.example.com/news/", BASE_TIME),
        ContentItem(20, 2, "page", "Foot Pain Guide", "https://foot.example.com/guide/", BASE_TIME, body="Heel and knee."),
        ContentItem(30, 3, "page", "Knee Staff Notes", "https://staff.example.com/notes/", BASE_TIME),
        ContentItem(40, 4, "page", "Knee Archive", "https://old.example.com/archive/", BASE_TIME),
    ]


@pytest.fixture
def store(sites, content_items) -> InMemoryContentStore:
    return InMemoryContentStore(sites=sites, items=content_items)


# ============================================================
# Sources
# ============================================================


@pytest.fixture
def local_source() -> SearchSource:
    return SearchSource.local(post_types=["page"])


@pytest.fixture
def remote_source() -> SearchSource:
    return SearchSource.remote_wp("https://footeducation.com", post_types=["page", "post"], score_bonus=60)
