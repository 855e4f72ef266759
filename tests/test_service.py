"""End-to-end tests for NetworkSearchService over the in-memory store."""

from unittest.mock import AsyncMock

import pytest

from conftest import mock_response
from network_search.application.search.service import NetworkSearchService
from network_search.config import SearchSettings
from network_search.domain.entities import ContentEvent, ContentEventKind, ResponseStatus, SearchSource
from network_search.infrastructure.providers import RemoteWPProvider


@pytest.fixture
def service(store, cache):
    settings = SearchSettings(
        sources=(
            SearchSource.local(),
            SearchSource.remote_wp("https://footeducation.com", score_bonus=60),
        )
    )
    return NetworkSearchService.from_settings(settings, store=store, cache=cache)


def _remote(service) -> RemoteWPProvider:
    return next(p for p in service.providers if isinstance(p, RemoteWPProvider))


class TestNetworkSearchService:
    def test_from_settings_builds_providers(self, service):
        assert [p.name for p in service.providers] == ["local", "footeducation.com"]

    def test_empty_injected_cache_is_kept(self, service, cache):
        assert len(cache) == 0
        assert service.cache is cache

    def test_local_source_without_store_skipped(self, cache):
        service = NetworkSearchService.from_settings(SearchSettings(), store=None, cache=cache)
        assert service.providers == []

    async def test_aggregate_local_and_remote(self, service):
        _remote(service).rest_client._client.get = AsyncMock(
            return_value=mock_response(
                200,
                [{"id": 9, "link": "https://footeducation.com/knee/", "title": {"rendered": "Knee Arthritis"}}],
            )
        )

        response = await service.aggregate("knee")

        assert response.status is ResponseStatus.OK
        assert response.hits[0].url == "https://footeducation.com/knee/"
        assert response.hits[0].score == 140
        assert {h.source_name for h in response.hits} == {"footeducation.com", "Knee Education", "Foot Care"}
        await service.aclose()

    async def test_remote_down_local_still_served(self, service):
        _remote(service).rest_client._client.get = AsyncMock(return_value=mock_response(502, None))

        response = await service.aggregate("knee")

        assert response.total == 3
        assert response.sources_failed == ("footeducation.com",)
        await service.aclose()

    async def test_empty_query(self, service):
        response = await service.aggregate("")
        assert response.is_empty_query
        assert response.to_dict()["status"] == "empty_query"

    async def test_suggest(self, service):
        _remote(service).rest_client._client.get = AsyncMock(return_value=mock_response(200, []))

        suggestions = await service.suggest("knee")

        # 2 per site: Knee Education contributes 2, Foot Care 1
        assert [s.source_name for s in suggestions] == ["Knee Education", "Knee Education", "Foot Care"]
        await service.aclose()

    async def test_content_event_clears_results(self, service, store):
        _remote(service).rest_client._client.get = AsyncMock(return_value=mock_response(200, []))
        await service.aggregate("knee", include_remote=False)
        assert len(service.cache) == 1

        cleared = service.handle_content_event(ContentEvent(kind=ContentEventKind.UPDATED, post_type="page"))

        assert cleared is True
        assert len(service.cache) == 0

    async def test_invalidate_all(self, service):
        _remote(service).rest_client._client.get = AsyncMock(return_value=mock_response(200, []))
        await service.aggregate("knee", include_remote=False)
        await service.suggest("knee")
        assert service.invalidate_all() >= 2
