"""
Tests for SearchAggregator - fan-out, ranking, caching and failure isolation.
"""

import asyncio
import dataclasses
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import StaticProvider, make_item, mock_response
from network_search.application.search.aggregator import SearchAggregator, validate_query
from network_search.domain.entities import ResponseStatus, SearchSource
from network_search.infrastructure.providers.remote import RemoteWPProvider
from network_search.shared.exceptions import EmptyQueryError, ProviderUnavailableError


def _remote_with_rest(source: SearchSource, **search_posts_kwargs) -> tuple[RemoteWPProvider, MagicMock]:
    rest = MagicMock()
    rest.search_posts = AsyncMock(**search_posts_kwargs)
    rest.close = AsyncMock()
    return RemoteWPProvider(source, rest_client=rest), rest


@pytest.fixture
def local_items():
    return [
        make_item("Knee Pain", "https://knee.example.com/pain/", source_name="Knee Education"),
        make_item("Knee Surgery Recovery", "https://knee.example.com/surgery/", minutes_ago=5),
        make_item("Runner's Knee", "https://knee.example.com/runners/", minutes_ago=1),
    ]


@pytest.fixture
def local_provider(local_source, local_items):
    return StaticProvider(local_source, local_items)


class TestValidateQuery:
    def test_trims(self):
        assert validate_query("  knee ") == "knee"

    def test_collapses_inner_whitespace(self):
        assert validate_query(" knee \t  pain ") == "knee pain"

    @pytest.mark.parametrize("query", ["", "   ", None, "\t\n"])
    def test_empty_raises(self, query):
        with pytest.raises(EmptyQueryError):
            validate_query(query)


class TestAggregate:
    """Full search across sources."""

    async def test_empty_query_designated_state(self, local_provider, cache, settings):
        aggregator = SearchAggregator([local_provider], cache, settings)

        response = await aggregator.aggregate("   ")

        assert response.status is ResponseStatus.EMPTY_QUERY
        assert response.is_empty_query
        assert response.total == 0
        assert local_provider.calls == []
        assert len(cache) == 0

    async def test_ranked_results(self, local_provider, cache, settings):
        aggregator = SearchAggregator([local_provider], cache, settings)

        response = await aggregator.aggregate("knee")

        assert response.status is ResponseStatus.OK
        # prefix hits (80) newest first, then the substring hit (60)
        assert [(h.title, h.score) for h in response.hits] == [
            ("Knee Pain", 80),
            ("Knee Surgery Recovery", 80),
            ("Runner's Knee", 60),
        ]
        assert response.sources_failed == ()

    async def test_idempotent_within_ttl(self, local_provider, cache, settings):
        aggregator = SearchAggregator([local_provider], cache, settings)

        first = await aggregator.aggregate("knee")
        second = await aggregator.aggregate("KNEE ")

        assert len(local_provider.calls) == 1
        assert second.from_cache
        assert not first.from_cache
        assert first.to_dict() == second.to_dict()

    async def test_cache_expires(self, local_provider, cache, settings, fake_timer):
        aggregator = SearchAggregator([local_provider], cache, settings)

        await aggregator.aggregate("knee")
        fake_timer.advance(settings.results_ttl + 1)
        await aggregator.aggregate("knee")

        assert len(local_provider.calls) == 2

    async def test_invalidate_then_recompute(self, local_provider, remote_source, cache, settings):
        remote = StaticProvider(remote_source, [make_item("Knee Brace", "https://footeducation.com/brace/")])
        aggregator = SearchAggregator([local_provider, remote], cache, settings)

        await aggregator.aggregate("knee")
        aggregator.invalidate_all()
        await aggregator.aggregate("knee")

        assert len(local_provider.calls) == 2
        assert len(remote.calls) == 2

    async def test_invalidation_during_compute_not_lost(self, local_source, cache, settings):
        provider = StaticProvider(local_source, [make_item("Knee Pain", "https://knee.example.com/pain/")], delay=0.05)
        aggregator = SearchAggregator([provider], cache, settings)

        pending = asyncio.ensure_future(aggregator.aggregate("knee"))
        await asyncio.sleep(0.01)
        aggregator.invalidate_all()
        first = await pending

        assert [h.title for h in first.hits] == ["Knee Pain"]
        assert len(cache) == 0
        await aggregator.aggregate("knee")
        assert len(provider.calls) == 2

    async def test_spacing_does_not_change_scores(self, local_source, cache, settings):
        provider = StaticProvider(local_source, [make_item("Knee Pain Guide", "https://knee.example.com/guide/")])
        aggregator = SearchAggregator([provider], cache, settings)

        spaced = await aggregator.aggregate("knee  pain")
        again = await aggregator.aggregate("Knee pain")

        assert provider.calls == [("knee pain", None)]
        assert spaced.query == "knee pain"
        assert [h.score for h in spaced.hits] == [80]
        assert again.from_cache
        assert again.query == "Knee pain"
        assert [h.score for h in again.hits] == [80]

    async def test_include_remote_false(self, local_provider, remote_source, cache, settings):
        remote = StaticProvider(remote_source, [make_item("Knee Brace", "https://footeducation.com/brace/")])
        aggregator = SearchAggregator([local_provider, remote], cache, settings)

        response = await aggregator.aggregate("knee", include_remote=False)

        assert remote.calls == []
        assert response.total == 3

    async def test_include_remote_is_part_of_key(self, local_provider, remote_source, cache, settings):
        remote = StaticProvider(remote_source, [make_item("Knee Brace", "https://footeducation.com/brace/")])
        aggregator = SearchAggregator([local_provider, remote], cache, settings)

        without = await aggregator.aggregate("knee", include_remote=False)
        with_remote = await aggregator.aggregate("knee", include_remote=True)

        assert without.total == 3
        assert with_remote.total == 4

    async def test_disabled_source_skipped(self, local_provider, cache, settings):
        disabled = StaticProvider(
            SearchSource.remote_wp("https://off.example.com", enabled=False),
            [make_item("Knee", "https://off.example.com/knee/")],
        )
        aggregator = SearchAggregator([local_provider, disabled], cache, settings)

        await aggregator.aggregate("knee")

        assert disabled.calls == []

    async def test_remote_bonus(self, cache, settings, local_source):
        local = StaticProvider(local_source, [make_item("Pain", "https://local/pain/")])
        remote_source = SearchSource.remote_wp("https://footeducation.com", score_bonus=60)
        remote = StaticProvider(remote_source, [make_item("Foot Pain Guide", "https://footeducation.com/guide/")])
        aggregator = SearchAggregator([local, remote], cache, settings)

        response = await aggregator.aggregate("pain")

        assert [(h.url, h.score) for h in response.hits] == [
            ("https://footeducation.com/guide/", 120),
            ("https://local/pain/", 100),
        ]

    async def test_duplicate_url_first_source_wins(self, cache, settings, local_source, remote_source):
        local = StaticProvider(local_source, [make_item("Knee", "https://shared/knee/", source_name="local")])
        remote = StaticProvider(
            remote_source, [make_item("Knee", "https://shared/knee/", source_name="footeducation.com")]
        )
        aggregator = SearchAggregator([local, remote], cache, settings)

        response = await aggregator.aggregate("knee")

        assert response.total == 1
        assert response.hits[0].source_name == "local"
        assert response.hits[0].score == 100


class TestFailureIsolation:
    """No provider failure reaches the caller."""

    async def test_unreachable_remote_other_source_kept(self, local_provider, remote_source, cache, settings):
        async def hang(*args, **kwargs):
            await asyncio.sleep(5)

        remote = RemoteWPProvider(remote_source)
        remote.rest_client._client.get = AsyncMock(side_effect=hang)
        aggregator = SearchAggregator(
            [remote, local_provider], cache, dataclasses.replace(settings, remote_timeout=0.05)
        )

        response = await aggregator.aggregate("knee")

        assert response.total == 3
        assert {h.url for h in response.hits} == {
            "https://knee.example.com/pain/",
            "https://knee.example.com/surgery/",
            "https://knee.example.com/runners/",
        }
        assert response.sources_failed == ("footeducation.com",)
        await remote.close()

    async def test_all_sources_fail(self, local_source, remote_source, cache, settings):
        local = StaticProvider(local_source, error=RuntimeError("db gone"))
        remote, _ = _remote_with_rest(remote_source, side_effect=ProviderUnavailableError("down"))
        aggregator = SearchAggregator([local, remote], cache, settings)

        response = await aggregator.aggregate("knee")

        assert response.status is ResponseStatus.OK
        assert response.total == 0
        assert set(response.sources_failed) == {"local", "footeducation.com"}
        assert response.to_dict()["hits"] == []

    async def test_failed_response_cached_briefly(self, local_source, cache, settings, fake_timer):
        local = StaticProvider(local_source, error=ProviderUnavailableError("down", source="local"))
        aggregator = SearchAggregator([local], cache, settings)

        await aggregator.aggregate("knee")
        await aggregator.aggregate("knee")
        assert len(local.calls) == 1

        fake_timer.advance(settings.negative_ttl + 1)
        await aggregator.aggregate("knee")
        assert len(local.calls) == 2

    async def test_overall_deadline_abandons_slow_source(self, local_provider, remote_source, cache, settings):
        slow = StaticProvider(remote_source, [make_item("Knee Late", "https://footeducation.com/late/")], delay=1.0)
        aggregator = SearchAggregator(
            [local_provider, slow], cache, dataclasses.replace(settings, overall_timeout=0.05)
        )

        response = await aggregator.aggregate("knee")

        assert response.total == 3
        assert response.sources_failed == ("footeducation.com",)


class TestRemoteSubResultCache:
    """Per-remote-source caching, including negative caching."""

    async def test_successful_remote_cached(self, remote_source, cache, settings, fake_timer):
        remote, rest = _remote_with_rest(
            remote_source,
            return_value=[{"id": 1, "link": "https://footeducation.com/a/", "title": {"rendered": "Ankle"}}],
        )
        aggregator = SearchAggregator([remote], cache, settings)

        await aggregator.compute("ankle")
        await aggregator.compute("ankle")
        calls_after_two = rest.search_posts.await_count

        fake_timer.advance(settings.negative_ttl + 1)
        await aggregator.compute("ankle")

        # one call per post type, all from the first compute
        assert calls_after_two == len(remote_source.post_types)
        assert rest.search_posts.await_count == calls_after_two

    async def test_failed_remote_negative_cached(self, remote_source, cache, settings, fake_timer):
        remote, rest = _remote_with_rest(remote_source, side_effect=ProviderUnavailableError("down"))
        aggregator = SearchAggregator([remote], cache, settings)

        await aggregator.compute("ankle")
        await aggregator.compute("ankle")
        assert rest.search_posts.await_count == 2

        fake_timer.advance(settings.negative_ttl + 1)
        await aggregator.compute("ankle")
        assert rest.search_posts.await_count == 4

    async def test_remote_http_shape(self, remote_source, cache, settings):
        remote = RemoteWPProvider(remote_source)
        remote.rest_client._client.get = AsyncMock(
            return_value=mock_response(
                200, [{"id": 5, "link": "https://footeducation.com/heel/", "title": {"rendered": "Heel Pain Relief"}}]
            )
        )
        aggregator = SearchAggregator([remote], cache, settings)

        response = await aggregator.aggregate("heel pain")

        # same link from both post types collapses to one hit
        assert response.total == 1
        assert response.hits[0].score == 80 + remote_source.score_bonus
        await remote.close()
