"""
Application DI Container (dependency-injector).

Centralizes service creation and lifecycle management.

Usage::

    from network_search.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict({
        "sources": [{"type": "local", "post_types": ["page"]}],
        "allowed_origins": ["https://example.org"],
    })

    service = container.service()
    trees = await container.sitemap().build()

    # In tests, override any provider:
    container.store.override(providers.Object(fake_store))
"""

from __future__ import annotations

import logging
from typing import Any

from dependency_injector import containers, providers

logger = logging.getLogger(__name__)


def _create_settings(config: dict[str, Any] | None) -> object:
    """Settings from the container config; empty config gives defaults."""
    from network_search.config import SearchSettings

    return SearchSettings.from_dict(config or {})


def _create_store() -> object:
    from network_search.infrastructure.store.memory import InMemoryContentStore

    return InMemoryContentStore()


def _create_cache(settings: Any) -> object:
    from network_search.infrastructure.cache.result_cache import ResultCache

    return ResultCache(max_size=settings.cache_max_size)


def _create_service(settings: Any, store: Any, cache: Any) -> object:
    """Build the search facade and hook it to store mutations."""
    from network_search.application.search.service import NetworkSearchService

    service = NetworkSearchService.from_settings(settings, store=store, cache=cache)
    subscribe = getattr(store, "subscribe", None)
    if subscribe is not None:
        subscribe(service.handle_content_event)
    else:
        logger.info("Content store does not publish events; cache relies on TTL expiry")
    return service


def _create_sitemap(settings: Any, store: Any, cache: Any) -> object:
    from network_search.application.sitemap.builder import NetworkSitemap

    return NetworkSitemap(store, cache, ttl=settings.sitemap_ttl)


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the network search application.

    - ``settings``: SearchSettings built from ``config``
    - ``store``: local multi-tenant content store
    - ``cache``: shared ResultCache for every key family
    - ``service``: NetworkSearchService (aggregate, suggest, invalidate)
    - ``sitemap``: NetworkSitemap over the same store and cache
    """

    config = providers.Configuration()

    settings = providers.Singleton(_create_settings, config=config)

    store = providers.Singleton(_create_store)

    cache = providers.Singleton(_create_cache, settings=settings)

    service = providers.Singleton(
        _create_service,
        settings=settings,
        store=store,
        cache=cache,
    )

    sitemap = providers.Singleton(
        _create_sitemap,
        settings=settings,
        store=store,
        cache=cache,
    )


__all__ = ["ApplicationContainer"]
