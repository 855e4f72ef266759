"""
Content Providers

Local (multi-tenant store) and remote (WordPress REST) implementations of
the ``ContentProvider`` search capability.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from network_search.domain.entities import SearchSource, SourceKind
from network_search.infrastructure.store.base import LocalContentStore

from .base import ContentProvider, ProviderResult
from .local import LocalProvider
from .remote import SEARCH_FIELDS, SUGGEST_FIELDS, RemoteWPProvider, WordPressRestClient, item_from_post

logger = logging.getLogger(__name__)


def build_provider(
    source: SearchSource,
    store: LocalContentStore | None,
    *,
    remote_timeout: float = 5.0,
    client: httpx.AsyncClient | None = None,
) -> ContentProvider | None:
    """Create the provider for one source; None if it cannot be served."""
    if source.kind is SourceKind.LOCAL:
        if store is None:
            logger.warning(f"Skipping local source {source.name!r}: no local content store configured")
            return None
        return LocalProvider(source, store)
    return RemoteWPProvider(source, timeout=remote_timeout, client=client)


def build_providers(
    sources: Iterable[SearchSource],
    store: LocalContentStore | None,
    *,
    remote_timeout: float = 5.0,
    client: httpx.AsyncClient | None = None,
) -> list[ContentProvider]:
    """Providers for every enabled source, in registration order."""
    providers: list[ContentProvider] = []
    for source in sources:
        if not source.enabled:
            continue
        provider = build_provider(source, store, remote_timeout=remote_timeout, client=client)
        if provider is not None:
            providers.append(provider)
    return providers


__all__ = [
    "ContentProvider",
    "ProviderResult",
    "LocalProvider",
    "RemoteWPProvider",
    "WordPressRestClient",
    "item_from_post",
    "SEARCH_FIELDS",
    "SUGGEST_FIELDS",
    "build_provider",
    "build_providers",
]
