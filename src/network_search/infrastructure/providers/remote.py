"""
Remote WordPress Content Provider

Queries a remote WordPress REST API, one GET per configured post type:

    GET {base}/wp-json/wp/v2/{post_type}?search=<q>&_fields=id,link,title,modified&per_page=<n>

Responses are untrusted. A non-200 status, transport error, timeout or
non-array body counts as zero results for that post type only; the other
post types of the same source still run. Items without ``title.rendered``
or ``link`` are skipped.
"""

from __future__ import annotations

import asyncio
import html
import logging
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import httpx

from network_search.domain.entities import REMOTE_PER_CALL_CAP, RawItem, SearchSource
from network_search.infrastructure.http.base_client import BaseAPIClient
from network_search.infrastructure.providers.base import ContentProvider, ProviderResult
from network_search.shared.async_utils import CircuitBreaker, gather_isolated
from network_search.shared.exceptions import MalformedResponseError, NetworkSearchError
from network_search.shared.profiling import record_source_call

logger = logging.getLogger(__name__)

WP_REST_PREFIX = "/wp-json/wp/v2"
SEARCH_FIELDS = "id,link,title,modified"
SUGGEST_FIELDS = "id,link,title"


class WordPressRestClient(BaseAPIClient):
    """
    Minimal WordPress REST client for content search.

    Usage:
        client = WordPressRestClient("https://footeducation.com", timeout=5.0)
        posts = await client.search_posts("page", "ankle", per_page=10)
    """

    _service_name = "WordPress"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ):
        super().__init__(base_url=base_url, timeout=timeout, client=client, circuit_breaker=circuit_breaker)
        self._service_name = httpx.URL(self._base_url).host or base_url
        if not self._circuit_breaker.source_name:
            self._circuit_breaker.source_name = self._service_name

    async def search_posts(
        self,
        post_type: str,
        query: str,
        per_page: int,
        *,
        fields: str = SEARCH_FIELDS,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        """
        Search one post type.

        Raises:
            ProviderUnavailableError: transport failure or non-200
            MalformedResponseError: body is not a JSON array
        """
        params = {
            "search": query,
            "_fields": fields,
            "per_page": per_page,
        }
        data = await self._get_json(f"{WP_REST_PREFIX}/{post_type}", params=params, timeout=timeout)
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"expected a JSON array for post type {post_type!r}, got {type(data).__name__}",
                source=self._service_name,
            )
        return data


def parse_modified(value: Any) -> datetime:
    """Parse a WordPress ``modified`` timestamp; fall back to now."""
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


def item_from_post(post: Any, source: SearchSource) -> RawItem | None:
    """Validate one REST object and convert it; None if unusable."""
    if not isinstance(post, dict):
        return None
    title = post.get("title")
    link = post.get("link")
    rendered = title.get("rendered") if isinstance(title, dict) else None
    if not isinstance(rendered, str) or not isinstance(link, str) or not link:
        return None
    return RawItem(
        title=html.unescape(rendered),
        url=link,
        source_name=source.name,
        source_url=source.base_url,
        modified_at=parse_modified(post.get("modified")),
    )


class RemoteWPProvider(ContentProvider):
    """
    Content provider backed by a remote WordPress site.

    Post types are queried concurrently; each lookup has its own timeout and
    its own failure isolation.
    """

    def __init__(
        self,
        source: SearchSource,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
        rest_client: WordPressRestClient | None = None,
    ) -> None:
        super().__init__(source)
        self._timeout = timeout
        self._rest = rest_client or WordPressRestClient(source.base_url, timeout=timeout, client=client)

    @property
    def rest_client(self) -> WordPressRestClient:
        return self._rest

    async def search_detailed(
        self,
        query: str,
        post_types: Sequence[str] | None = None,
        limit: int | None = None,
        *,
        timeout: float | None = None,
        fields: str = SEARCH_FIELDS,
    ) -> ProviderResult:
        types = list(post_types or self._source.post_types)
        per_page = min(limit if limit is not None else self._source.per_call_limit, REMOTE_PER_CALL_CAP)
        budget = timeout if timeout is not None else self._timeout
        result = ProviderResult(source_name=self.name, attempted=len(types))

        start = time.perf_counter()
        outcomes = await gather_isolated(
            [self._rest.search_posts(pt, query, per_page, fields=fields, timeout=budget) for pt in types]
        )
        for post_type, outcome in zip(types, outcomes):
            if isinstance(outcome, BaseException):
                self._log_failure(post_type, outcome)
                result.record_failure(outcome)
                continue
            for post in outcome or []:
                item = item_from_post(post, self._source)
                if item is not None:
                    result.items.append(item)

        record_source_call(self.name, (time.perf_counter() - start) * 1000, ok=result.ok)
        return result

    def _log_failure(self, post_type: str, error: BaseException) -> None:
        if isinstance(error, (NetworkSearchError, asyncio.CancelledError)):
            logger.warning(f"{self.name}: post type {post_type!r} contributed no results: {error}")
        else:
            logger.error(f"{self.name}: unexpected error searching post type {post_type!r}", exc_info=error)

    async def close(self) -> None:
        await self._rest.close()
