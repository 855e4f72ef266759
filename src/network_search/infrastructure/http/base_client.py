"""
Base API Client - Common HTTP request pattern with circuit breaker.

Shared by remote content providers:
- httpx.AsyncClient management (TLS verification on)
- Circuit breaker for fault tolerance
- Per-call timeout budget (no retries, so a call never outlives its budget)
- Typed errors: ProviderUnavailableError, MalformedResponseError, RateLimitError
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from typing_extensions import Self

from network_search.shared.async_utils import CircuitBreaker
from network_search.shared.exceptions import (
    ErrorContext,
    MalformedResponseError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "network-search/0.1"


class BaseAPIClient:
    """
    Base class for remote content API clients.

    Provides common infrastructure:
    - httpx.AsyncClient management
    - Circuit breaker for fault tolerance
    - Consistent error handling

    Subclasses should set `_service_name` and can override:
    - `_handle_response()`: Custom response processing

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyAPI"

            def __init__(self):
                super().__init__(base_url="https://api.example.com")

            async def get_items(self) -> Any:
                return await self._get_json("/items", timeout=3.0)
    """

    _service_name: str = "API"

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 5.0,
        headers: dict[str, str] | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Default request timeout in seconds
            headers: Default headers for all requests
            circuit_breaker: Breaker guarding this source.
                             If None, a default one is created (threshold=5, recovery=60s).
            client: Shared httpx.AsyncClient (owned by the caller if given)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            verify=True,
            follow_redirects=True,
            headers={"User-Agent": DEFAULT_USER_AGENT, **(headers or {})},
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(failure_threshold=5, recovery_timeout=60.0)

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        GET a JSON document within one timeout budget.

        Raises:
            ProviderUnavailableError: transport error, timeout or non-200 status
            MalformedResponseError: body is not valid JSON
            RateLimitError: circuit breaker is open
        """
        full_url = self._build_url(url)
        budget = timeout if timeout is not None else self._timeout

        async with self._circuit_breaker:
            try:
                response = await asyncio.wait_for(
                    self._client.get(full_url, params=params, timeout=budget),
                    timeout=budget,
                )
            except TimeoutError:
                raise ProviderUnavailableError(
                    f"request timed out after {budget:.1f}s", source=self._service_name
                ) from None
            except httpx.TimeoutException as e:
                raise ProviderUnavailableError(f"request timed out: {e}", source=self._service_name) from e
            except httpx.RequestError as e:
                raise ProviderUnavailableError(f"request failed: {e}", source=self._service_name) from e

            if response.status_code != 200:
                raise ProviderUnavailableError(
                    "unexpected status",
                    source=self._service_name,
                    status_code=response.status_code,
                    context=ErrorContext(source_name=self._service_name, input_value=full_url),
                )

            return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Parse response body. Override for custom extraction logic."""
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError("body is not valid JSON", source=self._service_name) from e

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
