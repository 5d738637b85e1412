"""Async HTTP plumbing shared by the vendor REST clients."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..errors import APIError, AuthError, NetworkError, RateLimitError, TaskPilotError
from ..utils.rate_limiter import ConcurrencyLimiter, api_limiter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def parse_int_header(value: str | None) -> int | None:
    """Parse an integer header value, ignoring garbage."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class BaseAPIClient:
    """Thin async REST client.

    Provides:
    - Per-request authentication (query params or headers, set by subclasses)
    - The shared concurrency gate around every request
    - Uniform error classification into the ``taskpilot.errors`` taxonomy
    """

    vendor = "API"

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        limiter: ConcurrencyLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root URL
            headers: Static headers sent with every request
            timeout: Per-request timeout in seconds
            limiter: Concurrency gate (default: the process-wide gate)
            transport: Optional httpx transport, used by tests
        """
        self.base_url = base_url
        self.timeout = timeout
        self._limiter = limiter or api_limiter
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers or {},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> BaseAPIClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # --- Authentication hooks ---

    def _auth_params(self) -> dict[str, str]:
        return {}

    def _auth_headers(self) -> dict[str, str]:
        return {}

    # --- Requests ---

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send an authenticated request and return the decoded JSON body.

        Raises:
            NetworkError: No response was received
            AuthError: HTTP 401
            RateLimitError: Vendor throttling
            APIError: Any other non-2xx response
        """
        query = {**(params or {}), **self._auth_params()}
        logger.debug("%s %s %s: params=%s", self.vendor, method, path, params)

        start_time = time.monotonic()
        try:
            async with self._limiter:
                response = await self._client.request(
                    method,
                    path,
                    params=query or None,
                    json=json,
                    headers=self._auth_headers(),
                )
        except httpx.TimeoutException as e:
            logger.error("%s %s %s timed out: %s", self.vendor, method, path, e)
            raise NetworkError(is_timeout=True) from e
        except httpx.ConnectError as e:
            logger.error("%s %s %s unreachable: %s", self.vendor, method, path, e)
            raise NetworkError(is_offline=True) from e
        except httpx.TransportError as e:
            logger.error("%s %s %s failed: %s", self.vendor, method, path, e)
            raise NetworkError() from e

        elapsed_ms = (time.monotonic() - start_time) * 1000

        if response.is_error:
            logger.error(
                "%s %s %s: HTTP %d (%.0fms)",
                self.vendor,
                method,
                path,
                response.status_code,
                elapsed_ms,
            )
            raise self.classify_error(response)

        logger.info(
            "%s %s %s: %d (%.0fms)", self.vendor, method, path, response.status_code, elapsed_ms
        )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                "Invalid JSON response",
                status_code=response.status_code,
                details=response.text,
            ) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def put(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("PUT", path, params=params, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str, json: Any = None) -> Any:
        return await self.request("DELETE", path, json=json)

    # --- Error classification ---

    def classify_error(self, response: httpx.Response) -> TaskPilotError:
        """Map a non-2xx response onto the error taxonomy."""
        if response.status_code == 401:
            return AuthError()
        if response.status_code == 429:
            return RateLimitError(parse_int_header(response.headers.get("Retry-After")))
        return self._api_error(response)

    def _api_error(self, response: httpx.Response) -> APIError:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text or None

        message = None
        if isinstance(body, dict):
            message = body.get("message")
        if not isinstance(message, str) or not message:
            message = response.reason_phrase or "Unknown API error"

        return APIError(message, status_code=response.status_code, details=body)
