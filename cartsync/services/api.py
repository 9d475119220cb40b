"""
Product/Stock API client.

Thin httpx wrapper over the REST API that serves ``/products/{id}`` and
``/stock/{id}``. Maps HTTP failures onto ApiError subclasses:

- 404                              -> NotFoundError
- other non-2xx, transport errors  -> NetworkError
- body that is not JSON            -> NetworkError

Only transport errors (connection refused, timeouts) are retried. A 4xx/5xx
answer is final.
"""
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cartsync.config import get_settings
from cartsync.errors import NetworkError, NotFoundError
from cartsync.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)


class ApiClient:
    """Shared async HTTP client for catalog and stock lookups."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retries: int = 3,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls) -> "ApiClient":
        settings = get_settings()
        return cls(settings.api_url, timeout=settings.api_timeout, retries=settings.api_retries)

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of the shared httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._http_client

    async def _request(self, path: str) -> httpx.Response:
        client = self._get_http_client()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential(multiplier=self.backoff, max=5),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                return await client.get(path)
        raise NetworkError(f"GET {path}: no attempt made")

    async def get_json(self, path: str) -> Any:
        """
        GET ``path`` and decode the JSON body.

        Raises:
            NotFoundError: API answered 404
            NetworkError: transport failure, other error status or invalid JSON
        """
        try:
            response = await self._request(path)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout calling GET {path}: {e}")
            raise NetworkError(f"GET {path} timed out") from e
        except httpx.TransportError as e:
            logger.warning(f"Transport error calling GET {path}: {e}")
            raise NetworkError(f"GET {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"GET {path}: not found", status_code=404)
        if response.is_error:
            body = sanitize_string_for_logging(response.text, 200)
            logger.warning(f"API error for GET {path}: status={response.status_code}, response={body}")
            raise NetworkError(f"GET {path}: HTTP {response.status_code}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"GET {path}: invalid JSON body") from e

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
