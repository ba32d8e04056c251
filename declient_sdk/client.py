"""HTTP transport shared by generated clients, with discovery and retries.

Resolves logical service names to base URLs, sends ``ServiceRequest``
objects through httpx and maps failures to the ``ServiceError`` hierarchy.
"""

import asyncio
import logging
import time
import uuid
from typing import Optional

import httpx

from .config import HttpClientConfig
from .exceptions import (
    ServiceClientError,
    ServiceConnectionError,
    ServiceError,
    ServiceServerError,
    ServiceTimeoutError,
)
from .messages import ServiceRequest

logger = logging.getLogger(__name__)


class HttpClient:
    """Sends service requests synchronously or asynchronously.

    Features:
        - Service-name to base-URL resolution
        - Automatic retries with exponential backoff
        - Request ID tracking
        - Status-aware error mapping

    Example:
        Synchronous:
        >>> client = HttpClient(HttpClientConfig(services={"users": "http://localhost:8000"}))
        >>> response = client.send(request)

        Asynchronous:
        >>> async with HttpClient() as client:
        ...     response = await client.send_async(request)
    """

    def __init__(
        self,
        config: Optional[HttpClientConfig] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the transport.

        Args:
            config: Client configuration (uses defaults if not provided)
            transport: Custom httpx transport for the sync client. It is also
                used by the async client when it implements
                ``httpx.AsyncBaseTransport`` (as ``httpx.MockTransport`` does)
            async_transport: Custom httpx transport for the async client
        """
        self.config = config or HttpClientConfig()
        if async_transport is None and isinstance(transport, httpx.AsyncBaseTransport):
            async_transport = transport
        self._async_transport = async_transport
        self._timeout = httpx.Timeout(
            timeout=self.config.timeout,
            connect=self.config.connect_timeout,
        )
        self._headers = {"User-Agent": self.config.user_agent}

        self._client = httpx.Client(
            headers=self._headers,
            timeout=self._timeout,
            verify=self.config.verify_ssl,
            transport=transport,
        )
        self._async_client: Optional[httpx.AsyncClient] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def close(self):
        """Close the sync HTTP connections.

        The async client is only closed by ``aclose()``, which needs a running
        event loop. Closing a client that still holds one logs a warning.
        """
        if self._client:
            self._client.close()
        if self._async_client is not None and not self._async_client.is_closed:
            logger.warning("HttpClient closed while its async client is open; use aclose()")

    async def aclose(self):
        """Close async and sync HTTP connections."""
        if self._async_client is not None:
            await self._async_client.aclose()
        self.close()

    def url_for(self, request: ServiceRequest) -> str:
        return self.config.resolve(request.service_name) + request.path

    def send(self, request: ServiceRequest) -> httpx.Response:
        """Send a request, retrying transient failures."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        last_exception: Optional[ServiceError] = None

        for attempt in range(self.config.max_retries + 1):
            try:
                outgoing = self._build(self._client, request, request_id)
                response = self._client.send(outgoing)
                return self._handle_response(response, request_id)

            except httpx.TimeoutException:
                last_exception = ServiceTimeoutError(
                    timeout_seconds=self.config.timeout,
                    request_id=request_id,
                )

            except httpx.ConnectError:
                last_exception = ServiceConnectionError(
                    f"Failed to connect to {self.url_for(request)}",
                    request_id=request_id,
                )

            if attempt < self.config.max_retries:
                time.sleep(self._backoff_delay(attempt))

        raise last_exception

    async def send_async(self, request: ServiceRequest) -> httpx.Response:
        """Send a request asynchronously, retrying transient failures."""
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(
                headers=self._headers,
                timeout=self._timeout,
                verify=self.config.verify_ssl,
                transport=self._async_transport,
            )

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        last_exception: Optional[ServiceError] = None

        for attempt in range(self.config.max_retries + 1):
            try:
                outgoing = self._build(self._async_client, request, request_id)
                response = await self._async_client.send(outgoing)
                return self._handle_response(response, request_id)

            except httpx.TimeoutException:
                last_exception = ServiceTimeoutError(
                    timeout_seconds=self.config.timeout,
                    request_id=request_id,
                )

            except httpx.ConnectError:
                last_exception = ServiceConnectionError(
                    f"Failed to connect to {self.url_for(request)}",
                    request_id=request_id,
                )

            if attempt < self.config.max_retries:
                await asyncio.sleep(self._backoff_delay(attempt))

        raise last_exception

    def _build(self, client, request: ServiceRequest, request_id: str) -> httpx.Request:
        """Bind a service request to its URL; content headers travel with the body."""
        headers = dict(request.headers)
        headers["X-Request-ID"] = request_id
        content = None
        if request.content is not None:
            headers.update(request.content.headers)
            content = request.content.body

        logger.debug("%s %s (request_id=%s)", request.method, self.url_for(request), request_id)
        return client.build_request(
            request.method,
            self.url_for(request),
            params=request.params,
            headers=headers,
            content=content,
        )

    def _handle_response(
        self,
        response: httpx.Response,
        request_id: str,
    ) -> httpx.Response:
        """Pass 2xx responses through and raise for everything else."""
        if 200 <= response.status_code < 300:
            return response

        message = response.text or f"HTTP {response.status_code}"

        if 400 <= response.status_code < 500:
            raise ServiceClientError(
                message,
                status_code=response.status_code,
                request_id=request_id,
            )

        if 500 <= response.status_code < 600:
            raise ServiceServerError(
                message,
                status_code=response.status_code,
                request_id=request_id,
            )

        raise ServiceClientError(
            f"Unexpected status {response.status_code}: {message}",
            status_code=response.status_code,
            request_id=request_id,
        )

    def _backoff_delay(self, attempt: int) -> float:
        """Calculate backoff delay."""
        delay = self.config.retry_backoff_factor * (2 ** attempt)
        return min(delay, self.config.retry_backoff_max)
