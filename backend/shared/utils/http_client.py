"""
Async HTTP client wrapper for external API requests.
Single attempt per call, timeout management, and metrics collection.
"""
from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from shared.utils.logging import get_logger
from shared.utils.metrics import API_LATENCY, API_REQUESTS

logger = get_logger(__name__)


class APIHTTPClient:
    """
    Async HTTP client for one external service (YouTube, stat.ink).
    Handles timeouts, cookies and records metrics per request. Never retries:
    errors surface to the caller.
    With follow_redirects off, a 3xx is raised like any other non-2xx status.
    """

    def __init__(
        self,
        service_name: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
        timeout_s: float = 15.0,
        follow_redirects: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._service = service_name
        self._base_url = base_url.rstrip("/")
        self._default_headers = headers or {}
        self._cookies = cookies or {}
        self._timeout = timeout_s
        self._follow_redirects = follow_redirects
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        """Initialize the underlying httpx client."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._default_headers,
            cookies=self._cookies,
            timeout=httpx.Timeout(self._timeout, connect=5.0),
            follow_redirects=self._follow_redirects,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "APIHTTPClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Perform a single request with metrics and structured logging.

        Raises:
            httpx.HTTPStatusError: On any non-2xx response.
            httpx.TransportError: On connection failures and timeouts.
        """
        if not self._client:
            raise RuntimeError("APIHTTPClient not started. Call start() first.")

        start_time = time.perf_counter()
        status = "unknown"
        try:
            resp = await self._client.request(method, path, params=params, data=data)
            status = str(resp.status_code)
            resp.raise_for_status()
            logger.debug(
                "api_request_success",
                service=self._service,
                method=method,
                path=path,
                status=resp.status_code,
                latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            return resp
        except httpx.HTTPStatusError as exc:
            logger.debug(
                "api_http_error",
                service=self._service,
                method=method,
                path=path,
                status=exc.response.status_code,
            )
            raise
        except httpx.TimeoutException:
            status = "timeout"
            logger.debug("api_timeout", service=self._service, method=method, path=path)
            raise
        except httpx.TransportError as exc:
            status = "error"
            logger.debug(
                "api_transport_error",
                service=self._service,
                method=method,
                path=path,
                error=str(exc),
            )
            raise
        finally:
            API_REQUESTS.labels(service=self._service, method=method, status=status).inc()
            API_LATENCY.labels(service=self._service).observe(time.perf_counter() - start_time)

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        resp = await self.request("GET", path, params=params)
        return resp.json()

    async def post_form(
        self,
        path: str,
        data: dict[str, str],
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        return await self.request("POST", path, params=params, data=data)
