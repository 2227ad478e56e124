"""HTTP transport layer with retry logic and connection pooling."""

import asyncio
import logging
import random
from typing import Any

import httpx

from .._version import __version__
from .exceptions import TransportError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset((408, 429, 500, 502, 503, 504))


class Transport:
    """JSON-over-HTTP transport. Must be used as async context manager."""

    def __init__(self, timeout: float = 30.0, max_retries: int = 3, token: str | None = None,
                 backoff_base: float = 1.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._token = token
        self._backoff_base = backoff_base
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "Transport":
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout), transport=self._transport,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5))
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json",
                   "User-Agent": f"keysync/{__version__}"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _backoff(self, attempt: int) -> float:
        delay = min(self._backoff_base * (2 ** attempt), 30.0)
        if delay <= 0:
            return 0.0
        return max(0.1, delay + delay * 0.25 * (2 * random.random() - 1))

    async def get(self, url: str, retry: bool = True) -> tuple[int, Any]:
        return await self._request("GET", url, None, retry)

    async def post(self, url: str, data: dict, retry: bool = True) -> tuple[int, Any]:
        return await self._request("POST", url, data, retry)

    async def delete(self, url: str, data: dict, retry: bool = True) -> tuple[int, Any]:
        return await self._request("DELETE", url, data, retry)

    async def _request(self, method: str, url: str, data: dict | None, retry: bool) -> tuple[int, Any]:
        if not self._client:
            raise TransportError("Transport not initialized")
        last_err: Exception | None = None
        attempts = self._max_retries if retry else 1
        for i in range(attempts):
            try:
                resp = await self._client.request(method, url, json=data, headers=self._headers())
                if resp.status_code in RETRYABLE_STATUS_CODES and i < attempts - 1:
                    logger.warning("%s %s returned %d, retrying (%d/%d)", method, url, resp.status_code, i + 1, attempts)
                    await asyncio.sleep(self._backoff(i))
                    continue
                try:
                    return resp.status_code, resp.json() if resp.content else None
                except ValueError:
                    return resp.status_code, None
            except (httpx.TimeoutException, httpx.RequestError) as e:
                last_err = e
                logger.warning("%s %s failed: %s (%d/%d)", method, url, e, i + 1, attempts)
                if i < attempts - 1:
                    await asyncio.sleep(self._backoff(i))
        raise TransportError(f"{method} {url} failed after {attempts} attempts: {last_err}")
