"""HTTP session management using httpx.

Rules:
  - One AsyncClient per run, shared by listing and detail fetches.
  - Transport failures (timeouts, connection resets) are retried here,
    unless the caller passes retry=False and retries on its own.
  - HTTP status codes are never retried here; callers decide.
"""

import logging
from types import TracebackType
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hubjobs.core.config import CrawlerConfig

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class HttpSession:
    """Async context manager that owns one httpx client.

    Usage::

        async with HttpSession(config) as session:
            response = await session.get("https://...")
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        transport_retries: int | None = None,
        backoff_min_s: float = 0.5,
        backoff_max_s: float = 8.0,
    ) -> None:
        self._config = config
        self._transport = transport
        self._transport_retries = (
            config.transport_retries if transport_retries is None else transport_retries
        )
        self._backoff_min_s = backoff_min_s
        self._backoff_max_s = backoff_max_s
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """The underlying client. Raises if not entered."""
        if self._client is None:
            msg = "HttpSession not entered - use 'async with'"
            raise RuntimeError(msg)
        return self._client

    async def __aenter__(self) -> "HttpSession":
        headers = {**DEFAULT_HEADERS, "User-Agent": self._config.user_agent}
        limits = httpx.Limits(
            max_connections=self._config.max_concurrency,
            max_keepalive_connections=self._config.max_concurrency,
        )
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=self._config.request_timeout_s,
            limits=limits,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(
        self, url: str, params: dict[str, Any] | None = None, *, retry: bool = True,
    ) -> httpx.Response:
        """GET with exponential backoff on transport errors only.

        Returns the response whatever its status code. With ``retry=False``
        a single attempt is made and transport errors propagate.
        """
        if not retry:
            return await self.client.get(url, params=params)
        retrying = AsyncRetrying(
            wait=wait_exponential(min=self._backoff_min_s, max=self._backoff_max_s),
            stop=stop_after_attempt(self._transport_retries + 1),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self.client.get(url, params=params)
        raise AssertionError("unreachable")  # pragma: no cover
