"""Detail-page crawler: fetch, extract, normalize, push.

Per-job failures never stop the crawl:
  - ExtractionError / RecordValidationError -> error placeholder pushed.
  - Any other handler error -> logged with traceback, placeholder pushed.
  - Fetch still failing after retries -> failed_request_handler pushes a
    placeholder and stores a plain-text debug artifact.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timezone

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hubjobs.core.config import CrawlerConfig
from hubjobs.core.db import Dataset
from hubjobs.core.errors import ExtractionError, FetchError, RecordValidationError
from hubjobs.core.schemas import DetailRequest
from hubjobs.http.session import HttpSession
from hubjobs.pipeline.normalizer import Clock, error_placeholder, format_instant, normalize, utc_now
from hubjobs.platforms.thehub.constants import JOB_DETAIL_LABEL
from hubjobs.platforms.thehub.nuxt import extract_detail_record

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({408, 425, 429, 500, 502, 503, 504})

Handler = Callable[[DetailRequest, str, str], Awaitable[None]]


class _RetryableFetch(Exception):
    """One failed attempt that is worth retrying."""


@dataclass
class CrawlStats:
    """Outcome counters for one crawl."""

    succeeded: int = 0
    failed: int = 0
    request_failures: int = 0
    skipped: int = 0

    @property
    def handled(self) -> int:
        return self.succeeded + self.failed + self.request_failures


class DetailCrawler:
    """Crawls job detail pages with bounded concurrency.

    Usage::

        crawler = DetailCrawler(session, dataset, settings.crawler, max_requests=50)
        stats = await crawler.run(requests)
    """

    def __init__(
        self,
        session: HttpSession,
        dataset: Dataset,
        config: CrawlerConfig,
        *,
        max_requests: int = 0,
        clock: Clock | None = None,
    ) -> None:
        self._session = session
        self._dataset = dataset
        self._config = config
        self._max_requests = max_requests
        self._clock = clock or utc_now
        self._stats = CrawlStats()
        self._handlers: dict[str, Handler] = {JOB_DETAIL_LABEL: self.handle_job_detail}

    @property
    def stats(self) -> CrawlStats:
        return self._stats

    async def run(self, requests: list[DetailRequest]) -> CrawlStats:
        """Process every request (up to max_requests) and return counters."""
        self._stats = CrawlStats()
        if self._max_requests > 0 and len(requests) > self._max_requests:
            self._stats.skipped = len(requests) - self._max_requests
            logger.info(
                "Limiting crawl to %d of %d requests", self._max_requests, len(requests),
            )
            requests = requests[: self._max_requests]

        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        await asyncio.gather(*(self._process(request, semaphore) for request in requests))

        logger.info(
            "Crawl completed: %d succeeded, %d failed extraction, %d failed requests",
            self._stats.succeeded, self._stats.failed, self._stats.request_failures,
        )
        return self._stats

    async def _process(self, request: DetailRequest, semaphore: asyncio.Semaphore) -> None:
        async with semaphore:
            try:
                html, loaded_url = await self.fetch_html(request)
            except FetchError as e:
                await self.failed_request_handler(request, e)
                return
            handler = self._handlers.get(request.label, self.default_handler)
            try:
                await handler(request, html, loaded_url)
            except Exception as e:
                logger.exception("Unexpected error while processing %s", request.url)
                error = f"{type(e).__name__}: {e}"
                self._dataset.push_data(
                    error_placeholder(loaded_url or request.url, request.job_id, error, clock=self._clock),
                )
                self._stats.failed += 1

    async def fetch_html(self, request: DetailRequest) -> tuple[str, str]:
        """Fetch a detail page, retrying transport errors and retryable statuses.

        The session makes one attempt per try, so max_request_retries bounds
        the total number of HTTP attempts.

        Returns (html, loaded URL). Raises FetchError once retries run out or
        on a non-retryable status.
        """
        messages: list[str] = []
        retrying = AsyncRetrying(
            wait=wait_exponential(min=0, max=self._config.retry_backoff_max_s),
            stop=stop_after_attempt(self._config.max_request_retries + 1),
            retry=retry_if_exception_type(_RetryableFetch),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    try:
                        response = await self._session.get(request.url, retry=False)
                    except httpx.HTTPError as e:
                        messages.append(f"{type(e).__name__}: {e}")
                        raise _RetryableFetch from e
                    if response.status_code in RETRYABLE_STATUSES:
                        messages.append(f"HTTP {response.status_code} {response.reason_phrase}")
                        raise _RetryableFetch
                    if not response.is_success:
                        messages.append(f"HTTP {response.status_code} {response.reason_phrase}")
                        raise FetchError(request.url, messages, len(messages) - 1)
                    return response.text, str(response.url)
        except RetryError:
            pass
        raise FetchError(request.url, messages, max(len(messages) - 1, 0))

    async def handle_job_detail(self, request: DetailRequest, html: str, loaded_url: str) -> None:
        """Extract the job from its page and push the record or a placeholder."""
        url = loaded_url or request.url
        logger.info("Processing job: %s", url)
        try:
            detail = await asyncio.to_thread(
                extract_detail_record, html, timeout=self._config.evaluation_timeout_s,
            )
            record = normalize(detail, url, clock=self._clock)
        except (ExtractionError, RecordValidationError) as e:
            logger.error("Failed to extract job data from %s: %s", url, e)
            self._dataset.push_data(error_placeholder(url, request.job_id, str(e), clock=self._clock))
            self._stats.failed += 1
            return

        self._dataset.push_data(record.to_item())
        self._stats.succeeded += 1
        logger.info('Successfully extracted: "%s" at %s', record.title, record.company.name)

    async def default_handler(self, request: DetailRequest, html: str, loaded_url: str) -> None:
        logger.warning("Unhandled route: %s", request.url)

    async def failed_request_handler(self, request: DetailRequest, error: FetchError) -> None:
        """Record a request that failed after all retries."""
        logger.error("Request failed: %s", request.url)
        now = self._clock()
        details = (
            f"URL: {request.url}\n"
            f"Error Messages: {', '.join(error.messages) or 'Unknown error'}\n"
            f"Retry Count: {error.retry_count}\n"
            f"Timestamp: {format_instant(now)}"
        )
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        millis = int(now.timestamp() * 1000)
        self._dataset.set_value(f"error-{millis}-{request.job_id}.txt", details)
        self._dataset.push_data(error_placeholder(request.url, request.job_id, str(error), clock=self._clock))
        self._stats.request_failures += 1
