"""thehub.io listing API client, URL builders, and pagination.

Pagination rules:
  - Page 1 is fetched alone: only it reports the page count and carries the
    featured listings.
  - Pages 2..N are then fetched concurrently, but only as many as the limit
    still needs.
  - REMOTE is sent as ``isRemote=true``. ``countryCode=REMOTE`` returns an
    empty page and is never sent.
"""

import asyncio
import logging
import math
import re
from typing import Any

import httpx
from pydantic import ValidationError

from hubjobs.core.errors import ApiError
from hubjobs.core.schemas import ListingPage, ListingSummary, Region
from hubjobs.http.session import HttpSession
from hubjobs.platforms.base import ListingSource
from hubjobs.platforms.thehub.constants import (
    IMAGE_HEIGHT,
    IMAGE_HOST,
    IMAGE_QUALITY,
    IMAGE_WIDTH,
    LISTING_ENDPOINT,
    PAGE_SIZE,
    SITE_BASE,
    SORTING,
)

logger = logging.getLogger(__name__)

JOB_ID_PATTERN = re.compile(r"/jobs/([a-zA-Z0-9-]+)")


def build_listing_params(region: Region | str, page: int) -> dict[str, str]:
    """Build query parameters for one listing page.

    Raises ValueError for an unrecognized region or a page below 1.
    """
    region = Region.parse(region)
    if page < 1:
        msg = f"page must be >= 1, got {page}"
        raise ValueError(msg)

    params: dict[str, str] = {}
    if region is Region.REMOTE:
        params["isRemote"] = "true"
    else:
        params["countryCode"] = region.value
    params["page"] = str(page)
    params["sorting"] = SORTING
    return params


def build_job_url(job_id: str) -> str:
    """Build the canonical detail page URL for a job."""
    return f"{SITE_BASE}/jobs/{job_id}"


def build_image_url(path: str, width: int = IMAGE_WIDTH, height: int = IMAGE_HEIGHT) -> str:
    """Compose an absolute image URL from a relative path."""
    return f"{IMAGE_HOST}{path}?fit=crop&w={width}&h={height}&auto=format&q={IMAGE_QUALITY}"


def job_id_from_url(url: str) -> str:
    """Extract the job id from a ``/jobs/<id>`` URL, or 'unknown'."""
    match = JOB_ID_PATTERN.search(url)
    return match.group(1) if match else "unknown"


def get_page_size() -> int:
    """Listing page size (fixed at 15 by the API)."""
    return PAGE_SIZE


def pages_needed(remaining: int, total_pages: int) -> int:
    """How many pages after page 1 to request. ``remaining`` of 0 means no limit."""
    after_first = max(total_pages - 1, 0)
    if remaining <= 0:
        return after_first
    return min(after_first, math.ceil(remaining / PAGE_SIZE))


class TheHubListingClient(ListingSource):
    """Listing API client bound to one HTTP session."""

    def __init__(self, session: HttpSession, *, page_concurrency: int = 5) -> None:
        self._session = session
        self._page_semaphore = asyncio.Semaphore(page_concurrency)

    @property
    def platform_id(self) -> str:
        return "thehub"

    async def fetch_page(self, region: Region | str, page: int) -> ListingPage:
        """Fetch one listing page.

        Raises ApiError on a non-success status or an unusable body. Status
        codes are not retried.
        """
        params = build_listing_params(region, page)
        logger.debug("Fetching jobs: %s %s", LISTING_ENDPOINT, params)

        try:
            response = await self._session.get(LISTING_ENDPOINT, params=params)
        except httpx.HTTPError as e:
            raise ApiError(None, f"request failed: {e}") from e

        if not response.is_success:
            raise ApiError(response.status_code, response.reason_phrase)

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise ApiError(response.status_code, f"invalid JSON: {e}") from e

        try:
            return ListingPage.model_validate(payload)
        except ValidationError as e:
            raise ApiError(
                response.status_code, f"unexpected response shape ({e.error_count()} errors)",
            ) from e

    async def fetch_all_for_region(self, region: Region | str, limit: int = 0) -> list[ListingSummary]:
        """Fetch every listing for one region, honoring an optional limit.

        Returns regular docs in page order, with page 1's featured docs
        following page 1's regular docs. ``limit`` of 0 means unlimited. The
        result may overshoot the limit by part of a page; callers truncate.
        """
        region = Region.parse(region)
        limit_note = f" (limit: {limit})" if limit > 0 else ""
        logger.info("Fetching jobs for region: %s%s", region.value, limit_note)

        first = await self.fetch_page(region, 1)
        jobs: list[ListingSummary] = list(first.jobs.docs)
        featured = first.featured_jobs.docs
        jobs.extend(featured)
        total_pages = first.jobs.pages
        self._log_page(region, 1, total_pages, len(first.jobs.docs), len(featured))

        if limit > 0 and len(jobs) >= limit:
            logger.info("Reached limit of %d jobs, stopping pagination", limit)
        else:
            remaining = limit - len(jobs) if limit > 0 else 0
            count = pages_needed(remaining, total_pages)
            if count:
                pages = await asyncio.gather(
                    *(self._fetch_page_bounded(region, n) for n in range(2, count + 2)),
                )
                for number, page in enumerate(pages, start=2):
                    jobs.extend(page.jobs.docs)
                    self._log_page(region, number, total_pages, len(page.jobs.docs), 0)
                if limit > 0 and count < total_pages - 1:
                    logger.info("Reached limit of %d jobs, stopping pagination", limit)

        logger.info("Fetched %d total jobs for %s", len(jobs), region.value)
        return jobs

    async def _fetch_page_bounded(self, region: Region, page: int) -> ListingPage:
        async with self._page_semaphore:
            return await self.fetch_page(region, page)

    @staticmethod
    def _log_page(region: Region, page: int, total_pages: int, regular: int, featured: int) -> None:
        featured_info = f" ({regular} regular + {featured} featured)" if featured else ""
        logger.info(
            "Fetched page %d/%d for %s: %d jobs%s",
            page, total_pages, region.value, regular + featured, featured_info,
        )
