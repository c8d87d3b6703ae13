"""Multi-region aggregation: concurrent per-region fetch, ordered merge, dedup.

Merge order is region order, then page order, then in-page order, whatever
order the concurrent fetches finish in. The first occurrence of a job id
wins; a job listed under several regions is attributed to the earliest
region in the requested list.
"""

import asyncio
import logging
from collections.abc import Sequence

from hubjobs.core.config import RegionErrorPolicy
from hubjobs.core.schemas import ListingSummary, Region
from hubjobs.platforms.base import ListingSource

logger = logging.getLogger(__name__)


class DeduplicationFilter:
    """Remove duplicates by job id within a single run.

    Stateful: tracks seen ids across calls within the same filter instance.
    Only touched from the synchronous merge step.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._seen

    def __call__(self, summaries: list[ListingSummary]) -> list[ListingSummary]:
        result: list[ListingSummary] = []
        for s in summaries:
            if s.id not in self._seen:
                self._seen.add(s.id)
                result.append(s)
        deduped = len(summaries) - len(result)
        if deduped:
            logger.debug("DeduplicationFilter: removed %d duplicates", deduped)
        return result


def merge_region_results(
    per_region: Sequence[list[ListingSummary]],
    limit: int = 0,
    dedup_filter: DeduplicationFilter | None = None,
) -> list[ListingSummary]:
    """Merge region results in order, dropping duplicates, up to ``limit``."""
    dedup_filter = dedup_filter or DeduplicationFilter()
    merged: list[ListingSummary] = []
    for summaries in per_region:
        for summary in dedup_filter(summaries):
            merged.append(summary)
            if limit > 0 and len(merged) >= limit:
                return merged
    return merged


async def fetch_all_jobs(
    source: ListingSource,
    regions: Sequence[Region | str],
    limit: int = 0,
    *,
    on_region_error: RegionErrorPolicy = RegionErrorPolicy.ABORT,
) -> list[ListingSummary]:
    """Fetch, merge, and deduplicate listings across regions.

    Every region is fetched concurrently with the full ``limit`` (so the
    unique count stays exact after dedup). With ``ABORT`` the first region
    failure propagates; with ``SKIP`` failed regions are logged and left out.
    """
    if limit < 0:
        msg = f"limit must not be negative, got {limit}"
        raise ValueError(msg)
    parsed = [Region.parse(r) for r in regions]

    results = await asyncio.gather(
        *(source.fetch_all_for_region(region, limit) for region in parsed),
        return_exceptions=on_region_error is RegionErrorPolicy.SKIP,
    )

    per_region: list[list[ListingSummary]] = []
    for region, result in zip(parsed, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error("Skipping region %s after failure: %s", region.value, result)
            continue
        per_region.append(result)

    merged = merge_region_results(per_region, limit)
    logger.info("Fetched %d unique jobs across %d regions", len(merged), len(parsed))
    return merged
