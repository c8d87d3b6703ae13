"""Orchestrator: wires run config, listing aggregation, detail crawl, and run tracking.

Data flow:
  1. Single-job mode → one detail request, listing API untouched
  2. Otherwise aggregator → unique listing summaries (capped)
  3. Summaries → detail requests
  4. Crawler → records / error placeholders pushed to the dataset
  5. Run recorded
"""

import logging
from datetime import datetime, timezone

from hubjobs.core.config import RunConfig, Settings, describe_limit
from hubjobs.core.db import Dataset, insert_run
from hubjobs.core.errors import RecordValidationError
from hubjobs.core.schemas import DetailRequest, ListingSummary
from hubjobs.http.session import HttpSession
from hubjobs.pipeline.aggregator import fetch_all_jobs
from hubjobs.pipeline.crawler import CrawlStats, DetailCrawler
from hubjobs.pipeline.normalizer import Clock
from hubjobs.pipeline.validation import validate_output
from hubjobs.platforms.thehub.api import TheHubListingClient, build_job_url, job_id_from_url
from hubjobs.platforms.thehub.constants import JOB_DETAIL_LABEL

logger = logging.getLogger(__name__)


class RunResult:
    """Summary of a single scraper run."""

    def __init__(
        self,
        mode: str,
        listed_count: int,
        requested_count: int,
        stats: CrawlStats,
        run_id: int,
    ) -> None:
        self.mode = mode
        self.listed_count = listed_count
        self.requested_count = requested_count
        self.stats = stats
        self.run_id = run_id


class AuditReport:
    """Outcome of re-validating every record stored in a dataset."""

    def __init__(self) -> None:
        self.valid = 0
        self.placeholders = 0
        self.invalid: list[tuple[str, RecordValidationError]] = []

    @property
    def total(self) -> int:
        return self.valid + self.placeholders + len(self.invalid)

    @property
    def success_rate(self) -> float:
        """Share of stored items that are valid records (0.0 for an empty dataset)."""
        return self.valid / self.total if self.total else 0.0


def build_start_requests(summaries: list[ListingSummary]) -> list[DetailRequest]:
    """One detail request per listing summary, in listing order."""
    return [
        DetailRequest(
            url=build_job_url(s.id),
            job_id=s.id,
            label=JOB_DETAIL_LABEL,
            basic_info={"title": s.title, "company": s.company.name},
        )
        for s in summaries
    ]


def single_job_request(job_url: str) -> DetailRequest:
    """Detail request for an explicitly given job URL."""
    return DetailRequest(url=job_url, job_id=job_id_from_url(job_url), label=JOB_DETAIL_LABEL)


async def run_scraper(
    run_config: RunConfig,
    settings: Settings,
    session: HttpSession,
    dataset: Dataset,
    *,
    clock: Clock | None = None,
) -> RunResult:
    """Execute one full run and record it.

    ApiError from the listing API and ValueError from bad input propagate;
    per-job failures end up in the dataset as error placeholders.
    """
    started_at = datetime.now(timezone.utc)
    logger.info(describe_limit(run_config))

    job_url = run_config.job_url
    if job_url is not None:
        logger.info(
            "Single job mode: scraping %s (from %s)",
            job_url, run_config.job_url_source or "input",
        )
        mode = "single"
        listed_count = 0
        requests = [single_job_request(job_url)]
    else:
        logger.info("Regions: %s", ", ".join(r.value for r in run_config.regions))
        mode = "listing"
        source = TheHubListingClient(session, page_concurrency=settings.listing.page_concurrency)
        summaries = await fetch_all_jobs(
            source,
            run_config.regions,
            run_config.max_items,
            on_region_error=settings.listing.on_region_error,
        )
        listed_count = len(summaries)
        requests = build_start_requests(summaries)
        logger.info("Enqueuing %d job detail requests", len(requests))

    crawler = DetailCrawler(
        session, dataset, settings.crawler, max_requests=run_config.max_items, clock=clock,
    )
    stats = await crawler.run(requests)

    finished_at = datetime.now(timezone.utc)
    run_id = insert_run(
        dataset.conn,
        mode=mode,
        regions=[] if run_config.single_job_mode else [r.value for r in run_config.regions],
        max_items=run_config.max_items,
        listed_count=listed_count,
        succeeded=stats.succeeded,
        failed=stats.failed + stats.request_failures,
        started_at=started_at,
        finished_at=finished_at,
    )

    logger.info(
        "Run %d finished: %d listed, %d succeeded, %d failed",
        run_id, listed_count, stats.succeeded, stats.failed + stats.request_failures,
    )
    return RunResult(
        mode=mode,
        listed_count=listed_count,
        requested_count=len(requests),
        stats=stats,
        run_id=run_id,
    )


def audit_dataset(dataset: Dataset) -> AuditReport:
    """Re-validate every stored record; placeholders are counted separately."""
    report = AuditReport()
    for item in dataset.items():
        if "error" in item:
            report.placeholders += 1
            continue
        try:
            validate_output(item)
        except RecordValidationError as e:
            report.invalid.append((str(item.get("url", "")), e))
            continue
        report.valid += 1
    return report
