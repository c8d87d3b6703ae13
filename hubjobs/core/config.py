"""Configuration models, YAML loader, and run-config resolution."""

import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hubjobs.core.schemas import ALL_REGIONS, Region

FREE_TIER_ITEM_LIMIT = 50

ENV_JOB_URL = "JOB_URL"
ENV_MAX_PAGES_TEST = "MAX_PAGES_TEST"
ENV_FREE_TIER = "HUBJOBS_FREE_TIER"


class RegionErrorPolicy(str, Enum):
    """What the aggregator does when one region's listing fetch fails."""

    ABORT = "abort"
    SKIP = "skip"


class InputConfig(BaseModel):
    """Run input: which regions, an optional single job, and the item cap."""

    regions: list[Region] = Field(default_factory=list)
    job_url: str | None = None
    max_requests_per_crawl: int = Field(default=0, ge=0)

    @field_validator("regions", mode="before")
    @classmethod
    def parse_regions(cls, v: Any) -> list[Region]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [Region.parse(r) for r in v]

    @field_validator("job_url")
    @classmethod
    def job_url_blank_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class CrawlerConfig(BaseModel):
    """Detail-page crawling settings."""

    max_concurrency: int = Field(default=50, ge=1)
    max_request_retries: int = Field(default=3, ge=0)
    request_timeout_s: float = Field(default=30.0, gt=0)
    evaluation_timeout_s: float = Field(default=5.0, gt=0)
    retry_backoff_max_s: float = Field(default=10.0, ge=0)
    # Listing API calls only; detail fetches use max_request_retries.
    transport_retries: int = Field(default=3, ge=0)
    user_agent: str = "hubjobs/0.1 (+https://thehub.io)"


class ListingConfig(BaseModel):
    """Listing API settings."""

    page_concurrency: int = Field(default=5, ge=1)
    on_region_error: RegionErrorPolicy = RegionErrorPolicy.ABORT


class PlatformConfig(BaseModel):
    """Hosting platform conditions."""

    free_tier: bool = False


class DatabaseConfig(BaseModel):
    """Dataset storage configuration."""

    path: str = "data/dataset.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    input: InputConfig = Field(default_factory=InputConfig)
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    listing: ListingConfig = Field(default_factory=ListingConfig)
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)


class RunConfig(BaseModel):
    """Immutable per-run configuration, resolved once and passed down.

    ``max_items`` of 0 means unlimited.
    """

    model_config = ConfigDict(frozen=True)

    regions: tuple[Region, ...]
    job_url: str | None = None
    job_url_source: str = ""
    max_items: int = Field(default=0, ge=0)
    limit_source: str = "input"
    free_tier: bool = False

    @property
    def single_job_mode(self) -> bool:
        return self.job_url is not None


def resolve_run_config(
    settings: Settings,
    env: Mapping[str, str] | None = None,
) -> RunConfig:
    """Combine settings with environment overrides into a RunConfig.

    Overrides:
      JOB_URL            switches the run into single-job mode.
      MAX_PAGES_TEST     replaces the configured item cap.
      HUBJOBS_FREE_TIER  enables the free-tier ceiling.
    """
    env = os.environ if env is None else env

    regions = tuple(settings.input.regions) or ALL_REGIONS

    env_job_url = (env.get(ENV_JOB_URL) or "").strip()
    if env_job_url:
        job_url: str | None = env_job_url
        job_url_source = "JOB_URL environment variable"
    else:
        job_url = settings.input.job_url
        job_url_source = "job_url input parameter" if job_url else ""

    raw_test_limit = (env.get(ENV_MAX_PAGES_TEST) or "").strip()
    if raw_test_limit:
        try:
            max_items = int(raw_test_limit)
        except ValueError:
            msg = f"{ENV_MAX_PAGES_TEST} must be an integer, got '{raw_test_limit}'"
            raise ValueError(msg) from None
        if max_items < 0:
            msg = f"{ENV_MAX_PAGES_TEST} must not be negative, got {max_items}"
            raise ValueError(msg)
        limit_source = ENV_MAX_PAGES_TEST
    else:
        max_items = settings.input.max_requests_per_crawl
        limit_source = "input"

    free_tier = settings.platform.free_tier or _env_flag(env.get(ENV_FREE_TIER))
    if free_tier and (max_items == 0 or max_items > FREE_TIER_ITEM_LIMIT):
        max_items = FREE_TIER_ITEM_LIMIT
        limit_source = "free tier"

    return RunConfig(
        regions=regions,
        job_url=job_url,
        job_url_source=job_url_source,
        max_items=max_items,
        limit_source=limit_source,
        free_tier=free_tier,
    )


def describe_limit(run_config: RunConfig) -> str:
    """Human-readable description of the item cap for logging."""
    if run_config.limit_source == ENV_MAX_PAGES_TEST:
        return (
            f"Maximum requests per crawl: {run_config.max_items} "
            f"(overridden by {ENV_MAX_PAGES_TEST} environment variable)"
        )
    if run_config.limit_source == "free tier":
        return f"Maximum requests per crawl: {run_config.max_items} (free tier limit)"
    if run_config.max_items == 0:
        return "Maximum requests per crawl: unlimited"
    return f"Maximum requests per crawl: {run_config.max_items}"


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}
