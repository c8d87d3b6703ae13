"""Map an extracted DetailRecord to a validated OutputRecord.

Derived fields:
  - company.logoUrl   composed from the relative logo path (absent without one)
  - jobPositionTypes  ids translated to labels, unknown ids kept as-is
  - publishedAt       falls back to createdAt when empty
  - link              empty string becomes absent
  - expirationDate    a full instant is reduced to its YYYY-MM-DD date
  - scrapedAt         the injected clock at normalization time
"""

import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from hubjobs.core.schemas import DetailRecord
from hubjobs.pipeline.validation import OutputRecord, validate_output
from hubjobs.platforms.thehub.api import build_image_url
from hubjobs.platforms.thehub.constants import JOB_POSITION_TYPE_MAP

Clock = Callable[[], datetime]

_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_instant(moment: datetime) -> str:
    """ISO-8601 UTC instant with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def translate_job_position_types(ids: list[str] | None) -> list[str]:
    """Translate position type ids to labels; unknown ids pass through."""
    return [JOB_POSITION_TYPE_MAP.get(i, i) for i in ids or []]


def normalize_expiration_date(value: str | None) -> str | None:
    if not value:
        return None
    match = _DATE_PREFIX.match(value)
    return match.group(1) if match else value


def _text(value: Any) -> Any:
    """Stringify numeric company fields; leave anything else for validation."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def build_output_data(detail: DetailRecord, source_url: str, scraped_at: datetime) -> dict[str, Any]:
    """Assemble the unvalidated output dict (camelCase keys)."""
    company = detail.company
    company_data: dict[str, Any] | None = None
    if company is not None:
        logo_path = company.logo_image.path if company.logo_image else None
        company_data = {
            "id": company.id,
            "key": company.key,
            "name": company.name,
            "website": company.website,
            "numberOfEmployees": _text(company.number_of_employees),
            "founded": _text(company.founded),
            "whatWeDo": company.what_we_do,
            "logoUrl": build_image_url(logo_path) if logo_path else None,
        }

    data: dict[str, Any] = {
        "id": detail.id,
        "key": detail.key,
        "url": source_url,
        "title": detail.title,
        "description": detail.description,
        "company": company_data,
        "location": detail.location.model_dump() if detail.location else None,
        "isRemote": detail.is_remote,
        "salary": detail.salary,
        "salaryRange": detail.salary_range.model_dump() if detail.salary_range else None,
        "equity": detail.equity,
        "jobRole": detail.job_role,
        "jobPositionTypes": translate_job_position_types(detail.job_position_types),
        "views": detail.views.model_dump() if detail.views else None,
        "link": detail.link or None,
        "createdAt": detail.created_at,
        "publishedAt": detail.published_at or detail.created_at,
        "expirationDate": normalize_expiration_date(detail.expiration_date),
        "scrapedAt": format_instant(scraped_at),
    }
    # Absent optional values are omitted rather than sent as null; required
    # ones stay so validation reports them.
    for key in ("location", "salaryRange", "link", "expirationDate"):
        if data[key] is None:
            del data[key]
    if company_data is not None:
        for key in ("whatWeDo", "logoUrl"):
            if company_data[key] is None:
                del company_data[key]
    return data


def normalize(
    detail: DetailRecord,
    source_url: str,
    *,
    clock: Clock | None = None,
) -> OutputRecord:
    """Normalize and validate one detail record.

    Raises RecordValidationError with every violated field.
    """
    scraped_at = (clock or utc_now)()
    return validate_output(build_output_data(detail, source_url, scraped_at))


def error_placeholder(
    url: str,
    job_id: str | None,
    error: str,
    *,
    clock: Clock | None = None,
) -> dict[str, Any]:
    """Dataset item recording a per-job failure."""
    item: dict[str, Any] = {"url": url}
    if job_id:
        item["jobId"] = job_id
    item["error"] = error
    item["timestamp"] = format_instant((clock or utc_now)())
    return item
