"""Output record schema and validation.

The output record is the externally visible unit handed to the dataset.
Validation is strict on types and accumulates every violation. Unknown
extra fields are ignored.
"""

import re
from datetime import date, datetime
from typing import Annotated, Any
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from hubjobs.core.errors import RecordValidationError, Violation

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})$")
_BRANCH_TAGS = {"str", "int", "float", "bool", "none"}


def _http_url(value: str) -> str:
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        msg = "must be a valid absolute URL"
        raise ValueError(msg)
    if parsed.scheme not in ("http", "https"):
        msg = "must use http or https protocol"
        raise ValueError(msg)
    return value


def _iso_datetime(value: str) -> str:
    if not _DATETIME.match(value):
        msg = "must be an ISO-8601 date-time with a timezone"
        raise ValueError(msg)
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        msg = "must be an ISO-8601 date-time"
        raise ValueError(msg) from None
    return value


def _iso_date(value: str) -> str:
    if not _DATE_ONLY.match(value):
        msg = "must be a date in YYYY-MM-DD format"
        raise ValueError(msg)
    try:
        date.fromisoformat(value)
    except ValueError:
        msg = "must be a date in YYYY-MM-DD format"
        raise ValueError(msg) from None
    return value


NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
HttpUrlStr = Annotated[StrictStr, AfterValidator(_http_url)]
DateTimeStr = Annotated[StrictStr, Field(min_length=1), AfterValidator(_iso_datetime)]
DateStr = Annotated[StrictStr, AfterValidator(_iso_date)]
Number = StrictInt | StrictFloat


class OutputModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CompanyOutput(OutputModel):
    id: NonEmptyStr
    key: NonEmptyStr
    name: NonEmptyStr
    website: StrictStr  # can be empty for some companies
    number_of_employees: StrictStr
    founded: StrictStr
    what_we_do: StrictStr | None = None
    logo_url: HttpUrlStr | None = None


class LocationOutput(OutputModel):
    country: StrictStr | None = None
    locality: StrictStr | None = None
    address: StrictStr | None = None


class ViewsOutput(OutputModel):
    week: Number
    total: Number


class SalaryRangeOutput(OutputModel):
    min: Number
    max: Number


class OutputRecord(OutputModel):
    """A validated job record, ready for the dataset."""

    id: NonEmptyStr
    key: NonEmptyStr
    url: HttpUrlStr
    title: NonEmptyStr
    description: NonEmptyStr
    company: CompanyOutput
    location: LocationOutput | None = None
    is_remote: StrictBool
    salary: NonEmptyStr
    salary_range: SalaryRangeOutput | None = None
    equity: NonEmptyStr
    job_role: NonEmptyStr
    job_position_types: list[StrictStr]
    views: ViewsOutput
    link: HttpUrlStr | None = None
    created_at: DateTimeStr
    published_at: DateTimeStr
    expiration_date: DateStr | None = None
    scraped_at: DateTimeStr

    def to_item(self) -> dict[str, Any]:
        """camelCase dict for the dataset, with absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


def validate_output(data: Any) -> OutputRecord:
    """Validate a candidate output record.

    Raises RecordValidationError listing every violated field.
    """
    if not isinstance(data, dict):
        raise RecordValidationError([Violation("$", f"must be an object, got {type(data).__name__}")])
    try:
        return OutputRecord.model_validate(data)
    except ValidationError as e:
        raise RecordValidationError(_violations(e)) from e


def _violations(error: ValidationError) -> list[Violation]:
    # A failed union reports once per branch; keep the first per field.
    violations: list[Violation] = []
    seen: set[str] = set()
    for item in error.errors():
        path = _format_loc(item["loc"])
        if path in seen:
            continue
        seen.add(path)
        violations.append(Violation(path, _clean_message(item["msg"])))
    return violations


def _format_loc(loc: tuple[Any, ...]) -> str:
    parts: list[str] = []
    for part in loc:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        elif part in _BRANCH_TAGS or "[" in str(part):
            # Union or validator branch names, not fields.
            continue
        else:
            parts.append(f".{part}" if parts else str(part))
    return "".join(parts) or "$"


def _clean_message(message: str) -> str:
    return message.removeprefix("Value error, ")
