"""Error taxonomy for the scraper.

Scope rules:
  - ApiError, configuration errors -> fatal for the whole run.
  - ExtractionError, RecordValidationError, FetchError -> scoped to one job;
    recorded as an error placeholder and the run continues.
"""

from dataclasses import dataclass
from enum import Enum


class ScraperError(Exception):
    """Base class for every error raised by the scraper."""


class ApiError(ScraperError):
    """The listing API returned a non-success status or an unusable body."""

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        prefix = f"API error: {status}" if status is not None else "API error"
        super().__init__(f"{prefix} {message}".strip())


class ExtractionFailure(str, Enum):
    """Why a detail page did not yield a usable record."""

    NO_EMBEDDED_SCRIPT = "NoEmbeddedScript"
    MALFORMED_PAYLOAD = "MalformedPayload"
    EVALUATION_TIMEOUT = "EvaluationTimeout"
    MISSING_JOB_PATH = "MissingJobPath"


class ExtractionError(ScraperError):
    """The embedded state could not be located, evaluated, or navigated."""

    def __init__(self, reason: ExtractionFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        text = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(text)


@dataclass(frozen=True)
class Violation:
    """A single failed constraint on an output record field."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class RecordValidationError(ScraperError):
    """An output record failed schema validation.

    Carries every violated field, not just the first one.
    """

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = list(violations)
        joined = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Output record failed validation ({len(self.violations)}): {joined}")

    @property
    def paths(self) -> list[str]:
        return [v.path for v in self.violations]


class FetchError(ScraperError):
    """A detail page could not be fetched after all retries."""

    def __init__(self, url: str, messages: list[str], retry_count: int) -> None:
        self.url = url
        self.messages = list(messages)
        self.retry_count = retry_count
        last = self.messages[-1] if self.messages else "Unknown error"
        super().__init__(f"Request failed after {retry_count} retries: {url} ({last})")
