"""Extract the job record from a thehub.io detail page's ``__NUXT__`` state.

The page is server-rendered by Nuxt, which embeds its whole store as:

    <script>window.__NUXT__=(function(a,b,c,...){return {...}}("v1","v2",...));</script>

The right-hand side is isolated by bracket balancing and handed to the
capability-free evaluator in ``jsexpr``; the job lives at ``state.jobs.job``.
"""

import logging
import re
from typing import Any

from bs4 import BeautifulSoup
from pydantic import ValidationError

from hubjobs.core.errors import ExtractionError, ExtractionFailure
from hubjobs.core.schemas import DetailRecord
from hubjobs.platforms.thehub.jsexpr import (
    JsEvaluationError,
    JsSyntaxError,
    JsTimeoutError,
    evaluate_expression,
)

logger = logging.getLogger(__name__)

NUXT_ASSIGNMENT = re.compile(r"window\s*\.\s*__NUXT__\s*=(?!=)")
JOB_PATH: tuple[str, ...] = ("state", "jobs", "job")
DEFAULT_EVALUATION_TIMEOUT_S = 5.0

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


def find_nuxt_script(html: str) -> str:
    """Return the text of the script that assigns ``window.__NUXT__``."""
    soup = BeautifulSoup(html, "html.parser")
    for script in soup.find_all("script"):
        content = script.string if script.string is not None else script.get_text()
        if content and NUXT_ASSIGNMENT.search(content):
            return content
    raise ExtractionError(ExtractionFailure.NO_EMBEDDED_SCRIPT, "No __NUXT__ script found in HTML")


def isolate_assignment(script: str) -> str:
    """Return exactly the right-hand expression of the ``__NUXT__`` assignment.

    Brackets are balanced while skipping string literals and comments, so
    braces or parentheses inside strings never end the expression early.
    """
    match = NUXT_ASSIGNMENT.search(script)
    if match is None:
        raise ExtractionError(ExtractionFailure.NO_EMBEDDED_SCRIPT, "No __NUXT__ assignment in script")

    start = match.end()
    n = len(script)
    i = start
    stack: list[str] = []
    seen_bracket = False
    while i < n:
        ch = script[i]
        if ch in "\"'`":
            i = _skip_string(script, i)
            continue
        if script.startswith("//", i):
            end = script.find("\n", i)
            i = n if end == -1 else end + 1
            continue
        if script.startswith("/*", i):
            end = script.find("*/", i + 2)
            if end == -1:
                break
            i = end + 2
            continue
        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
            seen_bracket = True
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                raise ExtractionError(
                    ExtractionFailure.MALFORMED_PAYLOAD, f"Unbalanced {ch!r} at offset {i - start}",
                )
            if not stack:
                # The call's argument list may follow a closed function body.
                j = _skip_space(script, i + 1)
                if j < n and script[j] in "([.":
                    i = j
                    continue
                return script[start:i + 1].strip()
        elif not stack and ch in ";\n" and seen_bracket:
            return script[start:i].strip()
        elif not stack and ch == ";":
            break
        i += 1

    if stack:
        raise ExtractionError(ExtractionFailure.MALFORMED_PAYLOAD, "Unterminated __NUXT__ expression")
    expr = script[start:i].strip().rstrip(";").strip()
    if not expr:
        raise ExtractionError(ExtractionFailure.MALFORMED_PAYLOAD, "Empty __NUXT__ assignment")
    return expr


def _skip_string(text: str, start: int) -> int:
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    raise ExtractionError(ExtractionFailure.MALFORMED_PAYLOAD, f"Unterminated string at offset {start}")


def _skip_space(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def evaluate_nuxt_payload(expression: str, *, timeout: float = DEFAULT_EVALUATION_TIMEOUT_S) -> Any:
    """Evaluate an isolated ``__NUXT__`` expression into plain Python data."""
    try:
        return evaluate_expression(expression, timeout=timeout)
    except JsTimeoutError as e:
        raise ExtractionError(ExtractionFailure.EVALUATION_TIMEOUT, str(e)) from e
    except (JsSyntaxError, JsEvaluationError) as e:
        raise ExtractionError(ExtractionFailure.MALFORMED_PAYLOAD, str(e)) from e


def extract_nuxt_state(html: str, *, timeout: float = DEFAULT_EVALUATION_TIMEOUT_S) -> Any:
    """Return the whole evaluated ``__NUXT__`` object (for debugging)."""
    script = find_nuxt_script(html)
    return evaluate_nuxt_payload(isolate_assignment(script), timeout=timeout)


def navigate_job_path(state: Any) -> dict[str, Any]:
    """Follow ``state.jobs.job``; raise MissingJobPath if any step is absent."""
    node = state
    for step in JOB_PATH:
        if not isinstance(node, dict) or node.get(step) is None:
            raise ExtractionError(
                ExtractionFailure.MISSING_JOB_PATH,
                "__NUXT__ data found but no job object in state.jobs.job",
            )
        node = node[step]
    if not isinstance(node, dict):
        raise ExtractionError(ExtractionFailure.MISSING_JOB_PATH, "state.jobs.job is not an object")
    return node


def extract_detail_record(html: str, *, timeout: float = DEFAULT_EVALUATION_TIMEOUT_S) -> DetailRecord:
    """Extract the job at ``state.jobs.job`` from a detail page.

    Raises ExtractionError with reason NoEmbeddedScript, MalformedPayload,
    EvaluationTimeout or MissingJobPath.
    """
    state = extract_nuxt_state(html, timeout=timeout)
    job = navigate_job_path(state)
    try:
        return DetailRecord.model_validate(job)
    except ValidationError as e:
        logger.debug("Job object did not match the detail shape", exc_info=True)
        raise ExtractionError(
            ExtractionFailure.MALFORMED_PAYLOAD,
            f"Job object has an unexpected shape ({e.error_count()} errors)",
        ) from e
