"""Schema validation with a bounded LLM repair loop.

Model output is untrusted: it may be wrapped in prose or markdown fences, carry
trailing commas, or miss required fields. ``run_repair_loop`` tries to parse
and validate the text, and on failure hands the error and the last text to a
repair callback (normally another chat call) until the attempt budget is spent.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from sketchstack.errors import PlanValidationError
from sketchstack.models.architecture_plan import ArchitecturePlan


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RepairFn = Callable[[str, str], str]

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def clean_json_text(raw: str) -> str:
    """Normalize raw model output into something ``json.loads`` can take.

    The order of the steps matters. The quote rewrite is lossy: it only runs
    when the text holds no double quote at all, and then turns every single
    quote (apostrophes included) into a double quote.
    """
    cleaned = (raw or "").strip()
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last != -1:
        cleaned = cleaned[first : last + 1]

    cleaned = _TRAILING_COMMA.sub(r"\1", cleaned)

    if '"' not in cleaned and "'" in cleaned:
        cleaned = cleaned.replace("'", '"')
    return cleaned


def extract_json(raw: str) -> Any:
    try:
        return json.loads(clean_json_text(raw))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc


def format_validation_error(exc: ValidationError) -> str:
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        lines.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "\n".join(lines)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return format_validation_error(exc)
    return str(exc)


@dataclass
class RepairOutcome(Generic[ModelT]):
    ok: bool
    value: Optional[ModelT]
    error: Optional[str]
    attempts: int
    repairs: int
    last_raw: str


def run_repair_loop(
    raw_text: str,
    schema: Type[ModelT],
    max_repair_attempts: int,
    repair: RepairFn,
) -> RepairOutcome[ModelT]:
    """Validate ``raw_text`` against ``schema`` with at most ``max_repair_attempts`` repairs.

    Exactly ``max_repair_attempts + 1`` parse/validate attempts run when the
    text never validates. Exceptions raised by ``repair`` itself propagate.
    """
    total = max(0, max_repair_attempts) + 1
    last_raw = raw_text
    last_error: Optional[str] = None
    repairs = 0

    for attempt in range(1, total + 1):
        try:
            value = schema.model_validate(extract_json(last_raw))
        except ValueError as exc:
            last_error = _error_message(exc)
            logger.warning("Validation attempt %d/%d failed: %s", attempt, total, last_error[:200])
        else:
            if attempt > 1:
                logger.info("Validation succeeded after %d repair(s)", repairs)
            return RepairOutcome(ok=True, value=value, error=None, attempts=attempt, repairs=repairs, last_raw=last_raw)

        if attempt < total:
            last_raw = repair(last_error, last_raw)
            repairs += 1

    return RepairOutcome(ok=False, value=None, error=last_error, attempts=total, repairs=repairs, last_raw=last_raw)


def validate_and_repair(
    raw_text: str,
    schema: Type[ModelT],
    max_repair_attempts: int,
    repair: RepairFn,
) -> ModelT:
    outcome = run_repair_loop(raw_text, schema, max_repair_attempts, repair)
    if not outcome.ok:
        raise PlanValidationError(
            f"Validation failed after {outcome.attempts} attempts: {outcome.error}",
            attempts=outcome.attempts,
            last_error=outcome.error or "",
        )
    return outcome.value


def validate_architecture_plan(data: Dict[str, Any]) -> ArchitecturePlan:
    return ArchitecturePlan.model_validate(data)
