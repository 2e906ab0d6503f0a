from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, List, Optional, Sequence

from pydantic import ValidationError

from ..state import VERDICTS, CoverageResult, CoverageState, EvidenceItem, OverallVerdict, PaperVerdict
from ...tools.logger import get_logger

logger = get_logger(__name__)


NON_JSON_EXPLANATION = "Model returned non-JSON output; unable to score."
NO_JSON_RATIONALE = "No JSON result."

_FENCED_JSON_RE = re.compile(r"```json([\s\S]*?)```", re.IGNORECASE)
_BRACES_RE = re.compile(r"(\{[\s\S]*\})")


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name}")


def _load_result(text: str) -> Optional[CoverageResult]:
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("overall"), dict):
        return None
    try:
        return CoverageResult.model_validate(data)
    except ValidationError as exc:
        # only reachable when per_paper is not a list of objects
        logger.debug("[reconcile] JSON does not match the result shape: %s", exc)
        return None


def parse_direct(text: str) -> Optional[CoverageResult]:
    return _load_result(text)


def parse_fenced(text: str) -> Optional[CoverageResult]:
    match = _FENCED_JSON_RE.search(text)
    if not match:
        return None
    return _load_result(match.group(1))


def parse_braces(text: str) -> Optional[CoverageResult]:
    match = _BRACES_RE.search(text)
    if not match:
        return None
    return _load_result(match.group(1))


def parse_embedded(text: str) -> Optional[CoverageResult]:
    """Parse a ```json fence if there is one, otherwise the widest {...} span."""
    if _FENCED_JSON_RE.search(text):
        return parse_fenced(text)
    return parse_braces(text)


STRATEGIES: List[Callable[[str], Optional[CoverageResult]]] = [
    parse_direct,
    parse_embedded,
]


def degraded_result(evidence: Sequence[EvidenceItem]) -> CoverageResult:
    return CoverageResult(
        overall=OverallVerdict(
            follows=False,
            coverage_percent=0,
            confidence=0.2,
            explanation=NON_JSON_EXPLANATION,
        ),
        per_paper=[
            PaperVerdict(
                id=item.id,
                title=item.title,
                coverage_percent=0,
                verdict="irrelevant",
                rationale=NO_JSON_RATIONALE,
            )
            for item in evidence
        ],
    )


def as_number(value: Any) -> Optional[float]:
    """``value`` as a finite float, or None when it is not a JSON number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _check_range(label: str, value: Any, high: float, problems: List[str]) -> None:
    number = as_number(value)
    if number is None:
        problems.append(f"{label} {value!r} is not a number")
    elif not 0 <= number <= high:
        problems.append(f"{label} {value!r} outside [0, {high:g}]")


def flag_schema_violations(result: CoverageResult, evidence: Sequence[EvidenceItem]) -> List[str]:
    """List values outside the documented schema. Nothing is corrected."""
    problems: List[str] = []
    overall = result.overall
    if not isinstance(overall.follows, bool):
        problems.append(f"overall follows {overall.follows!r} is not a boolean")
    _check_range("overall coverage_percent", overall.coverage_percent, 100, problems)
    _check_range("overall confidence", overall.confidence, 1, problems)
    known_ids = {item.id for item in evidence}
    for entry in result.per_paper:
        _check_range(f"{entry.id}: coverage_percent", entry.coverage_percent, 100, problems)
        if entry.verdict not in VERDICTS:
            problems.append(f"{entry.id}: unknown verdict {entry.verdict!r}")
        if not isinstance(entry.id, str) or entry.id not in known_ids:
            problems.append(f"{entry.id}: not part of the evidence set")
    for problem in problems:
        logger.warning("[reconcile] %s", problem)
    return problems


def reconcile(raw_text: str, evidence: Sequence[EvidenceItem]) -> CoverageResult:
    text = raw_text or ""
    for strategy in STRATEGIES:
        try:
            result = strategy(text)
        except Exception as exc:
            logger.warning("[reconcile] %s failed unexpectedly: %s", strategy.__name__, exc)
            continue
        if result is not None:
            logger.debug("[reconcile] Parsed model output with %s", strategy.__name__)
            flag_schema_violations(result, evidence)
            return result
    logger.warning("[reconcile] Model output is not JSON; returning degraded result")
    return degraded_result(evidence)


def reconcile_node(state: CoverageState) -> dict:
    return {"result": reconcile(state.raw_response, state.evidence)}
