from __future__ import annotations

import json
import math
import re
from typing import Any, Mapping

from .errors import (
    InvalidLimit,
    InvalidPage,
    InvalidRegion,
    InvalidSubject,
    InvalidWeightSubjects,
    InvalidWeightValues,
    InvalidWeightsFormat,
    InvalidYear,
    WeightsNotNormalized,
)

# ── Constant tables ──────────────────────────────────────────────────────

VALID_SUBJECTS: tuple[str, ...] = (
    "AR",       # Academic Reputation
    "ER",       # Employer Reputation
    "FSR",      # Faculty Student Ratio
    "CPF",      # Citations per Faculty
    "IFR",      # International Faculty Ratio
    "ISR",      # International Student Ratio
    "ISD",      # International Student Diversity
    "IRN",      # International Research Network
    "EO",       # Employment Outcomes
    "SUS",      # Sustainability
    "Overall",
)

# "Overall" is the blended result, so it cannot carry a weight itself.
VALID_WEIGHT_SUBJECTS: tuple[str, ...] = tuple(s for s in VALID_SUBJECTS if s != "Overall")

VALID_REGIONS: tuple[str, ...] = (
    "Asia",
    "Europe",
    "North America",
    "South America",
    "Africa",
    "Middle East",
    "Oceania",
)

VALID_YEARS: tuple[str, ...] = ("2025", "2026")

WEIGHT_PARAM_PREFIX = "weight_"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
WEIGHT_TOTAL = 100.0
WEIGHT_TOLERANCE = 0.01

_INT_RE = re.compile(r"\s*[+-]?\d+\s*")


def score_field(subject: str) -> str:
    return f"{subject} SCORE"


def rank_field(year: str) -> str:
    return f"{year} Rank"


# ── Filters ──────────────────────────────────────────────────────────────


def validate_subject(subject: str | None) -> str | None:
    """Return the score field for *subject*, or ``None`` when not given."""
    if not subject:
        return None
    if subject not in VALID_SUBJECTS:
        raise InvalidSubject(f"Invalid subject. Must be one of: {', '.join(VALID_SUBJECTS)}")
    return score_field(subject)


def validate_region(region: str | None) -> str | None:
    """Return the canonically-cased region matching *region* (case-insensitive)."""
    if not region:
        return None
    wanted = region.lower()
    for valid in VALID_REGIONS:
        if valid.lower() == wanted:
            return valid
    raise InvalidRegion(f"Invalid region. Must be one of: {', '.join(VALID_REGIONS)}")


def validate_year(year: str | None) -> str | None:
    if not year:
        return None
    if year not in VALID_YEARS:
        raise InvalidYear(f"Invalid year. Must be one of: {', '.join(VALID_YEARS)}")
    return year


# ── Pagination ───────────────────────────────────────────────────────────


def _parse_int(value: int | str | None) -> int | None:
    """Parse a decimal integer; anything else (absent, ``"abc"``, ``"1.5"``) is ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not _INT_RE.fullmatch(str(value)):
        return None
    try:
        return int(value)
    except ValueError:
        # beyond the interpreter's int string conversion limit
        return None


def validate_pagination(
    page: int | str | None = None,
    limit: int | str | None = None,
) -> dict[str, int]:
    """Return ``{"page", "limit"}`` as validated integers.

    Missing or non-numeric values fall back to page 1 / limit 10. A page that
    parses to 0 also falls back to 1, while a limit of 0 is rejected.
    """
    page_num = _parse_int(page) or DEFAULT_PAGE
    parsed_limit = _parse_int(limit)

    if page_num < 1:
        raise InvalidPage("Page must be a positive integer")

    if parsed_limit == 0:
        raise InvalidLimit(f"Limit must be between 1 and {MAX_LIMIT}")
    limit_num = parsed_limit or DEFAULT_LIMIT
    if limit_num < 1 or limit_num > MAX_LIMIT:
        raise InvalidLimit(f"Limit must be between 1 and {MAX_LIMIT}")

    return {"page": page_num, "limit": limit_num}


# ── Weights ──────────────────────────────────────────────────────────────


def _parse_float(raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return math.nan


def _is_valid_weight(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        value = float(value)
    except OverflowError:
        return False
    return math.isfinite(value) and 0 <= value <= WEIGHT_TOTAL


def validate_weights(
    weights_json: str | None,
    weight_params: Mapping[str, Any] | None = None,
) -> dict[str, float] | None:
    """Parse and validate the client weight map.

    *weights_json* is a JSON object string such as ``'{"AR": 60, "ER": 40}'``.
    *weight_params* holds ``weight_<SUBJECT>`` query parameters; only the ten
    weight-eligible subjects are picked up and they override JSON entries.

    Returns ``None`` when no weights were supplied at all.
    """
    if not weights_json and not weight_params:
        return None

    parsed: dict[str, Any] = {}

    if weights_json:
        try:
            decoded = json.loads(weights_json)
        except ValueError as exc:
            raise InvalidWeightsFormat("Invalid weights JSON format") from exc
        if not isinstance(decoded, dict):
            raise InvalidWeightsFormat("Invalid weights JSON format")
        parsed.update(decoded)

    for key, raw in (weight_params or {}).items():
        if not key.startswith(WEIGHT_PARAM_PREFIX):
            continue
        subject = key[len(WEIGHT_PARAM_PREFIX):]
        if subject in VALID_WEIGHT_SUBJECTS:
            parsed[subject] = _parse_float(raw)

    if not parsed:
        return None

    invalid_subjects = [s for s in parsed if s not in VALID_WEIGHT_SUBJECTS]
    if invalid_subjects:
        raise InvalidWeightSubjects(
            f"Invalid weight subjects: {', '.join(invalid_subjects)}. "
            f"Valid subjects: {', '.join(VALID_WEIGHT_SUBJECTS)}"
        )

    invalid_values = [(s, w) for s, w in parsed.items() if not _is_valid_weight(w)]
    if invalid_values:
        pairs = ", ".join(f"{s}={w}" for s, w in invalid_values)
        raise InvalidWeightValues(
            f"Invalid weights: {pairs}. Weights must be numbers between 0 and 100."
        )

    total = sum(parsed.values())
    if abs(total - WEIGHT_TOTAL) > WEIGHT_TOLERANCE:
        raise WeightsNotNormalized(
            f"Total weights must equal 100%. Current total: {total:.2f}%"
        )

    return parsed
