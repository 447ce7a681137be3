from __future__ import annotations

import math
from typing import Any, Mapping

from .validation import score_field

OVERALL_SCORE = "Overall SCORE"
COMPOSITE_SCORE = "Composite SCORE"


def _usable(score: Any) -> bool:
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return False
    return not math.isnan(score)


def calculate_composite_score(
    record: Mapping[str, Any],
    weights: Mapping[str, float] | None,
) -> float | None:
    """Blend a university's subject scores using the client weight map.

    Subjects with no usable score are dropped and the remaining weights are
    renormalised, so ``{"AR": 50, "ER": 50}`` with only an AR score of 80
    yields 80 rather than 40. Falls back to the record's Overall SCORE when
    no weights are given or none of the weighted subjects has data.
    """
    if not weights:
        return record.get(OVERALL_SCORE)

    weighted_sum = 0.0
    used_weight = 0.0
    for subject, weight in weights.items():
        score = record.get(score_field(subject))
        if not _usable(score):
            continue
        weighted_sum += score * weight
        used_weight += weight

    if used_weight == 0:
        return record.get(OVERALL_SCORE)

    return weighted_sum / used_weight
