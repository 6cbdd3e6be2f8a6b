"""
Score aggregation across a candidate's completed assessments.
"""

import math
from collections.abc import Mapping
from typing import Any, Iterable, Optional

DEFAULT_MAX_SCORE = 100.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, as recruiters expect."""
    return int(math.floor(value + 0.5))


def _read(assessment: Any, name: str) -> Any:
    if isinstance(assessment, Mapping):
        return assessment.get(name)
    return getattr(assessment, name, None)


def normalized_percentage(
    score: Optional[float], max_score: Optional[float]
) -> float:
    """
    Express ``score`` as a 0-100 percentage of ``max_score``.

    A missing score counts as 0 and a missing maximum as 100. A maximum of
    zero or less contributes 0.
    """
    score = score or 0
    max_score = DEFAULT_MAX_SCORE if max_score is None else max_score
    if max_score <= 0:
        return 0.0
    return (score / max_score) * 100


def calculate_overall_score(assessments: Iterable[Any]) -> int:
    """
    Mean of the normalized percentages of every assessment, rounded.

    Every assessment carries equal weight regardless of type or difficulty.

    Args:
        assessments: ORM rows or mappings exposing ``score`` and ``max_score``

    Returns:
        int: 0-100, or 0 when there are no assessments
    """
    percentages = [
        normalized_percentage(_read(a, "score"), _read(a, "max_score"))
        for a in assessments
    ]
    if not percentages:
        return 0
    return round_half_up(sum(percentages) / len(percentages))


def summarize_assessments(assessments: Iterable[Any]) -> dict[str, Any]:
    """
    Pooled result over several assessments: total points over total maximum.

    Returns:
        dict with ``overall_score`` (0-100), ``max_score`` (sum of maxima),
        ``passed`` (at least one assessment, all of them passed) and ``assessment_count``
    """
    items = list(assessments)
    total_score = sum(_read(a, "score") or 0 for a in items)
    max_score = sum(_read(a, "max_score") or 0 for a in items)
    overall = (total_score / max_score) * 100 if max_score > 0 else 0
    return {
        "overall_score": round_half_up(overall),
        "max_score": max_score,
        "passed": bool(items) and all(bool(_read(a, "passed")) for a in items),
        "assessment_count": len(items),
    }
