"""
RAG computation functions — pure functions with no side effects.

Provides score classification, weighted rollup of score components,
formula-driven rollup and indicator progress calculation.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

import pandas as pd

from .config import RAG_AMBER_MIN, RAG_GREEN_MIN, RAG_LABELS, SCORE_MAX, SCORE_MIN
from .errors import DegenerateWeights, EmptyAggregationInput, InvalidScoreComponent
from .models import AggregateScore, Formula, RAGStatus, ScoreComponent

logger = logging.getLogger(__name__)


def classify(score: float | None) -> RAGStatus:
    """Return the RAG status for a 0-100 score.

    Logic
    -----
    green    if score >= 70
    amber    if 40 <= score < 70
    red      if score < 40
    not-set  if there is no score (None or NaN)

    A never-scored item is unknown, not failing, so it is never red.
    """
    if score is None or pd.isna(score):
        return RAGStatus.NOT_SET
    if score >= RAG_GREEN_MIN:
        return RAGStatus.GREEN
    if score >= RAG_AMBER_MIN:
        return RAGStatus.AMBER
    return RAGStatus.RED


def rag_label(status: RAGStatus | str) -> str:
    """Human-facing label for a status, e.g. 'At Risk' for amber."""
    return RAG_LABELS[RAGStatus(status).value]


def _validate_component(component: ScoreComponent) -> float:
    """Check a component's domain and return its effective weight."""
    value = component.value
    if value is None or not math.isfinite(value) or not SCORE_MIN <= value <= SCORE_MAX:
        raise InvalidScoreComponent(
            f"Component '{component.label}' value {value!r} is outside "
            f"{SCORE_MIN:g}-{SCORE_MAX:g}"
        )

    weight = 1.0 if component.weight is None else component.weight
    if not math.isfinite(weight) or weight < 0:
        raise InvalidScoreComponent(
            f"Component '{component.label}' weight {component.weight!r} must be >= 0"
        )
    return float(weight)


def aggregate(components: Sequence[ScoreComponent]) -> AggregateScore:
    """Roll several score components up into one score and status.

    final_score = sum(value * weight) / sum(weight), where an omitted
    weight counts as 1. The status is always classify(final_score);
    child statuses are never voted on.

    Raises
    ------
    EmptyAggregationInput : no components were given.
    InvalidScoreComponent : a value is outside 0-100 or a weight is negative.
    DegenerateWeights : all weights are zero.
    """
    if not components:
        raise EmptyAggregationInput("Cannot aggregate an empty list of score components")

    weights = [_validate_component(c) for c in components]
    total_weight = sum(weights)
    if total_weight == 0:
        raise DegenerateWeights(
            f"All {len(components)} component weights are zero"
        )

    weighted_sum = sum(c.value * w for c, w in zip(components, weights))
    final_score = weighted_sum / total_weight
    return AggregateScore(final_score=final_score, final_status=classify(final_score))


def parse_formula(text: str | None) -> Formula:
    """Read the aggregation type out of a free-text formula.

    Matching is case-insensitive and by substring, checked in the order
    WEIGHTED_AVG, SUM, MIN, MAX. Anything else, including no formula,
    is a plain average.
    """
    if not text:
        return Formula.AVG
    normalised = text.upper().strip()
    if "WEIGHTED_AVG" in normalised or "WEIGHTED AVG" in normalised:
        return Formula.WEIGHTED_AVG
    for formula in (Formula.SUM, Formula.MIN, Formula.MAX):
        if formula.value in normalised:
            return formula
    return Formula.AVG


def apply_formula(
    components: Sequence[ScoreComponent],
    formula: Formula | str = Formula.WEIGHTED_AVG,
) -> AggregateScore:
    """Combine components with the given formula.

    Logic
    -----
    WEIGHTED_AVG  aggregate(components)
    AVG           aggregate with every weight ignored
    SUM           sum of values, capped at 100
    MIN / MAX     smallest / largest value

    Every formula rejects empty input and out-of-range values the way
    aggregate does; only the weighted average looks at weights.
    """
    formula = Formula(formula)
    if formula is Formula.WEIGHTED_AVG:
        return aggregate(components)
    if formula is Formula.AVG:
        return aggregate([replace(c, weight=None) for c in components])

    if not components:
        raise EmptyAggregationInput("Cannot aggregate an empty list of score components")
    for component in components:
        _validate_component(component)

    values = [c.value for c in components]
    if formula is Formula.SUM:
        score = min(sum(values), SCORE_MAX)
    elif formula is Formula.MIN:
        score = min(values)
    else:
        score = max(values)
    return AggregateScore(final_score=score, final_status=classify(score))


def indicator_progress(current: float | None, target: float | None) -> float | None:
    """Return progress towards target as a 0-100 score.

    Returns None if either value is missing or the target is not positive,
    so an indicator without usable data classifies as not-set. Progress
    beyond the target is capped at 100.
    """
    if current is None or target is None or pd.isna(current) or pd.isna(target):
        return None
    if target <= 0:
        return None
    progress = (current / target) * 100
    return min(max(progress, SCORE_MIN), SCORE_MAX)
