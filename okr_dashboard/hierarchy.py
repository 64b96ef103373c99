"""
Objective hierarchy rollup.

Scores flow bottom-up: indicator -> key result -> functional objective ->
department -> organisation objective. Every level is classified with the
same thresholds as a single score.
"""

import logging
from collections.abc import Iterator

import pandas as pd

from .models import ObjectiveNode, RAGStatus, RollupResult, ScoreComponent
from .rag import apply_formula, classify, indicator_progress, parse_formula, rag_label

logger = logging.getLogger(__name__)


def _leaf_score(node: ObjectiveNode) -> float | None:
    if node.score is not None and not pd.isna(node.score):
        return node.score
    if node.target is not None:
        return indicator_progress(node.current, node.target)
    return None


def rollup(node: ObjectiveNode) -> RollupResult:
    """Derive score and status for a node and all of its descendants.

    Leaves are classified from their own score, or from current/target
    progress when no score is given; NaN counts as no score. Inner nodes
    combine the children that produced a score with the node's formula
    (a plain average by default). A node with no scored children is
    not-set.
    """
    if not node.children:
        score = _leaf_score(node)
        return RollupResult(
            name=node.name,
            level=node.level,
            score=score,
            status=classify(score),
            weight=node.weight,
        )

    formula = parse_formula(node.formula)
    child_results = tuple(rollup(child) for child in node.children)

    components = [
        ScoreComponent(label=result.name, value=result.score, weight=result.weight)
        for result in child_results
        if result.score is not None
    ]

    if not components:
        logger.debug("No scored children under '%s', status not set", node.name)
        return RollupResult(
            name=node.name,
            level=node.level,
            score=None,
            status=RAGStatus.NOT_SET,
            children=child_results,
            formula=formula,
            weight=node.weight,
        )

    result = apply_formula(components, formula)
    return RollupResult(
        name=node.name,
        level=node.level,
        score=result.final_score,
        status=result.final_status,
        children=child_results,
        formula=formula,
        weight=node.weight,
    )


def calculation_breakdown(result: RollupResult) -> dict:
    """Explain how a node's score was reached from its direct children.

    Returns
    -------
    Dict with structure:
    {
        "name": "Retain key accounts", "level": "key_result",
        "formula": "AVG",
        "children": [
            {"name": "Renewal rate", "score": 80.0, "weight": None,
             "status": "green", "included": True},
            ...
        ],
        "score": 80.0, "status": "green", "label": "On Track",
    }
    Children without a score are listed with included=False. For a leaf
    "formula" is None and "children" is empty.
    """
    return {
        "name": result.name,
        "level": result.level,
        "formula": result.formula.value if result.formula is not None else None,
        "children": [
            {
                "name": child.name,
                "score": child.score,
                "weight": child.weight,
                "status": child.status.value,
                "included": child.score is not None,
            }
            for child in result.children
        ],
        "score": result.score,
        "status": result.status.value,
        "label": rag_label(result.status),
    }


def _walk(result: RollupResult, depth: int) -> Iterator[dict]:
    yield {
        "name": result.name,
        "level": result.level,
        "depth": depth,
        "formula": result.formula.value if result.formula is not None else None,
        "weight": result.weight,
        "score": result.score,
        "status": result.status.value,
        "label": rag_label(result.status),
    }
    for child in result.children:
        yield from _walk(child, depth + 1)


def flatten_rollup(result: RollupResult) -> pd.DataFrame:
    """Flatten a rollup tree into one row per node, depth-first.

    Returns
    -------
    DataFrame with columns:
        name, level, depth, formula, weight, score, status, label
    """
    df = pd.DataFrame(list(_walk(result, 0)))
    logger.info("Flattened rollup for '%s' into %d rows", result.name, len(df))
    return df
