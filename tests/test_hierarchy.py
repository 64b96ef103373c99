"""
Objective Hierarchy Tests
=========================
"""

import math

import pytest

from okr_dashboard.errors import DegenerateWeights, InvalidScoreComponent
from okr_dashboard.hierarchy import calculation_breakdown, flatten_rollup, rollup
from okr_dashboard.models import Formula, ObjectiveNode, RAGStatus


def _kr(name, *scores, weight=None, formula=None):
    return ObjectiveNode(
        name=name,
        level="key_result",
        weight=weight,
        formula=formula,
        children=[
            ObjectiveNode(name=f"{name} {i}", level="indicator", score=s)
            for i, s in enumerate(scores, start=1)
        ],
    )


@pytest.fixture
def tree() -> ObjectiveNode:
    return ObjectiveNode(
        name="Customer Success First",
        level="org_objective",
        children=[
            ObjectiveNode(
                name="Customer Success",
                level="department",
                formula="WEIGHTED_AVG",
                children=[
                    _kr("Retention", 60, weight=3),
                    _kr("Adoption", 90, weight=1),
                ],
            ),
            ObjectiveNode(
                name="Content Management",
                level="department",
                children=[_kr("Freshness", None, None)],
            ),
        ],
    )


def test_leaf_status_from_own_score():
    result = rollup(ObjectiveNode(name="kpi", level="indicator", score=72))
    assert result.status == RAGStatus.GREEN
    assert result.score == 72


def test_unscored_leaf_is_not_set():
    result = rollup(ObjectiveNode(name="kpi", level="indicator"))
    assert result.status == RAGStatus.NOT_SET
    assert result.score is None


def test_rollup_uses_child_weights(tree):
    result = rollup(tree)
    dept = result.children[0]
    assert dept.score == pytest.approx(67.5)
    assert dept.status == RAGStatus.AMBER


def test_node_without_scored_children_is_not_set(tree):
    result = rollup(tree)
    content = result.children[1]
    assert content.status == RAGStatus.NOT_SET
    assert content.score is None
    assert content.children[0].status == RAGStatus.NOT_SET


def test_unscored_branches_do_not_drag_parent_down(tree):
    result = rollup(tree)
    # Only Customer Success contributes to the organisation objective.
    assert result.score == pytest.approx(67.5)
    assert result.status == RAGStatus.AMBER


def test_averages_indicators_within_key_result():
    result = rollup(_kr("KR", 80, 40, None))
    assert result.score == pytest.approx(60)
    assert result.status == RAGStatus.AMBER


def test_flatten_rollup(tree):
    df = flatten_rollup(rollup(tree))

    assert list(df.columns) == [
        "name", "level", "depth", "formula", "weight", "score", "status", "label",
    ]
    assert df.iloc[0]["name"] == "Customer Success First"
    assert df.iloc[0]["depth"] == 0
    assert df["depth"].max() == 3
    # root, 2 departments, 3 key results, 4 indicators
    assert len(df) == 10
    freshness = df[df["name"] == "Freshness"].iloc[0]
    assert freshness["status"] == "not-set"
    assert freshness["label"] == "Not Set"
    assert df.iloc[0]["formula"] == "AVG"
    assert df[df["name"] == "Retention"].iloc[0]["weight"] == 3


def test_nan_leaf_is_skipped_like_a_missing_score():
    result = rollup(_kr("KR", 80.0, math.nan))
    assert result.score == pytest.approx(80.0)
    assert result.status == RAGStatus.GREEN
    assert result.children[1].score is None
    assert result.children[1].status == RAGStatus.NOT_SET


def test_all_nan_leaves_leave_parent_not_set():
    result = rollup(_kr("KR", math.nan, math.nan))
    assert result.score is None
    assert result.status == RAGStatus.NOT_SET


# =============================================================================
# Indicators with current/target values
# =============================================================================


def test_leaf_score_from_current_and_target():
    result = rollup(ObjectiveNode(name="kpi", level="indicator", current=30, target=40))
    assert result.score == pytest.approx(75)
    assert result.status == RAGStatus.GREEN


def test_explicit_score_wins_over_progress():
    node = ObjectiveNode(name="kpi", level="indicator", score=20, current=30, target=40)
    assert rollup(node).score == 20


def test_indicator_without_usable_target_is_not_set():
    node = ObjectiveNode(name="kpi", level="indicator", current=30, target=0)
    result = rollup(node)
    assert result.score is None
    assert result.status == RAGStatus.NOT_SET


def test_progress_indicators_roll_up():
    kr = ObjectiveNode(
        name="KR",
        level="key_result",
        children=[
            ObjectiveNode(name="a", level="indicator", current=150, target=100),
            ObjectiveNode(name="b", level="indicator", current=10, target=50),
        ],
    )
    # 100 (capped) and 20
    assert rollup(kr).score == pytest.approx(60)


# =============================================================================
# Formulas
# =============================================================================


def _weighted_kr(formula):
    return ObjectiveNode(
        name="KR",
        level="key_result",
        formula=formula,
        children=[
            ObjectiveNode(name="a", level="indicator", score=60, weight=3),
            ObjectiveNode(name="b", level="indicator", score=90, weight=1),
            ObjectiveNode(name="c", level="indicator"),
        ],
    )


@pytest.mark.parametrize(
    ("formula", "expected_score", "expected_status"),
    [
        (None, 75, RAGStatus.GREEN),
        ("AVG", 75, RAGStatus.GREEN),
        ("WEIGHTED_AVG", 67.5, RAGStatus.AMBER),
        ("weighted avg of indicators", 67.5, RAGStatus.AMBER),
        ("SUM", 100, RAGStatus.GREEN),
        ("MIN", 60, RAGStatus.AMBER),
        ("max", 90, RAGStatus.GREEN),
    ],
)
def test_rollup_applies_node_formula(formula, expected_score, expected_status):
    result = rollup(_weighted_kr(formula))
    assert result.score == pytest.approx(expected_score)
    assert result.status == expected_status


def test_unknown_formula_falls_back_to_average():
    result = rollup(_weighted_kr("MEDIAN"))
    assert result.formula == Formula.AVG
    assert result.score == pytest.approx(75)


def test_sum_below_cap():
    kr = ObjectiveNode(
        name="KR",
        level="key_result",
        formula="SUM",
        children=[
            ObjectiveNode(name="a", level="indicator", score=20),
            ObjectiveNode(name="b", level="indicator", score=15),
        ],
    )
    result = rollup(kr)
    assert result.score == pytest.approx(35)
    assert result.status == RAGStatus.RED


def test_all_zero_weights_raise_under_weighted_average():
    kr = ObjectiveNode(
        name="KR",
        level="key_result",
        formula="WEIGHTED_AVG",
        children=[ObjectiveNode(name="a", level="indicator", score=50, weight=0)],
    )
    # A plain average ignores the weight; the weighted one cannot.
    assert rollup(ObjectiveNode(name="KR", level="key_result", children=kr.children)).score == 50
    with pytest.raises(DegenerateWeights):
        rollup(kr)


def test_out_of_range_leaf_raises():
    with pytest.raises(InvalidScoreComponent):
        rollup(_kr("KR", 50, 120, formula="MAX"))


# =============================================================================
# Calculation breakdown
# =============================================================================


def test_calculation_breakdown_lists_children():
    breakdown = calculation_breakdown(rollup(_weighted_kr("WEIGHTED_AVG")))

    assert breakdown["formula"] == "WEIGHTED_AVG"
    assert breakdown["score"] == pytest.approx(67.5)
    assert breakdown["status"] == "amber"
    assert breakdown["label"] == "At Risk"
    assert [c["name"] for c in breakdown["children"]] == ["a", "b", "c"]
    assert [c["weight"] for c in breakdown["children"]] == [3, 1, None]
    assert [c["included"] for c in breakdown["children"]] == [True, True, False]
    assert breakdown["children"][2]["status"] == "not-set"


def test_calculation_breakdown_of_leaf():
    breakdown = calculation_breakdown(rollup(ObjectiveNode(name="kpi", level="indicator", score=10)))
    assert breakdown["formula"] is None
    assert breakdown["children"] == []
    assert breakdown["status"] == "red"
