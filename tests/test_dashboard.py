"""
Dashboard Entry Point Tests
===========================
"""

from datetime import datetime

import pytest

from okr_dashboard.dashboard import (
    get_compliance_report,
    get_managed_services_card,
    get_objective_health,
    get_owner_compliance_card,
)
from okr_dashboard.models import Entity, EntityId, ObjectiveNode, SubmissionRecord


def test_owner_compliance_card(owners, entities, submissions, now):
    card = get_owner_compliance_card(owners, entities, submissions, now)

    assert card["period"] == "2026-10"
    assert card["outcome"] == "non_compliant"
    assert card["compliant"] == ["Alice"]
    assert card["non_compliant"] == ["Bob"]
    assert (card["submitted"], card["total"], card["pending"]) == (1, 2, 1)
    assert card["compliance_pct"] == 50
    assert card["days_until_deadline"] == 2
    assert card["deadline_label"] == "Friday 11:30 PM (2 days)"
    assert card["past_cutoff"] is False
    assert card["invalid_period_keys"] == 0


def test_owner_compliance_card_uses_period_of_now(owners, entities, submissions):
    card = get_owner_compliance_card(owners, entities, submissions, datetime(2026, 11, 2))
    assert card["period"] == "2026-11"
    assert card["compliant"] == []


def test_owner_compliance_card_nothing_to_report(now):
    card = get_owner_compliance_card([], [], [], now)
    assert card["outcome"] == "no_obligation"
    assert card["compliance_rate"] is None
    assert card["compliance_pct"] is None


def test_owner_compliance_card_counts_invalid_keys(owners, entities, submissions, now):
    bad = SubmissionRecord(entity_id=EntityId("3"), period="Oct-2026")
    card = get_owner_compliance_card(owners, entities, submissions + [bad], now)
    assert card["invalid_period_keys"] == 1
    assert card["non_compliant"] == ["Bob"]


def test_managed_services_card(entities, submissions, now):
    card = get_managed_services_card(entities, submissions, now)

    assert card["scored"] == {"shown": ["Acme"], "more": 0}
    assert card["pending"] == {"shown": ["Initech", "Umbrella"], "more": 0}
    assert card["total"] == 3
    assert card["pct"] == 33


def test_managed_services_card_truncates_names(now):
    customers = [
        Entity(id=EntityId(str(i)), name=f"Customer {i}", managed_services=True)
        for i in range(20)
    ]
    card = get_managed_services_card(customers, [], now)

    assert len(card["pending"]["shown"]) == 15
    assert card["pending"]["more"] == 5
    assert card["pending_count"] == 20


def test_compliance_report(owners, entities, submissions, now):
    report = get_compliance_report(owners, entities, submissions, now)

    assert report["period"] == "2026-10"
    assert len(report["rows"]) == 3
    assert report["stats"]["completed_customers"] == 1
    assert report["stats"]["pending_owner_names"] == ["Bob"]
    assert report["days_until_deadline"] == 2


def test_objective_health():
    root = ObjectiveNode(
        name="Sustainable Revenue Growth",
        level="org_objective",
        children=[
            ObjectiveNode(name="kpi 1", level="indicator", score=80),
            ObjectiveNode(name="kpi 2", level="indicator", score=20),
        ],
    )
    health = get_objective_health(root)

    assert health["score"] == 50
    assert health["status"] == "amber"
    assert health["label"] == "At Risk"
    assert len(health["table"]) == 3


def test_compliance_report_all_time(owners, entities, submissions, now):
    report = get_compliance_report(owners, entities, submissions, now, all_time=True)

    assert report["scope"] == "all_time"
    assert report["period"] == "2026-10"
    # Bob's only submission is from September
    assert report["stats"]["pending_owner_names"] == []
    assert report["stats"]["completed_customers"] == 2


def test_compliance_report_defaults_to_current_period(owners, entities, submissions, now):
    assert get_compliance_report(owners, entities, submissions, now)["scope"] == "period"


def test_objective_health_breakdown():
    root = ObjectiveNode(
        name="Grow adoption",
        level="key_result",
        formula="MIN",
        children=[
            ObjectiveNode(name="Active users", level="indicator", current=45, target=50),
            ObjectiveNode(name="Feature uptake", level="indicator", score=35),
        ],
    )
    health = get_objective_health(root)

    assert health["score"] == 35
    assert health["status"] == "red"
    assert health["breakdown"]["formula"] == "MIN"
    assert [c["score"] for c in health["breakdown"]["children"]] == [pytest.approx(90), 35]
