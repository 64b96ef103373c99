"""
Dashboard-ready output functions.

These are the primary entry points for a front end. Each function takes
already-fetched records plus the evaluation instant and returns plain
dicts or DataFrames suitable for rendering cards and tables.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime

from .compliance import (
    build_customer_status_rows,
    calc_entity_compliance,
    calc_owner_compliance,
    is_managed_services,
    summarise_customer_rows,
)
from .config import REPORT_NAME_LIMIT
from .hierarchy import calculation_breakdown, flatten_rollup, rollup
from .models import Entity, EntityId, ObjectiveNode, Owner, SubmissionRecord
from .periods import (
    days_until_deadline,
    deadline_label,
    is_past_cutoff,
    reporting_period,
)
from .rag import rag_label
from .transforms import build_fact_submission, count_invalid_periods

logger = logging.getLogger(__name__)


def _deadline_info(now: datetime) -> dict:
    days = days_until_deadline(now)
    return {
        "days_until_deadline": days,
        "deadline_label": deadline_label(days),
        "past_cutoff": is_past_cutoff(now),
    }


def _pct(rate: float | None) -> int | None:
    return None if rate is None else int(round(rate * 100))


def _names(items, limit: int = REPORT_NAME_LIMIT) -> dict:
    names = [item.name for item in items]
    return {"shown": names[:limit], "more": max(len(names) - limit, 0)}


def get_owner_compliance_card(
    owners: Iterable[Owner],
    entities: Iterable[Entity],
    submissions: Iterable[SubmissionRecord],
    now: datetime,
) -> dict:
    """Populate the owner check-in card for the current period.

    Returns
    -------
    Dict with structure:
    {
        "period": "2026-10",
        "outcome": "non_compliant",
        "compliant": ["Alice"], "non_compliant": ["Bob"],
        "submitted": 1, "total": 2, "pending": 1,
        "compliance_rate": 0.5, "compliance_pct": 50,
        "days_until_deadline": 4, "deadline_label": "Friday 11:30 PM (4 days)",
        "past_cutoff": False, "invalid_period_keys": 0,
    }
    When outcome is "no_obligation" the rate and percentage are None and
    the card should not be shown.
    """
    submissions = list(submissions)
    period = reporting_period(now)
    result = calc_owner_compliance(owners, entities, submissions, period)

    card = {
        "period": period,
        "outcome": result.outcome.value,
        "compliant": [o.name for o in result.compliant_owners],
        "non_compliant": [o.name for o in result.non_compliant_owners],
        "submitted": len(result.compliant_owners),
        "total": result.total_considered,
        "pending": len(result.non_compliant_owners),
        "compliance_rate": result.compliance_rate,
        "compliance_pct": _pct(result.compliance_rate),
        "invalid_period_keys": count_invalid_periods(build_fact_submission(submissions)),
    }
    card.update(_deadline_info(now))
    return card


def get_managed_services_card(
    entities: Iterable[Entity],
    submissions: Iterable[SubmissionRecord],
    now: datetime,
    predicate: Callable[[Entity], bool] | None = is_managed_services,
) -> dict:
    """Populate the content-management card: which obligated customers are scored.

    Name lists are truncated to REPORT_NAME_LIMIT with a "more" count.
    """
    submissions = list(submissions)
    period = reporting_period(now)
    result = calc_entity_compliance(entities, submissions, period, predicate)

    card = {
        "period": period,
        "outcome": result.outcome.value,
        "scored": _names(result.scored),
        "pending": _names(result.pending),
        "scored_count": len(result.scored),
        "pending_count": len(result.pending),
        "total": result.total,
        "rate": result.rate,
        "pct": _pct(result.rate),
        "invalid_period_keys": count_invalid_periods(build_fact_submission(submissions)),
    }
    card.update(_deadline_info(now))
    return card


def get_compliance_report(
    owners: Iterable[Owner],
    entities: Iterable[Entity],
    submissions: Iterable[SubmissionRecord],
    now: datetime,
    expected_counts: Mapping[EntityId, int] | None = None,
    all_time: bool = False,
) -> dict:
    """Full compliance report: headline stats plus one row per customer.

    With all_time=True the rows count submissions from every valid period
    rather than the current one.

    Returns
    -------
    Dict with keys "period", "scope" ("period" or "all_time"), "stats"
    (see summarise_customer_rows), "rows" (customer status DataFrame) and
    the deadline fields.
    """
    period = reporting_period(now)
    rows = build_customer_status_rows(
        owners, entities, submissions, period, expected_counts, all_time=all_time,
    )
    report = {
        "period": period,
        "scope": "all_time" if all_time else "period",
        "stats": summarise_customer_rows(rows),
        "rows": rows,
    }
    report.update(_deadline_info(now))
    return report


def get_objective_health(root: ObjectiveNode) -> dict:
    """Roll an objective tree up and return its headline plus a flat table.

    Returns
    -------
    Dict with structure:
    {
        "name": "Customer Success First",
        "score": 67.5, "status": "amber", "label": "At Risk",
        "breakdown": {...},  # see hierarchy.calculation_breakdown
        "table": DataFrame(name, level, depth, formula, weight, score,
                           status, label),
    }
    """
    result = rollup(root)
    return {
        "name": result.name,
        "score": result.score,
        "status": result.status.value,
        "label": rag_label(result.status),
        "breakdown": calculation_breakdown(result),
        "table": flatten_rollup(result),
    }
