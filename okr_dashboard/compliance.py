"""
Compliance aggregation for the current reporting period.

Two views share one current-period filter:
    - owner compliance: has each owner started on their portfolio?
    - entity compliance: has each entity in a filtered population been scored?

A per-customer report adds submission counts, expected counts and score
trends for the compliance report page.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

import pandas as pd

from .models import Entity, EntityId, Owner, OwnerId, SubmissionRecord
from .periods import previous_period
from .transforms import (
    build_dim_entity,
    build_dim_owner,
    build_fact_submission,
    current_period_entity_ids,
    group_entities_by_owner,
    submissions_for_period,
)

logger = logging.getLogger(__name__)


class ComplianceOutcome(str, Enum):
    NO_OBLIGATION = "no_obligation"
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"


def _outcome(total: int, pending: int) -> ComplianceOutcome:
    if total == 0:
        return ComplianceOutcome.NO_OBLIGATION
    if pending == 0:
        return ComplianceOutcome.COMPLIANT
    return ComplianceOutcome.NON_COMPLIANT


@dataclass(frozen=True)
class OwnerCompliance:
    period: str
    compliant_owners: list[Owner]
    non_compliant_owners: list[Owner]

    @property
    def total_considered(self) -> int:
        return len(self.compliant_owners) + len(self.non_compliant_owners)

    @property
    def compliance_rate(self) -> float | None:
        """Fraction of considered owners that are compliant; None if there are none."""
        if self.total_considered == 0:
            return None
        return len(self.compliant_owners) / self.total_considered

    @property
    def outcome(self) -> ComplianceOutcome:
        return _outcome(self.total_considered, len(self.non_compliant_owners))


@dataclass(frozen=True)
class EntityCompliance:
    period: str
    scored: list[Entity]
    pending: list[Entity]

    @property
    def total(self) -> int:
        return len(self.scored) + len(self.pending)

    @property
    def rate(self) -> float | None:
        if self.total == 0:
            return None
        return len(self.scored) / self.total

    @property
    def outcome(self) -> ComplianceOutcome:
        return _outcome(self.total, len(self.pending))


def is_managed_services(entity: Entity) -> bool:
    return entity.managed_services


def calc_owner_compliance(
    owners: Iterable[Owner],
    entities: Iterable[Entity],
    submissions: Iterable[SubmissionRecord],
    period: str,
) -> OwnerCompliance:
    """Classify each owner as compliant or not for `period`.

    Logic
    -----
    - Entities are grouped by owner; ownerless entities are ignored.
    - Owners with no entities carry no obligation and are skipped.
    - An owner listed more than once is considered once.
    - An owner is compliant if at least one of their entities has a
      record for `period` (started, not necessarily finished).
    """
    entity_ids_by_owner = group_entities_by_owner(build_dim_entity(entities))
    covered = current_period_entity_ids(build_fact_submission(submissions), period)

    compliant: list[Owner] = []
    non_compliant: list[Owner] = []
    seen: set[OwnerId] = set()
    for owner in owners:
        if owner.id in seen:
            continue
        seen.add(owner.id)
        owned = entity_ids_by_owner.get(owner.id, [])
        if not owned:
            continue
        if covered.intersection(owned):
            compliant.append(owner)
        else:
            non_compliant.append(owner)

    result = OwnerCompliance(
        period=period,
        compliant_owners=compliant,
        non_compliant_owners=non_compliant,
    )
    logger.info(
        "Owner compliance for %s: %d/%d compliant",
        period, len(compliant), result.total_considered,
    )
    return result


def calc_entity_compliance(
    entities: Iterable[Entity],
    submissions: Iterable[SubmissionRecord],
    period: str,
    predicate: Callable[[Entity], bool] | None = is_managed_services,
) -> EntityCompliance:
    """Partition the entities under obligation into scored and pending.

    Parameters
    ----------
    predicate : Selects the population under obligation. Defaults to
                managed-services customers; None means every entity.
    """
    population = [e for e in entities if predicate is None or predicate(e)]
    covered = current_period_entity_ids(build_fact_submission(submissions), period)

    scored = [e for e in population if e.id in covered]
    pending = [e for e in population if e.id not in covered]

    result = EntityCompliance(period=period, scored=scored, pending=pending)
    logger.info(
        "Entity compliance for %s: %d/%d scored", period, len(scored), result.total
    )
    return result


# ---------------------------------------------------------------------------
# Per-customer report
# ---------------------------------------------------------------------------
CUSTOMER_ROW_COLUMNS = [
    "customer_id", "customer_name", "owner_name", "owner_email",
    "scores_this_period", "total_expected", "status",
    "current_avg", "previous_avg", "trend",
    "last_submission_period", "managed_services",
]


def _distinct_scores(period_df: pd.DataFrame) -> pd.DataFrame:
    return period_df.drop_duplicates(
        subset=["entity_id", "period", "feature_id", "indicator_id"]
    )


def _average_by_entity(period_df: pd.DataFrame) -> dict[EntityId, float]:
    values = period_df.dropna(subset=["value"])
    if values.empty:
        return {}
    return values.groupby("entity_id")["value"].mean().round(1).to_dict()


def _trend(current: float | None, previous: float | None) -> str | None:
    if current is None or previous is None:
        return None
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "flat"


def _submission_status(count: int, expected: int) -> str:
    if count > 0 and count >= expected:
        return "complete"
    if count > 0:
        return "partial"
    return "pending"


def build_customer_status_rows(
    owners: Iterable[Owner],
    entities: Iterable[Entity],
    submissions: Iterable[SubmissionRecord],
    period: str,
    expected_counts: Mapping[EntityId, int] | None = None,
    all_time: bool = False,
) -> pd.DataFrame:
    """One row per owned customer describing its submissions for `period`.

    Parameters
    ----------
    expected_counts : Number of distinct scores each customer is expected
                      to submit. Customers missing from the mapping expect 0,
                      so any submission makes them complete.
    all_time        : Count scores and averages over every valid period
                      instead of `period` alone. previous_avg still refers
                      to the period before `period`.

    Returns
    -------
    DataFrame with columns:
        customer_id, customer_name, owner_name, owner_email,
        scores_this_period, total_expected, status (complete/partial/pending),
        current_avg, previous_avg, trend (up/down/flat/None),
        last_submission_period, managed_services
    """
    expected_counts = expected_counts or {}
    dim_owner = build_dim_owner(owners).set_index("owner_id")
    dim_entity = build_dim_entity(entities)
    dim_entity = dim_entity[dim_entity["owner_id"].notna()]
    fact = build_fact_submission(submissions)

    if dim_entity.empty:
        return pd.DataFrame(columns=CUSTOMER_ROW_COLUMNS)

    valid = fact[fact["period_valid"]]
    current_df = valid if all_time else submissions_for_period(fact, period)
    previous_df = submissions_for_period(fact, previous_period(period))

    counts = _distinct_scores(current_df).groupby("entity_id").size().to_dict()
    current_avgs = _average_by_entity(current_df)
    previous_avgs = _average_by_entity(previous_df)

    last_periods = valid.groupby("entity_id")["period"].max().to_dict() if not valid.empty else {}

    rows = []
    for _, ent in dim_entity.iterrows():
        entity_id = ent["entity_id"]
        owner_id = ent["owner_id"]
        owner_known = owner_id in dim_owner.index
        count = int(counts.get(entity_id, 0))
        expected = int(expected_counts.get(entity_id, 0))
        current_avg = current_avgs.get(entity_id)
        previous_avg = previous_avgs.get(entity_id)

        rows.append({
            "customer_id": entity_id,
            "customer_name": ent["name"],
            "owner_name": dim_owner.at[owner_id, "name"] if owner_known else "Unassigned",
            "owner_email": dim_owner.at[owner_id, "email"] if owner_known else None,
            "scores_this_period": count,
            "total_expected": expected,
            "status": _submission_status(count, expected),
            "current_avg": current_avg,
            "previous_avg": previous_avg,
            "trend": _trend(current_avg, previous_avg),
            "last_submission_period": last_periods.get(entity_id),
            "managed_services": bool(ent["managed_services"]),
        })

    # object dtype keeps None in the optional columns on every pandas version
    df = pd.DataFrame(rows, columns=CUSTOMER_ROW_COLUMNS, dtype=object)
    df = df.astype({
        "scores_this_period": int,
        "total_expected": int,
        "managed_services": bool,
    })
    logger.info(
        "Built %d customer status rows for %s", len(df), "all time" if all_time else period,
    )
    return df


def summarise_customer_rows(rows: pd.DataFrame) -> dict:
    """Headline numbers for the compliance report.

    An owner counts as submitted when any of their customers is not
    pending.

    Returns
    -------
    Dict with structure:
    {
        "total_owners": 3, "compliant_owners": 2, "pending_owners": 1,
        "submitted_owner_names": [...], "pending_owner_names": [...],
        "total_customers": 10, "completed_customers": 7,
        "pending_customers": 3, "completion_pct": 70,
    }
    """
    if rows.empty:
        return {
            "total_owners": 0,
            "compliant_owners": 0,
            "pending_owners": 0,
            "submitted_owner_names": [],
            "pending_owner_names": [],
            "total_customers": 0,
            "completed_customers": 0,
            "pending_customers": 0,
            "completion_pct": 0,
        }

    started = rows["status"] != "pending"
    all_owners = list(dict.fromkeys(rows["owner_name"]))
    submitted = set(rows.loc[started, "owner_name"])
    pending_names = [name for name in all_owners if name not in submitted]
    submitted_names = [name for name in all_owners if name in submitted]
    completed = int(started.sum())

    return {
        "total_owners": len(all_owners),
        "compliant_owners": len(submitted_names),
        "pending_owners": len(pending_names),
        "submitted_owner_names": submitted_names,
        "pending_owner_names": pending_names,
        "total_customers": len(rows),
        "completed_customers": completed,
        "pending_customers": len(rows) - completed,
        "completion_pct": int(round(completed / len(rows) * 100)),
    }
