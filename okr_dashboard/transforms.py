"""
Data transforms: turn record snapshots into dimension and fact frames,
and derive the join structures the compliance views share.
"""

import logging
from collections.abc import Iterable

import pandas as pd

from .models import Entity, EntityId, Owner, OwnerId, SubmissionRecord
from .periods import is_valid_period_key

logger = logging.getLogger(__name__)

OWNER_COLUMNS = ["owner_id", "name", "email", "user_id"]
ENTITY_COLUMNS = ["entity_id", "name", "owner_id", "managed_services", "department_id"]
SUBMISSION_COLUMNS = [
    "entity_id", "period", "value", "feature_id", "indicator_id", "period_valid",
]


def build_dim_owner(owners: Iterable[Owner]) -> pd.DataFrame:
    """Build owner dimension table.

    Returns
    -------
    dim_owner DataFrame with columns:
        owner_id, name, email, user_id
    """
    rows = [
        {"owner_id": o.id, "name": o.name, "email": o.email, "user_id": o.user_id}
        for o in owners
    ]
    df = pd.DataFrame(rows, columns=OWNER_COLUMNS)
    logger.info("Built dim_owner with %d rows", len(df))
    return df


def build_dim_entity(entities: Iterable[Entity]) -> pd.DataFrame:
    """Build entity (customer) dimension table.

    Returns
    -------
    dim_entity DataFrame with columns:
        entity_id, name, owner_id, managed_services, department_id
    """
    rows = [
        {
            "entity_id": e.id,
            "name": e.name,
            "owner_id": e.owner_id,
            "managed_services": bool(e.managed_services),
            "department_id": e.department_id,
        }
        for e in entities
    ]
    df = pd.DataFrame(rows, columns=ENTITY_COLUMNS)
    logger.info("Built dim_entity with %d rows", len(df))
    return df


def build_fact_submission(records: Iterable[SubmissionRecord]) -> pd.DataFrame:
    """Build submission fact table.

    Rows whose period key is missing or malformed are kept but flagged
    with period_valid=False, so they can be counted and reported while
    never counting towards any period.

    Returns
    -------
    fact_submission DataFrame with columns:
        entity_id, period, value, feature_id, indicator_id, period_valid
    """
    rows = [
        {
            "entity_id": r.entity_id,
            "period": r.period,
            "value": r.value,
            "feature_id": r.feature_id,
            "indicator_id": r.indicator_id,
            "period_valid": is_valid_period_key(r.period),
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=SUBMISSION_COLUMNS)
    df["period_valid"] = df["period_valid"].astype(bool)
    df["value"] = pd.to_numeric(df["value"], errors="coerce")

    invalid = count_invalid_periods(df)
    if invalid:
        logger.warning(
            "%d submission record(s) have an invalid period key and are excluded",
            invalid,
        )
    logger.info("Built fact_submission with %d rows", len(df))
    return df


def count_invalid_periods(fact_submission: pd.DataFrame) -> int:
    """Number of submission rows flagged with an invalid period key."""
    if fact_submission.empty:
        return 0
    return int((~fact_submission["period_valid"]).sum())


def submissions_for_period(fact_submission: pd.DataFrame, period: str) -> pd.DataFrame:
    """Rows of fact_submission that belong to exactly `period`."""
    mask = fact_submission["period_valid"] & (fact_submission["period"] == period)
    return fact_submission[mask]


def current_period_entity_ids(
    fact_submission: pd.DataFrame,
    period: str,
) -> set[EntityId]:
    """Entity ids with at least one valid record for `period`.

    Duplicate records collapse into one signal; other periods never count.
    """
    if fact_submission.empty:
        return set()
    current = submissions_for_period(fact_submission, period)
    return set(current["entity_id"].unique().tolist())


def group_entities_by_owner(dim_entity: pd.DataFrame) -> dict[OwnerId, list[EntityId]]:
    """Map each owner id to the ids of the entities it owns.

    Entities without an owner are dropped; they are nobody's obligation.
    """
    if dim_entity.empty:
        return {}
    owned = dim_entity[dim_entity["owner_id"].notna()]
    if owned.empty:
        return {}
    grouped = owned.groupby("owner_id", sort=False)["entity_id"].apply(list)
    return grouped.to_dict()
