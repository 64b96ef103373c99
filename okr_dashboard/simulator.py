"""
Simulated data generator for the OKR dashboard.

Generates a plausible CSM portfolio, customer base, score submissions and
objective tree. All values are synthetic.
"""

import numpy as np

from .models import (
    Entity,
    EntityId,
    ObjectiveNode,
    Owner,
    OwnerId,
    SubmissionRecord,
)
from .periods import previous_period, reporting_period

# Seed for reproducibility
_RNG = np.random.default_rng(42)

# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------
_OWNERS = [
    ("csm-01", "Amara Okafor", "amara@example.com", "user-01"),
    ("csm-02", "Ben Carter", "ben@example.com", "user-02"),
    ("csm-03", "Chen Wei", "chen@example.com", None),
    ("csm-04", "Dana Levi", "dana@example.com", "user-04"),
    ("csm-05", "Eli Moreau", None, None),  # new starter, no portfolio yet
]

_FEATURES = ["feat-search", "feat-reports", "feat-alerts", "feat-api"]
_INDICATORS = ["ind-adoption", "ind-satisfaction"]

# Key result formulas, cycled in tree order
_KR_FORMULAS = [None, "MIN of KPIs", "WEIGHTED_AVG", "MAX"]

_OBJECTIVES = {
    "Customer Success First": {
        "Customer Success": {
            "Retain key accounts": ["Renewal rate", "Health score coverage"],
            "Grow adoption": ["Active users", "Feature uptake"],
        },
        "Content Management": {
            "Keep content current": ["Articles reviewed", "Broken links fixed"],
        },
    },
}


def _rng(rng: np.random.Generator | None) -> np.random.Generator:
    return _RNG if rng is None else rng


def generate_owners() -> list[Owner]:
    """Fixed roster of CSMs; the last one owns no customers."""
    return [
        Owner(id=OwnerId(oid), name=name, email=email, user_id=user_id)
        for oid, name, email, user_id in _OWNERS
    ]


def generate_entities(
    n_customers: int = 24,
    unassigned_share: float = 0.1,
    managed_services_share: float = 0.4,
    rng: np.random.Generator | None = None,
) -> list[Entity]:
    """Generate customers spread over every CSM but the last.

    A share of customers has no CSM, and a share is flagged managed-services.
    """
    rng = _rng(rng)
    owner_ids = [oid for oid, *_ in _OWNERS[:-1]]
    entities = []

    for i in range(1, n_customers + 1):
        owner_id = None
        if rng.random() >= unassigned_share:
            owner_id = OwnerId(owner_ids[(i - 1) % len(owner_ids)])
        entities.append(Entity(
            id=EntityId(f"cust-{i:03d}"),
            name=f"Customer {i:03d}",
            owner_id=owner_id,
            managed_services=bool(rng.random() < managed_services_share),
        ))

    return entities


def generate_submissions(
    entities: list[Entity],
    now,
    coverage: float = 0.6,
    duplicate_share: float = 0.05,
    invalid_share: float = 0.02,
    rng: np.random.Generator | None = None,
) -> list[SubmissionRecord]:
    """Generate score submissions for the current and previous period.

    Roughly `coverage` of customers have scores this period. Every customer
    has scores last period. Some records are duplicated and
    a few carry a malformed period key, as real exports do.
    """
    rng = _rng(rng)
    current = reporting_period(now)
    previous = previous_period(current)
    records = []

    for entity in entities:
        periods = [previous]
        if rng.random() < coverage:
            periods.append(current)
        for period in periods:
            for feature_id in _FEATURES:
                if rng.random() < 0.3:
                    continue
                for indicator_id in _INDICATORS:
                    value = round(float(np.clip(rng.normal(65, 18), 0, 100)), 1)
                    record = SubmissionRecord(
                        entity_id=entity.id,
                        period=period,
                        value=value,
                        feature_id=feature_id,
                        indicator_id=indicator_id,
                    )
                    records.append(record)
                    if rng.random() < duplicate_share:
                        records.append(record)

    n_invalid = int(len(records) * invalid_share)
    for i in range(n_invalid):
        entity = entities[i % len(entities)]
        records.append(SubmissionRecord(entity_id=entity.id, period=current.replace("-", "/")))

    return records


def generate_expected_counts(entities: list[Entity]) -> dict[EntityId, int]:
    """Every customer is expected to score each feature on each indicator."""
    return {e.id: len(_FEATURES) * len(_INDICATORS) for e in entities}


def generate_objective_tree(rng: np.random.Generator | None = None) -> ObjectiveNode:
    """Build the objective hierarchy with random indicator scores.

    About one indicator in ten is left unscored. The third indicator of
    every key result reports current/target values instead of a score.
    """
    rng = _rng(rng)
    (org_name, departments), = _OBJECTIVES.items()
    dept_nodes = []
    kr_count = 0

    for dept_name, functional in departments.items():
        fo_nodes = []
        for fo_name, key_results in functional.items():
            kr_nodes = []
            for kr_name in key_results:
                indicators = []
                for j in range(1, 3):
                    score = None
                    if rng.random() >= 0.1:
                        score = round(float(np.clip(rng.normal(62, 20), 0, 100)), 1)
                    indicators.append(ObjectiveNode(
                        name=f"{kr_name} KPI {j}", level="indicator", score=score,
                        weight=float(j),
                    ))
                target = float(rng.integers(50, 200))
                indicators.append(ObjectiveNode(
                    name=f"{kr_name} KPI 3", level="indicator",
                    current=round(float(target * rng.uniform(0.2, 1.2)), 1), target=target,
                ))
                kr_nodes.append(ObjectiveNode(
                    name=kr_name, level="key_result", children=indicators,
                    formula=_KR_FORMULAS[kr_count % len(_KR_FORMULAS)],
                ))
                kr_count += 1
            fo_nodes.append(ObjectiveNode(
                name=fo_name, level="functional_objective", children=kr_nodes,
            ))
        dept_nodes.append(ObjectiveNode(
            name=dept_name, level="department", children=fo_nodes,
        ))

    return ObjectiveNode(name=org_name, level="org_objective", children=dept_nodes)

