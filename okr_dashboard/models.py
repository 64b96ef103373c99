"""
Record types consumed and produced by the engine.

Owners, entities and submission records are read-only snapshots handed
over by the data-access layer. Owner and entity identifiers are distinct
NewTypes so the two id spaces are never joined by accident.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NewType

OwnerId = NewType("OwnerId", str)
EntityId = NewType("EntityId", str)


class RAGStatus(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    NOT_SET = "not-set"


class Formula(str, Enum):
    """How an inner objective node combines its children's scores."""

    AVG = "AVG"
    WEIGHTED_AVG = "WEIGHTED_AVG"
    SUM = "SUM"
    MIN = "MIN"
    MAX = "MAX"


@dataclass(frozen=True)
class Owner:
    """Party accountable for a portfolio of entities (e.g. a CSM)."""

    id: OwnerId
    name: str
    email: str | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class Entity:
    """Owned entity, typically a customer account."""

    id: EntityId
    name: str = ""
    owner_id: OwnerId | None = None
    managed_services: bool = False
    department_id: str | None = None


@dataclass(frozen=True)
class SubmissionRecord:
    """One score submission. Its existence for (entity_id, period) is the signal."""

    entity_id: EntityId
    period: str | None
    value: float | None = None
    feature_id: str | None = None
    indicator_id: str | None = None


@dataclass(frozen=True)
class ScoreComponent:
    label: str
    value: float
    weight: float | None = None


@dataclass(frozen=True)
class AggregateScore:
    final_score: float
    final_status: RAGStatus


@dataclass
class ObjectiveNode:
    """Node of the objective hierarchy.

    Leaves carry a score, or a current/target pair the score is derived
    from (None when never scored). Inner nodes derive theirs from their
    children using `formula`, free text such as "WEIGHTED_AVG" or
    "min of KRs"; an empty formula means a plain average.
    """

    name: str
    level: str
    score: float | None = None
    weight: float | None = None
    formula: str | None = None
    current: float | None = None
    target: float | None = None
    children: list["ObjectiveNode"] = field(default_factory=list)


@dataclass(frozen=True)
class RollupResult:
    """Score and status of a node, with what went into them.

    `formula` is None on leaves. `weight` is the node's own weight as its
    parent saw it.
    """

    name: str
    level: str
    score: float | None
    status: RAGStatus
    children: tuple["RollupResult", ...] = ()
    formula: Formula | None = None
    weight: float | None = None
