"""
Test Configuration
==================

Pytest fixtures shared across the engine tests.
"""

from datetime import datetime

import pytest

from okr_dashboard.models import Entity, EntityId, Owner, OwnerId, SubmissionRecord


@pytest.fixture
def now() -> datetime:
    """Wednesday 14 October 2026, mid-morning."""
    return datetime(2026, 10, 14, 10, 0)


@pytest.fixture
def period() -> str:
    return "2026-10"


@pytest.fixture
def owners() -> list[Owner]:
    """Two CSMs with customers and one without."""
    return [
        Owner(id=OwnerId("A"), name="Alice", email="alice@example.com", user_id="user-a"),
        Owner(id=OwnerId("B"), name="Bob", email="bob@example.com", user_id="user-b"),
        Owner(id=OwnerId("C"), name="Carol", email=None, user_id=None),
    ]


@pytest.fixture
def entities() -> list[Entity]:
    """Customers 1 and 2 belong to Alice, 3 to Bob, 4 to nobody."""
    return [
        Entity(id=EntityId("1"), name="Acme", owner_id=OwnerId("A"), managed_services=True),
        Entity(id=EntityId("2"), name="Globex", owner_id=OwnerId("A")),
        Entity(id=EntityId("3"), name="Initech", owner_id=OwnerId("B"), managed_services=True),
        Entity(id=EntityId("4"), name="Umbrella", owner_id=None, managed_services=True),
    ]


@pytest.fixture
def submissions(period) -> list[SubmissionRecord]:
    """Only customer 1 has scored this period; customer 3 scored last month."""
    return [
        SubmissionRecord(entity_id=EntityId("1"), period=period, value=80.0,
                         feature_id="f1", indicator_id="i1"),
        SubmissionRecord(entity_id=EntityId("3"), period="2026-09", value=55.0,
                         feature_id="f1", indicator_id="i1"),
    ]
