"""
Shared pytest fixtures for ledger tests.

Tests run against an in-memory SQLite engine built exactly like the
production one (BEGIN IMMEDIATE, foreign keys on). A single session is
shared by the test body and the code under test, since the in-memory
database lives on one connection.
"""

import uuid
from datetime import datetime

import pytest

import matchledger.models  # noqa: F401  (registers tables on Base.metadata)
from matchledger.database.session import create_engine_for_url, make_session_factory
from matchledger.db_base import Base
from matchledger.entitlements.models import UNLIMITED_INTERACTIONS
from matchledger.models import Actor, Capability, CapabilityGrant, GrantStatus
from matchledger.tests.helpers import FrozenClock


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def engine():
    engine = create_engine_for_url("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = make_session_factory(engine)()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def make_actor(db_session):
    """Factory persisting an actor and returning its id."""

    def _make(display_name: str = "actor") -> uuid.UUID:
        actor_id = uuid.uuid4()
        db_session.add(Actor(id=actor_id, display_name=display_name))
        db_session.commit()
        return actor_id

    return _make


@pytest.fixture
def make_capability(db_session):
    """Factory persisting a catalog capability and returning its id."""

    def _make(name: str, description: str = None) -> uuid.UUID:
        capability_id = uuid.uuid4()
        db_session.add(Capability(id=capability_id, name=name, description=description))
        db_session.commit()
        return capability_id

    return _make


@pytest.fixture
def unlimited_capability_id(make_capability):
    return make_capability(UNLIMITED_INTERACTIONS, "No daily limit on profile interactions")


@pytest.fixture
def make_grant(db_session):
    """Factory inserting a grant row directly (bypassing slot bookkeeping)."""

    def _make(
        actor_id: uuid.UUID,
        capability_id: uuid.UUID,
        starts_at: datetime,
        ends_at: datetime = None,
        status: GrantStatus = GrantStatus.ACTIVE,
        value: int = 0,
    ) -> uuid.UUID:
        grant_id = uuid.uuid4()
        db_session.add(
            CapabilityGrant(
                id=grant_id,
                actor_id=actor_id,
                capability_id=capability_id,
                starts_at=starts_at,
                ends_at=ends_at,
                status=status,
                value=value,
            )
        )
        db_session.commit()
        return grant_id

    return _make
