"""
InteractionLedger: pair uniqueness, daily quota, entitlement bypass,
rollover and all-or-nothing recording.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import text

from matchledger.entitlements.models import ActiveCapabilities
from matchledger.entitlements.resolver import EntitlementResolver
from matchledger.ledger.clock import start_of_day, usage_date
from matchledger.ledger.errors import (
    ActorNotFoundError,
    DuplicateInteractionError,
    QuotaExceededError,
)
from matchledger.ledger.interaction_ledger import InteractionLedger, parse_kind
from matchledger.models import DailyUsage, Interaction, InteractionKind
from matchledger.platform.errors import InvalidInputError
from matchledger.tests.helpers import T0

DAILY_LIMIT = 10


@pytest.fixture
def ledger(db_session, clock):
    return InteractionLedger(db_session, daily_limit=DAILY_LIMIT, clock=clock)


@pytest.fixture
def alice(make_actor):
    return make_actor("alice")


@pytest.fixture
def targets(make_actor):
    return [make_actor(f"target-{i}") for i in range(12)]


def no_capabilities(actor_id):
    return ActiveCapabilities.empty(actor_id, T0)


def row_count(db_session, actor_id):
    return db_session.query(Interaction).filter(Interaction.from_actor_id == actor_id).count()


def daily_count(ledger, actor_id, at=T0):
    return ledger.interactions.get_daily_count(actor_id, usage_date(at))


# ============================================================================
# RECORDING
# ============================================================================

class TestRecord:

    def test_record_persists_interaction_and_counts_it(self, ledger, db_session, alice, targets):
        interaction = ledger.record(alice, targets[0], "accept", no_capabilities(alice))

        assert interaction.from_actor_id == alice
        assert interaction.to_actor_id == targets[0]
        assert interaction.kind == InteractionKind.ACCEPT
        assert interaction.created_at == T0
        assert row_count(db_session, alice) == 1
        assert daily_count(ledger, alice) == 1

    def test_kind_is_stored_as_its_value(self, ledger, db_session, alice, targets):
        ledger.record(alice, targets[0], "pass", no_capabilities(alice))

        stored = db_session.execute(text("SELECT kind FROM interactions")).scalar_one()

        assert stored == "reject"

    @pytest.mark.parametrize("raw, expected", [
        ("like", InteractionKind.ACCEPT),
        ("PASS", InteractionKind.REJECT),
        (" reject ", InteractionKind.REJECT),
        (InteractionKind.ACCEPT, InteractionKind.ACCEPT),
    ])
    def test_parse_kind_accepts_aliases(self, raw, expected):
        assert parse_kind(raw) == expected

    def test_unknown_kind_is_rejected_before_store_access(self, ledger, alice, targets):
        with patch.object(ledger.interactions, "missing_actors") as missing:
            with pytest.raises(InvalidInputError) as exc_info:
                ledger.record(alice, targets[0], "superlike", no_capabilities(alice))

        assert exc_info.value.field == "kind"
        missing.assert_not_called()

    def test_self_interaction_is_rejected(self, ledger, db_session, alice):
        with pytest.raises(InvalidInputError):
            ledger.record(alice, alice, "accept", no_capabilities(alice))

        assert row_count(db_session, alice) == 0

    def test_unknown_target_raises_actor_not_found(self, ledger, db_session, alice):
        ghost = uuid.uuid4()

        with pytest.raises(ActorNotFoundError) as exc_info:
            ledger.record(alice, ghost, "accept", no_capabilities(alice))

        assert exc_info.value.actor_id == ghost
        assert exc_info.value.status_code == 404
        assert daily_count(ledger, alice) == 0

    def test_capabilities_for_another_actor_are_refused(self, ledger, alice, targets):
        with pytest.raises(ValueError):
            ledger.record(alice, targets[0], "accept", no_capabilities(targets[1]))


# ============================================================================
# UNIQUENESS
# ============================================================================

class TestUniqueness:

    def test_second_response_to_same_profile_conflicts(self, ledger, db_session, alice, targets):
        ledger.record(alice, targets[0], "accept", no_capabilities(alice))

        with pytest.raises(DuplicateInteractionError) as exc_info:
            ledger.record(alice, targets[0], "reject", no_capabilities(alice))

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "DUPLICATE_INTERACTION"
        assert row_count(db_session, alice) == 1
        # Conflict consumed no quota
        assert daily_count(ledger, alice) == 1

    def test_reverse_direction_is_independent(self, ledger, db_session, alice, targets):
        bob = targets[0]
        ledger.record(alice, bob, "accept", no_capabilities(alice))

        interaction = ledger.record(bob, alice, "accept", no_capabilities(bob))

        assert interaction.from_actor_id == bob
        assert row_count(db_session, bob) == 1

    def test_unique_constraint_backs_the_precheck(self, ledger, db_session, alice, targets):
        ledger.record(alice, targets[0], "accept", no_capabilities(alice))

        # Simulate a concurrent writer that passed the pre-check
        with patch.object(ledger.interactions, "pair_exists", return_value=False):
            with pytest.raises(DuplicateInteractionError):
                ledger.record(alice, targets[0], "accept", no_capabilities(alice))

        assert row_count(db_session, alice) == 1
        assert daily_count(ledger, alice) == 1

    def test_duplicate_takes_precedence_over_exhausted_quota(self, ledger, alice, targets):
        for target in targets[:DAILY_LIMIT]:
            ledger.record(alice, target, "accept", no_capabilities(alice))

        with pytest.raises(DuplicateInteractionError):
            ledger.record(alice, targets[0], "accept", no_capabilities(alice))


# ============================================================================
# DAILY QUOTA
# ============================================================================

class TestDailyQuota:

    def test_eleventh_interaction_is_blocked(self, ledger, db_session, alice, targets):
        for target in targets[:DAILY_LIMIT]:
            ledger.record(alice, target, "reject", no_capabilities(alice))

        with pytest.raises(QuotaExceededError) as exc_info:
            ledger.record(alice, targets[DAILY_LIMIT], "accept", no_capabilities(alice))

        error = exc_info.value
        assert error.status_code == 429
        assert error.limit == DAILY_LIMIT
        # T0 is noon UTC
        assert error.retry_after == 12 * 3600
        assert error.details["retry_after_seconds"] == 12 * 3600
        assert row_count(db_session, alice) == DAILY_LIMIT
        assert daily_count(ledger, alice) == DAILY_LIMIT

    def test_quota_resets_at_utc_midnight(self, ledger, clock, alice, targets):
        for target in targets[:DAILY_LIMIT]:
            ledger.record(alice, target, "accept", no_capabilities(alice))

        clock.set(datetime(2024, 3, 10, 23, 59, 59, tzinfo=timezone.utc))
        with pytest.raises(QuotaExceededError) as exc_info:
            ledger.record(alice, targets[DAILY_LIMIT], "accept", no_capabilities(alice))
        assert exc_info.value.retry_after == 1

        clock.set(datetime(2024, 3, 11, 0, 0, tzinfo=timezone.utc))
        ledger.record(alice, targets[DAILY_LIMIT], "accept", no_capabilities(alice))

        assert daily_count(ledger, alice, at=clock()) == 1
        assert daily_count(ledger, alice, at=T0) == DAILY_LIMIT

    def test_zero_limit_blocks_everything(self, db_session, clock, alice, targets):
        ledger = InteractionLedger(db_session, daily_limit=0, clock=clock)

        with pytest.raises(QuotaExceededError):
            ledger.record(alice, targets[0], "accept", no_capabilities(alice))

    def test_daily_limit_defaults_to_configuration(self, db_session, monkeypatch):
        monkeypatch.setenv("DAILY_INTERACTION_LIMIT", "3")

        assert InteractionLedger(db_session).daily_limit == 3

    def test_check_quota(self, ledger, alice, targets):
        assert ledger.check_quota(alice, no_capabilities(alice)) is True

        for target in targets[:DAILY_LIMIT]:
            ledger.record(alice, target, "accept", no_capabilities(alice))

        assert ledger.check_quota(alice, no_capabilities(alice)) is False

    def test_quota_status_reports_usage(self, ledger, alice, targets):
        for target in targets[:3]:
            ledger.record(alice, target, "accept", no_capabilities(alice))

        status = ledger.quota_status(alice, no_capabilities(alice))

        assert status.used == 3
        assert status.limit == DAILY_LIMIT
        assert status.remaining == DAILY_LIMIT - 3
        assert status.unlimited is False
        assert status.allowed is True
        assert status.resets_at == datetime(2024, 3, 11, tzinfo=timezone.utc)

    def test_counter_matches_rows(self, ledger, db_session, alice, targets):
        ledger.record(alice, targets[0], "accept", no_capabilities(alice))
        ledger.record(alice, targets[1], "reject", no_capabilities(alice))
        with pytest.raises(DuplicateInteractionError):
            ledger.record(alice, targets[0], "accept", no_capabilities(alice))

        rows_today = ledger.interactions.count_since(alice, start_of_day(T0))
        assert rows_today == daily_count(ledger, alice) == 2


# ============================================================================
# ENTITLEMENT BYPASS
# ============================================================================

class TestUnlimitedInteractions:

    @pytest.fixture
    def unlimited(self, db_session, clock, alice, unlimited_capability_id, make_grant):
        make_grant(
            alice, unlimited_capability_id,
            starts_at=T0 - timedelta(days=1), ends_at=T0 + timedelta(days=30),
        )
        return EntitlementResolver(db_session, clock=clock).resolve(alice)

    def test_unlimited_holder_records_past_the_limit(self, ledger, db_session, alice, targets, unlimited):
        for target in targets[:DAILY_LIMIT + 1]:
            ledger.record(alice, target, "accept", unlimited)

        assert row_count(db_session, alice) == DAILY_LIMIT + 1
        # Counter still tracks every row
        assert daily_count(ledger, alice) == DAILY_LIMIT + 1

    def test_unlimited_quota_status(self, ledger, alice, unlimited):
        status = ledger.quota_status(alice, unlimited)

        assert status.unlimited is True
        assert status.limit is None
        assert status.remaining is None
        assert status.allowed is True

    def test_lapsed_grant_restores_the_limit(self, ledger, db_session, clock, alice, targets, unlimited):
        for target in targets[:DAILY_LIMIT + 1]:
            ledger.record(alice, target, "accept", unlimited)

        clock.advance(days=31)
        later = EntitlementResolver(db_session, clock=clock).resolve(alice)

        assert later.unlimited_interactions is False
        assert ledger.check_quota(alice, later) is True


# ============================================================================
# ATOMICITY
# ============================================================================

class TestAtomicity:

    def test_failure_after_quota_increment_rolls_back_everything(self, ledger, db_session, alice, targets):
        ledger.record(alice, targets[0], "accept", no_capabilities(alice))

        with patch.object(ledger.interactions, "add_interaction", side_effect=RuntimeError("insert failed")):
            with pytest.raises(RuntimeError, match="insert failed"):
                ledger.record(alice, targets[1], "accept", no_capabilities(alice))

        assert daily_count(ledger, alice) == 1
        assert row_count(db_session, alice) == 1

    def test_quota_refusal_leaves_no_trace(self, ledger, db_session, alice, targets):
        for target in targets[:DAILY_LIMIT]:
            ledger.record(alice, target, "accept", no_capabilities(alice))

        for _ in range(3):
            with pytest.raises(QuotaExceededError):
                ledger.record(alice, targets[DAILY_LIMIT], "accept", no_capabilities(alice))

        assert daily_count(ledger, alice) == DAILY_LIMIT
        assert row_count(db_session, alice) == DAILY_LIMIT


# ============================================================================
# PROFILES
# ============================================================================

class TestGetProfiles:

    def test_excludes_self_and_already_answered(self, ledger, alice, targets):
        answered = set(targets[:5])
        for target in answered:
            ledger.record(alice, target, "accept", no_capabilities(alice))

        profiles = ledger.get_profiles(alice, no_capabilities(alice), limit=50)
        ids = {actor.id for actor in profiles}

        assert alice not in ids
        assert ids.isdisjoint(answered)
        assert ids == set(targets[5:])

    def test_default_batch_size_is_one(self, ledger, alice, targets):
        assert len(ledger.get_profiles(alice, no_capabilities(alice))) == 1

    def test_blocked_when_quota_exhausted(self, ledger, alice, targets):
        for target in targets[:DAILY_LIMIT]:
            ledger.record(alice, target, "accept", no_capabilities(alice))

        with pytest.raises(QuotaExceededError):
            ledger.get_profiles(alice, no_capabilities(alice))

    def test_invalid_limit_rejected(self, ledger, alice):
        with pytest.raises(InvalidInputError):
            ledger.get_profiles(alice, no_capabilities(alice), limit=0)

    def test_does_not_consume_quota(self, ledger, alice, targets):
        ledger.get_profiles(alice, no_capabilities(alice), limit=5)

        assert daily_count(ledger, alice) == 0
        assert ledger.get_profiles(alice, no_capabilities(alice), limit=5)


def test_daily_usage_row_is_keyed_by_utc_day(ledger, db_session, alice, targets):
    ledger.record(alice, targets[0], "accept", no_capabilities(alice))

    usage = db_session.query(DailyUsage).filter(DailyUsage.actor_id == alice).one()
    assert usage.usage_date == T0.date()
    assert usage.interaction_count == 1
