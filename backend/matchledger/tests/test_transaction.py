"""
Transaction boundary: commit/rollback, rollback-failure logging and
store error translation.
"""

import logging
import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from matchledger.database.dialects import is_unique_violation
from matchledger.database.transaction import atomic, translate_store_errors
from matchledger.models import Actor
from matchledger.platform.errors import StoreUnavailableError


class TestAtomic:

    def test_commits_when_block_completes(self, db_session):
        actor_id = uuid.uuid4()

        with atomic(db_session, "test.commit"):
            db_session.add(Actor(id=actor_id, display_name="committed"))

        db_session.rollback()
        assert db_session.get(Actor, actor_id) is not None

    def test_rolls_back_on_error(self, db_session):
        actor_id = uuid.uuid4()

        with pytest.raises(RuntimeError):
            with atomic(db_session, "test.rollback"):
                db_session.add(Actor(id=actor_id, display_name="discarded"))
                db_session.flush()
                raise RuntimeError("boom")

        assert db_session.get(Actor, actor_id) is None

    def test_rolls_back_on_cancellation(self):
        session = MagicMock()

        with pytest.raises(KeyboardInterrupt):
            with atomic(session, "test.cancel"):
                raise KeyboardInterrupt()

        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    def test_rollback_failure_is_logged_and_original_error_kept(self, caplog):
        session = MagicMock()
        session.rollback.side_effect = RuntimeError("rollback exploded")

        with caplog.at_level(logging.ERROR, logger="matchledger.database.transaction"):
            with pytest.raises(ValueError, match="original"):
                with atomic(session, "test.rollback_failure", actor_id="a-1"):
                    raise ValueError("original")

        assert "Transaction rollback failed" in caplog.text
        record = next(r for r in caplog.records if r.getMessage() == "Transaction rollback failed")
        assert record.original_error == "ValueError"
        assert record.actor_id == "a-1"

    def test_connectivity_failure_becomes_store_unavailable(self):
        session = MagicMock()
        cause = OperationalError("UPDATE daily_usage", {}, Exception("server closed the connection"))

        with pytest.raises(StoreUnavailableError) as exc_info:
            with atomic(session, "interaction.record"):
                raise cause

        assert exc_info.value.operation == "interaction.record"
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        session.rollback.assert_called_once()

    def test_commit_failure_becomes_store_unavailable(self):
        session = MagicMock()
        session.commit.side_effect = OperationalError("COMMIT", {}, Exception("database is locked"))

        with pytest.raises(StoreUnavailableError):
            with atomic(session, "subscription.activate"):
                pass

        session.rollback.assert_called_once()

    def test_integrity_errors_are_not_translated(self):
        session = MagicMock()
        cause = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: interactions.id"))

        with pytest.raises(IntegrityError):
            with atomic(session, "interaction.record"):
                raise cause


class TestTranslateStoreErrors:

    def test_interface_error_becomes_store_unavailable(self):
        with pytest.raises(StoreUnavailableError):
            with translate_store_errors("quota.read"):
                raise InterfaceError("SELECT", {}, Exception("connection already closed"))

    def test_other_errors_pass_through(self):
        with pytest.raises(KeyError):
            with translate_store_errors("quota.read"):
                raise KeyError("missing")


class TestUniqueViolation:

    def test_sqlite_message(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: interactions.from_actor_id"))
        assert is_unique_violation(exc) is True

    def test_postgres_sqlstate(self):
        orig = Exception("duplicate key value violates unique constraint")
        orig.pgcode = "23505"
        assert is_unique_violation(IntegrityError("INSERT", {}, orig)) is True

    def test_foreign_key_violation_is_not_unique(self):
        orig = Exception("insert or update violates foreign key constraint")
        orig.pgcode = "23503"
        assert is_unique_violation(IntegrityError("INSERT", {}, orig)) is False
