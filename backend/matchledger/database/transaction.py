"""
Transaction boundary for multi-step ledger writes.

Every check-and-write (quota increment + interaction insert, slot claim +
grant insert) runs inside atomic(): commit only when the block completes,
rollback on any exception, cancellation included.

Rollback failures are logged and never replace the original error.
Connectivity failures surface as StoreUnavailableError; nothing here
retries.

Usage:
    with atomic(session, "interaction.record", actor_id=str(actor_id)):
        ...
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from matchledger.platform.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def _is_unavailable(exc: BaseException) -> bool:
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def _rollback(session: Session, operation: str, cause: BaseException, context: dict) -> None:
    try:
        session.rollback()
    except Exception as rollback_exc:
        logger.error(
            "Transaction rollback failed",
            extra={
                "operation": operation,
                "error": str(rollback_exc),
                "original_error": type(cause).__name__,
                **context,
            },
        )


@contextmanager
def translate_store_errors(operation: str, **context: Any) -> Iterator[None]:
    """Map store connectivity failures to StoreUnavailableError (reads)."""
    try:
        yield
    except DBAPIError as exc:
        if not _is_unavailable(exc):
            raise
        logger.warning(
            "Store unavailable",
            extra={"operation": operation, "error": str(exc), **context},
        )
        raise StoreUnavailableError(operation, cause=exc) from exc


@contextmanager
def atomic(session: Session, operation: str, **context: Any) -> Iterator[Session]:
    """
    Run the block as one all-or-nothing unit on session.

    Args:
        session: SQLAlchemy session the block writes through
        operation: Dotted operation name for logs (e.g. "subscription.activate")
        **context: Extra structured log fields

    Raises:
        StoreUnavailableError: connection lost, lock timeout, or statement timeout
        Any exception raised by the block, after rollback
    """
    try:
        yield session
        session.commit()
    except BaseException as exc:
        _rollback(session, operation, exc, context)
        if isinstance(exc, DBAPIError) and _is_unavailable(exc):
            logger.warning(
                "Store unavailable",
                extra={"operation": operation, "error": str(exc), **context},
            )
            raise StoreUnavailableError(operation, cause=exc) from exc
        raise
