"""
Dialect-specific statement helpers.

The ledger relies on two store primitives that differ per backend:
- INSERT ... ON CONFLICT DO NOTHING (create a counter row if missing)
- recognizing a unique-constraint violation inside an IntegrityError
"""

from typing import Any, Dict, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

# PostgreSQL unique_violation SQLSTATE
PG_UNIQUE_VIOLATION = "23505"


def insert_ignore(
    session: Session,
    table,
    values: Dict[str, Any],
    index_elements: Sequence[str],
):
    """Insert a row unless one with the same index_elements already exists."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"insert_ignore is not supported for dialect {dialect}")

    stmt = insert(table).values(**values).on_conflict_do_nothing(
        index_elements=list(index_elements)
    )
    return session.execute(stmt)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True if exc was raised by a unique or primary-key constraint."""
    orig = getattr(exc, "orig", None)
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == PG_UNIQUE_VIOLATION
    message = str(orig if orig is not None else exc)
    return "UNIQUE constraint failed" in message
