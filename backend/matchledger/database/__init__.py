"""Relational store access: engine/session management and transaction boundary."""

from matchledger.database.session import (
    create_engine_for_url,
    get_db_session,
    get_engine,
    make_session_factory,
)
from matchledger.database.transaction import atomic, translate_store_errors

__all__ = [
    "create_engine_for_url",
    "get_db_session",
    "get_engine",
    "make_session_factory",
    "atomic",
    "translate_store_errors",
]
