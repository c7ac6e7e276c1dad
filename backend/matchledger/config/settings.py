"""
Runtime configuration read from environment variables.

Configuration (environment variables):
- DATABASE_URL:               SQLAlchemy URL of the relational store (required)
- DAILY_INTERACTION_LIMIT:    Interactions per actor per UTC day (default: "10")
- PROFILE_BATCH_SIZE:         Candidates returned per profile request (default: "1")
- DB_POOL_SIZE:               Connection pool size (default: "5")
- DB_MAX_OVERFLOW:            Extra connections under load (default: "10")
- DB_STATEMENT_TIMEOUT_MS:    PostgreSQL statement timeout, unset = none
- SQLITE_BUSY_TIMEOUT_SECONDS: Wait for the SQLite write lock (default: "30")
- JWT_SECRET:                 HS256 secret for bearer tokens
- REDIS_URL:                  Optional Redis for the capability catalog cache
- CATALOG_CACHE_TTL_SECONDS:  Catalog cache TTL (default: "300")
- LOG_LEVEL:                  Root log level (default: "INFO")
"""

import os
from typing import Optional

DEFAULT_DAILY_INTERACTION_LIMIT = 10
DEFAULT_PROFILE_BATCH_SIZE = 1
DEFAULT_CATALOG_CACHE_TTL_SECONDS = 300


def _get_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def get_database_url() -> str:
    """
    Get and normalize the database URL from environment.

    Handles the postgres:// URL format by converting to postgresql://.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable is not set")

    # SQLAlchemy requires postgresql://
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    return database_url


def get_daily_interaction_limit() -> int:
    return _get_int("DAILY_INTERACTION_LIMIT", DEFAULT_DAILY_INTERACTION_LIMIT, minimum=0)


def get_profile_batch_size() -> int:
    return _get_int("PROFILE_BATCH_SIZE", DEFAULT_PROFILE_BATCH_SIZE, minimum=1)


def get_pool_size() -> int:
    return _get_int("DB_POOL_SIZE", 5, minimum=1)


def get_max_overflow() -> int:
    return _get_int("DB_MAX_OVERFLOW", 10, minimum=0)


def get_statement_timeout_ms() -> Optional[int]:
    """Statement timeout for PostgreSQL sessions; None disables it."""
    timeout = _get_int("DB_STATEMENT_TIMEOUT_MS", 0, minimum=0)
    return timeout or None


def get_sqlite_busy_timeout() -> int:
    return _get_int("SQLITE_BUSY_TIMEOUT_SECONDS", 30, minimum=0)


def get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def get_redis_url() -> Optional[str]:
    return os.getenv("REDIS_URL") or None


def get_catalog_cache_ttl() -> int:
    return _get_int("CATALOG_CACHE_TTL_SECONDS", DEFAULT_CATALOG_CACHE_TTL_SECONDS, minimum=1)


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
