"""Configuration module for the ledger service."""

from matchledger.config.settings import (
    DEFAULT_DAILY_INTERACTION_LIMIT,
    get_catalog_cache_ttl,
    get_daily_interaction_limit,
    get_database_url,
    get_jwt_secret,
    get_log_level,
    get_profile_batch_size,
    get_redis_url,
)

__all__ = [
    "DEFAULT_DAILY_INTERACTION_LIMIT",
    "get_catalog_cache_ttl",
    "get_daily_interaction_limit",
    "get_database_url",
    "get_jwt_secret",
    "get_log_level",
    "get_profile_batch_size",
    "get_redis_url",
]
