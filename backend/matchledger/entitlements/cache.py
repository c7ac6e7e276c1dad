"""
Redis read-through cache for the capability catalog.

The catalog is immutable reference data, so it is the only thing the
ledger caches across requests. Grants and quota counts are never cached.

If Redis is unavailable the cache degrades gracefully: reads miss, writes
are skipped, and a warning is logged.
"""

import json
import logging
from typing import List, Optional

import redis

from matchledger.config.settings import get_catalog_cache_ttl, get_redis_url
from matchledger.entitlements.models import CatalogEntry

logger = logging.getLogger(__name__)

CACHE_KEY = "capabilities:catalog"


def _serialize(entries: List[CatalogEntry]) -> str:
    return json.dumps([entry.to_dict() for entry in entries])


def _deserialize(data: str) -> List[CatalogEntry]:
    return [CatalogEntry.from_dict(item) for item in json.loads(data)]


class CatalogCache:
    """Redis-backed cache of the capability catalog."""

    def __init__(self, redis_url: str, ttl_seconds: int = 300):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self._redis: Optional[redis.Redis] = None

    def _get_redis(self) -> redis.Redis:
        """Create the connection lazily so import never needs Redis."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return self._redis

    def get(self) -> Optional[List[CatalogEntry]]:
        """Cached catalog, or None on miss or failure."""
        try:
            raw = self._get_redis().get(CACHE_KEY)
        except redis.RedisError as exc:
            logger.warning(
                "Catalog cache get failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return None
        if not raw:
            return None
        try:
            return _deserialize(raw)
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding malformed catalog cache entry", extra={"error": str(exc)})
            return None

    def set(self, entries: List[CatalogEntry]) -> None:
        try:
            self._get_redis().setex(CACHE_KEY, self.ttl_seconds, _serialize(entries))
        except redis.RedisError as exc:
            logger.warning(
                "Catalog cache set failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )

    def invalidate(self) -> None:
        try:
            self._get_redis().delete(CACHE_KEY)
        except redis.RedisError as exc:
            logger.warning("Catalog cache delete failed", extra={"error": str(exc)})


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_catalog_cache: Optional[CatalogCache] = None


def get_catalog_cache() -> Optional[CatalogCache]:
    """
    Return the module-level CatalogCache, or None when REDIS_URL is unset.
    """
    global _catalog_cache
    redis_url = get_redis_url()
    if not redis_url:
        return None
    if _catalog_cache is None or _catalog_cache.redis_url != redis_url:
        _catalog_cache = CatalogCache(redis_url, ttl_seconds=get_catalog_cache_ttl())
    return _catalog_cache
