"""
Service health checks.

Provides:
- Relational store connectivity (SELECT 1)
- Optional Redis catalog cache connectivity
- Configuration presence report (never values)
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import redis
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from matchledger.config.settings import get_redis_url
from matchledger.database.session import get_engine

logger = logging.getLogger(__name__)

REQUIRED_VARS = ("DATABASE_URL", "JWT_SECRET")
OPTIONAL_VARS = ("REDIS_URL",)


class HealthChecker:
    """Health check service for the ledger API."""

    def __init__(self, engine_factory: Callable[[], Engine] = get_engine):
        self._engine_factory = engine_factory
        self.redis_url = get_redis_url()

    def check_database(self) -> Dict[str, Any]:
        """
        Check database connectivity.

        Returns:
            Dict with 'status' (ok/error) and 'message'
        """
        try:
            engine = self._engine_factory()
            with engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            return {"status": "ok", "message": "Database connection successful"}
        except ValueError as e:
            return {"status": "error", "message": str(e)}
        except SQLAlchemyError as e:
            logger.error("Database connection failed", extra={"error": str(e)})
            return {"status": "error", "message": "Database connection failed"}

    def check_cache(self) -> Dict[str, Any]:
        if not self.redis_url:
            return {"status": "disabled", "message": "REDIS_URL not configured"}
        try:
            client = redis.from_url(self.redis_url, socket_connect_timeout=1, socket_timeout=1)
            client.ping()
            return {"status": "ok", "message": "Redis connection successful"}
        except redis.RedisError as e:
            # Cache is optional; reads fall back to the store
            logger.warning("Redis health check failed", extra={"error": str(e)})
            return {"status": "error", "message": "Redis connection failed"}

    def check_environment_variables(self) -> Dict[str, Any]:
        present = [var for var in REQUIRED_VARS + OPTIONAL_VARS if os.getenv(var)]
        missing = [var for var in REQUIRED_VARS if not os.getenv(var)]
        return {
            "status": "ok" if not missing else "error",
            "present": present,
            "missing": missing,
        }

    def get_health_status(self) -> Dict[str, Any]:
        """
        Get comprehensive health status.

        Overall status is degraded when the store or required config is
        unavailable; a failing optional cache does not degrade it.
        """
        db_check = self.check_database()
        env_check = self.check_environment_variables()
        cache_check = self.check_cache()

        overall_status = "ok"
        if db_check["status"] != "ok" or env_check["status"] != "ok":
            overall_status = "degraded"

        return {
            "status": overall_status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "matchledger-api",
            "checks": {
                "database": db_check,
                "cache": cache_check,
                "environment": env_check,
            },
        }

    def log_config_status(self) -> None:
        """Log which configuration variables are present (NO secrets)."""
        env_check = self.check_environment_variables()
        logger.info("Configuration status", extra={
            "vars_present": env_check["present"],
            "vars_missing": env_check["missing"],
            "redis_configured": bool(self.redis_url),
        })
        if env_check["missing"]:
            logger.warning("Missing required environment variables", extra={
                "missing_vars": env_check["missing"]
            })


_health_checker: Optional[HealthChecker] = None


def get_health_checker() -> HealthChecker:
    """Get or create health checker instance."""
    global _health_checker
    if _health_checker is None:
        _health_checker = HealthChecker()
    return _health_checker
