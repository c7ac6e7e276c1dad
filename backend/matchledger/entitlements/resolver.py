"""
Entitlement resolution: active grants for an actor at an instant.

Resolution is read-only and produces a detached ActiveCapabilities
snapshot. Resolve once per request and pass the snapshot down; never
re-query per check.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.orm import Session

from matchledger.database.transaction import translate_store_errors
from matchledger.entitlements.models import ActiveCapabilities, GrantSnapshot
from matchledger.ledger.clock import Clock, as_utc, utcnow
from matchledger.repositories.grant_repository import GrantRepository

logger = logging.getLogger(__name__)


class EntitlementResolver:
    """Computes the set of currently active capabilities for an actor."""

    def __init__(self, session: Session, clock: Clock = utcnow):
        self.grants = GrantRepository(session)
        self.clock = clock

    def resolve(self, actor_id: uuid.UUID, at: Optional[datetime] = None) -> ActiveCapabilities:
        """
        Resolve the actor's active capabilities.

        Only grants with status=active, starts_at <= at and
        (ends_at is NULL or ends_at > at) are returned. An actor with no
        grants resolves to an empty set.

        Args:
            actor_id: Actor to resolve for
            at: Instant to resolve at (defaults to now, UTC)

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        at = as_utc(at) if at is not None else self.clock()

        with translate_store_errors("entitlements.resolve", actor_id=str(actor_id)):
            rows = self.grants.list_valid_grants(actor_id, at)

        grants: Dict[str, GrantSnapshot] = {}
        for row in rows:
            # Rows arrive newest first; keep the latest grant per capability
            grants.setdefault(row.capability.name, GrantSnapshot.from_grant(row))

        logger.debug(
            "entitlements.resolved",
            extra={
                "actor_id": str(actor_id),
                "capabilities": sorted(grants),
                "resolved_at": at.isoformat(),
            },
        )
        return ActiveCapabilities(actor_id=actor_id, resolved_at=at, grants=grants)
