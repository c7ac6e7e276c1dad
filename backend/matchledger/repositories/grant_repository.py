"""
Grant repository for capability catalog and grant data access.

Encapsulates all database operations for capabilities and grants with:
- Validity-window filtering for active grants
- Store-enforced single valid grant per (actor, capability) via GrantSlot
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from matchledger.database.dialects import is_unique_violation
from matchledger.models.actor import Actor
from matchledger.models.capability import Capability
from matchledger.models.capability_grant import CapabilityGrant, GrantSlot, GrantStatus

logger = logging.getLogger(__name__)

_slots = GrantSlot.__table__


class GrantRepository:
    """Repository for capabilities, grants and grant slots."""

    def __init__(self, db_session: Session):
        """
        Initialize repository with database session.

        Args:
            db_session: SQLAlchemy database session
        """
        self.db = db_session

    # =========================================================================
    # Catalog
    # =========================================================================

    def get_capability(self, capability_id: uuid.UUID) -> Optional[Capability]:
        return self.db.query(Capability).filter(Capability.id == capability_id).first()

    def list_capabilities(self) -> List[Capability]:
        return self.db.query(Capability).order_by(Capability.name).all()

    def actor_exists(self, actor_id: uuid.UUID) -> bool:
        return self.db.query(Actor.id).filter(Actor.id == actor_id).first() is not None

    # =========================================================================
    # Grants
    # =========================================================================

    def list_valid_grants(self, actor_id: uuid.UUID, at: datetime) -> List[CapabilityGrant]:
        """
        Active grants for actor whose [starts_at, ends_at) contains at.

        Newest first, so callers keying by capability keep the latest grant.
        """
        return (
            self.db.query(CapabilityGrant)
            .options(joinedload(CapabilityGrant.capability))
            .filter(
                CapabilityGrant.actor_id == actor_id,
                CapabilityGrant.status == GrantStatus.ACTIVE,
                CapabilityGrant.starts_at <= at,
                (CapabilityGrant.ends_at.is_(None)) | (CapabilityGrant.ends_at > at),
            )
            .order_by(CapabilityGrant.starts_at.desc())
            .all()
        )

    def get_grant(self, grant_id: uuid.UUID, actor_id: uuid.UUID) -> Optional[CapabilityGrant]:
        return self.db.query(CapabilityGrant).filter(
            CapabilityGrant.id == grant_id,
            CapabilityGrant.actor_id == actor_id,
        ).first()

    def add_grant(self, grant: CapabilityGrant) -> CapabilityGrant:
        self.db.add(grant)
        self.db.flush()
        return grant

    # =========================================================================
    # Slots
    # =========================================================================

    def claim_slot(
        self,
        actor_id: uuid.UUID,
        capability_id: uuid.UUID,
        grant_id: uuid.UUID,
        valid_until: Optional[datetime],
        now: datetime,
    ) -> bool:
        """
        Point the (actor, capability) slot at grant_id.

        Succeeds when no slot row exists yet, or the existing one has lapsed
        (valid_until <= now). Concurrent claimers are serialized by the
        store: the losing UPDATE matches no row once the winner commits, and
        the losing INSERT hits the primary key.

        Returns:
            True if the slot was claimed, False if a valid grant holds it
        """
        result = self.db.execute(
            update(_slots)
            .where(
                _slots.c.actor_id == actor_id,
                _slots.c.capability_id == capability_id,
                _slots.c.valid_until.is_not(None),
                _slots.c.valid_until <= now,
            )
            .values(grant_id=grant_id, valid_until=valid_until)
        )
        if result.rowcount == 1:
            return True

        try:
            self.db.execute(
                insert(_slots).values(
                    actor_id=actor_id,
                    capability_id=capability_id,
                    grant_id=grant_id,
                    valid_until=valid_until,
                )
            )
        except IntegrityError as exc:
            if is_unique_violation(exc):
                return False
            raise
        return True

    def release_slot(
        self,
        actor_id: uuid.UUID,
        capability_id: uuid.UUID,
        grant_id: uuid.UUID,
        at: datetime,
    ) -> bool:
        """Free the slot if grant_id still holds it."""
        result = self.db.execute(
            update(_slots)
            .where(
                _slots.c.actor_id == actor_id,
                _slots.c.capability_id == capability_id,
                _slots.c.grant_id == grant_id,
            )
            .values(valid_until=at)
        )
        return result.rowcount == 1
