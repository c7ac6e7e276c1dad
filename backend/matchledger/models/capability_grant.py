"""
CapabilityGrant and GrantSlot models.

A CapabilityGrant activates a catalog capability for an actor over
[starts_at, ends_at). Grants lapse lazily: nothing rewrites them when
ends_at passes, the resolver simply stops returning them.

Lifecycle:
1. SubscriptionActivator claims the (actor, capability) GrantSlot
2. CapabilityGrant inserted with status=active in the same transaction
3. Grant lapses once ends_at <= now, or is revoked (status=revoked)

CONSISTENCY:
- At most one currently valid active grant per (actor_id, capability_id).
  Enforced by GrantSlot: the primary key rejects a second slot row and the
  slot can only be re-claimed once its valid_until has passed.
- Only status is ever mutated on a grant.
"""

import enum

from sqlalchemy import Column, ForeignKey, Index, Integer, Enum as SAEnum
from sqlalchemy.orm import relationship

from matchledger.db_base import Base
from matchledger.models.base import GUID, TimestampMixin, UTCDateTime, generate_uuid


class GrantStatus(str, enum.Enum):
    """Grant lifecycle status."""
    ACTIVE = "active"     # Valid while starts_at <= now < ends_at
    REVOKED = "revoked"   # Withdrawn before ends_at


class CapabilityGrant(Base, TimestampMixin):
    """A capability activated for one actor over a bounded period."""

    __tablename__ = "capability_grants"

    id = Column(
        GUID(),
        primary_key=True,
        default=generate_uuid,
        comment="Primary key (UUID)"
    )

    actor_id = Column(
        GUID(),
        ForeignKey("actors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Actor holding the grant"
    )

    capability_id = Column(
        GUID(),
        ForeignKey("capabilities.id"),
        nullable=False,
        index=True,
        comment="Granted capability"
    )

    value = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Tier or quantity attached to the grant"
    )

    starts_at = Column(
        UTCDateTime(),
        nullable=False,
        comment="Start of validity (inclusive)"
    )

    ends_at = Column(
        UTCDateTime(),
        nullable=True,
        comment="End of validity (exclusive); NULL never expires"
    )

    status = Column(
        SAEnum(
            GrantStatus,
            name="grant_status",
            create_constraint=True,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
        ),
        nullable=False,
        default=GrantStatus.ACTIVE,
        comment="Current grant status"
    )

    capability = relationship("Capability", lazy="joined")

    __table_args__ = (
        Index("ix_capability_grants_actor_status_ends", "actor_id", "status", "ends_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<CapabilityGrant(id={self.id}, actor_id={self.actor_id}, "
            f"capability_id={self.capability_id}, status={self.status.value})>"
        )

    def revoke(self) -> None:
        """Mark grant as revoked."""
        self.status = GrantStatus.REVOKED


class GrantSlot(Base):
    """
    One row per (actor, capability) recording which grant currently holds it.

    valid_until mirrors the holding grant's ends_at. A NULL valid_until means
    the slot is held indefinitely.
    """

    __tablename__ = "capability_grant_slots"

    actor_id = Column(
        GUID(),
        primary_key=True,
        comment="Actor owning the slot"
    )

    capability_id = Column(
        GUID(),
        primary_key=True,
        comment="Capability the slot guards"
    )

    grant_id = Column(
        GUID(),
        nullable=False,
        comment="Grant currently holding the slot"
    )

    valid_until = Column(
        UTCDateTime(),
        nullable=True,
        comment="Slot is free again once this instant has passed"
    )

    def __repr__(self) -> str:
        return (
            f"<GrantSlot(actor_id={self.actor_id}, capability_id={self.capability_id}, "
            f"grant_id={self.grant_id}, valid_until={self.valid_until})>"
        )
