"""
Interaction and DailyUsage models.

An Interaction is a directional accept/reject from one actor to another.
Rows are append-only: created once by the InteractionLedger, never updated
or deleted.

DailyUsage is the materialized per-actor, per-UTC-day interaction counter.
It is written in the same transaction as the Interaction insert, so for
every (actor, day) interaction_count equals the number of Interaction rows
authored by that actor on that day.
"""

import enum

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Enum as SAEnum,
)

from matchledger.db_base import Base
from matchledger.models.base import GUID, UTCDateTime, generate_uuid, utc_now


class InteractionKind(str, enum.Enum):
    """Direction-specific response of one actor to another."""
    ACCEPT = "accept"
    REJECT = "reject"

    @classmethod
    def aliases(cls) -> dict:
        return {
            "accept": cls.ACCEPT,
            "like": cls.ACCEPT,
            "reject": cls.REJECT,
            "pass": cls.REJECT,
        }


class Interaction(Base):
    """One actor's recorded response to another actor."""

    __tablename__ = "interactions"

    id = Column(
        GUID(),
        primary_key=True,
        default=generate_uuid,
        comment="Primary key (UUID)"
    )

    from_actor_id = Column(
        GUID(),
        ForeignKey("actors.id", ondelete="CASCADE"),
        nullable=False,
        comment="Actor who responded"
    )

    to_actor_id = Column(
        GUID(),
        ForeignKey("actors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Actor who was responded to"
    )

    kind = Column(
        SAEnum(
            InteractionKind,
            name="interaction_kind",
            create_constraint=True,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
        ),
        nullable=False,
        comment="accept or reject"
    )

    created_at = Column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        comment="When the interaction was recorded"
    )

    __table_args__ = (
        UniqueConstraint("from_actor_id", "to_actor_id", name="uq_interactions_from_to"),
        Index("ix_interactions_from_created", "from_actor_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Interaction(id={self.id}, from={self.from_actor_id}, "
            f"to={self.to_actor_id}, kind={self.kind.value})>"
        )


class DailyUsage(Base):
    """Per-actor interaction counter for one UTC calendar day."""

    __tablename__ = "daily_usage"

    actor_id = Column(
        GUID(),
        primary_key=True,
        comment="Actor whose interactions are counted"
    )

    usage_date = Column(
        Date,
        primary_key=True,
        comment="UTC calendar day"
    )

    interaction_count = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Interactions recorded by the actor on usage_date"
    )

    updated_at = Column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        comment="Last counter change"
    )

    def __repr__(self) -> str:
        return (
            f"<DailyUsage(actor_id={self.actor_id}, usage_date={self.usage_date}, "
            f"interaction_count={self.interaction_count})>"
        )
