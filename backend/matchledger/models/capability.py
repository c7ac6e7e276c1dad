"""
Capability catalog model.

Capabilities are immutable reference data managed outside the ledger
(e.g. "unlimited_interactions"). Grants point at them by id.
"""

from sqlalchemy import Column, String, Text

from matchledger.db_base import Base
from matchledger.models.base import GUID, TimestampMixin, generate_uuid


class Capability(Base, TimestampMixin):
    """A purchasable capability in the catalog."""

    __tablename__ = "capabilities"

    id = Column(
        GUID(),
        primary_key=True,
        default=generate_uuid,
        comment="Primary key (UUID)"
    )

    name = Column(
        String(100),
        nullable=False,
        unique=True,
        comment="Stable machine name, e.g. unlimited_interactions"
    )

    description = Column(
        Text,
        nullable=True,
        comment="Human-readable description"
    )

    def __repr__(self) -> str:
        return f"<Capability(id={self.id}, name={self.name})>"
