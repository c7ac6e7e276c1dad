"""
Actor model.

An actor is one side of a pairwise match. Identity and credentials live with
the upstream auth service; this table only holds the public profile fields
returned to other actors as candidates.
"""

from sqlalchemy import Column, Date, String, Text

from matchledger.db_base import Base
from matchledger.models.base import GUID, TimestampMixin, generate_uuid


class Actor(Base, TimestampMixin):
    """Public profile of a participant in the matching service."""

    __tablename__ = "actors"

    id = Column(
        GUID(),
        primary_key=True,
        default=generate_uuid,
        comment="Actor identifier (UUID), issued by the identity provider"
    )

    display_name = Column(
        String(255),
        nullable=False,
        comment="Name shown to other actors"
    )

    bio = Column(
        Text,
        nullable=True,
        comment="Free-form profile text"
    )

    birth_date = Column(
        Date,
        nullable=True,
        comment="Date of birth"
    )

    gender = Column(
        String(50),
        nullable=True,
        comment="Self-reported gender (male, female, other)"
    )

    def __repr__(self) -> str:
        return f"<Actor(id={self.id}, display_name={self.display_name})>"
