"""
Interaction repository: append-only interaction rows and daily counters.

The daily counter is consumed with a single conditional UPDATE
(interaction_count < ceiling). The row lock taken by that UPDATE is what
serializes concurrent writers for the same (actor, day).
"""

import logging
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from matchledger.database.dialects import insert_ignore, is_unique_violation
from matchledger.ledger.errors import DuplicateInteractionError
from matchledger.models.actor import Actor
from matchledger.models.base import utc_now
from matchledger.models.interaction import DailyUsage, Interaction

logger = logging.getLogger(__name__)

_usage = DailyUsage.__table__


class InteractionRepository:
    """Repository for interactions, daily usage and candidate lookup."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def missing_actors(self, actor_ids: Iterable[uuid.UUID]) -> List[uuid.UUID]:
        """Ids from actor_ids with no matching actor row, in input order."""
        wanted = list(dict.fromkeys(actor_ids))
        found = {
            row[0]
            for row in self.db.query(Actor.id).filter(Actor.id.in_(wanted)).all()
        }
        return [actor_id for actor_id in wanted if actor_id not in found]

    def pair_exists(self, from_actor_id: uuid.UUID, to_actor_id: uuid.UUID) -> bool:
        return self.db.query(Interaction.id).filter(
            Interaction.from_actor_id == from_actor_id,
            Interaction.to_actor_id == to_actor_id,
        ).first() is not None

    def get_daily_count(self, actor_id: uuid.UUID, day: date) -> int:
        count = self.db.query(DailyUsage.interaction_count).filter(
            DailyUsage.actor_id == actor_id,
            DailyUsage.usage_date == day,
        ).scalar()
        return count or 0

    def count_since(self, actor_id: uuid.UUID, since: datetime) -> int:
        """Interaction rows authored by actor since the given instant."""
        return self.db.query(func.count(Interaction.id)).filter(
            Interaction.from_actor_id == actor_id,
            Interaction.created_at >= since,
        ).scalar()

    def consume_daily_quota(
        self,
        actor_id: uuid.UUID,
        day: date,
        ceiling: Optional[int],
    ) -> bool:
        """
        Increment the (actor, day) counter unless it has reached ceiling.

        Args:
            actor_id: Actor consuming quota
            day: UTC usage date
            ceiling: Maximum count for the day; None means unbounded

        Returns:
            True if a unit was consumed, False if the ceiling was reached
        """
        now = utc_now()
        insert_ignore(
            self.db,
            _usage,
            {"actor_id": actor_id, "usage_date": day, "interaction_count": 0, "updated_at": now},
            index_elements=("actor_id", "usage_date"),
        )

        stmt = update(_usage).where(
            _usage.c.actor_id == actor_id,
            _usage.c.usage_date == day,
        )
        if ceiling is not None:
            stmt = stmt.where(_usage.c.interaction_count < ceiling)
        result = self.db.execute(
            stmt.values(interaction_count=_usage.c.interaction_count + 1, updated_at=now)
        )
        return result.rowcount == 1

    def add_interaction(self, interaction: Interaction) -> Interaction:
        """
        Insert interaction.

        Raises:
            DuplicateInteractionError: the ordered pair is already recorded
        """
        self.db.add(interaction)
        try:
            self.db.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise DuplicateInteractionError(
                    interaction.from_actor_id, interaction.to_actor_id
                ) from exc
            raise
        return interaction

    def list_candidates(self, actor_id: uuid.UUID, limit: int) -> List[Actor]:
        """Random actors other than actor_id that actor_id has not responded to."""
        responded = select(Interaction.to_actor_id).where(
            Interaction.from_actor_id == actor_id
        )
        return (
            self.db.query(Actor)
            .filter(Actor.id != actor_id, Actor.id.not_in(responded))
            .order_by(func.random())
            .limit(limit)
            .all()
        )
