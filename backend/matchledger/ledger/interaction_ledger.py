"""
InteractionLedger for quota-gated pairwise interactions.

Handles:
- Quota checks against the per-actor UTC-day counter
- Recording accept/reject interactions atomically with the counter
- Candidate profile listing, gated by quota
- Usage reporting (used / remaining / reset time)

CONSISTENCY:
- The quota is consumed by a conditional increment with a ceiling, inside
  the same transaction as the interaction insert. Two concurrent requests
  can never both take the last unit.
- Actors holding the unlimited-interactions capability skip the ceiling but
  still increment the counter, so the counter always matches the rows.
- (from_actor_id, to_actor_id) is unique at the store; a violation becomes
  DuplicateInteractionError and the counter increment is rolled back.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from matchledger.config.settings import get_daily_interaction_limit, get_profile_batch_size
from matchledger.database.transaction import atomic, translate_store_errors
from matchledger.entitlements.models import ActiveCapabilities
from matchledger.ledger.clock import (
    Clock,
    next_day_start,
    seconds_until_reset,
    usage_date,
    utcnow,
)
from matchledger.ledger.errors import (
    ActorNotFoundError,
    DuplicateInteractionError,
    QuotaExceededError,
)
from matchledger.models.actor import Actor
from matchledger.models.interaction import Interaction, InteractionKind
from matchledger.platform.errors import InvalidInputError
from matchledger.repositories.interaction_repository import InteractionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaStatus:
    """Actor's interaction usage for the current UTC day."""

    actor_id: uuid.UUID
    used: int
    limit: Optional[int]
    remaining: Optional[int]
    unlimited: bool
    resets_at: datetime

    @property
    def allowed(self) -> bool:
        return self.unlimited or (self.remaining or 0) > 0


def parse_kind(kind: Union[str, InteractionKind]) -> InteractionKind:
    """Parse accept/reject (or like/pass) into InteractionKind."""
    if isinstance(kind, InteractionKind):
        return kind
    parsed = InteractionKind.aliases().get(str(kind).strip().lower())
    if parsed is None:
        raise InvalidInputError(
            f"Invalid interaction kind {kind!r}; expected accept or reject",
            field="kind",
        )
    return parsed


class InteractionLedger:
    """Append-only interaction ledger with a daily per-actor quota."""

    def __init__(
        self,
        session: Session,
        daily_limit: Optional[int] = None,
        clock: Clock = utcnow,
    ):
        """
        Initialize ledger with database session.

        Args:
            session: SQLAlchemy session for database operations
            daily_limit: Interactions per actor per UTC day (default from config)
            clock: Source of "now" (UTC)
        """
        self.session = session
        self.interactions = InteractionRepository(session)
        self.daily_limit = daily_limit if daily_limit is not None else get_daily_interaction_limit()
        self.clock = clock

    # =========================================================================
    # Quota
    # =========================================================================

    def check_quota(self, actor_id: uuid.UUID, capabilities: ActiveCapabilities) -> bool:
        """
        True if actor may perform another interaction today.

        Advisory only: record() re-validates atomically with the insert.
        """
        self._check_snapshot(actor_id, capabilities)
        if capabilities.unlimited_interactions:
            return True
        return self._used_today(actor_id, self.clock()) < self.daily_limit

    def quota_status(self, actor_id: uuid.UUID, capabilities: ActiveCapabilities) -> QuotaStatus:
        self._check_snapshot(actor_id, capabilities)
        now = self.clock()
        used = self._used_today(actor_id, now)
        unlimited = capabilities.unlimited_interactions
        return QuotaStatus(
            actor_id=actor_id,
            used=used,
            limit=None if unlimited else self.daily_limit,
            remaining=None if unlimited else max(0, self.daily_limit - used),
            unlimited=unlimited,
            resets_at=next_day_start(now),
        )

    # =========================================================================
    # Core Operations
    # =========================================================================

    def record(
        self,
        from_actor_id: uuid.UUID,
        to_actor_id: uuid.UUID,
        kind: Union[str, InteractionKind],
        capabilities: ActiveCapabilities,
    ) -> Interaction:
        """
        Record from_actor's response to to_actor.

        Args:
            from_actor_id: Authenticated actor responding
            to_actor_id: Actor being responded to
            kind: accept or reject (like/pass accepted)
            capabilities: Snapshot resolved for from_actor at request start

        Returns:
            Persisted Interaction

        Raises:
            InvalidInputError: Unknown kind or self-interaction
            ActorNotFoundError: Either actor does not exist
            DuplicateInteractionError: from_actor already responded to to_actor
            QuotaExceededError: Daily quota exhausted
            StoreUnavailableError: Store unreachable; nothing was written
        """
        interaction_kind = parse_kind(kind)
        if from_actor_id == to_actor_id:
            raise InvalidInputError("An actor cannot respond to their own profile", field="to_actor_id")
        self._check_snapshot(from_actor_id, capabilities)

        now = self.clock()
        ceiling = None if capabilities.unlimited_interactions else self.daily_limit
        context = {"from_actor_id": str(from_actor_id), "to_actor_id": str(to_actor_id)}

        with atomic(self.session, "interaction.record", **context):
            missing = self.interactions.missing_actors([from_actor_id, to_actor_id])
            if missing:
                raise ActorNotFoundError(missing[0])

            if self.interactions.pair_exists(from_actor_id, to_actor_id):
                raise DuplicateInteractionError(from_actor_id, to_actor_id)

            if not self.interactions.consume_daily_quota(from_actor_id, usage_date(now), ceiling):
                raise QuotaExceededError(
                    from_actor_id,
                    limit=self.daily_limit,
                    retry_after=seconds_until_reset(now),
                )

            # Unique constraint covers the race the pre-check above cannot
            interaction = self.interactions.add_interaction(
                Interaction(
                    id=uuid.uuid4(),
                    from_actor_id=from_actor_id,
                    to_actor_id=to_actor_id,
                    kind=interaction_kind,
                    created_at=now,
                )
            )

        logger.info(
            "interaction.recorded",
            extra={
                **context,
                "interaction_id": str(interaction.id),
                "kind": interaction_kind.value,
                "unlimited": ceiling is None,
            },
        )
        return interaction

    def get_profiles(
        self,
        actor_id: uuid.UUID,
        capabilities: ActiveCapabilities,
        limit: Optional[int] = None,
    ) -> List[Actor]:
        """
        Candidate profiles the actor has not yet responded to.

        Raises:
            QuotaExceededError: Actor has no interactions left today
        """
        limit = limit if limit is not None else get_profile_batch_size()
        if limit < 1:
            raise InvalidInputError("limit must be at least 1", field="limit")

        if not self.check_quota(actor_id, capabilities):
            raise QuotaExceededError(
                actor_id,
                limit=self.daily_limit,
                retry_after=seconds_until_reset(self.clock()),
            )

        with translate_store_errors("profiles.list", actor_id=str(actor_id)):
            return self.interactions.list_candidates(actor_id, limit)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _used_today(self, actor_id: uuid.UUID, now: datetime) -> int:
        with translate_store_errors("quota.read", actor_id=str(actor_id)):
            return self.interactions.get_daily_count(actor_id, usage_date(now))

    @staticmethod
    def _check_snapshot(actor_id: uuid.UUID, capabilities: ActiveCapabilities) -> None:
        if capabilities.actor_id != actor_id:
            raise ValueError("capabilities were resolved for a different actor")
