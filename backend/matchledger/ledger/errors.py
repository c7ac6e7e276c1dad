"""
Interaction ledger error hierarchy.

Provides:
- DuplicateInteractionError: ordered pair already recorded (409, no state changed)
- QuotaExceededError: daily interaction quota exhausted (429, retry after reset)
- ActorNotFoundError: either side of the interaction does not exist (404)

Conflict and quota outcomes are expected business results; callers
distinguish them by type or error code, never by message.
"""

import uuid
from typing import Optional

from matchledger.platform.errors import ConflictError, NotFoundError, RateLimitError


class DuplicateInteractionError(ConflictError):
    """Raised when from_actor has already responded to to_actor."""

    def __init__(self, from_actor_id: uuid.UUID, to_actor_id: uuid.UUID):
        super().__init__(
            "Interaction already recorded for this profile",
            details={"to_actor_id": str(to_actor_id)},
        )
        self.code = "DUPLICATE_INTERACTION"
        self.from_actor_id = from_actor_id
        self.to_actor_id = to_actor_id


class QuotaExceededError(RateLimitError):
    """Raised when the actor has used the whole daily interaction quota."""

    def __init__(self, actor_id: uuid.UUID, limit: int, retry_after: Optional[int] = None):
        super().__init__(
            message="Daily interaction limit exceeded",
            retry_after=retry_after,
        )
        self.code = "DAILY_QUOTA_EXCEEDED"
        self.details["limit"] = limit
        self.actor_id = actor_id
        self.limit = limit


class ActorNotFoundError(NotFoundError):
    """Raised when an actor referenced by the request does not exist."""

    def __init__(self, actor_id: uuid.UUID):
        super().__init__("Actor", str(actor_id))
        self.code = "ACTOR_NOT_FOUND"
        self.actor_id = actor_id
