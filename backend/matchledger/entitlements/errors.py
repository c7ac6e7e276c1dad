"""
Entitlement error hierarchy.

Provides:
- CapabilityNotFoundError: capability id not in the catalog
- GrantNotFoundError: grant does not exist or belongs to another actor
- AlreadySubscribedError: a currently valid grant already holds the slot
"""

import uuid

from matchledger.platform.errors import ConflictError, NotFoundError


class CapabilityNotFoundError(NotFoundError):
    """Raised when the catalog has no capability with the given id."""

    def __init__(self, capability_id: uuid.UUID):
        super().__init__("Capability", str(capability_id))
        self.code = "CAPABILITY_NOT_FOUND"
        self.capability_id = capability_id


class GrantNotFoundError(NotFoundError):
    """Raised when a grant is missing or not owned by the actor."""

    def __init__(self, grant_id: uuid.UUID):
        super().__init__("Grant", str(grant_id))
        self.code = "GRANT_NOT_FOUND"
        self.grant_id = grant_id


class AlreadySubscribedError(ConflictError):
    """Raised when the actor already holds a valid grant for the capability."""

    def __init__(self, actor_id: uuid.UUID, capability_id: uuid.UUID):
        super().__init__(
            "Already subscribed to this capability",
            details={"capability_id": str(capability_id)},
        )
        self.code = "ALREADY_SUBSCRIBED"
        self.actor_id = actor_id
        self.capability_id = capability_id
