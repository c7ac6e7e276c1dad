"""
Database models for actors, capability grants, and interactions.
"""

from matchledger.models.base import GUID, UTCDateTime, TimestampMixin, generate_uuid
from matchledger.models.actor import Actor
from matchledger.models.capability import Capability
from matchledger.models.capability_grant import CapabilityGrant, GrantSlot, GrantStatus
from matchledger.models.interaction import DailyUsage, Interaction, InteractionKind

__all__ = [
    "GUID",
    "UTCDateTime",
    "TimestampMixin",
    "generate_uuid",
    "Actor",
    # Entitlements
    "Capability",
    "CapabilityGrant",
    "GrantSlot",
    "GrantStatus",
    # Ledger
    "DailyUsage",
    "Interaction",
    "InteractionKind",
]
