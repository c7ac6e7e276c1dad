"""FastAPI dependencies: identity and per-request services."""

from matchledger.api.dependencies.identity import get_current_actor_id
from matchledger.api.dependencies.services import (
    get_active_capabilities,
    get_capability_catalog,
    get_clock,
    get_interaction_ledger,
    get_subscription_activator,
)

__all__ = [
    "get_current_actor_id",
    "get_active_capabilities",
    "get_capability_catalog",
    "get_clock",
    "get_interaction_ledger",
    "get_subscription_activator",
]
