"""
Capability entitlements: catalog, grant resolution and subscription activation.

This module provides:
- EntitlementResolver: active capabilities for an actor at an instant
- ActiveCapabilities: per-request snapshot passed to downstream checks
- SubscriptionActivator: create and revoke time-bounded grants
- CapabilityCatalog: catalog reads with optional Redis cache
"""

from matchledger.entitlements.models import (
    UNLIMITED_INTERACTIONS,
    ActiveCapabilities,
    CatalogEntry,
    GrantSnapshot,
    SubscriptionPeriod,
)
from matchledger.entitlements.errors import (
    AlreadySubscribedError,
    CapabilityNotFoundError,
    GrantNotFoundError,
)
from matchledger.entitlements.resolver import EntitlementResolver
from matchledger.entitlements.activator import SubscriptionActivator
from matchledger.entitlements.catalog import CapabilityCatalog

__all__ = [
    # Models
    "UNLIMITED_INTERACTIONS",
    "ActiveCapabilities",
    "CatalogEntry",
    "GrantSnapshot",
    "SubscriptionPeriod",
    # Errors
    "AlreadySubscribedError",
    "CapabilityNotFoundError",
    "GrantNotFoundError",
    # Services
    "EntitlementResolver",
    "SubscriptionActivator",
    "CapabilityCatalog",
]
