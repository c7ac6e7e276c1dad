"""
Per-request service wiring.

The caller's capabilities are resolved once per request by
get_active_capabilities and handed to every check made while serving it.
"""

import uuid
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from matchledger.api.dependencies.identity import get_current_actor_id
from matchledger.database.session import get_db_session
from matchledger.entitlements.activator import SubscriptionActivator
from matchledger.entitlements.cache import CatalogCache, get_catalog_cache
from matchledger.entitlements.catalog import CapabilityCatalog
from matchledger.entitlements.models import ActiveCapabilities
from matchledger.entitlements.resolver import EntitlementResolver
from matchledger.ledger.clock import Clock, utcnow
from matchledger.ledger.interaction_ledger import InteractionLedger


def get_clock() -> Clock:
    return utcnow


def get_active_capabilities(
    actor_id: uuid.UUID = Depends(get_current_actor_id),
    db: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> ActiveCapabilities:
    return EntitlementResolver(db, clock=clock).resolve(actor_id)


def get_interaction_ledger(
    db: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> InteractionLedger:
    return InteractionLedger(db, clock=clock)


def get_subscription_activator(
    db: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> SubscriptionActivator:
    return SubscriptionActivator(db, clock=clock)


def get_capability_catalog(
    db: Session = Depends(get_db_session),
    cache: Optional[CatalogCache] = Depends(get_catalog_cache),
) -> CapabilityCatalog:
    return CapabilityCatalog(db, cache=cache)
