"""
Capability catalog and subscription routes.

Payment is settled before these routes are called; activation only
validates the request and persists the grant.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status

from matchledger.api.dependencies import (
    get_active_capabilities,
    get_capability_catalog,
    get_current_actor_id,
    get_subscription_activator,
)
from matchledger.api.schemas.capabilities import (
    ActiveCapabilitiesResponse,
    CapabilityListResponse,
    CapabilityResponse,
    GrantResponse,
    SubscribeRequest,
)
from matchledger.entitlements.activator import SubscriptionActivator
from matchledger.entitlements.catalog import CapabilityCatalog
from matchledger.entitlements.models import ActiveCapabilities
from matchledger.models.capability_grant import CapabilityGrant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/capabilities", tags=["capabilities"])


def _grant_response(grant: CapabilityGrant) -> GrantResponse:
    return GrantResponse(
        id=str(grant.id),
        capability_id=str(grant.capability_id),
        capability_name=grant.capability.name if grant.capability else None,
        value=grant.value,
        starts_at=grant.starts_at,
        ends_at=grant.ends_at,
        status=grant.status.value,
    )


@router.get("", response_model=CapabilityListResponse)
def list_capabilities(
    catalog: CapabilityCatalog = Depends(get_capability_catalog),
) -> CapabilityListResponse:
    """Purchasable capabilities, ordered by name."""
    return CapabilityListResponse(
        capabilities=[
            CapabilityResponse(id=str(entry.id), name=entry.name, description=entry.description)
            for entry in catalog.list_capabilities()
        ]
    )


@router.get("/me", response_model=ActiveCapabilitiesResponse)
def get_my_capabilities(
    capabilities: ActiveCapabilities = Depends(get_active_capabilities),
) -> ActiveCapabilitiesResponse:
    """Capabilities the caller holds right now."""
    return ActiveCapabilitiesResponse(
        actor_id=str(capabilities.actor_id),
        resolved_at=capabilities.resolved_at,
        grants=[
            GrantResponse(
                id=str(snapshot.grant_id),
                capability_id=str(snapshot.capability_id),
                capability_name=snapshot.capability_name,
                value=snapshot.value,
                starts_at=snapshot.starts_at,
                ends_at=snapshot.ends_at,
            )
            for snapshot in sorted(capabilities, key=lambda s: s.capability_name)
        ],
    )


@router.post(
    "/{capability_id}/subscriptions",
    response_model=GrantResponse,
    status_code=status.HTTP_201_CREATED,
)
def subscribe(
    capability_id: uuid.UUID,
    body: SubscribeRequest,
    actor_id: uuid.UUID = Depends(get_current_actor_id),
    activator: SubscriptionActivator = Depends(get_subscription_activator),
) -> GrantResponse:
    """
    Activate a capability for the caller.

    409 if the caller already holds a valid grant for it.
    """
    grant = activator.activate(actor_id, capability_id, body.period, body.value)
    return _grant_response(grant)


@router.delete("/grants/{grant_id}", response_model=GrantResponse)
def revoke_grant(
    grant_id: uuid.UUID,
    actor_id: uuid.UUID = Depends(get_current_actor_id),
    activator: SubscriptionActivator = Depends(get_subscription_activator),
) -> GrantResponse:
    grant = activator.revoke(actor_id, grant_id)
    return _grant_response(grant)
