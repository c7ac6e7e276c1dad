"""
Profile discovery and interaction routes.

The acting actor always comes from the bearer token; it is never accepted
from the path or body.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from matchledger.api.dependencies import (
    get_active_capabilities,
    get_current_actor_id,
    get_interaction_ledger,
)
from matchledger.api.schemas.profiles import (
    InteractionResponse,
    ProfileListResponse,
    ProfileResponse,
    RecordInteractionRequest,
    UsageResponse,
)
from matchledger.entitlements.models import ActiveCapabilities
from matchledger.ledger.interaction_ledger import InteractionLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["profiles"])


@router.get("/profiles", response_model=ProfileListResponse)
def list_profiles(
    limit: Optional[int] = Query(None, ge=1, le=50),
    actor_id: uuid.UUID = Depends(get_current_actor_id),
    capabilities: ActiveCapabilities = Depends(get_active_capabilities),
    ledger: InteractionLedger = Depends(get_interaction_ledger),
) -> ProfileListResponse:
    """
    Candidate profiles the caller has not responded to.

    Returns 429 once the caller's daily interaction quota is used up.
    """
    actors = ledger.get_profiles(actor_id, capabilities, limit=limit)
    return ProfileListResponse(
        profiles=[
            ProfileResponse(
                id=str(actor.id),
                display_name=actor.display_name,
                bio=actor.bio,
                birth_date=actor.birth_date,
                gender=actor.gender,
            )
            for actor in actors
        ]
    )


@router.post(
    "/profiles/{target_actor_id}/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_interaction(
    target_actor_id: uuid.UUID,
    body: RecordInteractionRequest,
    actor_id: uuid.UUID = Depends(get_current_actor_id),
    capabilities: ActiveCapabilities = Depends(get_active_capabilities),
    ledger: InteractionLedger = Depends(get_interaction_ledger),
) -> InteractionResponse:
    interaction = ledger.record(actor_id, target_actor_id, body.kind, capabilities)
    return InteractionResponse(
        id=str(interaction.id),
        from_actor_id=str(interaction.from_actor_id),
        to_actor_id=str(interaction.to_actor_id),
        kind=interaction.kind.value,
        created_at=interaction.created_at,
    )


@router.get("/interactions/usage", response_model=UsageResponse)
def get_usage(
    actor_id: uuid.UUID = Depends(get_current_actor_id),
    capabilities: ActiveCapabilities = Depends(get_active_capabilities),
    ledger: InteractionLedger = Depends(get_interaction_ledger),
) -> UsageResponse:
    usage = ledger.quota_status(actor_id, capabilities)
    return UsageResponse(
        used=usage.used,
        limit=usage.limit,
        remaining=usage.remaining,
        unlimited=usage.unlimited,
        allowed=usage.allowed,
        resets_at=usage.resets_at,
    )
