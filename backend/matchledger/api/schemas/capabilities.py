"""
Pydantic schemas for the capability catalog and subscriptions API.
"""

from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field


class CapabilityResponse(BaseModel):
    """Catalog capability."""

    id: str
    name: str
    description: Optional[str] = None


class CapabilityListResponse(BaseModel):
    capabilities: List[CapabilityResponse]


class SubscribeRequest(BaseModel):
    """Request to activate a capability for a subscription period."""

    period: str = Field(..., description="1_month, 3_months, 6_months or 12_months")
    value: Optional[int] = Field(0, description="Tier or quantity attached to the grant")


class GrantResponse(BaseModel):
    """Capability grant held by the actor."""

    id: str = Field(..., description="Grant identifier")
    capability_id: str = Field(..., description="Granted capability")
    capability_name: Optional[str] = Field(None, description="Granted capability name")
    value: int = Field(..., description="Tier or quantity attached to the grant")
    starts_at: datetime = Field(..., description="Start of validity (inclusive)")
    ends_at: Optional[datetime] = Field(None, description="End of validity (exclusive)")
    status: str = Field("active", description="active or revoked")


class ActiveCapabilitiesResponse(BaseModel):
    """Capabilities the actor currently holds."""

    actor_id: str
    resolved_at: datetime
    grants: List[GrantResponse]
