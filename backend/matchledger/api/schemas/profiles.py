"""
Pydantic schemas for the profiles and interactions API.
"""

from typing import Optional, List
from datetime import date, datetime

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    """Candidate profile shown to the requesting actor."""

    id: str = Field(..., description="Actor identifier")
    display_name: str = Field(..., description="Name shown to other actors")
    bio: Optional[str] = Field(None, description="Free-form profile text")
    birth_date: Optional[date] = Field(None, description="Date of birth")
    gender: Optional[str] = Field(None, description="Self-reported gender")


class ProfileListResponse(BaseModel):
    """Candidates the actor has not responded to yet."""

    profiles: List[ProfileResponse] = Field(..., description="Candidate profiles")


class RecordInteractionRequest(BaseModel):
    """Request to respond to a profile."""

    kind: str = Field(..., description="accept or reject")


class InteractionResponse(BaseModel):
    """A recorded interaction."""

    id: str = Field(..., description="Interaction identifier")
    from_actor_id: str = Field(..., description="Actor who responded")
    to_actor_id: str = Field(..., description="Actor who was responded to")
    kind: str = Field(..., description="accept or reject")
    created_at: datetime = Field(..., description="When the interaction was recorded")


class UsageResponse(BaseModel):
    """Interaction quota usage for the current UTC day."""

    used: int = Field(..., description="Interactions recorded today")
    limit: Optional[int] = Field(None, description="Daily limit; null when unlimited")
    remaining: Optional[int] = Field(None, description="Interactions left today; null when unlimited")
    unlimited: bool = Field(..., description="Whether the actor holds unlimited interactions")
    allowed: bool = Field(..., description="Whether another interaction is allowed today")
    resets_at: datetime = Field(..., description="Next UTC midnight")
