from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from matchledger.platform.errors import InvalidInputError

UNLIMITED_INTERACTIONS = "unlimited_interactions"
# Catalog name used before the rename; still honored for existing grants
LEGACY_UNLIMITED_INTERACTIONS = "daily_responses"


class SubscriptionPeriod(str, enum.Enum):
    """Purchasable subscription lengths."""

    ONE_MONTH = "1_month"
    THREE_MONTHS = "3_months"
    SIX_MONTHS = "6_months"
    TWELVE_MONTHS = "12_months"

    @property
    def months(self) -> int:
        return _PERIOD_MONTHS[self]

    @classmethod
    def parse(cls, value) -> "SubscriptionPeriod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise InvalidInputError(
                f"Invalid period {value!r}; expected one of: {allowed}",
                field="period",
            )


_PERIOD_MONTHS = {
    SubscriptionPeriod.ONE_MONTH: 1,
    SubscriptionPeriod.THREE_MONTHS: 3,
    SubscriptionPeriod.SIX_MONTHS: 6,
    SubscriptionPeriod.TWELVE_MONTHS: 12,
}


@dataclass(frozen=True)
class GrantSnapshot:
    """Detached copy of an active grant, safe to use after the session closes."""

    grant_id: uuid.UUID
    capability_id: uuid.UUID
    capability_name: str
    value: int
    starts_at: datetime
    ends_at: Optional[datetime]

    @classmethod
    def from_grant(cls, grant) -> "GrantSnapshot":
        return cls(
            grant_id=grant.id,
            capability_id=grant.capability_id,
            capability_name=grant.capability.name,
            value=grant.value,
            starts_at=grant.starts_at,
            ends_at=grant.ends_at,
        )


@dataclass(frozen=True)
class ActiveCapabilities:
    """
    Capabilities an actor holds at resolved_at.

    A snapshot: resolved once per request and passed explicitly to every
    check, so a grant expiring mid-request is seen consistently.
    """

    actor_id: uuid.UUID
    resolved_at: datetime
    grants: Mapping[str, GrantSnapshot] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "grants", MappingProxyType(dict(self.grants)))

    @classmethod
    def empty(cls, actor_id: uuid.UUID, resolved_at: datetime) -> "ActiveCapabilities":
        return cls(actor_id=actor_id, resolved_at=resolved_at)

    def has(self, capability_name: str) -> bool:
        normalized = str(capability_name).strip()
        return bool(normalized) and normalized in self.grants

    def get(self, capability_name: str) -> Optional[GrantSnapshot]:
        return self.grants.get(capability_name)

    @property
    def names(self) -> frozenset:
        return frozenset(self.grants)

    @property
    def unlimited_interactions(self) -> bool:
        return self.has(UNLIMITED_INTERACTIONS) or self.has(LEGACY_UNLIMITED_INTERACTIONS)

    def __contains__(self, capability_name: object) -> bool:
        return isinstance(capability_name, str) and self.has(capability_name)

    def __iter__(self) -> Iterator[GrantSnapshot]:
        return iter(self.grants.values())

    def __len__(self) -> int:
        return len(self.grants)


@dataclass(frozen=True)
class CatalogEntry:
    """Capability catalog row as served to callers (and cached)."""

    id: uuid.UUID
    name: str
    description: Optional[str]

    def to_dict(self) -> dict:
        return {"id": str(self.id), "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Mapping) -> "CatalogEntry":
        return cls(
            id=uuid.UUID(str(data["id"])),
            name=data["name"],
            description=data.get("description"),
        )
