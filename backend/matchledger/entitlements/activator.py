"""
SubscriptionActivator for turning a purchase into a capability grant.

Handles:
- Activating a capability for a subscription period
- Revoking an actor's grant before it lapses

Payment is settled upstream; activation only validates and persists the
grant. Exclusivity (one valid grant per actor and capability) is enforced
by claiming the GrantSlot inside the same transaction as the grant insert,
so two concurrent activations cannot both succeed.
"""

import logging
import uuid
from typing import Union

from sqlalchemy.orm import Session

from matchledger.database.transaction import atomic
from matchledger.entitlements.errors import (
    AlreadySubscribedError,
    CapabilityNotFoundError,
    GrantNotFoundError,
)
from matchledger.entitlements.models import SubscriptionPeriod
from matchledger.ledger.clock import Clock, add_months, utcnow
from matchledger.ledger.errors import ActorNotFoundError
from matchledger.models.capability_grant import CapabilityGrant, GrantStatus
from matchledger.platform.errors import InvalidInputError
from matchledger.repositories.grant_repository import GrantRepository

logger = logging.getLogger(__name__)


class SubscriptionActivator:
    """Validates and persists capability grants."""

    def __init__(self, session: Session, clock: Clock = utcnow):
        """
        Initialize activator with database session.

        Args:
            session: SQLAlchemy session for database operations
            clock: Source of "now" (UTC)
        """
        self.session = session
        self.grants = GrantRepository(session)
        self.clock = clock

    def activate(
        self,
        actor_id: uuid.UUID,
        capability_id: uuid.UUID,
        period: Union[str, SubscriptionPeriod],
        value: int = 0,
    ) -> CapabilityGrant:
        """
        Activate a capability for actor starting now.

        Args:
            actor_id: Actor purchasing the capability
            capability_id: Catalog capability to activate
            period: One of 1_month, 3_months, 6_months, 12_months
            value: Tier or quantity attached to the grant

        Returns:
            Persisted CapabilityGrant with starts_at=now and ends_at=now+period

        Raises:
            InvalidInputError: Unknown period or negative value
            ActorNotFoundError: Actor does not exist
            CapabilityNotFoundError: Capability not in the catalog
            AlreadySubscribedError: A valid grant for the capability exists
            StoreUnavailableError: Store unreachable; nothing was written
        """
        subscription_period = SubscriptionPeriod.parse(period)
        if value is None:
            value = 0
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise InvalidInputError("value must be a non-negative integer", field="value")

        now = self.clock()
        ends_at = add_months(now, subscription_period.months)
        context = {"actor_id": str(actor_id), "capability_id": str(capability_id)}

        with atomic(self.session, "subscription.activate", **context):
            capability = self.grants.get_capability(capability_id)
            if capability is None:
                raise CapabilityNotFoundError(capability_id)
            if not self.grants.actor_exists(actor_id):
                raise ActorNotFoundError(actor_id)

            grant_id = uuid.uuid4()
            if not self.grants.claim_slot(actor_id, capability_id, grant_id, ends_at, now):
                logger.info("subscription.already_active", extra=context)
                raise AlreadySubscribedError(actor_id, capability_id)

            grant = self.grants.add_grant(
                CapabilityGrant(
                    id=grant_id,
                    actor_id=actor_id,
                    capability_id=capability_id,
                    value=value,
                    starts_at=now,
                    ends_at=ends_at,
                    status=GrantStatus.ACTIVE,
                )
            )

        logger.info(
            "subscription.activated",
            extra={
                **context,
                "grant_id": str(grant_id),
                "period": subscription_period.value,
                "ends_at": ends_at.isoformat(),
            },
        )
        return grant

    def revoke(self, actor_id: uuid.UUID, grant_id: uuid.UUID) -> CapabilityGrant:
        """
        Revoke one of the actor's grants and free its slot.

        Revoking an already revoked grant is a no-op.

        Raises:
            GrantNotFoundError: Grant missing or owned by another actor
        """
        now = self.clock()
        with atomic(self.session, "subscription.revoke", actor_id=str(actor_id), grant_id=str(grant_id)):
            grant = self.grants.get_grant(grant_id, actor_id)
            if grant is None:
                raise GrantNotFoundError(grant_id)
            if grant.status == GrantStatus.REVOKED:
                return grant
            grant.revoke()
            self.grants.release_slot(actor_id, grant.capability_id, grant.id, now)

        logger.info(
            "subscription.revoked",
            extra={"actor_id": str(actor_id), "grant_id": str(grant_id)},
        )
        return grant
