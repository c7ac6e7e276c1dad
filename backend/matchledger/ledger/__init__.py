"""
Interaction ledger: quota-gated, append-only pairwise interactions.

InteractionLedger lives in matchledger.ledger.interaction_ledger; it is not
re-exported here because the repositories import this package's errors.
"""

from matchledger.ledger.clock import add_months, start_of_day, usage_date, utcnow
from matchledger.ledger.errors import (
    ActorNotFoundError,
    DuplicateInteractionError,
    QuotaExceededError,
)

__all__ = [
    "add_months",
    "start_of_day",
    "usage_date",
    "utcnow",
    "ActorNotFoundError",
    "DuplicateInteractionError",
    "QuotaExceededError",
]
