"""Data access repositories for grants and interactions."""

from matchledger.repositories.grant_repository import GrantRepository
from matchledger.repositories.interaction_repository import InteractionRepository

__all__ = ["GrantRepository", "InteractionRepository"]
