"""
Capability catalog reads, through the optional Redis cache.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from matchledger.database.transaction import translate_store_errors
from matchledger.entitlements.cache import CatalogCache
from matchledger.entitlements.models import CatalogEntry
from matchledger.repositories.grant_repository import GrantRepository

logger = logging.getLogger(__name__)


class CapabilityCatalog:
    """Read-only view of purchasable capabilities."""

    def __init__(self, session: Session, cache: Optional[CatalogCache] = None):
        self.grants = GrantRepository(session)
        self.cache = cache

    def list_capabilities(self) -> List[CatalogEntry]:
        """All capabilities ordered by name."""
        if self.cache is not None:
            cached = self.cache.get()
            if cached is not None:
                return cached

        with translate_store_errors("catalog.list"):
            entries = [
                CatalogEntry(id=row.id, name=row.name, description=row.description)
                for row in self.grants.list_capabilities()
            ]

        if self.cache is not None:
            self.cache.set(entries)
        return entries
