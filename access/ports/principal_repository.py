"""
Principal repository port (interface).
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional

from access.domain.principal import Principal


class PrincipalRepository(ABC):
    """Abstract repository for Principal entities."""

    @abstractmethod
    async def save(self, principal: Principal) -> Principal:
        """Save a principal entity."""
        pass

    @abstractmethod
    async def find_by_id(self, principal_id: uuid.UUID) -> Optional[Principal]:
        """
        Find a principal by ID.

        Args:
            principal_id: Principal UUID

        Returns:
            Principal entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Principal]:
        """Find a principal by (normalized) email."""
        pass
