"""
Clinic repository port (interface).

This defines the contract for clinic persistence operations.
Implementations are in the infrastructure layer.
"""

import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from clinics.domain.clinic import Clinic


class ClinicRepository(ABC):
    """
    Abstract repository for Clinic entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, clinic: Clinic) -> Clinic:
        """
        Save a clinic entity.

        Args:
            clinic: Clinic entity to save

        Returns:
            Saved clinic entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, clinic_id: uuid.UUID) -> Optional[Clinic]:
        """
        Find a clinic by ID.

        Args:
            clinic_id: Clinic UUID

        Returns:
            Clinic entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Clinic]:
        """Find a clinic by slug."""
        pass

    @abstractmethod
    async def exists(self, clinic_id: uuid.UUID) -> bool:
        """Check if a clinic exists."""
        pass

    @abstractmethod
    async def list_all(self) -> List[Clinic]:
        """List all clinics."""
        pass
