"""
LicenseKey repository port (interface).

The registry of every key ever issued, retired keys included.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Optional

from licenses.domain.license_key import LicenseKey


class LicenseKeyRepository(ABC):
    """
    Abstract repository for LicenseKey entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, license_key: LicenseKey) -> LicenseKey:
        """
        Save a license key entity.

        Raises:
            DuplicateLicenseKeyError: If another entry holds the same key
        """
        pass

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[LicenseKey]:
        """
        Find a license key by key string.

        Args:
            key: License key string

        Returns:
            LicenseKey entity or None if not found
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check if a key was ever issued.

        Args:
            key: License key string

        Returns:
            True if the key is in the registry, retired or not
        """
        pass

    @abstractmethod
    async def find_current_for_license(self, license_id: uuid.UUID) -> Optional[LicenseKey]:
        pass

    @abstractmethod
    async def count_by_strategy(self) -> Dict[str, int]:
        pass

    @abstractmethod
    async def count_retired(self) -> int:
        pass
