"""
License repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.domain.value_objects import ResourceType
from licenses.domain.license import License
from licenses.domain.license_key import LicenseKey


@dataclass
class LicenseSummary:
    """Aggregate license counts."""

    total: int = 0
    by_plan: Dict[str, int] = field(default_factory=dict)
    by_status: Dict[str, int] = field(default_factory=dict)
    expiring_soon: int = 0


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    Usage counters are only changed through the ``try_*`` operations, each
    of which is a single atomic conditional update in storage.
    """

    @abstractmethod
    async def save(self, license: License) -> License:
        """
        Save a license entity. Usage counters are written only when the
        license is first stored.

        Raises:
            LicenseAlreadyProvisionedError: If the clinic already has another license
            DuplicateLicenseKeyError: If the key is already used
        """
        pass

    @abstractmethod
    async def provision(self, license: License, issued_key: LicenseKey) -> License:
        """
        Create a license and record its key in the key registry, atomically.

        Raises:
            LicenseAlreadyProvisionedError: If the clinic already has a license
            DuplicateLicenseKeyError: If the key was issued concurrently
        """
        pass

    @abstractmethod
    async def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        pass

    @abstractmethod
    async def find_by_clinic(self, clinic_id: uuid.UUID) -> Optional[License]:
        pass

    @abstractmethod
    async def find_by_key(self, license_key: str) -> Optional[License]:
        pass

    @abstractmethod
    async def find_expired_running(self, now: datetime) -> List[License]:
        """Licenses still in ``active`` or ``trial`` status whose expiry has passed."""
        pass

    @abstractmethod
    async def try_increment_usage(
        self, license_id: uuid.UUID, resource_type: ResourceType, amount: int
    ) -> bool:
        """
        Add ``amount`` to the counter only if the result stays within the limit.

        Returns:
            True if the counter was changed
        """
        pass

    @abstractmethod
    async def try_decrement_usage(
        self, license_id: uuid.UUID, resource_type: ResourceType, amount: int
    ) -> bool:
        """
        Subtract ``amount`` from the counter only if the result stays >= 0.

        Returns:
            True if the counter was changed
        """
        pass

    @abstractmethod
    async def reset_monthly_usage(self, period_start: datetime, now: datetime) -> int:
        """
        Zero the monthly counters of every license not yet reset since
        ``period_start``.

        Returns:
            Number of licenses reset
        """
        pass

    @abstractmethod
    async def replace_key(
        self, license_id: uuid.UUID, new_key: LicenseKey, actor: str
    ) -> str:
        """
        Atomically retire the current key, record ``new_key`` in the key
        registry, point the license at it and append an audit entry.

        Returns:
            The replaced key

        Raises:
            LicenseNotFoundError: If the license does not exist
            DuplicateLicenseKeyError: If the new key was issued concurrently
        """
        pass

    @abstractmethod
    async def add_audit_entry(
        self,
        license_id: uuid.UUID,
        action: str,
        changes: Dict[str, Any],
        actor: str = "system",
    ) -> None:
        pass

    @abstractmethod
    async def summary(self, expiring_within_days: int = 30) -> LicenseSummary:
        pass
