"""
License domain events.

Domain events represent something that happened in the license domain.
"""

import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class LicenseProvisioned(DomainEvent):
    """Event raised when a clinic's license is provisioned."""

    def __init__(
        self,
        license_id: uuid.UUID,
        clinic_id: uuid.UUID,
        plan: str,
        expires_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseProvisioned event.

        Args:
            license_id: License UUID
            clinic_id: Clinic UUID
            plan: Plan tier name
            expires_at: Expiration datetime
            occurred_at: When the event occurred
        """
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id
        self.clinic_id = clinic_id
        self.plan = plan
        self.expires_at = expires_at


class LicenseKeyRegenerated(DomainEvent):
    """Event raised when a license's key is replaced."""

    def __init__(
        self,
        license_id: uuid.UUID,
        old_key: str,
        new_key: str,
        actor: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseKeyRegenerated event.

        Args:
            license_id: License UUID
            old_key: The retired key
            new_key: The key now in force
            actor: Who requested the regeneration
            occurred_at: When the event occurred
        """
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id
        self.old_key = old_key
        self.new_key = new_key
        self.actor = actor


class LicenseActivated(DomainEvent):
    """Event raised when a license is activated with its activation code."""

    def __init__(self, license_id: uuid.UUID, occurred_at: Optional[datetime] = None):
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id


class LicenseRenewed(DomainEvent):
    """Event raised when a license is renewed."""

    def __init__(
        self,
        license_id: uuid.UUID,
        new_expiration: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseRenewed event.

        Args:
            license_id: License UUID
            new_expiration: New expiration datetime
            occurred_at: When the event occurred
        """
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id
        self.new_expiration = new_expiration


class LicenseSuspended(DomainEvent):
    """Event raised when a license is suspended."""

    def __init__(self, license_id: uuid.UUID, occurred_at: Optional[datetime] = None):
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id


class LicenseResumed(DomainEvent):
    """Event raised when a license is resumed."""

    def __init__(self, license_id: uuid.UUID, occurred_at: Optional[datetime] = None):
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id


class LicenseExpired(DomainEvent):
    """Event raised when the expiry sweep marks a license expired."""

    def __init__(self, license_id: uuid.UUID, occurred_at: Optional[datetime] = None):
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id


class UsageLimitReached(DomainEvent):
    """Event raised when an increment is rejected by a usage limit."""

    def __init__(
        self,
        license_id: uuid.UUID,
        resource_type: str,
        current: int,
        limit: int,
        requested: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(**self._base_fields(license_id, occurred_at))
        self.license_id = license_id
        self.resource_type = resource_type
        self.current = current
        self.limit = limit
        self.requested = requested
