"""
LicenseKey domain entity.

An entry in the registry of issued keys. Every key handed to a license is
recorded here and never removed; regeneration retires the old entry. The
uniqueness check consults the registry, so a retired key is never issued
again.
"""

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import KeyStrategy


def hash_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()


@dataclass(frozen=True)
class LicenseKey:
    """LicenseKey domain entity."""

    id: uuid.UUID
    key: str
    key_hash: str
    strategy: KeyStrategy
    license_id: Optional[uuid.UUID]
    issued_at: datetime
    retired_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate license key entity."""
        if not self.key or len(self.key.strip()) == 0:
            raise ValueError("License key cannot be empty")
        if len(self.key) > 120:
            raise ValueError("License key too long")
        if not self.key_hash or len(self.key_hash) != 64:
            raise ValueError("Invalid key hash")

    @classmethod
    def issue(
        cls,
        key: str,
        strategy: KeyStrategy,
        license_id: Optional[uuid.UUID] = None,
        license_key_id: Optional[uuid.UUID] = None,
    ) -> "LicenseKey":
        """
        Record a freshly generated key.

        Args:
            key: The generated key string
            strategy: Strategy the key was generated with
            license_id: License the key is issued to, if any
            license_key_id: Optional UUID (generated if not provided)
        """
        return cls(
            id=license_key_id or uuid.uuid4(),
            key=key,
            key_hash=hash_key(key),
            strategy=strategy,
            license_id=license_id,
            issued_at=datetime.now(timezone.utc),
        )

    @property
    def is_retired(self) -> bool:
        return self.retired_at is not None

    def retire(self) -> "LicenseKey":
        return LicenseKey(
            id=self.id,
            key=self.key,
            key_hash=self.key_hash,
            strategy=self.strategy,
            license_id=self.license_id,
            issued_at=self.issued_at,
            retired_at=datetime.now(timezone.utc),
        )

    def verify_key(self, raw_key: str) -> bool:
        """
        Verify a raw license key against the stored hash.

        Returns:
            True if key matches, False otherwise
        """
        return secrets.compare_digest(self.key_hash, hash_key(raw_key))
