"""
Principal domain entity.

An authenticated user identity. Principals are never hard-deleted;
deactivation flips ``is_active``.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import Email


@dataclass(frozen=True)
class Principal:
    """Principal domain entity."""

    id: uuid.UUID
    email: Email
    password_hash: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        if not self.password_hash:
            raise ValueError("Password hash is required")

    @classmethod
    def create(
        cls,
        email: str,
        password_hash: str,
        principal_id: Optional[uuid.UUID] = None,
    ) -> "Principal":
        now = datetime.now(timezone.utc)
        return cls(
            id=principal_id or uuid.uuid4(),
            email=Email(email),
            password_hash=password_hash,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_authenticated(self) -> bool:
        """Lets DRF treat a resolved principal as an authenticated request user."""
        return True

    def deactivate(self) -> "Principal":
        return Principal(
            id=self.id,
            email=self.email,
            password_hash=self.password_hash,
            is_active=False,
            created_at=self.created_at,
            updated_at=datetime.now(timezone.utc),
        )

    def reactivate(self) -> "Principal":
        return Principal(
            id=self.id,
            email=self.email,
            password_hash=self.password_hash,
            is_active=True,
            created_at=self.created_at,
            updated_at=datetime.now(timezone.utc),
        )
