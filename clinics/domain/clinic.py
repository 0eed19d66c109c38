"""
Clinic domain entity.

A clinic is the tenant boundary: every clinic-scoped resource carries a
clinic id and cross-clinic access requires a membership.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import ClinicSlug


@dataclass(frozen=True)
class Clinic:
    """Clinic domain entity."""

    id: uuid.UUID
    name: str
    slug: ClinicSlug
    is_active: bool
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate clinic entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Clinic name cannot be empty")
        if len(self.name) > 255:
            raise ValueError("Clinic name too long")

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        clinic_id: Optional[uuid.UUID] = None,
    ) -> "Clinic":
        """
        Create a new Clinic entity.

        Args:
            name: Clinic display name
            slug: URL-safe identifier
            clinic_id: Optional UUID (generated if not provided)

        Returns:
            Clinic entity instance
        """
        now = datetime.now(timezone.utc)
        return cls(
            id=clinic_id or uuid.uuid4(),
            name=name.strip(),
            slug=ClinicSlug(slug),
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def rename(self, new_name: str) -> "Clinic":
        """Return a copy with an updated name."""
        return Clinic(
            id=self.id,
            name=new_name.strip(),
            slug=self.slug,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=datetime.now(timezone.utc),
        )
