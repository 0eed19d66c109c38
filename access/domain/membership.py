"""
Clinic membership.

Binds one principal to one clinic with exactly one role.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from access.domain.role import Role


@dataclass(frozen=True)
class Membership:
    """Membership domain entity."""

    id: uuid.UUID
    principal_id: uuid.UUID
    clinic_id: uuid.UUID
    role: Role
    created_at: datetime

    @classmethod
    def create(
        cls,
        principal_id: uuid.UUID,
        clinic_id: uuid.UUID,
        role: Role,
        membership_id: Optional[uuid.UUID] = None,
    ) -> "Membership":
        return cls(
            id=membership_id or uuid.uuid4(),
            principal_id=principal_id,
            clinic_id=clinic_id,
            role=role,
            created_at=datetime.now(timezone.utc),
        )

    def with_role(self, role: Role) -> "Membership":
        return Membership(
            id=self.id,
            principal_id=self.principal_id,
            clinic_id=self.clinic_id,
            role=role,
            created_at=self.created_at,
        )
