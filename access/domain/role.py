"""
Role domain entity.

A role is a named bundle of permissions. System roles are seeded and
immutable; custom roles may be edited and deleted while unassigned.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import FrozenSet, Iterable, Optional

from access.domain.permission import Permission
from core.domain.exceptions import SystemRoleImmutableError


@dataclass(frozen=True)
class Role:
    """Role domain entity."""

    id: uuid.UUID
    name: str
    description: str
    is_system_role: bool
    permissions: FrozenSet[Permission]
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate role entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Role name cannot be empty")
        if len(self.name) > 100:
            raise ValueError("Role name too long")

    @classmethod
    def create(
        cls,
        name: str,
        description: str = "",
        permissions: Iterable[Permission] = (),
        is_system_role: bool = False,
        role_id: Optional[uuid.UUID] = None,
    ) -> "Role":
        """
        Create a new Role entity.

        Args:
            name: Unique role name
            description: Free text description
            permissions: Permissions granted by the role
            is_system_role: Only the seeding process creates system roles
            role_id: Optional UUID (generated if not provided)
        """
        now = datetime.now(timezone.utc)
        return cls(
            id=role_id or uuid.uuid4(),
            name=name.strip(),
            description=description,
            is_system_role=is_system_role,
            permissions=frozenset(permissions),
            created_at=now,
            updated_at=now,
        )

    @property
    def permission_names(self) -> FrozenSet[str]:
        return frozenset(p.name for p in self.permissions)

    @property
    def grant_names(self) -> FrozenSet[str]:
        """Every string that matches a permission of this role."""
        names = set()
        for permission in self.permissions:
            names.add(permission.name)
            names.add(permission.qualified_name)
        return frozenset(names)

    def has_permission(self, requested: str) -> bool:
        return any(p.matches(requested) for p in self.permissions)

    def _ensure_mutable(self) -> None:
        if self.is_system_role:
            raise SystemRoleImmutableError(f"System role '{self.name}' cannot be modified")

    def update(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        permissions: Optional[Iterable[Permission]] = None,
    ) -> "Role":
        """
        Create a new Role instance with the given attributes replaced.

        Raises:
            SystemRoleImmutableError: If this is a system role
        """
        self._ensure_mutable()
        return Role(
            id=self.id,
            name=name.strip() if name is not None else self.name,
            description=description if description is not None else self.description,
            is_system_role=False,
            permissions=frozenset(permissions) if permissions is not None else self.permissions,
            created_at=self.created_at,
            updated_at=datetime.now(timezone.utc),
        )

    def ensure_deletable(self) -> None:
        """
        Raises:
            SystemRoleImmutableError: If this is a system role
        """
        if self.is_system_role:
            raise SystemRoleImmutableError(f"System role '{self.name}' cannot be deleted")
