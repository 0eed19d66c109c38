"""
Role repository port (interface).
"""

import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from access.domain.role import Role


class RoleRepository(ABC):
    """
    Abstract repository for Role entities.

    Roles are loaded together with their permissions.
    """

    @abstractmethod
    async def save(self, role: Role) -> Role:
        """
        Save a role entity, replacing its permission set.

        Raises:
            RoleNameTakenError: If another role already uses the name
        """
        pass

    @abstractmethod
    async def find_by_id(self, role_id: uuid.UUID) -> Optional[Role]:
        """Find a role by ID."""
        pass

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[Role]:
        """Find a role by name."""
        pass

    @abstractmethod
    async def name_taken(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        """Check whether a role other than ``exclude_id`` uses ``name``."""
        pass

    @abstractmethod
    async def list_all(self) -> List[Role]:
        """List all roles."""
        pass

    @abstractmethod
    async def delete(self, role_id: uuid.UUID) -> bool:
        """
        Delete a role.

        Returns:
            True if a row was deleted

        Raises:
            RoleInUseError: If a membership still references the role
        """
        pass
