"""
Permission repository port (interface).
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from access.domain.permission import Permission


class PermissionRepository(ABC):
    """Abstract repository for Permission entities."""

    @abstractmethod
    async def save(self, permission: Permission) -> Permission:
        """Save a permission entity."""
        pass

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[Permission]:
        """Find a permission by its unique name."""
        pass

    @abstractmethod
    async def find_by_names(self, names: Iterable[str]) -> List[Permission]:
        """
        Find permissions by name.

        Unknown names are skipped; callers compare lengths to detect them.
        """
        pass

    @abstractmethod
    async def list_names(self) -> List[str]:
        """List every stored permission name."""
        pass
