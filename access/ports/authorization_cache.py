"""
Authorization cache port.

Entries are addressed through keys obtained from ``key_for`` *before*
grants are loaded from storage, so a snapshot loaded concurrently with an
invalidation is stored under a key nobody reads again.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional

from access.domain.grants import PrincipalGrants


class AuthorizationCache(ABC):
    """Abstract cache of resolved principal grants."""

    @abstractmethod
    async def key_for(self, principal_id: uuid.UUID) -> str:
        """Current cache key for a principal's grants."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[PrincipalGrants]:
        """Cached grants or None."""
        pass

    @abstractmethod
    async def set(self, key: str, grants: PrincipalGrants) -> None:
        """Store grants under a key returned by ``key_for``."""
        pass

    @abstractmethod
    async def invalidate_principal(self, principal_id: uuid.UUID) -> None:
        """
        Make every cached entry for one principal unreachable.

        Raises:
            CacheUnavailableError: If the entries may still be served
        """

    @abstractmethod
    async def invalidate_all(self) -> None:
        """
        Make every cached entry unreachable (role permission changes).

        Raises:
            CacheUnavailableError: If the entries may still be served
        """
