"""
Membership repository port (interface).
"""

import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from access.domain.membership import Membership


class MembershipRepository(ABC):
    """Abstract repository for clinic memberships."""

    @abstractmethod
    async def save(self, membership: Membership) -> Membership:
        """
        Save a membership.

        A principal holds at most one membership per clinic; saving for an
        existing pair replaces its role.
        """
        pass

    @abstractmethod
    async def find(self, principal_id: uuid.UUID, clinic_id: uuid.UUID) -> Optional[Membership]:
        """Find the membership for a principal/clinic pair."""
        pass

    @abstractmethod
    async def find_by_principal(self, principal_id: uuid.UUID) -> List[Membership]:
        """List memberships of a principal, oldest first."""
        pass

    @abstractmethod
    async def delete(self, principal_id: uuid.UUID, clinic_id: uuid.UUID) -> bool:
        """
        Delete the membership for a principal/clinic pair.

        Returns:
            True if a membership was deleted
        """
        pass

    @abstractmethod
    async def count_by_role(self, role_id: uuid.UUID) -> int:
        """Count memberships referencing a role."""
        pass
