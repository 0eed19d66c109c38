"""
Access domain events.

Published after role and membership changes have been committed and the
authorization cache has been invalidated.
"""

import uuid
from typing import Iterable, Optional

from core.domain.events import DomainEvent


class RoleCreated(DomainEvent):
    """Event raised when a custom role is created."""

    def __init__(self, role_id: uuid.UUID, name: str, permissions: Iterable[str]):
        super().__init__(**self._base_fields(role_id))
        self.role_id = role_id
        self.name = name
        self.permissions = frozenset(permissions)


class RoleUpdated(DomainEvent):
    """Event raised when a custom role's name, description or permissions change."""

    def __init__(self, role_id: uuid.UUID, name: str, permissions: Iterable[str]):
        super().__init__(**self._base_fields(role_id))
        self.role_id = role_id
        self.name = name
        self.permissions = frozenset(permissions)


class RoleDeleted(DomainEvent):
    """Event raised when a custom role is deleted."""

    def __init__(self, role_id: uuid.UUID, name: str):
        super().__init__(**self._base_fields(role_id))
        self.role_id = role_id
        self.name = name


class ClinicAccessGranted(DomainEvent):
    """Event raised when a principal is given (or re-given) a role in a clinic."""

    def __init__(
        self,
        principal_id: uuid.UUID,
        clinic_id: uuid.UUID,
        role_name: str,
        previous_role_name: Optional[str] = None,
    ):
        """
        Initialize ClinicAccessGranted event.

        Args:
            principal_id: Principal UUID
            clinic_id: Clinic UUID
            role_name: Role now held in the clinic
            previous_role_name: Role held before a re-grant, if any
        """
        super().__init__(**self._base_fields(principal_id))
        self.principal_id = principal_id
        self.clinic_id = clinic_id
        self.role_name = role_name
        self.previous_role_name = previous_role_name


class ClinicAccessRevoked(DomainEvent):
    """Event raised when a principal's membership in a clinic is removed."""

    def __init__(self, principal_id: uuid.UUID, clinic_id: uuid.UUID):
        super().__init__(**self._base_fields(principal_id))
        self.principal_id = principal_id
        self.clinic_id = clinic_id


class PrincipalRegistered(DomainEvent):
    """Event raised when a principal registers."""

    def __init__(self, principal_id: uuid.UUID, email: str):
        super().__init__(**self._base_fields(principal_id))
        self.principal_id = principal_id
        self.email = email


class PrincipalDeactivated(DomainEvent):
    """Event raised when a principal is deactivated."""

    def __init__(self, principal_id: uuid.UUID):
        super().__init__(**self._base_fields(principal_id))
        self.principal_id = principal_id
