"""
Django implementation of RoleRepository port.
"""

import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError

from access.domain.role import Role
from access.infrastructure.models import Role as RoleModel
from access.infrastructure.repositories.django_permission_repository import (
    permission_to_domain,
)
from access.ports.role_repository import RoleRepository
from core.domain.exceptions import RoleInUseError, RoleNameTakenError


def role_to_domain(model: RoleModel) -> Role:
    """Convert a Role row (with its permissions) to its domain entity."""
    return Role(
        id=model.id,
        name=model.name,
        description=model.description,
        is_system_role=model.is_system_role,
        permissions=frozenset(permission_to_domain(p) for p in model.permissions.all()),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class DjangoRoleRepository(RoleRepository):
    """Django ORM implementation of RoleRepository."""

    def _queryset(self):
        return RoleModel.objects.prefetch_related("permissions")

    @sync_to_async
    def save(self, role: Role) -> Role:
        try:
            with transaction.atomic():
                model, _ = RoleModel.objects.update_or_create(
                    id=role.id,
                    defaults={
                        "name": role.name,
                        "description": role.description,
                        "is_system_role": role.is_system_role,
                    },
                )
                model.permissions.set([p.id for p in role.permissions])
        except IntegrityError as e:
            raise RoleNameTakenError(f"Role name '{role.name}' already exists") from e
        return role_to_domain(self._queryset().get(id=model.id))

    @sync_to_async
    def find_by_id(self, role_id: uuid.UUID) -> Optional[Role]:
        try:
            return role_to_domain(self._queryset().get(id=role_id))
        except RoleModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_name(self, name: str) -> Optional[Role]:
        try:
            return role_to_domain(self._queryset().get(name=name))
        except RoleModel.DoesNotExist:
            return None

    @sync_to_async
    def name_taken(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        queryset = RoleModel.objects.filter(name__iexact=name.strip())
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    @sync_to_async
    def list_all(self) -> List[Role]:
        return [role_to_domain(model) for model in self._queryset()]

    @sync_to_async
    def delete(self, role_id: uuid.UUID) -> bool:
        try:
            deleted, _ = RoleModel.objects.filter(id=role_id).delete()
        except ProtectedError as e:
            raise RoleInUseError() from e
        return deleted > 0
