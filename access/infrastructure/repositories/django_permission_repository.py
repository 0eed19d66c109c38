"""
Django implementation of PermissionRepository port.
"""

from typing import Iterable, List, Optional

from asgiref.sync import sync_to_async

from access.domain.permission import Permission
from access.infrastructure.models import Permission as PermissionModel
from access.ports.permission_repository import PermissionRepository


def permission_to_domain(model: PermissionModel) -> Permission:
    """Convert a Permission row to its domain entity."""
    return Permission(
        id=model.id,
        name=model.name,
        module=model.module,
        action=model.action,
        description=model.description,
    )


class DjangoPermissionRepository(PermissionRepository):
    """Django ORM implementation of PermissionRepository."""

    @sync_to_async
    def save(self, permission: Permission) -> Permission:
        model, _ = PermissionModel.objects.update_or_create(
            id=permission.id,
            defaults={
                "name": permission.name,
                "module": permission.module,
                "action": permission.action,
                "description": permission.description,
            },
        )
        return permission_to_domain(model)

    @sync_to_async
    def find_by_name(self, name: str) -> Optional[Permission]:
        try:
            return permission_to_domain(PermissionModel.objects.get(name=name))
        except PermissionModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_names(self, names: Iterable[str]) -> List[Permission]:
        models = PermissionModel.objects.filter(name__in=list(names))
        return [permission_to_domain(model) for model in models]

    @sync_to_async
    def list_names(self) -> List[str]:
        return list(PermissionModel.objects.values_list("name", flat=True))
