"""
Role management handlers.

System roles are created only by seeding; every role passed through these
handlers is a custom role. Permission changes invalidate all cached grants
before the handler returns.
"""

import logging
from typing import Iterable, List, Optional, Tuple, Union

from access.application.commands.role_commands import (
    CreateRoleCommand,
    DeleteRoleCommand,
    SetRolePermissionsCommand,
    UpdateRoleCommand,
)
from access.domain.events import RoleCreated, RoleDeleted, RoleUpdated
from access.domain.permission import Permission
from access.domain.role import Role
from access.ports.authorization_cache import AuthorizationCache
from access.ports.membership_repository import MembershipRepository
from access.ports.permission_repository import PermissionRepository
from access.ports.role_repository import RoleRepository
from core.domain.exceptions import (
    RoleInUseError,
    RoleNameTakenError,
    SystemRoleImmutableError,
)
from core.domain.results import BusinessRuleFailure, NotFound, Ok, ValidationFailure
from core.infrastructure.events import event_bus

logger = logging.getLogger(__name__)

RoleResult = Union[Ok, NotFound, ValidationFailure, BusinessRuleFailure]


async def _resolve_permissions(
    permission_repository: PermissionRepository, names: Iterable[str]
) -> Tuple[List[Permission], Optional[ValidationFailure]]:
    requested = sorted(set(names))
    found = await permission_repository.find_by_names(requested)
    missing = sorted(set(requested) - {p.name for p in found})
    if missing:
        return [], ValidationFailure(
            message=f"Unknown permissions: {', '.join(missing)}",
            code="UNKNOWN_PERMISSION",
            field="permissions",
        )
    return found, None


def _role_not_found(role_id) -> NotFound:
    return NotFound(message=f"Role {role_id} not found", code="ROLE_NOT_FOUND", entity="role")


def _name_taken(name: str) -> BusinessRuleFailure:
    return BusinessRuleFailure(message=f"Role name '{name}' already exists", code="ROLE_NAME_TAKEN")


class CreateRoleHandler:
    """Handler for CreateRoleCommand."""

    def __init__(
        self,
        role_repository: RoleRepository,
        permission_repository: PermissionRepository,
    ):
        self.role_repository = role_repository
        self.permission_repository = permission_repository

    async def handle(self, command: CreateRoleCommand) -> RoleResult:
        """
        Create a custom role.

        Returns:
            Ok(Role), ValidationFailure for unknown permissions, or
            BusinessRuleFailure when the name is taken
        """
        name = (command.name or "").strip()
        if not name:
            return ValidationFailure(message="Role name is required", field="name")

        permissions, failure = await _resolve_permissions(
            self.permission_repository, command.permissions
        )
        if failure is not None:
            return failure

        if await self.role_repository.name_taken(name):
            return _name_taken(name)

        role = Role.create(name=name, description=command.description, permissions=permissions)
        try:
            saved = await self.role_repository.save(role)
        except RoleNameTakenError:
            return _name_taken(name)

        logger.info("Created role %s with %d permissions", saved.name, len(saved.permissions))
        await event_bus.publish(
            RoleCreated(role_id=saved.id, name=saved.name, permissions=saved.permission_names)
        )
        return Ok(saved)


class UpdateRoleHandler:
    """Handler for UpdateRoleCommand."""

    def __init__(
        self,
        role_repository: RoleRepository,
        permission_repository: PermissionRepository,
        authorization_cache: Optional[AuthorizationCache] = None,
    ):
        self.role_repository = role_repository
        self.permission_repository = permission_repository
        self.authorization_cache = authorization_cache

    async def handle(self, command: UpdateRoleCommand) -> RoleResult:
        """
        Update a custom role.

        Returns:
            Ok(Role), NotFound, ValidationFailure, or BusinessRuleFailure
            (SYSTEM_ROLE_IMMUTABLE, ROLE_NAME_TAKEN)
        """
        role = await self.role_repository.find_by_id(command.role_id)
        if role is None:
            return _role_not_found(command.role_id)

        if role.is_system_role:
            logger.warning("Rejected update of system role %s", role.name)
            return BusinessRuleFailure(
                message=f"System role '{role.name}' cannot be modified",
                code="SYSTEM_ROLE_IMMUTABLE",
            )

        permissions = None
        if command.permissions is not None:
            permissions, failure = await _resolve_permissions(
                self.permission_repository, command.permissions
            )
            if failure is not None:
                return failure

        if command.name is not None:
            if not command.name.strip():
                return ValidationFailure(message="Role name is required", field="name")
            if await self.role_repository.name_taken(command.name, exclude_id=role.id):
                return _name_taken(command.name.strip())

        try:
            updated = role.update(
                name=command.name, description=command.description, permissions=permissions
            )
            saved = await self.role_repository.save(updated)
        except SystemRoleImmutableError as e:
            return BusinessRuleFailure(message=e.message, code=e.code)
        except RoleNameTakenError:
            return _name_taken(command.name.strip())

        if self.authorization_cache is not None:
            await self.authorization_cache.invalidate_all()

        logger.info("Updated role %s", saved.name)
        await event_bus.publish(
            RoleUpdated(role_id=saved.id, name=saved.name, permissions=saved.permission_names)
        )
        return Ok(saved)


class SetRolePermissionsHandler:
    """Handler for SetRolePermissionsCommand."""

    def __init__(self, update_handler: UpdateRoleHandler):
        self.update_handler = update_handler

    async def handle(self, command: SetRolePermissionsCommand) -> RoleResult:
        return await self.update_handler.handle(
            UpdateRoleCommand(role_id=command.role_id, permissions=list(command.permissions))
        )


class DeleteRoleHandler:
    """Handler for DeleteRoleCommand."""

    def __init__(
        self,
        role_repository: RoleRepository,
        membership_repository: MembershipRepository,
    ):
        self.role_repository = role_repository
        self.membership_repository = membership_repository

    async def handle(self, command: DeleteRoleCommand) -> RoleResult:
        """
        Delete a custom role that no membership references.

        Returns:
            Ok(None), NotFound, or BusinessRuleFailure with
            SYSTEM_ROLE_IMMUTABLE or ROLE_IN_USE
        """
        role = await self.role_repository.find_by_id(command.role_id)
        if role is None:
            return _role_not_found(command.role_id)

        try:
            role.ensure_deletable()
        except SystemRoleImmutableError as e:
            logger.warning("Rejected deletion of system role %s", role.name)
            return BusinessRuleFailure(message=e.message, code=e.code)

        in_use = RoleInUseError()
        if await self.membership_repository.count_by_role(role.id) > 0:
            logger.info("Rejected deletion of role %s: still assigned", role.name)
            return BusinessRuleFailure(message=in_use.message, code=in_use.code)

        try:
            await self.role_repository.delete(role.id)
        except RoleInUseError:
            return BusinessRuleFailure(message=in_use.message, code=in_use.code)

        logger.info("Deleted role %s", role.name)
        await event_bus.publish(RoleDeleted(role_id=role.id, name=role.name))
        return Ok()
