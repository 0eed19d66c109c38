"""
System role seeding.

Creates the permission catalog and the default system roles. Running the
seeder again only adds what is missing; existing system roles keep their
permission sets.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from access.domain.catalog import DEFAULT_ROLE_PERMISSIONS, SYSTEM_PERMISSIONS
from access.domain.permission import Permission
from access.domain.role import Role
from access.ports.permission_repository import PermissionRepository
from access.ports.role_repository import RoleRepository

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    """What a seeding run created."""

    permissions_created: List[str] = field(default_factory=list)
    roles_created: List[str] = field(default_factory=list)
    roles_skipped: List[str] = field(default_factory=list)


class RoleSeeder:
    """Seeds permissions and system roles."""

    def __init__(
        self,
        permission_repository: PermissionRepository,
        role_repository: RoleRepository,
    ):
        self.permission_repository = permission_repository
        self.role_repository = role_repository

    async def seed(
        self,
        permissions: Iterable[str] = SYSTEM_PERMISSIONS,
        roles: Dict[str, List[str]] = DEFAULT_ROLE_PERMISSIONS,
    ) -> SeedReport:
        report = SeedReport()

        existing = set(await self.permission_repository.list_names())
        for name in permissions:
            if name in existing:
                continue
            await self.permission_repository.save(Permission.create(name))
            existing.add(name)
            report.permissions_created.append(name)

        for role_name, permission_names in roles.items():
            if await self.role_repository.find_by_name(role_name) is not None:
                report.roles_skipped.append(role_name)
                continue
            granted = await self.permission_repository.find_by_names(permission_names)
            await self.role_repository.save(
                Role.create(
                    name=role_name,
                    description=f"Default {role_name} role",
                    permissions=granted,
                    is_system_role=True,
                )
            )
            report.roles_created.append(role_name)

        logger.info(
            "Seeded %d permission(s) and %d role(s)",
            len(report.permissions_created),
            len(report.roles_created),
        )
        return report
