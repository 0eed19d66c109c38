"""
Unit tests for role management, seeding and principal handlers.
"""
import pytest
from django.contrib.auth.hashers import check_password

from access.application.commands.principal_commands import (
    DeactivatePrincipalCommand,
    RegisterPrincipalCommand,
)
from access.application.commands.role_commands import (
    CreateRoleCommand,
    DeleteRoleCommand,
    UpdateRoleCommand,
)
from access.application.handlers.principal_handlers import (
    DeactivatePrincipalHandler,
    RegisterPrincipalHandler,
)
from access.application.handlers.role_handlers import (
    CreateRoleHandler,
    DeleteRoleHandler,
    UpdateRoleHandler,
)
from access.application.services.role_seeder import RoleSeeder
from access.domain.catalog import SYSTEM_PERMISSIONS, SYSTEM_ROLES
from access.domain.permission import Permission
from access.domain.role import Role
from core.domain.exceptions import SystemRoleImmutableError


class TestRoleEntity:
    """Tests for Role entity rules."""

    def test_permission_matches_by_name_or_module_action(self):
        permission = Permission.create("View patients", module="patients", action="view")
        role = Role.create("viewer", permissions=[permission])

        assert role.has_permission("patients.view")
        assert role.has_permission("View patients")
        assert not role.has_permission("patients.edit")
        assert role.grant_names == {"patients.view", "View patients"}

    def test_system_role_cannot_be_updated(self):
        role = Role.create("admin", is_system_role=True)
        with pytest.raises(SystemRoleImmutableError):
            role.update(description="changed")

    def test_permission_name_shape(self):
        with pytest.raises(ValueError, match="module.action"):
            Permission.create("patients")


@pytest.mark.asyncio
class TestRoleSeeder:
    """Tests for RoleSeeder."""

    async def test_seed_creates_catalog_and_roles(self, permission_repository, role_repository):
        report = await RoleSeeder(permission_repository, role_repository).seed()

        assert len(report.permissions_created) == len(SYSTEM_PERMISSIONS)
        assert sorted(report.roles_created) == sorted(SYSTEM_ROLES)
        superadmin = await role_repository.find_by_name("superadmin")
        assert superadmin.is_system_role
        assert superadmin.permission_names == frozenset(SYSTEM_PERMISSIONS)

    async def test_seed_is_idempotent(self, permission_repository, role_repository):
        seeder = RoleSeeder(permission_repository, role_repository)
        await seeder.seed()

        report = await seeder.seed()

        assert report.permissions_created == []
        assert report.roles_created == []
        assert sorted(report.roles_skipped) == sorted(SYSTEM_ROLES)
        assert len(await role_repository.list_all()) == len(SYSTEM_ROLES)


@pytest.mark.asyncio
class TestCreateRoleHandler:
    """Tests for CreateRoleHandler."""

    async def test_create_custom_role(self, role_repository, permission_repository, seeded_roles):
        handler = CreateRoleHandler(role_repository, permission_repository)

        result = await handler.handle(
            CreateRoleCommand(
                name="clinic_admin",
                description="Runs one clinic",
                permissions=["patients.create", "patients.view"],
            )
        )

        assert result.ok
        assert not result.value.is_system_role
        assert result.value.permission_names == {"patients.create", "patients.view"}

    async def test_unknown_permission_is_rejected(
        self, role_repository, permission_repository, seeded_roles
    ):
        handler = CreateRoleHandler(role_repository, permission_repository)

        result = await handler.handle(
            CreateRoleCommand(name="nurse", permissions=["patients.view", "patients.teleport"])
        )

        assert not result.ok
        assert result.code == "UNKNOWN_PERMISSION"
        assert "patients.teleport" in result.message
        assert await role_repository.find_by_name("nurse") is None

    async def test_name_taken(self, role_repository, permission_repository, seeded_roles):
        handler = CreateRoleHandler(role_repository, permission_repository)

        result = await handler.handle(CreateRoleCommand(name="Doctor"))

        assert not result.ok
        assert result.code == "ROLE_NAME_TAKEN"

    async def test_blank_name(self, role_repository, permission_repository):
        result = await CreateRoleHandler(role_repository, permission_repository).handle(
            CreateRoleCommand(name="  ")
        )
        assert result.code == "VALIDATION_ERROR"


@pytest.mark.asyncio
class TestUpdateRoleHandler:
    """Tests for UpdateRoleHandler."""

    async def test_system_role_is_immutable(
        self, role_repository, permission_repository, seeded_roles
    ):
        """Test a system role keeps its permission set after a rejected update."""
        doctor = seeded_roles["doctor"]
        handler = UpdateRoleHandler(role_repository, permission_repository)

        result = await handler.handle(
            UpdateRoleCommand(role_id=doctor.id, permissions=["billing.manage"])
        )

        assert not result.ok
        assert result.code == "SYSTEM_ROLE_IMMUTABLE"
        stored = await role_repository.find_by_id(doctor.id)
        assert stored.permission_names == doctor.permission_names

    async def test_rename_to_taken_name(
        self, role_repository, permission_repository, seeded_roles
    ):
        created = await CreateRoleHandler(role_repository, permission_repository).handle(
            CreateRoleCommand(name="nurse")
        )

        result = await UpdateRoleHandler(role_repository, permission_repository).handle(
            UpdateRoleCommand(role_id=created.value.id, name="admin")
        )

        assert result.code == "ROLE_NAME_TAKEN"

    async def test_empty_permission_list_strips_permissions(
        self, role_repository, permission_repository, seeded_roles
    ):
        created = await CreateRoleHandler(role_repository, permission_repository).handle(
            CreateRoleCommand(name="nurse", permissions=["patients.view"])
        )

        result = await UpdateRoleHandler(role_repository, permission_repository).handle(
            UpdateRoleCommand(role_id=created.value.id, permissions=[])
        )

        assert result.ok
        assert result.value.permissions == frozenset()
        assert result.value.name == "nurse"


@pytest.mark.asyncio
class TestDeleteRoleHandler:
    """Tests for DeleteRoleHandler."""

    async def test_assigned_role_cannot_be_deleted(
        self,
        role_repository,
        permission_repository,
        membership_repository,
        seeded_roles,
        clinic_factory,
        principal_factory,
        grant,
    ):
        created = await CreateRoleHandler(role_repository, permission_repository).handle(
            CreateRoleCommand(name="nurse", permissions=["patients.view"])
        )
        role = created.value
        await grant(await principal_factory(), await clinic_factory(), role)

        result = await DeleteRoleHandler(role_repository, membership_repository).handle(
            DeleteRoleCommand(role.id)
        )

        assert not result.ok
        assert result.code == "ROLE_IN_USE"
        assert await role_repository.find_by_id(role.id) is not None

    async def test_delete_unassigned_custom_role(
        self, role_repository, permission_repository, membership_repository, seeded_roles
    ):
        created = await CreateRoleHandler(role_repository, permission_repository).handle(
            CreateRoleCommand(name="nurse")
        )

        result = await DeleteRoleHandler(role_repository, membership_repository).handle(
            DeleteRoleCommand(created.value.id)
        )

        assert result.ok
        assert await role_repository.find_by_id(created.value.id) is None

    async def test_system_role_cannot_be_deleted(
        self, role_repository, membership_repository, seeded_roles
    ):
        result = await DeleteRoleHandler(role_repository, membership_repository).handle(
            DeleteRoleCommand(seeded_roles["patient"].id)
        )

        assert result.code == "SYSTEM_ROLE_IMMUTABLE"


@pytest.mark.asyncio
class TestPrincipalHandlers:
    """Tests for principal registration and deactivation."""

    async def test_register_hashes_password(self, principal_repository):
        result = await RegisterPrincipalHandler(principal_repository).handle(
            RegisterPrincipalCommand(email="Doc@Clinic.com", password="s3cret")
        )

        assert result.ok
        assert str(result.value.email) == "doc@clinic.com"
        assert check_password("s3cret", result.value.password_hash)

    async def test_register_duplicate_email(self, principal_repository):
        handler = RegisterPrincipalHandler(principal_repository)
        await handler.handle(RegisterPrincipalCommand(email="doc@clinic.com", password="a"))

        result = await handler.handle(
            RegisterPrincipalCommand(email="DOC@clinic.com", password="b")
        )

        assert result.code == "EMAIL_TAKEN"

    async def test_deactivate(self, principal_repository, principal_factory):
        principal = await principal_factory()

        result = await DeactivatePrincipalHandler(principal_repository).handle(
            DeactivatePrincipalCommand(principal.id)
        )

        assert result.ok
        assert not (await principal_repository.find_by_id(principal.id)).is_active
