"""
Unit tests for the authorization resolver.
"""
import uuid

import pytest

from access.application.commands.membership_commands import (
    GrantClinicAccessCommand,
    RevokeClinicAccessCommand,
)
from access.application.commands.role_commands import CreateRoleCommand, SetRolePermissionsCommand
from access.application.handlers.membership_handlers import (
    GrantClinicAccessHandler,
    RevokeClinicAccessHandler,
)
from access.application.handlers.role_handlers import (
    CreateRoleHandler,
    SetRolePermissionsHandler,
    UpdateRoleHandler,
)
from access.application.services.authorization_cache_service import AuthorizationCacheService
from access.domain.services import AuthorizationResolver, PermissionRegistry
from core.domain.exceptions import CacheUnavailableError, UnknownPermissionError
from core.domain.results import AuthorizationFailure


@pytest.fixture
def grants_cache(in_memory_cache):
    return AuthorizationCacheService(cache=in_memory_cache, ttl=60)


@pytest.fixture
def resolver(principal_repository, membership_repository, clinic_repository):
    return AuthorizationResolver(principal_repository, membership_repository, clinic_repository)


@pytest.fixture
def cached_resolver(principal_repository, membership_repository, clinic_repository, grants_cache):
    return AuthorizationResolver(
        principal_repository, membership_repository, clinic_repository, grants_cache=grants_cache
    )


@pytest.mark.asyncio
class TestPermissionChecks:
    """Tests for global and clinic-scoped permission checks."""

    async def test_permission_is_scoped_to_the_membership_clinic(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        """Test a receptionist of clinic A gets nothing in clinic B."""
        clinic_a = await clinic_factory("Clinic A")
        clinic_b = await clinic_factory("Clinic B")
        principal = await principal_factory()
        await grant(principal, clinic_a, seeded_roles["receptionist"])

        assert await resolver.has_permission_in_clinic(principal, "patients.create", clinic_a.id)
        assert not await resolver.has_permission_in_clinic(
            principal, "patients.create", clinic_b.id
        )
        assert await resolver.has_permission(principal, "patients.create")

    async def test_role_in_one_clinic_does_not_leak_to_another(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        """Test an admin role in clinic A does not widen a patient role in clinic B."""
        clinic_a = await clinic_factory("Clinic A")
        clinic_b = await clinic_factory("Clinic B")
        principal = await principal_factory()
        await grant(principal, clinic_a, seeded_roles["admin"])
        await grant(principal, clinic_b, seeded_roles["patient"])

        assert await resolver.has_permission_in_clinic(principal, "billing.manage", clinic_a.id)
        assert not await resolver.has_permission_in_clinic(
            principal, "billing.manage", clinic_b.id
        )
        assert await resolver.has_role_in_clinic(principal, "patient", clinic_b.id)
        assert not await resolver.has_role_in_clinic(principal, "admin", clinic_b.id)
        assert await resolver.has_role(principal, "admin")

    async def test_clinic_access_requires_membership(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        clinic = await clinic_factory()
        other = await clinic_factory("Other")
        principal = await principal_factory()
        await grant(principal, clinic, seeded_roles["doctor"])

        assert await resolver.has_clinic_access(principal, clinic.id)
        assert await resolver.has_clinic_access(principal, str(clinic.id))
        assert not await resolver.has_clinic_access(principal, other.id)
        assert not await resolver.has_clinic_access(principal, "not-a-uuid")

    async def test_any_and_all_permissions(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        """Test OR and AND combinations, including the empty list."""
        clinic = await clinic_factory()
        principal = await principal_factory()
        await grant(principal, clinic, seeded_roles["doctor"])

        assert await resolver.has_any_permission(
            principal, ["billing.manage", "prescriptions.create"], clinic.id
        )
        assert not await resolver.has_all_permissions(
            principal, ["billing.manage", "prescriptions.create"], clinic.id
        )
        assert await resolver.has_all_permissions(
            principal, ["patients.view", "prescriptions.create"]
        )
        assert not await resolver.has_any_permission(principal, [])
        assert not await resolver.has_all_permissions(principal, [])

    async def test_unknown_and_anonymous_principals_are_denied(self, resolver, seeded_roles):
        assert not await resolver.has_permission(uuid.uuid4(), "clinics.view")
        assert not await resolver.has_permission(None, "clinics.view")
        assert not await resolver.has_role("not-a-uuid", "admin")

    async def test_inactive_principal_is_denied(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        """Test deactivated principals lose every grant."""
        clinic = await clinic_factory()
        principal = await principal_factory(active=False)
        await grant(principal, clinic, seeded_roles["superadmin"])

        assert not await resolver.has_permission(principal, "system.admin")
        assert not await resolver.has_clinic_access(principal, clinic.id)
        assert await resolver.current_clinic(principal) is None


@pytest.mark.asyncio
class TestRequireChecks:
    """Tests for the require_* variants."""

    async def test_require_permission_names_missing_permission_and_clinic(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        await grant(principal, clinic, seeded_roles["patient"])

        result = await resolver.require_permission(principal, "patients.create", clinic.id)

        assert isinstance(result, AuthorizationFailure)
        assert result.required_permission == "patients.create"
        assert result.clinic_id == clinic.id
        assert result.code == "FORBIDDEN"

    async def test_require_permission_ok(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        await grant(principal, clinic, seeded_roles["patient"])

        result = await resolver.require_permission(principal, "profile.edit", clinic.id)

        assert result.ok

    async def test_require_role_failure(self, resolver, seeded_roles, principal_factory):
        principal = await principal_factory()

        result = await resolver.require_role(principal, "admin")

        assert isinstance(result, AuthorizationFailure)
        assert result.required_role == "admin"
        assert result.clinic_id is None

    async def test_require_all_permissions_reports_first_missing(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        await grant(principal, clinic, seeded_roles["receptionist"])

        result = await resolver.require_all_permissions(
            principal, ["patients.view", "prescriptions.create", "billing.delete"], clinic.id
        )

        assert not result.ok
        assert result.required_permission == "prescriptions.create"

    async def test_require_clinic_access(
        self, resolver, seeded_roles, clinic_factory, principal_factory
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()

        result = await resolver.require_clinic_access(principal, clinic.id)

        assert not result.ok
        assert result.clinic_id == clinic.id

    async def test_require_without_principal_raises(self, resolver):
        """Test a missing principal is a caller error, not a denial."""
        with pytest.raises(ValueError):
            await resolver.require_permission(None, "licenses.view")


@pytest.mark.asyncio
class TestCurrentClinic:
    """Tests for clinic context resolution."""

    async def test_single_membership_resolves_implicitly(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        await grant(principal, clinic, seeded_roles["doctor"])

        current = await resolver.current_clinic(principal)

        assert current.id == clinic.id

    async def test_several_memberships_need_explicit_selection(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        clinic_a = await clinic_factory("Clinic A")
        clinic_b = await clinic_factory("Clinic B")
        principal = await principal_factory()
        await grant(principal, clinic_a, seeded_roles["doctor"])
        await grant(principal, clinic_b, seeded_roles["doctor"])

        assert await resolver.current_clinic(principal) is None
        selected = await resolver.current_clinic(principal, clinic_b.id)
        assert selected.id == clinic_b.id

    async def test_explicit_clinic_without_membership(
        self, resolver, seeded_roles, clinic_factory, principal_factory, grant
    ):
        clinic = await clinic_factory()
        other = await clinic_factory("Other")
        principal = await principal_factory()
        await grant(principal, clinic, seeded_roles["doctor"])

        assert await resolver.current_clinic(principal, other.id) is None

    async def test_no_memberships(self, resolver, principal_factory):
        principal = await principal_factory()
        assert await resolver.current_clinic(principal) is None


@pytest.mark.asyncio
class TestCachedGrants:
    """Tests that membership and role changes are visible immediately."""

    async def test_revoked_membership_is_not_served_from_cache(
        self,
        cached_resolver,
        grants_cache,
        seeded_roles,
        clinic_factory,
        principal_factory,
        principal_repository,
        clinic_repository,
        role_repository,
        membership_repository,
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        grant_handler = GrantClinicAccessHandler(
            principal_repository,
            clinic_repository,
            role_repository,
            membership_repository,
            grants_cache,
        )
        revoke_handler = RevokeClinicAccessHandler(membership_repository, grants_cache)

        granted = await grant_handler.handle(
            GrantClinicAccessCommand(principal.id, clinic.id, "doctor")
        )
        assert granted.ok
        assert await cached_resolver.has_permission_in_clinic(
            principal, "patients.view", clinic.id
        )

        revoked = await revoke_handler.handle(RevokeClinicAccessCommand(principal.id, clinic.id))
        assert revoked.ok
        assert not await cached_resolver.has_permission_in_clinic(
            principal, "patients.view", clinic.id
        )

    async def test_regrant_replaces_role(
        self,
        cached_resolver,
        grants_cache,
        seeded_roles,
        clinic_factory,
        principal_factory,
        principal_repository,
        clinic_repository,
        role_repository,
        membership_repository,
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        handler = GrantClinicAccessHandler(
            principal_repository,
            clinic_repository,
            role_repository,
            membership_repository,
            grants_cache,
        )

        await handler.handle(GrantClinicAccessCommand(principal.id, clinic.id, "patient"))
        assert await cached_resolver.has_role_in_clinic(principal, "patient", clinic.id)

        await handler.handle(GrantClinicAccessCommand(principal.id, clinic.id, "receptionist"))

        assert await cached_resolver.has_role_in_clinic(principal, "receptionist", clinic.id)
        assert not await cached_resolver.has_role_in_clinic(principal, "patient", clinic.id)
        assert len(await membership_repository.find_by_principal(principal.id)) == 1

    async def test_role_permission_change_invalidates_every_principal(
        self,
        cached_resolver,
        grants_cache,
        seeded_roles,
        clinic_factory,
        principal_factory,
        grant,
        role_repository,
        permission_repository,
    ):
        clinic = await clinic_factory()
        first = await principal_factory()
        second = await principal_factory()
        created = await CreateRoleHandler(role_repository, permission_repository).handle(
            CreateRoleCommand(name="clinic_admin", permissions=["patients.view"])
        )
        role = created.value
        await grant(first, clinic, role)
        await grant(second, clinic, role)

        assert not await cached_resolver.has_permission_in_clinic(
            first, "patients.create", clinic.id
        )
        assert not await cached_resolver.has_permission_in_clinic(
            second, "patients.create", clinic.id
        )

        handler = SetRolePermissionsHandler(
            UpdateRoleHandler(role_repository, permission_repository, grants_cache)
        )
        result = await handler.handle(
            SetRolePermissionsCommand(role.id, ["patients.view", "patients.create"])
        )

        assert result.ok
        assert await cached_resolver.has_permission_in_clinic(first, "patients.create", clinic.id)
        assert await cached_resolver.has_permission_in_clinic(second, "patients.create", clinic.id)

    async def test_grant_for_unknown_role(
        self,
        grants_cache,
        seeded_roles,
        clinic_factory,
        principal_factory,
        principal_repository,
        clinic_repository,
        role_repository,
        membership_repository,
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        handler = GrantClinicAccessHandler(
            principal_repository,
            clinic_repository,
            role_repository,
            membership_repository,
            grants_cache,
        )

        result = await handler.handle(GrantClinicAccessCommand(principal.id, clinic.id, "nurse"))

        assert not result.ok
        assert result.code == "ROLE_NOT_FOUND"

    async def test_revoke_is_not_reported_while_cached_grants_survive(
        self,
        cached_resolver,
        grants_cache,
        in_memory_cache,
        seeded_roles,
        clinic_factory,
        principal_factory,
        grant,
        membership_repository,
        role_repository,
        monkeypatch,
    ):
        clinic = await clinic_factory()
        principal = await principal_factory()
        await grant(principal, clinic, await role_repository.find_by_name("doctor"))
        assert await cached_resolver.has_permission_in_clinic(
            principal, "patients.view", clinic.id
        )

        async def rejected_write(key, value, timeout=None):
            raise CacheUnavailableError(f"Cache write failed for {key}")

        monkeypatch.setattr(in_memory_cache, "put", rejected_write)
        handler = RevokeClinicAccessHandler(membership_repository, grants_cache)

        with pytest.raises(CacheUnavailableError):
            await handler.handle(RevokeClinicAccessCommand(principal.id, clinic.id))
        assert await membership_repository.find(principal.id, clinic.id) is None

    async def test_role_update_is_not_reported_while_cached_grants_survive(
        self,
        grants_cache,
        in_memory_cache,
        seeded_roles,
        role_repository,
        permission_repository,
        monkeypatch,
    ):
        created = await CreateRoleHandler(role_repository, permission_repository).handle(
            CreateRoleCommand(name="clinic_admin", permissions=["patients.view"])
        )

        async def rejected_write(key, value, timeout=None):
            raise CacheUnavailableError(f"Cache write failed for {key}")

        monkeypatch.setattr(in_memory_cache, "put", rejected_write)
        handler = SetRolePermissionsHandler(
            UpdateRoleHandler(role_repository, permission_repository, grants_cache)
        )

        with pytest.raises(CacheUnavailableError):
            await handler.handle(
                SetRolePermissionsCommand(created.value.id, ["patients.view", "patients.create"])
            )


@pytest.mark.asyncio
class TestPermissionRegistry:
    """Tests for the seeded permission check."""

    async def test_verify_passes_after_seeding(self, permission_repository, seeded_roles):
        registry = PermissionRegistry(permission_repository)
        assert await registry.missing() == []
        await registry.verify()

    async def test_verify_fails_on_unseeded_name(self, permission_repository, seeded_roles):
        registry = PermissionRegistry(permission_repository)

        with pytest.raises(UnknownPermissionError, match="patients.teleport"):
            await registry.verify(["patients.view", "patients.teleport"])
