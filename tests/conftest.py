"""
Pytest configuration and shared fixtures.

Unit tests run the domain services over the in-memory repositories
defined here; integration tests use the Django repositories.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

import pytest
from django.contrib.auth.hashers import make_password

from access.domain.catalog import DEFAULT_ROLE_PERMISSIONS
from access.domain.membership import Membership
from access.domain.permission import Permission
from access.domain.principal import Principal
from access.domain.role import Role
from access.ports.membership_repository import MembershipRepository
from access.ports.permission_repository import PermissionRepository
from access.ports.principal_repository import PrincipalRepository
from access.ports.role_repository import RoleRepository
from clinics.domain.clinic import Clinic
from clinics.ports.clinic_repository import ClinicRepository
from core.domain.exceptions import (
    DuplicateLicenseKeyError,
    LicenseAlreadyProvisionedError,
    LicenseNotFoundError,
    RoleInUseError,
    RoleNameTakenError,
)
from core.domain.value_objects import LicensePlan, LicenseStatus, ResourceType
from core.infrastructure.cache import CachePort
from licenses.domain.license import License
from licenses.domain.license_key import LicenseKey
from licenses.infrastructure.activation_codes import HmacActivationCodePolicy
from licenses.ports.license_key_repository import LicenseKeyRepository
from licenses.ports.license_repository import LicenseRepository, LicenseSummary


class InMemoryCache(CachePort):
    def __init__(self):
        self.data: Dict[str, Any] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, timeout=None):
        self.data[key] = value

    async def put(self, key, value, timeout=None):
        self.data[key] = value

    async def add(self, key, value, timeout=None):
        if key in self.data:
            return False
        self.data[key] = value
        return True

    async def delete(self, key):
        self.data.pop(key, None)


class InMemoryClinicRepository(ClinicRepository):
    def __init__(self):
        self.clinics: Dict[uuid.UUID, Clinic] = {}

    async def save(self, clinic):
        self.clinics[clinic.id] = clinic
        return clinic

    async def find_by_id(self, clinic_id):
        return self.clinics.get(clinic_id)

    async def find_by_slug(self, slug):
        return next((c for c in self.clinics.values() if c.slug.value == slug), None)

    async def exists(self, clinic_id):
        return clinic_id in self.clinics

    async def list_all(self):
        return list(self.clinics.values())


class InMemoryPrincipalRepository(PrincipalRepository):
    def __init__(self):
        self.principals: Dict[uuid.UUID, Principal] = {}

    async def save(self, principal):
        self.principals[principal.id] = principal
        return principal

    async def find_by_id(self, principal_id):
        return self.principals.get(principal_id)

    async def find_by_email(self, email):
        email = email.strip().lower()
        return next((p for p in self.principals.values() if str(p.email) == email), None)


class InMemoryPermissionRepository(PermissionRepository):
    def __init__(self):
        self.permissions: Dict[str, Permission] = {}

    async def save(self, permission):
        self.permissions[permission.name] = permission
        return permission

    async def find_by_name(self, name):
        return self.permissions.get(name)

    async def find_by_names(self, names: Iterable[str]):
        return [self.permissions[n] for n in names if n in self.permissions]

    async def list_names(self):
        return sorted(self.permissions)


class InMemoryRoleRepository(RoleRepository):
    def __init__(self, memberships: Optional["InMemoryMembershipRepository"] = None):
        self.roles: Dict[uuid.UUID, Role] = {}
        self.memberships = memberships

    async def save(self, role):
        if await self.name_taken(role.name, exclude_id=role.id):
            raise RoleNameTakenError()
        self.roles[role.id] = role
        if self.memberships is not None:
            self.memberships.refresh_role(role)
        return role

    async def find_by_id(self, role_id):
        return self.roles.get(role_id)

    async def find_by_name(self, name):
        return next((r for r in self.roles.values() if r.name == name), None)

    async def name_taken(self, name, exclude_id=None):
        name = name.strip().lower()
        return any(
            r.name.lower() == name and r.id != exclude_id for r in self.roles.values()
        )

    async def list_all(self):
        return list(self.roles.values())

    async def delete(self, role_id):
        if self.memberships is not None and await self.memberships.count_by_role(role_id):
            raise RoleInUseError()
        return self.roles.pop(role_id, None) is not None


class InMemoryMembershipRepository(MembershipRepository):
    def __init__(self):
        self.memberships: Dict[tuple, Membership] = {}

    def refresh_role(self, role: Role) -> None:
        for key, membership in self.memberships.items():
            if membership.role.id == role.id:
                self.memberships[key] = membership.with_role(role)

    async def save(self, membership):
        self.memberships[(membership.principal_id, membership.clinic_id)] = membership
        return membership

    async def find(self, principal_id, clinic_id):
        return self.memberships.get((principal_id, clinic_id))

    async def find_by_principal(self, principal_id):
        return [m for (p, _), m in self.memberships.items() if p == principal_id]

    async def delete(self, principal_id, clinic_id):
        return self.memberships.pop((principal_id, clinic_id), None) is not None

    async def count_by_role(self, role_id):
        return sum(1 for m in self.memberships.values() if m.role.id == role_id)


class InMemoryLicenseKeyRepository(LicenseKeyRepository):
    def __init__(self):
        self.keys: Dict[str, LicenseKey] = {}

    async def save(self, license_key):
        if license_key.key in self.keys:
            raise DuplicateLicenseKeyError()
        self.keys[license_key.key] = license_key
        return license_key

    async def find_by_key(self, key):
        return self.keys.get(key)

    async def exists(self, key):
        return key in self.keys

    async def find_current_for_license(self, license_id):
        return next(
            (
                k
                for k in self.keys.values()
                if k.license_id == license_id and not k.is_retired
            ),
            None,
        )

    async def count_by_strategy(self):
        counts: Dict[str, int] = {}
        for key in self.keys.values():
            counts[key.strategy.value] = counts.get(key.strategy.value, 0) + 1
        return counts

    async def count_retired(self):
        return sum(1 for k in self.keys.values() if k.is_retired)


class InMemoryLicenseRepository(LicenseRepository):
    """Counters are changed without awaiting, so each try_* call is atomic."""

    def __init__(self, key_repository: Optional[InMemoryLicenseKeyRepository] = None):
        self.licenses: Dict[uuid.UUID, License] = {}
        self.key_repository = key_repository or InMemoryLicenseKeyRepository()
        self.audit: List[Dict[str, Any]] = []

    def _replace(self, license_id, **changes):
        from dataclasses import replace

        self.licenses[license_id] = replace(self.licenses[license_id], **changes)

    async def save(self, license):
        stored = self.licenses.get(license.id)
        if stored is not None:
            license = License(**{**license.__dict__, "usage": dict(stored.usage)})
        self.licenses[license.id] = license
        return license

    async def provision(self, license, issued_key):
        if any(l.clinic_id == license.clinic_id for l in self.licenses.values()):
            raise LicenseAlreadyProvisionedError()
        await self.key_repository.save(issued_key)
        self.licenses[license.id] = license
        return license

    async def find_by_id(self, license_id):
        return self.licenses.get(license_id)

    async def find_by_clinic(self, clinic_id):
        return next((l for l in self.licenses.values() if l.clinic_id == clinic_id), None)

    async def find_by_key(self, license_key):
        return next(
            (l for l in self.licenses.values() if l.license_key == license_key), None
        )

    async def find_expired_running(self, now):
        return [
            l
            for l in self.licenses.values()
            if l.status in (LicenseStatus.ACTIVE, LicenseStatus.TRIAL) and l.expires_at <= now
        ]

    async def try_increment_usage(self, license_id, resource_type, amount):
        license = self.licenses.get(license_id)
        if license is None:
            return False
        current = license.usage[resource_type]
        if current + amount > license.usage_limits[resource_type]:
            return False
        self._replace(license_id, usage={**license.usage, resource_type: current + amount})
        return True

    async def try_decrement_usage(self, license_id, resource_type, amount):
        license = self.licenses.get(license_id)
        if license is None or license.usage[resource_type] < amount:
            return False
        self._replace(
            license_id,
            usage={**license.usage, resource_type: license.usage[resource_type] - amount},
        )
        return True

    async def reset_monthly_usage(self, period_start, now):
        count = 0
        for license in list(self.licenses.values()):
            if license.last_usage_reset is not None and license.last_usage_reset >= period_start:
                continue
            usage = {t: (0 if t.is_monthly else c) for t, c in license.usage.items()}
            self._replace(license.id, usage=usage, last_usage_reset=now)
            count += 1
        return count

    async def replace_key(self, license_id, new_key, actor):
        license = self.licenses.get(license_id)
        if license is None:
            raise LicenseNotFoundError()
        await self.key_repository.save(new_key)
        old = self.key_repository.keys.get(license.license_key)
        if old is not None:
            self.key_repository.keys[old.key] = old.retire()
        self._replace(license_id, license_key=new_key.key)
        self.audit.append(
            {
                "license_id": license_id,
                "action": "key_regenerated",
                "changes": {"old_key": license.license_key, "new_key": new_key.key},
                "actor": actor,
            }
        )
        return license.license_key

    async def add_audit_entry(self, license_id, action, changes, actor="system"):
        self.audit.append(
            {"license_id": license_id, "action": action, "changes": changes, "actor": actor}
        )

    async def summary(self, expiring_within_days=30):
        summary = LicenseSummary(total=len(self.licenses))
        for license in self.licenses.values():
            summary.by_plan[license.plan.value] = summary.by_plan.get(license.plan.value, 0) + 1
            summary.by_status[license.status.value] = (
                summary.by_status.get(license.status.value, 0) + 1
            )
        return summary


def make_license(
    clinic_id: Optional[uuid.UUID] = None,
    plan: LicensePlan = LicensePlan.STANDARD,
    expires_at: Optional[datetime] = None,
    limits: Optional[Dict[ResourceType, int]] = None,
    usage: Optional[Dict[ResourceType, int]] = None,
    status: Optional[LicenseStatus] = None,
    features: Iterable[str] = ("basic_appointments",),
    license_key: str = "MEDI-AAAA-BBBB-CCCC-DDDD",
) -> License:
    """Build a license with explicit limits and counters."""
    license = License.create(
        clinic_id=clinic_id or uuid.uuid4(),
        license_key=license_key,
        plan=plan,
        expires_at=expires_at or datetime.now(timezone.utc) + timedelta(days=365),
        usage_limits=limits or {t: 10 for t in ResourceType},
        features=features,
    )
    changes = {}
    if usage:
        changes["usage"] = usage
    if status is not None:
        changes["status"] = status
    if changes:
        license = License(**{**license.__dict__, **changes})
    return license


@pytest.fixture
def in_memory_cache():
    return InMemoryCache()


@pytest.fixture
def clinic_repository():
    return InMemoryClinicRepository()


@pytest.fixture
def principal_repository():
    return InMemoryPrincipalRepository()


@pytest.fixture
def permission_repository():
    return InMemoryPermissionRepository()


@pytest.fixture
def membership_repository():
    return InMemoryMembershipRepository()


@pytest.fixture
def role_repository(membership_repository):
    return InMemoryRoleRepository(membership_repository)


@pytest.fixture
def license_key_repository():
    return InMemoryLicenseKeyRepository()


@pytest.fixture
def license_repository(license_key_repository):
    return InMemoryLicenseRepository(license_key_repository)


@pytest.fixture
def activation_policy():
    return HmacActivationCodePolicy(secret="unit-test-secret")


@pytest.fixture
def license_factory():
    return make_license


@pytest.fixture
async def seeded_roles(permission_repository, role_repository):
    """Every catalog permission and system role, stored in memory."""
    from access.application.services.role_seeder import RoleSeeder

    await RoleSeeder(permission_repository, role_repository).seed()
    return {role.name: role for role in await role_repository.list_all()}


@pytest.fixture
async def clinic_factory(clinic_repository):
    async def create(name: str = "North Clinic") -> Clinic:
        slug = f"clinic-{uuid.uuid4().hex[:8]}"
        return await clinic_repository.save(Clinic.create(name=name, slug=slug))

    return create


@pytest.fixture
async def principal_factory(principal_repository):
    async def create(email: Optional[str] = None, active: bool = True) -> Principal:
        principal = Principal.create(
            email or f"user-{uuid.uuid4().hex[:8]}@example.com", make_password("secret")
        )
        if not active:
            principal = principal.deactivate()
        return await principal_repository.save(principal)

    return create


@pytest.fixture
def grant(membership_repository):
    """Bind a principal to a clinic with a role, bypassing the handlers."""

    async def bind(principal: Principal, clinic: Clinic, role: Role) -> Membership:
        return await membership_repository.save(Membership.create(principal.id, clinic.id, role))

    return bind


@pytest.fixture
def default_role_permissions():
    return DEFAULT_ROLE_PERMISSIONS


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def db_roles(db):
    """Seed the default permissions and roles into the test database."""
    from asgiref.sync import async_to_sync

    from access.application.services.role_seeder import RoleSeeder
    from access.infrastructure.repositories.django_permission_repository import (
        DjangoPermissionRepository,
    )
    from access.infrastructure.repositories.django_role_repository import DjangoRoleRepository

    async_to_sync(RoleSeeder(DjangoPermissionRepository(), DjangoRoleRepository()).seed)()


@pytest.fixture
def db_clinic_factory(db):
    from clinics.infrastructure.models import Clinic as ClinicModel

    def create(name: str = "North Clinic") -> ClinicModel:
        return ClinicModel.objects.create(name=name, slug=f"clinic-{uuid.uuid4().hex[:10]}")

    return create


@pytest.fixture
def db_member_factory(db_roles):
    """Create a principal holding ``role`` in ``clinic``; the password is "secret"."""
    from access.infrastructure.models import ClinicMembership
    from access.infrastructure.models import Principal as PrincipalModel
    from access.infrastructure.models import Role as RoleModel

    def create(clinic, role: str) -> PrincipalModel:
        principal = PrincipalModel.objects.create(
            email=f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            password=make_password("secret"),
        )
        ClinicMembership.objects.create(
            principal=principal, clinic=clinic, role=RoleModel.objects.get(name=role)
        )
        return principal

    return create


@pytest.fixture
def login(api_client):
    """Authenticate the API client as ``principal`` with Basic credentials."""
    import base64

    def authenticate(principal, password: str = "secret", **headers):
        token = base64.b64encode(f"{principal.email}:{password}".encode()).decode()
        api_client.credentials(HTTP_AUTHORIZATION=f"Basic {token}", **headers)
        return api_client

    return authenticate


@pytest.fixture
def db_license_factory(db):
    """Provision a license through the application handler."""
    from asgiref.sync import async_to_sync

    from licenses.application.commands.provision_license import ProvisionLicenseCommand
    from licenses.application.services.licensing import build_provision_handler

    def provision(clinic, plan: str = "standard", usage_limits=None, features=None):
        return async_to_sync(build_provision_handler().handle)(
            ProvisionLicenseCommand(
                clinic_id=clinic.id,
                plan=plan,
                usage_limits=usage_limits or {},
                features=features,
            )
        )

    return provision
