"""
Access domain services.

The authorization resolver answers yes/no questions about a principal's
roles and permissions, globally and per clinic. Every question is a pure
read; a principal with no membership in a clinic is never granted
anything there, whatever it holds elsewhere.
"""

import logging
import uuid
from typing import Iterable, List, Optional, Union

from access.domain.catalog import REQUIRED_PERMISSIONS
from access.domain.grants import PrincipalGrants
from access.domain.principal import Principal
from access.ports.authorization_cache import AuthorizationCache
from access.ports.membership_repository import MembershipRepository
from access.ports.permission_repository import PermissionRepository
from access.ports.principal_repository import PrincipalRepository
from clinics.domain.clinic import Clinic
from clinics.ports.clinic_repository import ClinicRepository
from core.domain.exceptions import UnknownPermissionError
from core.domain.results import AuthorizationFailure, Ok
from core.metrics import authorization_checks_total, authorization_grants_cache_total

logger = logging.getLogger(__name__)

PrincipalRef = Union[Principal, uuid.UUID, str, None]
ClinicRef = Union[uuid.UUID, str, None]
AuthorizationResult = Union[Ok, AuthorizationFailure]


def _principal_id(principal: PrincipalRef) -> Optional[uuid.UUID]:
    """Principal id, or None for absent or anonymous principals."""
    if principal is None or not getattr(principal, "is_authenticated", True):
        return None
    if isinstance(principal, Principal):
        return principal.id
    if isinstance(principal, uuid.UUID):
        return principal
    try:
        return uuid.UUID(str(principal))
    except ValueError:
        return None


def _clinic_id(clinic_id: ClinicRef) -> Optional[uuid.UUID]:
    if clinic_id is None or isinstance(clinic_id, uuid.UUID):
        return clinic_id
    try:
        return uuid.UUID(str(clinic_id))
    except ValueError:
        return None


def _record(check: str, allowed: bool) -> bool:
    authorization_checks_total.labels(check=check, outcome="allow" if allowed else "deny").inc()
    return allowed


class AuthorizationResolver:
    """
    Resolves roles and permissions for principals.

    Grants are loaded once per principal (membership, role name and the
    role's permission strings) and optionally cached; the cache is
    invalidated synchronously by every membership or role change.
    """

    def __init__(
        self,
        principal_repository: PrincipalRepository,
        membership_repository: MembershipRepository,
        clinic_repository: ClinicRepository,
        grants_cache: Optional[AuthorizationCache] = None,
    ):
        self.principal_repository = principal_repository
        self.membership_repository = membership_repository
        self.clinic_repository = clinic_repository
        self.grants_cache = grants_cache

    async def grants_for(self, principal: PrincipalRef) -> Optional[PrincipalGrants]:
        """
        Resolve the grants snapshot of a principal.

        Returns:
            Grants, or None when no principal is given
        """
        principal_id = _principal_id(principal)
        if principal_id is None:
            return None

        key = None
        if self.grants_cache is not None:
            key = await self.grants_cache.key_for(principal_id)
            cached = await self.grants_cache.get(key)
            if cached is not None:
                authorization_grants_cache_total.labels(source="cache").inc()
                return cached

        stored = await self.principal_repository.find_by_id(principal_id)
        if stored is None:
            grants = PrincipalGrants.empty(principal_id)
        else:
            memberships = await self.membership_repository.find_by_principal(principal_id)
            grants = PrincipalGrants.build(stored, memberships)
        authorization_grants_cache_total.labels(source="storage").inc()

        if key is not None:
            await self.grants_cache.set(key, grants)
        return grants

    async def _active_grants(self, principal: PrincipalRef) -> Optional[PrincipalGrants]:
        grants = await self.grants_for(principal)
        if grants is None or not grants.is_active:
            return None
        return grants

    async def has_permission(self, principal: PrincipalRef, permission_name: str) -> bool:
        """True iff a role held in any clinic includes the permission."""
        grants = await self._active_grants(principal)
        allowed = grants is not None and any(
            permission_name in grant.permissions for grant in grants.clinics
        )
        return _record("permission", allowed)

    async def has_permission_in_clinic(
        self, principal: PrincipalRef, permission_name: str, clinic_id: ClinicRef
    ) -> bool:
        """True iff the principal's role in ``clinic_id`` includes the permission."""
        grants = await self._active_grants(principal)
        clinic = _clinic_id(clinic_id)
        grant = grants.for_clinic(clinic) if grants is not None and clinic is not None else None
        allowed = grant is not None and permission_name in grant.permissions
        return _record("permission_in_clinic", allowed)

    async def has_role(self, principal: PrincipalRef, role_name: str) -> bool:
        """True iff the principal holds ``role_name`` in any clinic."""
        grants = await self._active_grants(principal)
        allowed = grants is not None and any(g.role_name == role_name for g in grants.clinics)
        return _record("role", allowed)

    async def has_role_in_clinic(
        self, principal: PrincipalRef, role_name: str, clinic_id: ClinicRef
    ) -> bool:
        """True iff the principal holds ``role_name`` in ``clinic_id``."""
        grants = await self._active_grants(principal)
        clinic = _clinic_id(clinic_id)
        grant = grants.for_clinic(clinic) if grants is not None and clinic is not None else None
        allowed = grant is not None and grant.role_name == role_name
        return _record("role_in_clinic", allowed)

    async def has_any_permission(
        self,
        principal: PrincipalRef,
        permission_names: Iterable[str],
        clinic_id: ClinicRef = None,
    ) -> bool:
        """Logical OR of the per-permission check. An empty list is never granted."""
        for name in list(permission_names):
            if await self._check(principal, name, clinic_id):
                return True
        return False

    async def has_all_permissions(
        self,
        principal: PrincipalRef,
        permission_names: Iterable[str],
        clinic_id: ClinicRef = None,
    ) -> bool:
        """Logical AND of the per-permission check. An empty list is never granted."""
        names = list(permission_names)
        if not names:
            return False
        for name in names:
            if not await self._check(principal, name, clinic_id):
                return False
        return True

    async def has_clinic_access(self, principal: PrincipalRef, clinic_id: ClinicRef) -> bool:
        """True iff the principal has a membership in ``clinic_id``."""
        grants = await self._active_grants(principal)
        clinic = _clinic_id(clinic_id)
        allowed = grants is not None and clinic is not None and grants.for_clinic(clinic) is not None
        return _record("clinic_access", allowed)

    async def _check(self, principal: PrincipalRef, name: str, clinic_id: ClinicRef) -> bool:
        if clinic_id is None:
            return await self.has_permission(principal, name)
        return await self.has_permission_in_clinic(principal, name, clinic_id)

    @staticmethod
    def _ensure_principal(principal: PrincipalRef) -> None:
        if principal is None:
            raise ValueError("A principal is required for authorization checks")

    @staticmethod
    def _deny(message: str, **details) -> AuthorizationFailure:
        logger.info(
            "Authorization denied: %s",
            message,
            extra={k: str(v) for k, v in details.items() if v is not None},
        )
        return AuthorizationFailure(message=message, **details)

    async def require_permission(
        self, principal: PrincipalRef, permission_name: str, clinic_id: ClinicRef = None
    ) -> AuthorizationResult:
        """
        Same as the permission checks but returns ``AuthorizationFailure``
        naming the missing permission (and clinic) on denial.

        Raises:
            ValueError: If no principal is given
        """
        self._ensure_principal(principal)
        if await self._check(principal, permission_name, clinic_id):
            return Ok()
        where = f" in clinic {clinic_id}" if clinic_id is not None else ""
        return self._deny(
            f"Missing permission '{permission_name}'{where}",
            required_permission=permission_name,
            clinic_id=_clinic_id(clinic_id),
        )

    async def require_role(
        self, principal: PrincipalRef, role_name: str, clinic_id: ClinicRef = None
    ) -> AuthorizationResult:
        """
        Raises:
            ValueError: If no principal is given
        """
        self._ensure_principal(principal)
        if clinic_id is None:
            allowed = await self.has_role(principal, role_name)
        else:
            allowed = await self.has_role_in_clinic(principal, role_name, clinic_id)
        if allowed:
            return Ok()
        where = f" in clinic {clinic_id}" if clinic_id is not None else ""
        return self._deny(
            f"Missing role '{role_name}'{where}",
            required_role=role_name,
            clinic_id=_clinic_id(clinic_id),
        )

    async def require_any_permission(
        self,
        principal: PrincipalRef,
        permission_names: Iterable[str],
        clinic_id: ClinicRef = None,
    ) -> AuthorizationResult:
        self._ensure_principal(principal)
        names = list(permission_names)
        if await self.has_any_permission(principal, names, clinic_id):
            return Ok()
        return self._deny(
            f"Missing any of permissions {', '.join(names)}",
            required_permission=" | ".join(names),
            clinic_id=_clinic_id(clinic_id),
        )

    async def require_all_permissions(
        self,
        principal: PrincipalRef,
        permission_names: Iterable[str],
        clinic_id: ClinicRef = None,
    ) -> AuthorizationResult:
        self._ensure_principal(principal)
        names = list(permission_names)
        for name in names:
            if not await self._check(principal, name, clinic_id):
                where = f" in clinic {clinic_id}" if clinic_id is not None else ""
                return self._deny(
                    f"Missing permission '{name}'{where}",
                    required_permission=name,
                    clinic_id=_clinic_id(clinic_id),
                )
        if not names:
            return self._deny("No permissions requested", clinic_id=_clinic_id(clinic_id))
        return Ok()

    async def require_clinic_access(
        self, principal: PrincipalRef, clinic_id: ClinicRef
    ) -> AuthorizationResult:
        self._ensure_principal(principal)
        if await self.has_clinic_access(principal, clinic_id):
            return Ok()
        return self._deny(
            f"No access to clinic {clinic_id}",
            clinic_id=_clinic_id(clinic_id),
        )

    async def current_clinic(
        self, principal: PrincipalRef, clinic_id: ClinicRef = None
    ) -> Optional[Clinic]:
        """
        Resolve the clinic context of a request.

        An explicit ``clinic_id`` resolves only if the principal is a member.
        Without one, a principal with exactly one membership resolves to that
        clinic; zero or several memberships resolve to None, and the caller
        must ask for an explicit selection.
        """
        grants = await self._active_grants(principal)
        if grants is None:
            return None

        if clinic_id is not None:
            target = _clinic_id(clinic_id)
            if target is None or grants.for_clinic(target) is None:
                return None
        elif len(grants.clinics) == 1:
            target = grants.clinics[0].clinic_id
        else:
            logger.debug(
                "No implicit clinic context for principal %s (%d memberships)",
                grants.principal_id,
                len(grants.clinics),
            )
            return None

        return await self.clinic_repository.find_by_id(target)


class PermissionRegistry:
    """Checks that permission names referenced by code exist in storage."""

    def __init__(self, permission_repository: PermissionRepository):
        self.permission_repository = permission_repository

    async def missing(self, required: Iterable[str] = REQUIRED_PERMISSIONS) -> List[str]:
        """Required names absent from storage, in the order given."""
        stored = set(await self.permission_repository.list_names())
        return [name for name in required if name not in stored]

    async def verify(self, required: Iterable[str] = REQUIRED_PERMISSIONS) -> None:
        """
        Raises:
            UnknownPermissionError: If any required name is not seeded
        """
        missing = await self.missing(required)
        if missing:
            raise UnknownPermissionError(
                f"Permissions referenced by code are not seeded: {', '.join(missing)}"
            )
