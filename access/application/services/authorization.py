"""
Wiring for the authorization resolver.

Callers outside the access app (HTTP layer, middleware, tasks) obtain a
resolver backed by the Django repositories and the shared grants cache.
"""

from access.application.services.authorization_cache_service import AuthorizationCacheService
from access.domain.services import AuthorizationResolver, PermissionRegistry
from access.infrastructure.repositories.django_membership_repository import (
    DjangoMembershipRepository,
)
from access.infrastructure.repositories.django_permission_repository import (
    DjangoPermissionRepository,
)
from access.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)
from clinics.infrastructure.repositories.django_clinic_repository import DjangoClinicRepository

authorization_cache = AuthorizationCacheService()


def build_authorization_resolver(use_cache: bool = True) -> AuthorizationResolver:
    return AuthorizationResolver(
        principal_repository=DjangoPrincipalRepository(),
        membership_repository=DjangoMembershipRepository(),
        clinic_repository=DjangoClinicRepository(),
        grants_cache=authorization_cache if use_cache else None,
    )


def build_permission_registry() -> PermissionRegistry:
    return PermissionRegistry(DjangoPermissionRepository())
