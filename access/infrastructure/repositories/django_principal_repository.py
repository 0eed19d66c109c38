"""
Django implementation of PrincipalRepository port.
"""

import uuid
from typing import Optional

from asgiref.sync import sync_to_async

from access.domain.principal import Principal
from access.infrastructure.models import Principal as PrincipalModel
from access.ports.principal_repository import PrincipalRepository
from core.domain.value_objects import Email


class DjangoPrincipalRepository(PrincipalRepository):
    """Django ORM implementation of PrincipalRepository."""

    def _to_domain(self, model: PrincipalModel) -> Principal:
        return Principal(
            id=model.id,
            email=Email(model.email),
            password_hash=model.password,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, principal: Principal) -> PrincipalModel:
        model, created = PrincipalModel.objects.get_or_create(
            id=principal.id,
            defaults={
                "email": str(principal.email),
                "password": principal.password_hash,
                "is_active": principal.is_active,
            },
        )
        if not created:
            model.email = str(principal.email)
            model.password = principal.password_hash
            model.is_active = principal.is_active
        return model

    @sync_to_async
    def save(self, principal: Principal) -> Principal:
        model = self._to_model(principal)
        model.save()
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, principal_id: uuid.UUID) -> Optional[Principal]:
        try:
            return self._to_domain(PrincipalModel.objects.get(id=principal_id))
        except PrincipalModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_email(self, email: str) -> Optional[Principal]:
        try:
            return self._to_domain(PrincipalModel.objects.get(email=email.strip().lower()))
        except PrincipalModel.DoesNotExist:
            return None
