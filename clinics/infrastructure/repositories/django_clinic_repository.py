"""
Django implementation of ClinicRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async

from clinics.domain.clinic import Clinic
from clinics.infrastructure.models import Clinic as ClinicModel
from clinics.ports.clinic_repository import ClinicRepository
from core.domain.value_objects import ClinicSlug


class DjangoClinicRepository(ClinicRepository):
    """Django ORM implementation of ClinicRepository."""

    def _to_domain(self, model: ClinicModel) -> Clinic:
        """Convert Django model to domain entity."""
        return Clinic(
            id=model.id,
            name=model.name,
            slug=ClinicSlug(model.slug),
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, clinic: Clinic) -> ClinicModel:
        """Convert domain entity to Django model."""
        model, created = ClinicModel.objects.get_or_create(
            id=clinic.id,
            defaults={
                "name": clinic.name,
                "slug": str(clinic.slug),
                "is_active": clinic.is_active,
            },
        )
        if not created:
            model.name = clinic.name
            model.slug = str(clinic.slug)
            model.is_active = clinic.is_active
        return model

    @sync_to_async
    def save(self, clinic: Clinic) -> Clinic:
        model = self._to_model(clinic)
        model.save()
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, clinic_id: uuid.UUID) -> Optional[Clinic]:
        try:
            return self._to_domain(ClinicModel.objects.get(id=clinic_id))
        except ClinicModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_slug(self, slug: str) -> Optional[Clinic]:
        try:
            return self._to_domain(ClinicModel.objects.get(slug=slug))
        except ClinicModel.DoesNotExist:
            return None

    @sync_to_async
    def exists(self, clinic_id: uuid.UUID) -> bool:
        return ClinicModel.objects.filter(id=clinic_id).exists()

    @sync_to_async
    def list_all(self) -> List[Clinic]:
        return [self._to_domain(model) for model in ClinicModel.objects.all()]
