"""
Django implementation of LicenseKeyRepository port.
"""
import uuid
from typing import Dict, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError
from django.db.models import Count

from core.domain.exceptions import DuplicateLicenseKeyError
from core.domain.value_objects import KeyStrategy
from licenses.domain.license_key import LicenseKey
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel
from licenses.ports.license_key_repository import LicenseKeyRepository


class DjangoLicenseKeyRepository(LicenseKeyRepository):
    """Django ORM implementation of the issued key registry."""

    def _to_domain(self, model: LicenseKeyModel) -> LicenseKey:
        return LicenseKey(
            id=model.id,
            key=model.key,
            key_hash=model.key_hash,
            strategy=KeyStrategy(model.strategy),
            license_id=model.license_id,
            issued_at=model.issued_at,
            retired_at=model.retired_at,
        )

    @sync_to_async
    def save(self, license_key: LicenseKey) -> LicenseKey:
        try:
            model, _ = LicenseKeyModel.objects.update_or_create(
                id=license_key.id,
                defaults={
                    "key": license_key.key,
                    "key_hash": license_key.key_hash,
                    "strategy": license_key.strategy.value,
                    "license_id": license_key.license_id,
                    "issued_at": license_key.issued_at,
                    "retired_at": license_key.retired_at,
                },
            )
        except IntegrityError as e:
            raise DuplicateLicenseKeyError(
                f"License key {license_key.key} was already issued"
            ) from e
        return self._to_domain(model)

    @sync_to_async
    def find_by_key(self, key: str) -> Optional[LicenseKey]:
        try:
            return self._to_domain(LicenseKeyModel.objects.get(key=key))
        except LicenseKeyModel.DoesNotExist:
            return None

    @sync_to_async
    def exists(self, key: str) -> bool:
        return LicenseKeyModel.objects.filter(key=key).exists()

    @sync_to_async
    def find_current_for_license(self, license_id: uuid.UUID) -> Optional[LicenseKey]:
        model = (
            LicenseKeyModel.objects.filter(license_id=license_id, retired_at__isnull=True)
            .order_by("-issued_at")
            .first()
        )
        return self._to_domain(model) if model else None

    @sync_to_async
    def count_by_strategy(self) -> Dict[str, int]:
        return dict(
            LicenseKeyModel.objects.values_list("strategy").annotate(count=Count("id")).order_by()
        )

    @sync_to_async
    def count_retired(self) -> int:
        return LicenseKeyModel.objects.filter(retired_at__isnull=False).count()
