"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
Usage counters are changed with conditional ``UPDATE`` statements so the
limit check and the write are one atomic step in the database.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from core.domain.exceptions import (
    DuplicateLicenseKeyError,
    LicenseAlreadyProvisionedError,
    LicenseNotFoundError,
)
from core.domain.value_objects import LicensePlan, LicenseStatus, ResourceType
from licenses.domain.license import License
from licenses.domain.license_key import LicenseKey
from licenses.infrastructure.models import USAGE_COLUMNS
from licenses.infrastructure.models import License as LicenseModel
from licenses.infrastructure.models import LicenseAuditLog as AuditLogModel
from licenses.infrastructure.models import LicenseKey as LicenseKeyModel
from licenses.ports.license_repository import LicenseRepository, LicenseSummary

_UPDATABLE_FIELDS = [
    "plan",
    "status",
    "expires_at",
    "features",
    "activated_at",
    "updated_at",
] + [limit for _, limit in USAGE_COLUMNS.values()]


class DjangoLicenseRepository(LicenseRepository):
    """
    Django ORM implementation of LicenseRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements the atomic usage counter operations
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            id=model.id,
            clinic_id=model.clinic_id,
            license_key=model.license_key,
            plan=LicensePlan(model.plan),
            status=LicenseStatus(model.status),
            expires_at=model.expires_at,
            features=frozenset(model.features or []),
            usage_limits={t: getattr(model, cols[1]) for t, cols in USAGE_COLUMNS.items()},
            usage={t: getattr(model, cols[0]) for t, cols in USAGE_COLUMNS.items()},
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_usage_reset=model.last_usage_reset,
            activated_at=model.activated_at,
        )

    def _to_model(self, license: License) -> LicenseModel:
        """
        Convert domain entity to Django model.

        Counters are only taken from the entity for a new row.
        """
        defaults = {
            "clinic_id": license.clinic_id,
            "license_key": license.license_key,
            "plan": license.plan.value,
            "status": license.status.value,
            "expires_at": license.expires_at,
            "features": sorted(license.features),
            "last_usage_reset": license.last_usage_reset,
            "activated_at": license.activated_at,
        }
        for resource_type, (counter, limit) in USAGE_COLUMNS.items():
            defaults[limit] = license.limit_for(resource_type)
            defaults[counter] = license.current_usage(resource_type)

        model, created = LicenseModel.objects.get_or_create(id=license.id, defaults=defaults)
        if not created:
            model.plan = license.plan.value
            model.status = license.status.value
            model.expires_at = license.expires_at
            model.features = sorted(license.features)
            model.activated_at = license.activated_at
            for resource_type, (_, limit) in USAGE_COLUMNS.items():
                setattr(model, limit, license.limit_for(resource_type))
        return model

    @sync_to_async
    def save(self, license: License) -> License:
        try:
            with transaction.atomic():
                model = self._to_model(license)
                # Counters are excluded: they only change through the conditional updates.
                model.save(update_fields=_UPDATABLE_FIELDS)
        except IntegrityError as e:
            if LicenseModel.objects.filter(clinic_id=license.clinic_id).exclude(
                id=license.id
            ).exists():
                raise LicenseAlreadyProvisionedError(
                    f"Clinic {license.clinic_id} already has a license"
                ) from e
            raise DuplicateLicenseKeyError() from e
        return self._to_domain(LicenseModel.objects.get(id=license.id))

    @sync_to_async
    def provision(self, license: License, issued_key: LicenseKey) -> License:
        with transaction.atomic():
            if LicenseModel.objects.filter(clinic_id=license.clinic_id).exists():
                raise LicenseAlreadyProvisionedError(
                    f"Clinic {license.clinic_id} already has a license"
                )
            try:
                with transaction.atomic():
                    model = self._to_model(license)
                    LicenseKeyModel.objects.create(
                        id=issued_key.id,
                        key=issued_key.key,
                        key_hash=issued_key.key_hash,
                        strategy=issued_key.strategy.value,
                        license=model,
                        issued_at=issued_key.issued_at,
                    )
            except IntegrityError as e:
                if LicenseModel.objects.filter(clinic_id=license.clinic_id).exists():
                    raise LicenseAlreadyProvisionedError(
                        f"Clinic {license.clinic_id} already has a license"
                    ) from e
                raise DuplicateLicenseKeyError(
                    f"License key {issued_key.key} was already issued"
                ) from e
            AuditLogModel.objects.create(
                license=model,
                action="license_provisioned",
                changes={
                    "plan": license.plan.value,
                    "expires_at": license.expires_at.isoformat(),
                    "license_key": license.license_key,
                },
                actor="system",
            )
        return self._to_domain(LicenseModel.objects.get(id=license.id))

    @sync_to_async
    def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        try:
            return self._to_domain(LicenseModel.objects.get(id=license_id))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_clinic(self, clinic_id: uuid.UUID) -> Optional[License]:
        try:
            return self._to_domain(LicenseModel.objects.get(clinic_id=clinic_id))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_key(self, license_key: str) -> Optional[License]:
        try:
            return self._to_domain(LicenseModel.objects.get(license_key=license_key))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def find_expired_running(self, now: datetime) -> List[License]:
        models = LicenseModel.objects.filter(
            status__in=[LicenseStatus.ACTIVE.value, LicenseStatus.TRIAL.value],
            expires_at__lte=now,
        )
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def try_increment_usage(
        self, license_id: uuid.UUID, resource_type: ResourceType, amount: int
    ) -> bool:
        counter, limit = USAGE_COLUMNS[resource_type]
        # Single conditional UPDATE: concurrent callers cannot both pass the limit.
        updated = LicenseModel.objects.filter(
            id=license_id, **{f"{counter}__lte": F(limit) - amount}
        ).update(**{counter: F(counter) + amount, "updated_at": timezone.now()})
        return updated == 1

    @sync_to_async
    def try_decrement_usage(
        self, license_id: uuid.UUID, resource_type: ResourceType, amount: int
    ) -> bool:
        counter, _ = USAGE_COLUMNS[resource_type]
        updated = LicenseModel.objects.filter(
            id=license_id, **{f"{counter}__gte": amount}
        ).update(**{counter: F(counter) - amount, "updated_at": timezone.now()})
        return updated == 1

    @sync_to_async
    def reset_monthly_usage(self, period_start: datetime, now: datetime) -> int:
        monthly = [USAGE_COLUMNS[t][0] for t in ResourceType if t.is_monthly]
        return LicenseModel.objects.filter(
            Q(last_usage_reset__isnull=True) | Q(last_usage_reset__lt=period_start)
        ).update(last_usage_reset=now, updated_at=now, **{column: 0 for column in monthly})

    @sync_to_async
    def replace_key(self, license_id: uuid.UUID, new_key: LicenseKey, actor: str) -> str:
        with transaction.atomic():
            try:
                model = LicenseModel.objects.select_for_update().get(id=license_id)
            except LicenseModel.DoesNotExist:
                raise LicenseNotFoundError(f"License {license_id} not found") from None

            old_key = model.license_key
            now = timezone.now()
            try:
                with transaction.atomic():
                    LicenseKeyModel.objects.create(
                        id=new_key.id,
                        key=new_key.key,
                        key_hash=new_key.key_hash,
                        strategy=new_key.strategy.value,
                        license=model,
                        issued_at=new_key.issued_at,
                    )
            except IntegrityError as e:
                raise DuplicateLicenseKeyError(
                    f"License key {new_key.key} was already issued"
                ) from e

            LicenseKeyModel.objects.filter(key=old_key, retired_at__isnull=True).update(
                retired_at=now
            )
            model.license_key = new_key.key
            model.save(update_fields=["license_key", "updated_at"])
            AuditLogModel.objects.create(
                license=model,
                action="key_regenerated",
                changes={"old_key": old_key, "new_key": new_key.key},
                actor=actor,
            )
        return old_key

    @sync_to_async
    def add_audit_entry(
        self,
        license_id: uuid.UUID,
        action: str,
        changes: Dict[str, Any],
        actor: str = "system",
    ) -> None:
        AuditLogModel.objects.create(
            license_id=license_id, action=action, changes=changes, actor=actor
        )

    @sync_to_async
    def summary(self, expiring_within_days: int = 30) -> LicenseSummary:
        now = timezone.now()
        by_plan = dict(
            LicenseModel.objects.values_list("plan").annotate(count=Count("id")).order_by()
        )
        by_status = dict(
            LicenseModel.objects.values_list("status").annotate(count=Count("id")).order_by()
        )
        expiring = LicenseModel.objects.filter(
            status__in=[LicenseStatus.ACTIVE.value, LicenseStatus.TRIAL.value],
            expires_at__gt=now,
            expires_at__lte=now + timedelta(days=expiring_within_days),
        ).count()
        return LicenseSummary(
            total=sum(by_plan.values()),
            by_plan=by_plan,
            by_status=by_status,
            expiring_soon=expiring,
        )
