"""
License domain entity.

One license per clinic. The license carries its plan tier, status, expiry,
feature flags, and per resource type usage limits and counters. Counters
are mutated through the usage manager's atomic storage operations, never
by saving a modified entity.
"""

import calendar
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from core.domain.exceptions import InvalidLicenseStatusError, LicenseAlreadyActivatedError
from core.domain.value_objects import LicensePlan, LicenseStatus, ResourceType


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    Immutable; every transition returns a new instance.
    """

    id: uuid.UUID
    clinic_id: uuid.UUID
    license_key: str
    plan: LicensePlan
    status: LicenseStatus
    expires_at: datetime
    features: FrozenSet[str]
    usage_limits: Mapping[ResourceType, int]
    usage: Mapping[ResourceType, int]
    created_at: datetime
    updated_at: datetime
    last_usage_reset: Optional[datetime] = None
    activated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate license entity."""
        if not self.clinic_id:
            raise ValueError("Clinic ID is required")
        if not self.license_key or len(self.license_key.strip()) == 0:
            raise ValueError("License key cannot be empty")
        if self.expires_at is None:
            raise ValueError("Expiration date is required")
        object.__setattr__(
            self, "usage_limits", {t: int(self.usage_limits.get(t, 0)) for t in ResourceType}
        )
        object.__setattr__(self, "usage", {t: int(self.usage.get(t, 0)) for t in ResourceType})
        for resource_type, limit in self.usage_limits.items():
            if limit < 0:
                raise ValueError(f"Usage limit for {resource_type} cannot be negative")
            if self.usage[resource_type] < 0:
                raise ValueError(f"Usage for {resource_type} cannot be negative")

    @classmethod
    def create(
        cls,
        clinic_id: uuid.UUID,
        license_key: str,
        plan: LicensePlan,
        expires_at: datetime,
        usage_limits: Mapping[ResourceType, int],
        features: Iterable[str] = (),
        license_id: Optional[uuid.UUID] = None,
    ) -> "License":
        """
        Create a new License entity.

        Trial plans start in ``trial`` status, every other plan in ``active``.
        """
        now = _now()
        return cls(
            id=license_id or uuid.uuid4(),
            clinic_id=clinic_id,
            license_key=license_key,
            plan=plan,
            status=LicenseStatus.TRIAL if plan is LicensePlan.TRIAL else LicenseStatus.ACTIVE,
            expires_at=expires_at,
            features=frozenset(features),
            usage_limits=dict(usage_limits),
            usage={},
            created_at=now,
            updated_at=now,
            last_usage_reset=now,
        )

    def current_usage(self, resource_type: ResourceType) -> int:
        return self.usage[resource_type]

    def limit_for(self, resource_type: ResourceType) -> int:
        return self.usage_limits[resource_type]

    def is_valid(self, current_time: Optional[datetime] = None) -> bool:
        """
        Effective validity: an access-granting status and an unexpired date.

        The stored status is not changed by this check.
        """
        check_time = current_time or _now()
        return self.status.grants_access and check_time < self.expires_at

    def is_expired(self, current_time: Optional[datetime] = None) -> bool:
        return (current_time or _now()) >= self.expires_at

    def days_remaining(self, current_time: Optional[datetime] = None) -> int:
        remaining = self.expires_at - (current_time or _now())
        return max(0, remaining.days)

    def has_feature(self, feature_name: str) -> bool:
        return feature_name in self.features

    def _evolve(self, **changes) -> "License":
        return replace(self, updated_at=_now(), **changes)

    def enable_feature(self, feature_name: str) -> "License":
        return self._evolve(features=self.features | {feature_name})

    def disable_feature(self, feature_name: str) -> "License":
        return self._evolve(features=self.features - {feature_name})

    def with_limits(self, usage_limits: Mapping[ResourceType, int]) -> "License":
        return self._evolve(usage_limits={**self.usage_limits, **usage_limits})

    def with_key(self, license_key: str) -> "License":
        return self._evolve(license_key=license_key)

    def _running_status(self) -> LicenseStatus:
        return LicenseStatus.TRIAL if self.plan is LicensePlan.TRIAL else LicenseStatus.ACTIVE

    def suspend(self) -> "License":
        """
        Raises:
            InvalidLicenseStatusError: If the license is already suspended
        """
        if self.status is LicenseStatus.SUSPENDED:
            raise InvalidLicenseStatusError("License is already suspended")
        return self._evolve(status=LicenseStatus.SUSPENDED)

    def resume(self) -> "License":
        """
        Raises:
            InvalidLicenseStatusError: If the license is not suspended
        """
        if self.status is not LicenseStatus.SUSPENDED:
            raise InvalidLicenseStatusError("Can only resume a suspended license")
        status = LicenseStatus.EXPIRED if self.is_expired() else self._running_status()
        return self._evolve(status=status)

    def renew(self, months: int) -> "License":
        """
        Extend the expiry by whole months, counted from the later of now
        and the current expiry. An expired license becomes running again;
        a suspended one stays suspended.
        """
        if months < 1:
            raise ValueError("Renewal must be at least one month")
        base = max(self.expires_at, _now())
        status = self._running_status() if self.status is LicenseStatus.EXPIRED else self.status
        return self._evolve(expires_at=add_months(base, months), status=status)

    def change_plan(self, plan: LicensePlan) -> "License":
        status = self.status
        if status in (LicenseStatus.ACTIVE, LicenseStatus.TRIAL):
            status = LicenseStatus.TRIAL if plan is LicensePlan.TRIAL else LicenseStatus.ACTIVE
        return self._evolve(plan=plan, status=status)

    def mark_expired(self) -> "License":
        return self._evolve(status=LicenseStatus.EXPIRED)

    def activate(self, current_time: Optional[datetime] = None) -> "License":
        """
        Raises:
            LicenseAlreadyActivatedError: If the license was activated before
        """
        if self.activated_at is not None:
            raise LicenseAlreadyActivatedError()
        return self._evolve(activated_at=current_time or _now())

    def usage_snapshot(self) -> Dict[str, Dict[str, int]]:
        return {
            t.value: {"current": self.usage[t], "limit": self.usage_limits[t]}
            for t in ResourceType
        }
