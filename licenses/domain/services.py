"""
License domain services.

Usage metering and lifecycle rules. Every operation that can be rejected
for a business reason returns ``Ok`` or a ``Failure`` naming the reason.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from core.domain.exceptions import InvalidResourceTypeError
from core.domain.results import (
    BusinessRuleFailure,
    NotFound,
    Ok,
    UsageLimitExceeded,
    ValidationFailure,
)
from core.domain.value_objects import LicenseStatus, ResourceType
from core.metrics import license_activations_total, license_usage_operations_total
from licenses.domain.license import License
from licenses.ports.activation_code_policy import ActivationCodePolicy
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)

LicenseRef = Union[License, uuid.UUID, str]


def _license_id(license: LicenseRef) -> Optional[uuid.UUID]:
    if isinstance(license, License):
        return license.id
    if isinstance(license, uuid.UUID):
        return license
    try:
        return uuid.UUID(str(license))
    except ValueError:
        return None


def _not_found(license: Any) -> NotFound:
    return NotFound(
        message=f"License {license} not found", code="LICENSE_NOT_FOUND", entity="license"
    )


def start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class UsageReport:
    """Usage of one resource type against its limit."""

    resource_type: ResourceType
    current: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.current)

    @property
    def exceeded(self) -> bool:
        """True once no further unit can be added."""
        return self.current >= self.limit

    @property
    def percentage(self) -> float:
        if self.limit <= 0:
            return 0.0
        return round(self.current / self.limit * 100, 2)

    @classmethod
    def of(cls, license: License, resource_type: ResourceType) -> "UsageReport":
        return cls(
            resource_type=resource_type,
            current=license.current_usage(resource_type),
            limit=license.limit_for(resource_type),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_type": self.resource_type.value,
            "current": self.current,
            "limit": self.limit,
            "remaining": self.remaining,
            "exceeded": self.exceeded,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class LicenseStatusReport:
    """Effective validity of a license."""

    valid: bool
    status: str
    expires_at: datetime
    days_remaining: int

    @classmethod
    def of(cls, license: License, now: Optional[datetime] = None) -> "LicenseStatusReport":
        now = now or datetime.now(timezone.utc)
        return cls(
            valid=license.is_valid(now),
            status=license.status.value,
            expires_at=license.expires_at,
            days_remaining=license.days_remaining(now),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "status": self.status,
            "expires_at": self.expires_at.isoformat(),
            "days_remaining": self.days_remaining,
        }


class LicenseUsageManager:
    """
    Domain service for usage counters, validity and features.

    Counter changes go through the repository's conditional updates, so a
    check and its write are never separated.
    """

    def __init__(self, license_repository: LicenseRepository):
        self.license_repository = license_repository

    async def _load(self, license: LicenseRef) -> Optional[License]:
        license_id = _license_id(license)
        if license_id is None:
            return None
        return await self.license_repository.find_by_id(license_id)

    @staticmethod
    def _resource_type(value: Union[str, ResourceType]):
        try:
            return ResourceType.parse(value), None
        except InvalidResourceTypeError as e:
            logger.info("Rejected usage operation: %s", e.message)
            return None, ValidationFailure(message=e.message, code=e.code, field="resource_type")

    @staticmethod
    def _amount_failure(amount: Any) -> Optional[ValidationFailure]:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            return ValidationFailure(
                message=f"Amount must be a positive integer, got {amount!r}",
                code="INVALID_AMOUNT",
                field="amount",
            )
        return None

    @staticmethod
    def _record(operation: str, resource_type: Optional[ResourceType], outcome: str) -> None:
        license_usage_operations_total.labels(
            operation=operation,
            resource_type=resource_type.value if resource_type else "unknown",
            outcome=outcome,
        ).inc()

    async def check_usage_limit(
        self, license: LicenseRef, resource_type: Union[str, ResourceType]
    ) -> Union[Ok, NotFound, ValidationFailure]:
        """
        Read-only usage report.

        Returns:
            Ok(UsageReport), NotFound, or ValidationFailure for an unknown type
        """
        parsed, failure = self._resource_type(resource_type)
        if failure is not None:
            return failure
        stored = await self._load(license)
        if stored is None:
            return _not_found(license)
        return Ok(UsageReport.of(stored, parsed))

    async def usage_report(self, license: LicenseRef) -> Union[Ok, NotFound]:
        """Usage of every resource type."""
        stored = await self._load(license)
        if stored is None:
            return _not_found(license)
        return Ok({t: UsageReport.of(stored, t) for t in ResourceType})

    async def increment_usage(
        self,
        license: LicenseRef,
        resource_type: Union[str, ResourceType],
        amount: int = 1,
    ) -> Union[Ok, UsageLimitExceeded, NotFound, ValidationFailure]:
        """
        Add ``amount`` only if the counter stays within its limit.

        Returns:
            Ok(UsageReport after the increment), UsageLimitExceeded with the
            counter unchanged, NotFound, or ValidationFailure
        """
        parsed, failure = self._resource_type(resource_type)
        if failure is None:
            failure = self._amount_failure(amount)
        if failure is not None:
            self._record("increment", parsed, "invalid")
            return failure

        license_id = _license_id(license)
        if license_id is None:
            return _not_found(license)

        if await self.license_repository.try_increment_usage(license_id, parsed, amount):
            self._record("increment", parsed, "accepted")
            stored = await self.license_repository.find_by_id(license_id)
            return Ok(UsageReport.of(stored, parsed))

        stored = await self.license_repository.find_by_id(license_id)
        if stored is None:
            self._record("increment", parsed, "not_found")
            return _not_found(license)

        self._record("increment", parsed, "limit_exceeded")
        current, limit = stored.current_usage(parsed), stored.limit_for(parsed)
        logger.info(
            "Usage limit exceeded",
            extra={
                "license_id": str(license_id),
                "resource_type": parsed.value,
                "current": current,
                "limit": limit,
                "requested": amount,
            },
        )
        return UsageLimitExceeded(
            message=f"Usage limit exceeded for {parsed.value}: {current}/{limit}",
            resource_type=parsed.value,
            current=current,
            limit=limit,
            requested=amount,
        )

    async def decrement_usage(
        self,
        license: LicenseRef,
        resource_type: Union[str, ResourceType],
        amount: int = 1,
    ) -> Union[Ok, BusinessRuleFailure, NotFound, ValidationFailure]:
        """
        Subtract ``amount``; going below zero is rejected and leaves the
        counter unchanged.
        """
        parsed, failure = self._resource_type(resource_type)
        if failure is None:
            failure = self._amount_failure(amount)
        if failure is not None:
            self._record("decrement", parsed, "invalid")
            return failure

        license_id = _license_id(license)
        if license_id is None:
            return _not_found(license)

        if await self.license_repository.try_decrement_usage(license_id, parsed, amount):
            self._record("decrement", parsed, "accepted")
            stored = await self.license_repository.find_by_id(license_id)
            return Ok(UsageReport.of(stored, parsed))

        stored = await self.license_repository.find_by_id(license_id)
        if stored is None:
            self._record("decrement", parsed, "not_found")
            return _not_found(license)

        self._record("decrement", parsed, "underflow")
        current = stored.current_usage(parsed)
        logger.warning(
            "Rejected usage decrement below zero",
            extra={
                "license_id": str(license_id),
                "resource_type": parsed.value,
                "current": current,
                "requested": amount,
            },
        )
        return BusinessRuleFailure(
            message=f"Cannot decrement {parsed.value} by {amount}: current usage is {current}",
            code="USAGE_BELOW_ZERO",
        )

    async def reset_monthly_usage(self, now: Optional[datetime] = None) -> Ok:
        """
        Zero the monthly counters of every license not yet reset this
        calendar month (UTC). A second run in the same month resets nothing.

        Returns:
            Ok(number of licenses reset)
        """
        now = now or datetime.now(timezone.utc)
        count = await self.license_repository.reset_monthly_usage(start_of_month(now), now)
        logger.info("Monthly usage reset for %d license(s)", count)
        return Ok(count)

    async def get_license_status(
        self, license: LicenseRef, now: Optional[datetime] = None
    ) -> Union[Ok, NotFound]:
        """
        Returns:
            Ok(LicenseStatusReport) or NotFound
        """
        stored = license if isinstance(license, License) else await self._load(license)
        if stored is None:
            return _not_found(license)
        return Ok(LicenseStatusReport.of(stored, now))

    async def has_feature(self, license: LicenseRef, feature_name: str) -> bool:
        """Membership test on the feature set; unknown licenses have no features."""
        stored = license if isinstance(license, License) else await self._load(license)
        return stored is not None and stored.has_feature(feature_name)


class LicenseLifecycleManager:
    """Domain service for activation and status transitions."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activation_policy: Optional[ActivationCodePolicy] = None,
    ):
        self.license_repository = license_repository
        self.activation_policy = activation_policy

    def activation_code_for(self, license_key: str) -> str:
        if self.activation_policy is None:
            raise RuntimeError("No activation code policy configured")
        return self.activation_policy.code_for(license_key)

    async def activate_license(
        self,
        license_key: str,
        activation_code: str,
        actor: str = "system",
        now: Optional[datetime] = None,
    ) -> Union[Ok, NotFound, BusinessRuleFailure]:
        """
        Activate a license with the code derived for its key.

        Checks run in order: the key exists, the license is not expired,
        not suspended, the code matches, and the license was not activated
        before.

        Returns:
            Ok(License) or a failure naming the reason
        """
        if self.activation_policy is None:
            raise RuntimeError("No activation code policy configured")
        now = now or datetime.now(timezone.utc)

        def reject(outcome: str, failure):
            license_activations_total.labels(outcome=outcome).inc()
            logger.info("License activation rejected: %s", failure.code)
            return failure

        license = await self.license_repository.find_by_key(license_key)
        if license is None:
            return reject("not_found", _not_found(license_key))
        if license.is_expired(now):
            return reject(
                "expired",
                BusinessRuleFailure(
                    message=f"License expired on {license.expires_at.date().isoformat()}",
                    code="LICENSE_EXPIRED",
                ),
            )
        if license.status is LicenseStatus.SUSPENDED:
            return reject(
                "suspended",
                BusinessRuleFailure(message="License is suspended", code="LICENSE_SUSPENDED"),
            )
        if not self.activation_policy.verify(license_key, activation_code):
            return reject(
                "invalid_code",
                BusinessRuleFailure(
                    message="Invalid activation code", code="INVALID_ACTIVATION_CODE"
                ),
            )
        if license.activated_at is not None:
            return reject(
                "already_activated",
                BusinessRuleFailure(message="License already activated", code="ALREADY_ACTIVATED"),
            )

        activated = await self.license_repository.save(license.activate(now))
        await self.license_repository.add_audit_entry(
            activated.id, "license_activated", {"activated_at": now.isoformat()}, actor
        )
        license_activations_total.labels(outcome="activated").inc()
        logger.info("License %s activated", activated.id)
        return Ok(activated)

    async def renew_license(self, license: License, months: int) -> License:
        """
        Renew a license.

        Args:
            license: License entity to renew
            months: Number of months to extend by

        Returns:
            Renewed license entity
        """
        return await self.license_repository.save(license.renew(months))

    async def suspend_license(self, license: License) -> License:
        return await self.license_repository.save(license.suspend())

    async def resume_license(self, license: License) -> License:
        return await self.license_repository.save(license.resume())

    async def expire_overdue(self, now: Optional[datetime] = None) -> List[License]:
        """
        Mark every running license whose expiry has passed as expired.

        Returns:
            The licenses transitioned
        """
        now = now or datetime.now(timezone.utc)
        expired = []
        for license in await self.license_repository.find_expired_running(now):
            expired.append(await self.license_repository.save(license.mark_expired()))
            await self.license_repository.add_audit_entry(
                license.id,
                "license_expired",
                {"expires_at": license.expires_at.isoformat(), "previous_status": license.status.value},
            )
            logger.info("Marked license %s as expired", license.id)
        return expired
