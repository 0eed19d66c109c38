"""
License lifecycle handlers.

Handlers for activate, renew, suspend, resume, feature and expiry commands.
"""
import logging
from datetime import datetime
from typing import List, Optional, Union

from core.domain.exceptions import LicenseNotFoundError
from core.domain.results import BusinessRuleFailure, NotFound, Ok
from core.infrastructure.events import event_bus
from core.metrics import license_transitions_total
from licenses.application.commands.activate_license import ActivateLicenseCommand
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.resume_license import ResumeLicenseCommand
from licenses.application.commands.set_license_feature import SetLicenseFeatureCommand
from licenses.application.commands.suspend_license import SuspendLicenseCommand
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.events import (
    LicenseActivated,
    LicenseExpired,
    LicenseRenewed,
    LicenseResumed,
    LicenseSuspended,
)
from licenses.domain.license import License
from licenses.domain.services import LicenseLifecycleManager
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


async def _load(license_repository: LicenseRepository, license_id) -> License:
    license = await license_repository.find_by_id(license_id)
    if not license:
        raise LicenseNotFoundError(f"License {license_id} not found")
    return license


class ActivateLicenseHandler:
    """Handler for ActivateLicenseCommand."""

    def __init__(self, lifecycle_manager: LicenseLifecycleManager):
        self.lifecycle_manager = lifecycle_manager

    async def handle(
        self, command: ActivateLicenseCommand
    ) -> Union[Ok, NotFound, BusinessRuleFailure]:
        """
        Handle activate license command.

        Returns:
            Ok(License), NotFound for an unknown key, or BusinessRuleFailure
            (LICENSE_EXPIRED, LICENSE_SUSPENDED, INVALID_ACTIVATION_CODE,
            ALREADY_ACTIVATED)
        """
        result = await self.lifecycle_manager.activate_license(
            command.license_key, command.activation_code, actor=command.actor
        )
        if result.ok:
            activated = result.value
            await LicenseCacheService.invalidate_license_status(activated.id)
            await event_bus.publish(LicenseActivated(license_id=activated.id))
        return result


class RenewLicenseHandler:
    """Handler for RenewLicenseCommand."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.lifecycle_manager = LicenseLifecycleManager(license_repository)

    async def handle(self, command: RenewLicenseCommand) -> License:
        """
        Handle renew license command.

        Args:
            command: RenewLicenseCommand

        Returns:
            Renewed License entity

        Raises:
            LicenseNotFoundError: If license not found
            ValueError: If months is less than one
        """
        license = await _load(self.license_repository, command.license_id)
        renewed = await self.lifecycle_manager.renew_license(license, command.months)

        await self.license_repository.add_audit_entry(
            renewed.id,
            "license_renewed",
            {
                "months": command.months,
                "previous_expires_at": license.expires_at.isoformat(),
                "expires_at": renewed.expires_at.isoformat(),
            },
            command.actor,
        )
        license_transitions_total.labels(transition="renewed").inc()
        await LicenseCacheService.invalidate_license_status(renewed.id)
        await event_bus.publish(
            LicenseRenewed(license_id=renewed.id, new_expiration=renewed.expires_at)
        )
        return renewed


class SuspendLicenseHandler:
    """Handler for SuspendLicenseCommand."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.lifecycle_manager = LicenseLifecycleManager(license_repository)

    async def handle(self, command: SuspendLicenseCommand) -> License:
        """
        Handle suspend license command.

        Raises:
            LicenseNotFoundError: If license not found
            InvalidLicenseStatusError: If the license is already suspended
        """
        license = await _load(self.license_repository, command.license_id)
        suspended = await self.lifecycle_manager.suspend_license(license)

        await self.license_repository.add_audit_entry(
            suspended.id,
            "license_suspended",
            {"previous_status": license.status.value, "reason": command.reason},
            command.actor,
        )
        license_transitions_total.labels(transition="suspended").inc()
        await LicenseCacheService.invalidate_license_status(suspended.id)
        await event_bus.publish(LicenseSuspended(license_id=suspended.id))
        return suspended


class ResumeLicenseHandler:
    """Handler for ResumeLicenseCommand."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.lifecycle_manager = LicenseLifecycleManager(license_repository)

    async def handle(self, command: ResumeLicenseCommand) -> License:
        """
        Handle resume license command.

        Raises:
            LicenseNotFoundError: If license not found
            InvalidLicenseStatusError: If the license is not suspended
        """
        license = await _load(self.license_repository, command.license_id)
        resumed = await self.lifecycle_manager.resume_license(license)

        await self.license_repository.add_audit_entry(
            resumed.id, "license_resumed", {"status": resumed.status.value}, command.actor
        )
        license_transitions_total.labels(transition="resumed").inc()
        await LicenseCacheService.invalidate_license_status(resumed.id)
        await event_bus.publish(LicenseResumed(license_id=resumed.id))
        return resumed


class SetLicenseFeatureHandler:
    """Handler for SetLicenseFeatureCommand."""

    def __init__(self, license_repository: LicenseRepository):
        self.license_repository = license_repository

    async def handle(self, command: SetLicenseFeatureCommand) -> License:
        """
        Raises:
            LicenseNotFoundError: If license not found
        """
        license = await _load(self.license_repository, command.license_id)
        if command.enabled == license.has_feature(command.feature):
            return license

        if command.enabled:
            changed = license.enable_feature(command.feature)
        else:
            changed = license.disable_feature(command.feature)
        saved = await self.license_repository.save(changed)
        await self.license_repository.add_audit_entry(
            saved.id,
            "features_changed",
            {"feature": command.feature, "enabled": command.enabled},
            command.actor,
        )
        logger.info(
            "License feature %s %s",
            command.feature,
            "enabled" if command.enabled else "disabled",
            extra={"license_id": str(saved.id), "actor": command.actor},
        )
        return saved


class ExpireLicensesHandler:
    """Transitions running licenses whose expiry has passed to ``expired``."""

    def __init__(self, license_repository: LicenseRepository):
        self.lifecycle_manager = LicenseLifecycleManager(license_repository)

    async def handle(self, now: Optional[datetime] = None) -> List[License]:
        expired = await self.lifecycle_manager.expire_overdue(now)
        for license in expired:
            license_transitions_total.labels(transition="expired").inc()
            await LicenseCacheService.invalidate_license_status(license.id)
            await event_bus.publish(LicenseExpired(license_id=license.id))
        return expired
