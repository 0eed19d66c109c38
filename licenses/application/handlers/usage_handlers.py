"""
Usage handlers.

Thin application wrappers over the usage manager that announce rejected
increments on the event bus.
"""
import logging
from datetime import datetime
from typing import Optional, Union

from core.domain.results import (
    BusinessRuleFailure,
    NotFound,
    Ok,
    UsageLimitExceeded,
    ValidationFailure,
)
from core.infrastructure.events import event_bus
from licenses.application.commands.record_usage import DecrementUsageCommand, IncrementUsageCommand
from licenses.application.queries.get_license_usage import GetLicenseUsageQuery
from licenses.domain.events import UsageLimitReached
from licenses.domain.services import LicenseUsageManager

logger = logging.getLogger(__name__)


class IncrementUsageHandler:
    """Handler for IncrementUsageCommand."""

    def __init__(self, usage_manager: LicenseUsageManager):
        self.usage_manager = usage_manager

    async def handle(
        self, command: IncrementUsageCommand
    ) -> Union[Ok, UsageLimitExceeded, NotFound, ValidationFailure]:
        result = await self.usage_manager.increment_usage(
            command.license_id, command.resource_type, command.amount
        )
        if isinstance(result, UsageLimitExceeded):
            await event_bus.publish(
                UsageLimitReached(
                    license_id=command.license_id,
                    resource_type=result.resource_type,
                    current=result.current,
                    limit=result.limit,
                    requested=result.requested,
                )
            )
        return result


class DecrementUsageHandler:
    """Handler for DecrementUsageCommand."""

    def __init__(self, usage_manager: LicenseUsageManager):
        self.usage_manager = usage_manager

    async def handle(
        self, command: DecrementUsageCommand
    ) -> Union[Ok, BusinessRuleFailure, NotFound, ValidationFailure]:
        return await self.usage_manager.decrement_usage(
            command.license_id, command.resource_type, command.amount
        )


class ResetMonthlyUsageHandler:
    """Zeroes monthly counters; safe to run more than once per month."""

    def __init__(self, usage_manager: LicenseUsageManager):
        self.usage_manager = usage_manager

    async def handle(self, now: Optional[datetime] = None) -> Ok:
        return await self.usage_manager.reset_monthly_usage(now)


class GetLicenseUsageHandler:
    """Handler for GetLicenseUsageQuery."""

    def __init__(self, usage_manager: LicenseUsageManager):
        self.usage_manager = usage_manager

    async def handle(self, query: GetLicenseUsageQuery) -> Union[Ok, NotFound]:
        """
        Returns:
            Ok(dict of ResourceType to UsageReport) or NotFound
        """
        return await self.usage_manager.usage_report(query.license_id)
