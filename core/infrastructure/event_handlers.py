"""
Subscribers for access and license events.
"""

import logging

from access.domain.events import (
    ClinicAccessGranted,
    ClinicAccessRevoked,
    PrincipalDeactivated,
    PrincipalRegistered,
    RoleCreated,
    RoleDeleted,
    RoleUpdated,
)
from core.domain.events import DomainEvent, EventHandler
from core.infrastructure.events import event_bus
from licenses.domain.events import (
    LicenseActivated,
    LicenseExpired,
    LicenseKeyRegenerated,
    LicenseProvisioned,
    LicenseRenewed,
    LicenseResumed,
    LicenseSuspended,
    UsageLimitReached,
)

logger = logging.getLogger(__name__)

AUDITED_EVENTS = (
    RoleCreated,
    RoleUpdated,
    RoleDeleted,
    ClinicAccessGranted,
    ClinicAccessRevoked,
    PrincipalRegistered,
    PrincipalDeactivated,
    LicenseProvisioned,
    LicenseActivated,
    LicenseKeyRegenerated,
    LicenseRenewed,
    LicenseSuspended,
    LicenseResumed,
    LicenseExpired,
    UsageLimitReached,
)


class AuditLogEventHandler(EventHandler):
    """Writes each audited event, with its payload, to the JSON log."""

    async def handle(self, event: DomainEvent) -> None:
        logger.info(
            "audit %s %s",
            event.event_type,
            event.aggregate_id,
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
                "data": event.payload(),
            },
        )


class UsageLimitAlertHandler(EventHandler):
    """Warns when a license rejects usage because a limit is reached."""

    async def handle(self, event: DomainEvent) -> None:
        logger.warning(
            "License %s reached its %s limit (%d/%d, requested %d)",
            event.license_id,
            event.resource_type,
            event.current,
            event.limit,
            event.requested,
            extra={"license_id": str(event.license_id), "resource_type": event.resource_type},
        )


def register_event_handlers(bus=event_bus) -> None:
    """Safe to call on every app start; the bus ignores repeat subscriptions."""
    audit = AuditLogEventHandler()
    for event_type in AUDITED_EVENTS:
        bus.subscribe(event_type, audit)
    bus.subscribe(UsageLimitReached, UsageLimitAlertHandler())
    logger.info("Event handlers registered")
