"""
Clinic membership handlers.

Both handlers invalidate the principal's cached grants before returning,
so the next authorization check observes the change.
"""

import logging
from typing import Optional, Union

from access.application.commands.membership_commands import (
    GrantClinicAccessCommand,
    RevokeClinicAccessCommand,
)
from access.domain.events import ClinicAccessGranted, ClinicAccessRevoked
from access.domain.membership import Membership
from access.ports.authorization_cache import AuthorizationCache
from access.ports.membership_repository import MembershipRepository
from access.ports.principal_repository import PrincipalRepository
from access.ports.role_repository import RoleRepository
from clinics.ports.clinic_repository import ClinicRepository
from core.domain.results import NotFound, Ok
from core.infrastructure.events import event_bus

logger = logging.getLogger(__name__)


class GrantClinicAccessHandler:
    """Handler for GrantClinicAccessCommand."""

    def __init__(
        self,
        principal_repository: PrincipalRepository,
        clinic_repository: ClinicRepository,
        role_repository: RoleRepository,
        membership_repository: MembershipRepository,
        authorization_cache: Optional[AuthorizationCache] = None,
    ):
        self.principal_repository = principal_repository
        self.clinic_repository = clinic_repository
        self.role_repository = role_repository
        self.membership_repository = membership_repository
        self.authorization_cache = authorization_cache

    async def handle(self, command: GrantClinicAccessCommand) -> Union[Ok, NotFound]:
        """
        Bind a principal to a clinic with a role. Re-granting replaces the role.

        Returns:
            Ok(Membership) or NotFound naming the missing principal, clinic or role
        """
        principal = await self.principal_repository.find_by_id(command.principal_id)
        if principal is None:
            return NotFound(
                message=f"Principal {command.principal_id} not found",
                code="PRINCIPAL_NOT_FOUND",
                entity="principal",
            )

        clinic = await self.clinic_repository.find_by_id(command.clinic_id)
        if clinic is None:
            return NotFound(
                message=f"Clinic {command.clinic_id} not found",
                code="CLINIC_NOT_FOUND",
                entity="clinic",
            )

        role = await self.role_repository.find_by_name(command.role_name)
        if role is None:
            return NotFound(
                message=f"Role '{command.role_name}' not found",
                code="ROLE_NOT_FOUND",
                entity="role",
            )

        existing = await self.membership_repository.find(principal.id, clinic.id)
        if existing is not None:
            membership = existing.with_role(role)
        else:
            membership = Membership.create(principal.id, clinic.id, role)
        saved = await self.membership_repository.save(membership)

        if self.authorization_cache is not None:
            await self.authorization_cache.invalidate_principal(principal.id)

        logger.info(
            "Granted role %s in clinic %s to principal %s", role.name, clinic.id, principal.id
        )
        await event_bus.publish(
            ClinicAccessGranted(
                principal_id=principal.id,
                clinic_id=clinic.id,
                role_name=role.name,
                previous_role_name=existing.role.name if existing is not None else None,
            )
        )
        return Ok(saved)


class RevokeClinicAccessHandler:
    """Handler for RevokeClinicAccessCommand."""

    def __init__(
        self,
        membership_repository: MembershipRepository,
        authorization_cache: Optional[AuthorizationCache] = None,
    ):
        self.membership_repository = membership_repository
        self.authorization_cache = authorization_cache

    async def handle(self, command: RevokeClinicAccessCommand) -> Union[Ok, NotFound]:
        deleted = await self.membership_repository.delete(command.principal_id, command.clinic_id)
        if not deleted:
            return NotFound(
                message=(
                    f"Principal {command.principal_id} has no membership "
                    f"in clinic {command.clinic_id}"
                ),
                code="MEMBERSHIP_NOT_FOUND",
                entity="membership",
            )

        if self.authorization_cache is not None:
            await self.authorization_cache.invalidate_principal(command.principal_id)

        logger.info(
            "Revoked clinic %s from principal %s", command.clinic_id, command.principal_id
        )
        await event_bus.publish(
            ClinicAccessRevoked(principal_id=command.principal_id, clinic_id=command.clinic_id)
        )
        return Ok()
