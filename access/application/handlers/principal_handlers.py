"""
Principal handlers.
"""

import logging
from typing import Optional, Union

from django.contrib.auth.hashers import make_password

from access.application.commands.principal_commands import (
    DeactivatePrincipalCommand,
    RegisterPrincipalCommand,
)
from access.domain.events import PrincipalDeactivated, PrincipalRegistered
from access.domain.principal import Principal
from access.ports.authorization_cache import AuthorizationCache
from access.ports.principal_repository import PrincipalRepository
from core.domain.results import BusinessRuleFailure, NotFound, Ok, ValidationFailure
from core.infrastructure.events import event_bus

logger = logging.getLogger(__name__)


class RegisterPrincipalHandler:
    """Handler for RegisterPrincipalCommand."""

    def __init__(self, principal_repository: PrincipalRepository):
        self.principal_repository = principal_repository

    async def handle(
        self, command: RegisterPrincipalCommand
    ) -> Union[Ok, ValidationFailure, BusinessRuleFailure]:
        if not command.password:
            return ValidationFailure(message="Password is required", field="password")
        try:
            principal = Principal.create(command.email, make_password(command.password))
        except ValueError as e:
            return ValidationFailure(message=str(e), field="email")

        if await self.principal_repository.find_by_email(str(principal.email)):
            return BusinessRuleFailure(
                message=f"Email {principal.email} is already registered", code="EMAIL_TAKEN"
            )

        saved = await self.principal_repository.save(principal)
        logger.info("Registered principal %s", saved.id)
        await event_bus.publish(PrincipalRegistered(principal_id=saved.id, email=str(saved.email)))
        return Ok(saved)


class DeactivatePrincipalHandler:
    """Handler for DeactivatePrincipalCommand."""

    def __init__(
        self,
        principal_repository: PrincipalRepository,
        authorization_cache: Optional[AuthorizationCache] = None,
    ):
        self.principal_repository = principal_repository
        self.authorization_cache = authorization_cache

    async def handle(self, command: DeactivatePrincipalCommand) -> Union[Ok, NotFound]:
        principal = await self.principal_repository.find_by_id(command.principal_id)
        if principal is None:
            return NotFound(
                message=f"Principal {command.principal_id} not found",
                code="PRINCIPAL_NOT_FOUND",
                entity="principal",
            )

        saved = await self.principal_repository.save(principal.deactivate())
        if self.authorization_cache is not None:
            await self.authorization_cache.invalidate_principal(saved.id)

        logger.info("Deactivated principal %s", saved.id)
        await event_bus.publish(PrincipalDeactivated(principal_id=saved.id))
        return Ok(saved)
