"""
RegenerateLicenseKeyHandler.

Replaces a license's key. The old key is retired in the key registry and
can never be issued again.
"""
import logging

from core.domain.exceptions import (
    DuplicateLicenseKeyError,
    KeyCollisionExhaustedError,
    LicenseNotFoundError,
)
from core.domain.value_objects import KeyStrategy
from core.infrastructure.events import event_bus
from licenses.application.commands.regenerate_license_key import RegenerateLicenseKeyCommand
from licenses.application.dto.license_dto import KeyRegenerationDTO
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.events import LicenseKeyRegenerated
from licenses.domain.key_generator import LicenseKeyGenerator
from licenses.domain.license_key import LicenseKey
from licenses.ports.activation_code_policy import ActivationCodePolicy
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class RegenerateLicenseKeyHandler:
    """Handler for RegenerateLicenseKeyCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        key_generator: LicenseKeyGenerator,
        activation_policy: ActivationCodePolicy,
    ):
        self.license_repository = license_repository
        self.key_generator = key_generator
        self.activation_policy = activation_policy

    async def handle(self, command: RegenerateLicenseKeyCommand) -> KeyRegenerationDTO:
        """
        Raises:
            LicenseNotFoundError: If the license does not exist
            InvalidKeyStrategyError: If the strategy is unknown
            KeyCollisionExhaustedError: If no unique key could be stored
        """
        license = await self.license_repository.find_by_id(command.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {command.license_id} not found")

        strategy = KeyStrategy.parse(command.strategy)
        for attempt in range(1, self.key_generator.max_attempts + 1):
            new_key = await self.key_generator.generate(strategy, command.options)
            try:
                old_key = await self.license_repository.replace_key(
                    license.id,
                    LicenseKey.issue(new_key, strategy, license_id=license.id),
                    command.actor,
                )
                break
            except DuplicateLicenseKeyError:
                logger.warning(
                    "Regenerated key taken concurrently, retrying",
                    extra={"license_id": str(license.id), "attempt": attempt},
                )
        else:
            raise KeyCollisionExhaustedError(
                f"Unable to store a unique license key for license {license.id}"
            )

        logger.info(
            "License key regenerated",
            extra={
                "license_id": str(license.id),
                "old_key": old_key,
                "new_key": new_key,
                "actor": command.actor,
            },
        )

        await LicenseCacheService.invalidate_license_status(license.id)
        await event_bus.publish(
            LicenseKeyRegenerated(
                license_id=license.id, old_key=old_key, new_key=new_key, actor=command.actor
            )
        )

        return KeyRegenerationDTO(
            license_id=license.id,
            old_key=old_key,
            new_key=new_key,
            activation_code=self.activation_policy.code_for(new_key),
        )
