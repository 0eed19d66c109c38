"""
ProvisionLicenseHandler.

Handles the provision license command.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from django.conf import settings

from clinics.ports.clinic_repository import ClinicRepository
from core.domain.exceptions import (
    ClinicNotFoundError,
    DuplicateLicenseKeyError,
    InvalidInputError,
    KeyCollisionExhaustedError,
    LicenseAlreadyProvisionedError,
)
from core.domain.value_objects import KeyStrategy, ResourceType
from core.infrastructure.events import event_bus
from core.metrics import licenses_provisioned_total
from licenses.application.commands.provision_license import ProvisionLicenseCommand
from licenses.application.dto.license_dto import LicenseDTO, ProvisionLicenseResponseDTO
from licenses.domain.events import LicenseProvisioned
from licenses.domain.key_generator import LicenseKeyGenerator
from licenses.domain.license import License, add_months
from licenses.domain.license_key import LicenseKey
from licenses.domain.plans import PLAN_DURATION_MONTHS, PLAN_FEATURES, limits_for, parse_plan
from licenses.ports.activation_code_policy import ActivationCodePolicy
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class ProvisionLicenseHandler:
    """Handler for ProvisionLicenseCommand."""

    def __init__(
        self,
        clinic_repository: ClinicRepository,
        license_repository: LicenseRepository,
        key_generator: LicenseKeyGenerator,
        activation_policy: ActivationCodePolicy,
        limit_overrides: Optional[Mapping[str, Mapping[str, int]]] = None,
    ):
        """Initialize handler with repositories and services."""
        self.clinic_repository = clinic_repository
        self.license_repository = license_repository
        self.key_generator = key_generator
        self.activation_policy = activation_policy
        if limit_overrides is None:
            limit_overrides = getattr(settings, "LICENSE_DEFAULT_LIMITS", {})
        self.limit_overrides = limit_overrides

    async def handle(self, command: ProvisionLicenseCommand) -> ProvisionLicenseResponseDTO:
        """
        Handle provision license command.

        Args:
            command: ProvisionLicenseCommand

        Returns:
            ProvisionLicenseResponseDTO with the license and its activation code

        Raises:
            ClinicNotFoundError: If the clinic does not exist
            LicenseAlreadyProvisionedError: If the clinic already has a license
            InvalidInputError: If the plan or a limit is invalid
            KeyCollisionExhaustedError: If no unique key could be generated
        """
        clinic = await self.clinic_repository.find_by_id(command.clinic_id)
        if not clinic:
            raise ClinicNotFoundError(f"Clinic {command.clinic_id} not found")

        if await self.license_repository.find_by_clinic(clinic.id):
            raise LicenseAlreadyProvisionedError(f"Clinic {clinic.id} already has a license")

        try:
            plan = parse_plan(command.plan)
        except ValueError:
            raise InvalidInputError(f"Unknown plan: {command.plan}", code="INVALID_PLAN") from None
        strategy = KeyStrategy.parse(command.strategy)

        limits = limits_for(plan, self.limit_overrides)
        for name, value in command.usage_limits.items():
            if not isinstance(value, int) or value < 0:
                raise InvalidInputError(f"Invalid usage limit for {name}: {value!r}")
            limits[ResourceType.parse(name)] = value

        features = PLAN_FEATURES[plan] if command.features is None else command.features
        expires_at = command.expires_at or add_months(
            datetime.now(timezone.utc), PLAN_DURATION_MONTHS[plan]
        )

        # A key can be taken between generation and insert; retry with a new one.
        for attempt in range(1, self.key_generator.max_attempts + 1):
            key = await self.key_generator.generate_with_characteristics(
                plan, strategy, command.key_options
            )
            license = License.create(
                clinic_id=clinic.id,
                license_key=key,
                plan=plan,
                expires_at=expires_at,
                usage_limits=limits,
                features=features,
            )
            try:
                saved = await self.license_repository.provision(
                    license, LicenseKey.issue(key, strategy, license_id=license.id)
                )
                break
            except DuplicateLicenseKeyError:
                logger.warning(
                    "License key taken during provisioning, retrying",
                    extra={"clinic_id": str(clinic.id), "attempt": attempt},
                )
        else:
            raise KeyCollisionExhaustedError(
                f"Unable to provision a unique license key for clinic {clinic.id}"
            )

        licenses_provisioned_total.labels(plan=plan.value).inc()
        logger.info(
            "License provisioned",
            extra={
                "license_id": str(saved.id),
                "clinic_id": str(clinic.id),
                "plan": plan.value,
                "actor": command.actor,
            },
        )

        await event_bus.publish(
            LicenseProvisioned(
                license_id=saved.id,
                clinic_id=clinic.id,
                plan=plan.value,
                expires_at=saved.expires_at,
            )
        )

        return ProvisionLicenseResponseDTO(
            license=LicenseDTO.from_entity(saved),
            activation_code=self.activation_policy.code_for(saved.license_key),
        )
