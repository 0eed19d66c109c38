"""
Unit tests for ProvisionLicenseHandler and RegenerateLicenseKeyHandler.
"""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.exceptions import (
    ClinicNotFoundError,
    InvalidKeyStrategyError,
    InvalidResourceTypeError,
    LicenseAlreadyProvisionedError,
    LicenseNotFoundError,
)
from core.domain.value_objects import LicensePlan, LicenseStatus, ResourceType
from licenses.application.commands.provision_license import ProvisionLicenseCommand
from licenses.application.commands.regenerate_license_key import RegenerateLicenseKeyCommand
from licenses.application.handlers.provision_license_handler import ProvisionLicenseHandler
from licenses.application.handlers.regenerate_license_key_handler import (
    RegenerateLicenseKeyHandler,
)
from licenses.domain.key_generator import LicenseKeyGenerator
from licenses.domain.plans import PLAN_FEATURES


@pytest.fixture
def key_generator(license_key_repository, license_repository):
    return LicenseKeyGenerator(license_key_repository, license_repository)


@pytest.fixture
def provision_handler(clinic_repository, license_repository, key_generator, activation_policy):
    return ProvisionLicenseHandler(
        clinic_repository=clinic_repository,
        license_repository=license_repository,
        key_generator=key_generator,
        activation_policy=activation_policy,
        limit_overrides={},
    )


@pytest.mark.asyncio
class TestProvisionLicenseHandler:
    """Tests for ProvisionLicenseHandler."""

    async def test_provision_premium_license(
        self, provision_handler, clinic_factory, license_key_repository, activation_policy
    ):
        """Test successful license provisioning."""
        clinic = await clinic_factory()

        result = await provision_handler.handle(
            ProvisionLicenseCommand(clinic_id=clinic.id, plan="premium")
        )

        license = result.license
        assert license.clinic_id == clinic.id
        assert license.plan == "premium"
        assert license.status == "active"
        assert license.license_key.startswith("PRM-")
        assert set(license.features) == PLAN_FEATURES[LicensePlan.PREMIUM]
        assert license.usage["users"] == {"current": 0, "limit": 50}
        assert result.activation_code == activation_policy.code_for(license.license_key)
        issued = await license_key_repository.find_by_key(license.license_key)
        assert issued.license_id == license.id

    async def test_provision_trial_with_overrides(self, provision_handler, clinic_factory):
        clinic = await clinic_factory()
        expires_at = datetime.now(timezone.utc) + timedelta(days=14)

        result = await provision_handler.handle(
            ProvisionLicenseCommand(
                clinic_id=clinic.id,
                plan="trial",
                strategy="compact",
                expires_at=expires_at,
                usage_limits={"patients": 2},
                features=["basic_appointments"],
            )
        )

        license = result.license
        assert license.status == LicenseStatus.TRIAL.value
        assert license.expires_at == expires_at
        assert license.usage["patients"]["limit"] == 2
        assert license.usage["users"]["limit"] == 3
        assert license.features == ["basic_appointments"]
        assert LicenseKeyGenerator.validate_format(license.license_key, "compact")

    async def test_one_license_per_clinic(self, provision_handler, clinic_factory):
        clinic = await clinic_factory()
        await provision_handler.handle(ProvisionLicenseCommand(clinic_id=clinic.id))

        with pytest.raises(LicenseAlreadyProvisionedError):
            await provision_handler.handle(ProvisionLicenseCommand(clinic_id=clinic.id))

    async def test_unknown_clinic(self, provision_handler):
        with pytest.raises(ClinicNotFoundError):
            await provision_handler.handle(ProvisionLicenseCommand(clinic_id=uuid.uuid4()))

    async def test_unknown_resource_type_in_limits(self, provision_handler, clinic_factory):
        clinic = await clinic_factory()
        with pytest.raises(InvalidResourceTypeError):
            await provision_handler.handle(
                ProvisionLicenseCommand(clinic_id=clinic.id, usage_limits={"beds": 4})
            )

    async def test_unknown_strategy(self, provision_handler, clinic_factory):
        clinic = await clinic_factory()
        with pytest.raises(InvalidKeyStrategyError):
            await provision_handler.handle(
                ProvisionLicenseCommand(clinic_id=clinic.id, strategy="hex")
            )


@pytest.mark.asyncio
class TestRegenerateLicenseKeyHandler:
    """Tests for key regeneration."""

    async def test_old_key_is_retired_and_never_reissued(
        self,
        provision_handler,
        clinic_factory,
        license_repository,
        license_key_repository,
        key_generator,
        activation_policy,
    ):
        clinic = await clinic_factory()
        provisioned = await provision_handler.handle(
            ProvisionLicenseCommand(clinic_id=clinic.id, plan="standard")
        )
        old_key = provisioned.license.license_key
        handler = RegenerateLicenseKeyHandler(license_repository, key_generator, activation_policy)

        result = await handler.handle(
            RegenerateLicenseKeyCommand(provisioned.license.id, strategy="compact", actor="ops")
        )

        assert result.old_key == old_key
        assert result.new_key != old_key
        assert result.activation_code == activation_policy.code_for(result.new_key)
        stored = await license_repository.find_by_id(provisioned.license.id)
        assert stored.license_key == result.new_key
        assert (await license_key_repository.find_by_key(old_key)).is_retired
        assert await key_generator.key_exists(old_key)
        assert license_repository.audit[-1]["action"] == "key_regenerated"
        assert stored.current_usage(ResourceType.USERS) == 0

    async def test_unknown_license(self, license_repository, key_generator, activation_policy):
        handler = RegenerateLicenseKeyHandler(license_repository, key_generator, activation_policy)
        with pytest.raises(LicenseNotFoundError):
            await handler.handle(RegenerateLicenseKeyCommand(uuid.uuid4()))
