"""
Wiring for the license services.

Builds generators, managers and handlers over the Django repositories,
configured from settings.
"""

from django.conf import settings

from clinics.infrastructure.repositories.django_clinic_repository import DjangoClinicRepository
from licenses.application.handlers.provision_license_handler import ProvisionLicenseHandler
from licenses.application.handlers.regenerate_license_key_handler import (
    RegenerateLicenseKeyHandler,
)
from licenses.domain.key_generator import DEFAULT_MAX_ATTEMPTS, DEFAULT_PREFIX, LicenseKeyGenerator
from licenses.domain.services import LicenseLifecycleManager, LicenseUsageManager
from licenses.infrastructure.activation_codes import HmacActivationCodePolicy
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)
from licenses.infrastructure.repositories.django_license_repository import (
    DjangoLicenseRepository,
)


def build_key_generator() -> LicenseKeyGenerator:
    return LicenseKeyGenerator(
        license_key_repository=DjangoLicenseKeyRepository(),
        license_repository=DjangoLicenseRepository(),
        default_prefix=getattr(settings, "LICENSE_KEY_DEFAULT_PREFIX", DEFAULT_PREFIX),
        max_attempts=getattr(settings, "LICENSE_KEY_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
    )


def build_usage_manager() -> LicenseUsageManager:
    return LicenseUsageManager(DjangoLicenseRepository())


def build_lifecycle_manager() -> LicenseLifecycleManager:
    return LicenseLifecycleManager(DjangoLicenseRepository(), HmacActivationCodePolicy())


def build_provision_handler() -> ProvisionLicenseHandler:
    return ProvisionLicenseHandler(
        clinic_repository=DjangoClinicRepository(),
        license_repository=DjangoLicenseRepository(),
        key_generator=build_key_generator(),
        activation_policy=HmacActivationCodePolicy(),
    )


def build_regenerate_handler() -> RegenerateLicenseKeyHandler:
    return RegenerateLicenseKeyHandler(
        license_repository=DjangoLicenseRepository(),
        key_generator=build_key_generator(),
        activation_policy=HmacActivationCodePolicy(),
    )
