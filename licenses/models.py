"""Model registration for the licenses app."""

from licenses.infrastructure.models import License, LicenseAuditLog, LicenseKey  # noqa: F401
