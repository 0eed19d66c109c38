"""
SetLicenseFeatureCommand.
"""
import uuid
from dataclasses import dataclass


@dataclass
class SetLicenseFeatureCommand:
    """Command to enable or disable one feature flag of a license."""

    license_id: uuid.UUID
    feature: str
    enabled: bool = True
    actor: str = "system"
