"""
SuspendLicenseCommand.
"""
import uuid
from dataclasses import dataclass


@dataclass
class SuspendLicenseCommand:
    """Command to suspend a license."""

    license_id: uuid.UUID
    reason: str = ""
    actor: str = "system"
