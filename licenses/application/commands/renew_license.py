"""
RenewLicenseCommand.

Command to renew (extend) a license.
"""
import uuid
from dataclasses import dataclass


@dataclass
class RenewLicenseCommand:
    """Command to extend a license by whole months."""

    license_id: uuid.UUID
    months: int = 12
    actor: str = "system"
