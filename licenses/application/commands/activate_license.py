"""
ActivateLicenseCommand.

Command to activate a license with the code issued at provisioning.
"""
from dataclasses import dataclass


@dataclass
class ActivateLicenseCommand:
    """Command to activate a license by key and activation code."""

    license_key: str
    activation_code: str
    actor: str = "system"
