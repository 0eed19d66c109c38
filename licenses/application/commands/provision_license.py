"""
ProvisionLicenseCommand.

Command to provision the license of a clinic.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ProvisionLicenseCommand:
    """
    Command to provision a clinic's license.

    This command creates:
    - A unique license key, recorded in the key registry
    - The license with the plan's default features and usage limits
    """

    clinic_id: uuid.UUID
    plan: str = "trial"
    strategy: str = "standard"
    key_options: Dict[str, Any] = field(default_factory=dict)
    expires_at: Optional[datetime] = None
    usage_limits: Dict[str, int] = field(default_factory=dict)
    features: Optional[List[str]] = None
    actor: str = "system"
