"""
RegenerateLicenseKeyCommand.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class RegenerateLicenseKeyCommand:
    """Command to replace a license's key with a freshly generated one."""

    license_id: uuid.UUID
    strategy: str = "standard"
    options: Dict[str, Any] = field(default_factory=dict)
    actor: str = "system"
