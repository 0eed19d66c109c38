"""
Principal commands.
"""

import uuid
from dataclasses import dataclass


@dataclass
class RegisterPrincipalCommand:
    """Command to register a principal with a raw password."""

    email: str
    password: str


@dataclass
class DeactivatePrincipalCommand:
    """Command to deactivate a principal."""

    principal_id: uuid.UUID
