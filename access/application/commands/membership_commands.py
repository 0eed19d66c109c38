"""
Clinic membership commands.
"""

import uuid
from dataclasses import dataclass


@dataclass
class GrantClinicAccessCommand:
    """Command to give a principal a role in a clinic (or change it)."""

    principal_id: uuid.UUID
    clinic_id: uuid.UUID
    role_name: str


@dataclass
class RevokeClinicAccessCommand:
    """Command to remove a principal's membership in a clinic."""

    principal_id: uuid.UUID
    clinic_id: uuid.UUID
