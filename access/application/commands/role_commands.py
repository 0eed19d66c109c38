"""
Role management commands.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CreateRoleCommand:
    """Command to create a custom role."""

    name: str
    description: str = ""
    permissions: List[str] = field(default_factory=list)


@dataclass
class UpdateRoleCommand:
    """
    Command to update a custom role.

    ``None`` leaves the attribute unchanged; an empty permission list
    strips every permission.
    """

    role_id: uuid.UUID
    name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[List[str]] = None


@dataclass
class SetRolePermissionsCommand:
    """Command to replace the permission set of a custom role."""

    role_id: uuid.UUID
    permissions: List[str]


@dataclass
class DeleteRoleCommand:
    """Command to delete a custom role."""

    role_id: uuid.UUID
