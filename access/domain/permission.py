"""
Permission domain entity.

A permission is an atomic capability grouped by module (resource family)
and action (verb).
"""

import re
import uuid
from dataclasses import dataclass
from typing import Optional

_SEGMENT = re.compile(r"^[a-z][a-z0-9_]*$")


@dataclass(frozen=True)
class Permission:
    """Permission domain entity."""

    id: uuid.UUID
    name: str
    module: str
    action: str
    description: str = ""

    def __post_init__(self):
        """Validate permission entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Permission name cannot be empty")
        if not _SEGMENT.match(self.module or ""):
            raise ValueError(f"Invalid permission module: {self.module!r}")
        if not _SEGMENT.match(self.action or ""):
            raise ValueError(f"Invalid permission action: {self.action!r}")

    @classmethod
    def create(
        cls,
        name: str,
        module: Optional[str] = None,
        action: Optional[str] = None,
        description: str = "",
        permission_id: Optional[uuid.UUID] = None,
    ) -> "Permission":
        """
        Create a new Permission entity.

        When module and action are omitted they are taken from a
        ``module.action`` shaped name.
        """
        name = name.strip()
        if module is None or action is None:
            parts = name.split(".")
            if len(parts) != 2:
                raise ValueError(f"Permission name must look like 'module.action': {name!r}")
            module, action = parts
        return cls(
            id=permission_id or uuid.uuid4(),
            name=name,
            module=module,
            action=action,
            description=description,
        )

    @property
    def qualified_name(self) -> str:
        """The ``module.action`` form of this permission."""
        return f"{self.module}.{self.action}"

    def matches(self, requested: str) -> bool:
        """True if ``requested`` names this permission by name or by module.action."""
        return requested in (self.name, self.qualified_name)
