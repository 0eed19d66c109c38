"""
Usage commands.

Commands to move a license's usage counters.
"""
import uuid
from dataclasses import dataclass


@dataclass
class IncrementUsageCommand:
    """Command to consume ``amount`` units of a resource type."""

    license_id: uuid.UUID
    resource_type: str
    amount: int = 1


@dataclass
class DecrementUsageCommand:
    """Command to release ``amount`` units of a resource type."""

    license_id: uuid.UUID
    resource_type: str
    amount: int = 1
