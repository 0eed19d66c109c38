"""
Domain event base classes.

Role, membership and license handlers publish an event once their change
is stored. Subscribers write the audit log and raise usage alerts.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Subclasses call ``super().__init__`` with the aggregate id and then
    attach their own payload attributes.
    """

    event_id: uuid.UUID
    occurred_at: datetime
    aggregate_id: str
    event_type: str

    def __init_subclass__(cls, **kwargs):
        """Automatically set event_type for subclasses."""
        super().__init_subclass__(**kwargs)
        cls.event_type = cls.__name__

    @classmethod
    def _base_fields(cls, aggregate_id: Any, occurred_at: Optional[datetime] = None) -> Dict[str, Any]:
        """Common constructor arguments for subclasses."""
        return {
            "event_id": uuid.uuid4(),
            "occurred_at": occurred_at or datetime.now(timezone.utc),
            "aggregate_id": str(aggregate_id),
            "event_type": cls.__name__,
        }

    def payload(self) -> Dict[str, Any]:
        """Subclass attributes, serialized to JSON-friendly values."""
        base = {f.name for f in fields(DomainEvent)}
        data = {}
        for name, value in vars(self).items():
            if name in base:
                continue
            if isinstance(value, (uuid.UUID, Enum)):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, (set, frozenset, tuple)):
                value = sorted(str(v) for v in value)
            data[name] = value
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "event_type": self.event_type,
            "data": self.payload(),
        }


class EventHandler(ABC):
    """Reacts to published events; must not mutate licenses or grants."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        pass


class EventBus(ABC):
    """Routes published events to subscribed handlers."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        pass

    @abstractmethod
    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        pass
