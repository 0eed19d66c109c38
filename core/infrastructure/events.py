"""
In-process event bus.

Access and license handlers publish after their state change is stored;
subscribers (audit log, usage alerts) run concurrently and their
failures are logged, never propagated to the operation that published.
"""

import asyncio
import logging
from typing import Dict, List, Type

from core.domain.events import DomainEvent, EventBus, EventHandler

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """Dispatches each event to the handlers subscribed to its exact type."""

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribing a second handler of the same class to one event type is
        ignored, so registration can run on every app start.
        """
        handlers = self._handlers.setdefault(event_type, [])
        if any(type(existing) is type(handler) for existing in handlers):
            return
        handlers.append(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._handlers.get(event_type, ()))

    async def publish(self, event: DomainEvent) -> None:
        handlers = self._handlers.get(type(event))
        if not handlers:
            return
        await asyncio.gather(*(self._deliver(handler, event) for handler in handlers))

    @staticmethod
    async def _deliver(handler: EventHandler, event: DomainEvent) -> None:
        try:
            await handler.handle(event)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.error(
                "%s failed on %s for %s",
                handler.__class__.__name__,
                event.event_type,
                event.aggregate_id,
                exc_info=True,
                extra={"event_id": str(event.event_id)},
            )


event_bus = InMemoryEventBus()
