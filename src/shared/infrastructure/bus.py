"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, List, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Instances are created by the composition root and injected into the
    components that publish or listen; there is no module-level bus.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(
        self, event_class: Type[DomainEvent], handler: IEventHandler
    ) -> None:
        handlers = self._handlers.get(event_class, [])
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._handlers.pop(event_class, None)

    def handler_count(self, event_class: Type[DomainEvent]) -> int:
        return len(self._handlers.get(event_class, []))

    def publish(self, event: DomainEvent) -> None:
        # Copy: a handler may unsubscribe while the event is being delivered.
        handlers = list(self._handlers.get(type(event), []))
        logger.info(
            "event_bus.published",
            event_name=event.event_name,
            handlers=len(handlers),
        )
        for handler in handlers:
            handler.handle(event)
