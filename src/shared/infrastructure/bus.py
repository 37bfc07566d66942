"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Any, Dict, List, Type

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent


class InMemoryEventBus(IEventBus):
    """In-process bus; handlers run synchronously in subscription order."""

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(type(event), []):
            handler.handle(event)

    def publish_by_name(self, event_name: str, payload: Dict[str, Any]) -> int:
        """Rebuild an event from its outbox payload and publish it.

        Returns the number of handlers that received it; ``0`` when no event
        class with that name has subscribers.
        """
        for event_class, handlers in self._handlers.items():
            if event_class.__name__ != event_name:
                continue
            event = event_class.from_payload(payload)
            for handler in handlers:
                handler.handle(event)
            return len(handlers)
        return 0


event_bus = InMemoryEventBus()
