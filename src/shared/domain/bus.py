"""Contracts between the outbox publisher and event subscribers."""

from __future__ import annotations

from typing import Any, Dict, Generic, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    """Reacts to one event type; raising marks the outbox row as failed."""

    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...

    def publish(self, event: DomainEvent) -> None: ...

    def publish_by_name(self, event_name: str, payload: Dict[str, Any]) -> int:
        """Deliver a stored payload; returns how many handlers received it."""
        ...
