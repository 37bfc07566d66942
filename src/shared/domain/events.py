"""Domain event primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable).

    Subclasses add their own fields with defaults; ``event_name`` is derived
    from the class name and is what the outbox stores as ``event_type``.
    """

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    @classmethod
    def from_payload(cls, payload: dict) -> DomainEvent:
        """Rebuild an event from its JSON-normalised outbox payload."""
        data = {key: value for key, value in payload.items() if key != "event_name"}
        data["aggregate_id"] = UUID(str(data["aggregate_id"]))
        if "event_id" in data:
            data["event_id"] = UUID(str(data["event_id"]))
        if "occurred_on" in data:
            data["occurred_on"] = datetime.fromisoformat(data["occurred_on"])
        return cls(**data)


class DomainEventMixin:
    """Mixin for aggregate roots that collect domain events in memory."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        return list(self._domain_events)
