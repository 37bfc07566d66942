"""Write-side helper that moves collected domain events into the outbox."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

import structlog

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent, DomainEventMixin

logger = structlog.get_logger(__name__)


def flush_domain_events(entity: DomainEventMixin, topic: str) -> List[OutboxEvent]:
    """Persist every event collected on *entity* and clear its buffer.

    Must run inside the transaction that saved *entity*.
    """
    rows = [
        OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=serialize_event(event),
            topic=topic,
        )
        for event in entity.domain_events
    ]
    entity.clear_domain_events()
    if rows:
        logger.info(
            "outbox.events_recorded",
            topic=topic,
            event_types=[row.event_type for row in rows],
        )
    return rows


def serialize_event(event: DomainEvent) -> Dict[str, Any]:
    return json.loads(json.dumps(_normalize_for_json(asdict(event))))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
