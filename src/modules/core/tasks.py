"""Asynchronous tasks of the core module."""

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_BATCH_SIZE = 100
OUTBOX_MAX_RETRIES = 5


@shared_task(name="core.debug_task")
def debug_task():
    """Diagnostic task confirming the worker is up."""
    logger.info("debug_task.executed", status="ok")
    return {"status": "ok", "message": "Celery is working"}


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE):
    """Drain publishable outbox rows onto the in-process event bus.

    Each row is locked and handled in its own transaction so one failing
    handler does not hold back the rest of the batch.
    """
    published = failed = 0
    event_ids = list(
        OutboxEvent.objects.publishable(OUTBOX_MAX_RETRIES).values_list(
            "id", flat=True
        )[:batch_size]
    )
    for event_id in event_ids:
        with transaction.atomic():
            event = (
                OutboxEvent.objects.select_for_update()
                .publishable(OUTBOX_MAX_RETRIES)
                .filter(id=event_id)
                .first()
            )
            if event is None:
                continue
            log = logger.bind(event_id=str(event.id), event_type=event.event_type)
            try:
                handlers = event_bus.publish_by_name(event.event_type, event.payload)
            except Exception as exc:
                log.exception("outbox.publish_failed")
                event.mark_as_failed(str(exc))
                failed += 1
                continue
            event.mark_as_published()
            log.info("outbox.published", handlers=handlers)
            published += 1

    logger.info("outbox.batch_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
