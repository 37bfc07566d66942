"""Event handlers for Orders domain events.

Handlers run when ``core.publish_outbox_events`` drains the outbox; for now
they only record the event in the structured log.
"""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
    PaymentCompleted,
    PaymentFailed,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            user_id=event.user_id,
            total_amount=event.total_amount,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            cancelled_by=event.cancelled_by,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class PaymentCompletedHandler(IEventHandler[PaymentCompleted]):
    def handle(self, event: PaymentCompleted) -> None:
        logger.info(
            "payment.event.completed",
            order_id=str(event.aggregate_id),
            transaction_id=event.transaction_id,
        )


class PaymentFailedHandler(IEventHandler[PaymentFailed]):
    def handle(self, event: PaymentFailed) -> None:
        logger.warning(
            "payment.event.failed",
            order_id=str(event.aggregate_id),
            reason=event.reason,
        )


order_created_handler = OrderCreatedHandler()
order_cancelled_handler = OrderCancelledHandler()
order_status_changed_handler = OrderStatusChangedHandler()
payment_completed_handler = PaymentCompletedHandler()
payment_failed_handler = PaymentFailedHandler()
