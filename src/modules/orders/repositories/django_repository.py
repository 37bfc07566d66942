"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Domain events
collected on the aggregate are written to the outbox by ``save`` inside the
caller's transaction.

Concurrency control on status changes uses ``select_for_update()`` plus a
conditional ``UPDATE ... WHERE status = <expected>``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q, Sum
from django.utils import timezone

from modules.core.outbox import flush_domain_events
from modules.orders.constants import ORDER_NUMBER_MAX_RETRIES, OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

ORDER_TOPIC = "orders"


def _with_relations(queryset):
    return queryset.select_related("user").prefetch_related(
        "items__product", "status_history"
    )


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        items = data["items"]
        lines = [
            (item["product_id"], item["quantity"], item["unit_price"]) for item in items
        ]
        total = sum((qty * price for _, qty, price in lines), Decimal("0.00"))

        order = Order(
            user_id=data["user_id"],
            total_amount=total,
            shipping_address=data["shipping_address"],
            phone=data["phone"],
            city=data.get("city", ""),
            notes=data.get("notes", ""),
            payment_method=data["payment_method"],
            payment_status=data.get("payment_status", PaymentStatus.PENDING),
            idempotency_key=data.get("idempotency_key"),
        )
        self._insert_with_order_number(order)

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=quantity * unit_price,
                )
                for product_id, quantity, unit_price in lines
            ]
        )

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(lines),
        )
        return order

    def _insert_with_order_number(self, order: Order) -> None:
        for _ in range(ORDER_NUMBER_MAX_RETRIES):
            candidate = Order.generate_order_number()
            if Order.objects.filter(order_number=candidate).exists():
                continue
            order.order_number = candidate
            try:
                with transaction.atomic():
                    order.save(force_insert=True)
            except IntegrityError:
                if order.idempotency_key and self.get_by_idempotency_key(
                    order.idempotency_key
                ):
                    raise
                continue
            return
        raise RuntimeError(
            f"Failed to generate unique order_number after "
            f"{ORDER_NUMBER_MAX_RETRIES} attempts"
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return _with_relations(Order.objects.filter(id=id)).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Items are prefetched so the caller can iterate over them while the
        row is locked.
        """
        try:
            return (
                Order.objects.select_for_update(of=("self",))
                .select_related("user")
                .prefetch_related("items__product")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders, newest first.

        Supported filter keys are plain ORM look-ups, e.g. ``user_id``,
        ``status``, ``created_at__gte``.
        """
        queryset = _with_relations(Order.objects.all())
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return _with_relations(Order.objects.filter(idempotency_key=key)).first()

    def recent(self, limit: int = 5) -> List[Order]:
        return list(
            Order.objects.select_related("user").order_by("-created_at")[:limit]
        )

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and move its pending domain events to the outbox."""
        entity.save()
        flush_domain_events(entity, ORDER_TOPIC)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        try:
            deleted, _ = Order.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info("order.deleted", order_id=str(id))
        return bool(deleted)

    # ------------------------------------------------------------------
    # Order-specific writes
    # ------------------------------------------------------------------

    def transition_status(self, id: str, from_status: str, to_status: str) -> bool:
        updated = Order.objects.filter(id=id, status=from_status).update(
            status=to_status, updated_at=timezone.now()
        )
        return updated == 1

    @transaction.atomic
    def add_history(
        self,
        order_id: Any,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            user_id=user_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    def mark_item_reviewed(
        self, order_id: Any, product_id: Any, reviewed: bool = True
    ) -> None:
        OrderItem.objects.filter(order_id=order_id, product_id=product_id).update(
            reviewed=reviewed, updated_at=timezone.now()
        )

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count(
        self,
        filters: Optional[Dict[str, Any]] = None,
        since: Optional[datetime] = None,
    ) -> int:
        queryset = Order.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        if since is not None:
            queryset = queryset.filter(created_at__gt=since)
        return queryset.count()

    def revenue(self) -> Decimal:
        total = (
            Order.objects.exclude(status=OrderStatus.CANCELLED)
            .filter(
                Q(payment_status=PaymentStatus.COMPLETED)
                | Q(status=OrderStatus.DELIVERED)
            )
            .aggregate(total=Sum("total_amount"))["total"]
        )
        return (total or Decimal("0")).quantize(Decimal("0.01"))
