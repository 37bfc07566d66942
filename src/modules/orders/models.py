"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Status transitions follow ``VALID_TRANSITIONS`` (enforced at service layer).
- Each status change generates a history record.
- Idempotency via ``idempotency_key`` unique constraint.
- OrderItem snapshots the product price at creation time (``unit_price``).
- Totals and subtotals are computed by the repository when the order is
  created; models carry no save hooks that transform business data.
- Product FK uses PROTECT to preserve financial history.
"""

from __future__ import annotations

import secrets

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    PAYMENT_TRANSITIONS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``order_number`` is a human-readable identifier (format:
    ``ORD-YYYYMMDD-XXXXXX``).  The UUIDv7 ``id`` is used for all internal
    references and API lookups.

    ``payment_details`` holds what the gateway hands back: ``pidx`` (the
    reference issued at initiation), ``payment_url``, ``transaction_id`` and
    timestamps.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.COD,
    )
    payment_details = models.JSONField(default=dict, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    shipping_address = models.TextField()
    phone = models.CharField(max_length=20)
    city = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def can_transition_payment_to(self, new_status: str) -> bool:
        return new_status in PAYMENT_TRANSITIONS.get(self.payment_status, set())

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Product.

    ``unit_price`` is a **snapshot** of the catalog price at the time of
    purchase.  ``reviewed`` flips once the buyer reviews the product for
    this order.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    reviewed = models.BooleanField(default=False)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["order", "product"],
                name="order_items_unique_product",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} ({self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``user`` is nullable: ``None`` means the change was performed by the
    system (e.g. a payment callback moving the order to ``processing``).
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
