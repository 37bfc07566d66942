"""Order domain constants.

Order status and payment status are two independent state machines; the
only coupling is that a completed payment moves a pending order on to
``processing``.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    INITIATED = "initiated", "Initiated"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class PaymentMethod(models.TextChoices):
    COD = "cod", "Cash on delivery"
    ONLINE = "online", "Online"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

PAYMENT_TRANSITIONS: dict[str, set[str]] = {
    PaymentStatus.PENDING: {
        PaymentStatus.INITIATED,
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
    },
    PaymentStatus.INITIATED: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    # a failed attempt can only be retried through a new initiation
    PaymentStatus.FAILED: {PaymentStatus.INITIATED},
    PaymentStatus.COMPLETED: set(),
}

ORDER_NUMBER_MAX_RETRIES = 5
