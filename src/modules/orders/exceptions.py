"""Order domain exceptions.

Raised by ``OrderService`` when business rules are violated.  Each one
subclasses a kind from ``modules.core.exceptions`` so the API layer knows
which HTTP status to answer with.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed


class OrderNotFound(NotFound):
    """The requested order does not exist."""

    default_code = "order_not_found"
    default_message = "Order not found."


class OrderAccessDenied(Forbidden):
    """The caller neither owns the order nor is an administrator."""

    default_code = "order_access_denied"
    default_message = "You can only access your own orders."


class InvalidOrderStatus(Conflict):
    """The order cannot move from its current status to the requested one."""

    default_code = "invalid_order_status"
    default_message = "Invalid order status transition."


class InsufficientStock(Conflict):
    """Not enough stock to fulfil a line item."""

    default_code = "insufficient_stock"

    def __init__(self, product_name: str) -> None:
        self.product_name = product_name
        super().__init__(f"Not enough stock for {product_name}.")


class PriceMismatch(Conflict):
    """The client priced a line item differently from the catalog."""

    default_code = "price_mismatch"
    default_message = "Product price has changed; refresh and try again."


class InvalidOrderInput(ValidationFailed):
    default_code = "invalid_order"


class PaymentAlreadyCompleted(Conflict):
    default_code = "payment_already_completed"
    default_message = "Order is already paid."


class InvalidPaymentTransition(Conflict):
    default_code = "invalid_payment_transition"
    default_message = "Invalid payment status transition."


class PaymentReferenceMismatch(NotFound):
    """The gateway reference does not belong to the order."""

    default_code = "payment_reference_not_found"
    default_message = "Payment reference not found for this order."


class PaymentAmountMismatch(Conflict):
    """The gateway settled a different amount than the order total."""

    default_code = "payment_amount_mismatch"
    default_message = "Paid amount does not match the order total."
