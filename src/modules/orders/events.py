"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created and its stock reserved."""

    user_id: str = ""
    total_amount: str = "0.00"


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled and its stock restored."""

    cancelled_by: str = ""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class PaymentCompleted(DomainEvent):
    transaction_id: str = ""


@dataclass(frozen=True)
class PaymentFailed(DomainEvent):
    reason: str = ""
