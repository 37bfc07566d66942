"""Read-side composition of order responses.

Orders are rendered from the prefetched aggregate (items with their
products, status history, buyer) into immutable output DTOs; nothing here
queries beyond what the repository already loaded.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.products.dtos import ProductSummaryDTO

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem, OrderStatusHistory


class BuyerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str


class OrderItemOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    product: ProductSummaryDTO
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    reviewed: bool

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderItemOutputDTO:
        return cls(
            id=item.id,
            product=ProductSummaryDTO.from_entity(item.product),
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
            reviewed=item.reviewed,
        )


class StatusHistoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    old_status: Optional[str]
    new_status: str
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, history: OrderStatusHistory) -> StatusHistoryDTO:
        return cls(
            old_status=history.old_status,
            new_status=history.new_status,
            notes=history.notes,
            created_at=history.created_at,
        )


class OrderSummaryDTO(BaseModel):
    """List shape: no nested items or history."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    order_number: str
    user: BuyerDTO
    status: str
    payment_status: str
    payment_method: str
    total_amount: Decimal
    created_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderSummaryDTO:
        return cls(
            id=order.id,
            order_number=order.order_number,
            user=_buyer(order),
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            total_amount=order.total_amount,
            created_at=order.created_at,
        )


class OrderOutputDTO(OrderSummaryDTO):
    shipping_address: str
    phone: str
    city: str
    notes: str
    payment_reference: Optional[str]
    transaction_id: Optional[str]
    updated_at: datetime
    items: List[OrderItemOutputDTO]
    history: List[StatusHistoryDTO]

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Assumes ``items__product`` and ``status_history`` are prefetched."""
        details = order.payment_details or {}
        return cls(
            id=order.id,
            order_number=order.order_number,
            user=_buyer(order),
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            total_amount=order.total_amount,
            created_at=order.created_at,
            shipping_address=order.shipping_address,
            phone=order.phone,
            city=order.city,
            notes=order.notes,
            payment_reference=details.get("pidx"),
            transaction_id=details.get("transaction_id"),
            updated_at=order.updated_at,
            items=[OrderItemOutputDTO.from_entity(i) for i in order.items.all()],
            history=[StatusHistoryDTO.from_entity(h) for h in order.status_history.all()],
        )


def _buyer(order: Order) -> BuyerDTO:
    user = order.user
    return BuyerDTO(id=user.pk, username=user.get_username(), email=user.email or "")


def present_order(order: Order) -> Dict[str, Any]:
    return OrderOutputDTO.from_entity(order).model_dump(mode="json")


def present_orders(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    return [OrderSummaryDTO.from_entity(o).model_dump(mode="json") for o in orders]
