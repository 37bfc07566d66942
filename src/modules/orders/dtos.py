"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are the
contracts between the API layer and ``OrderService``; all are immutable.

- ``CreateOrderItemDTO``: one requested line item.
- ``CreateOrderDTO``: a complete order request (buyer, items, shipping).
- ``UpdateOrderStatusDTO``: an administrator's status change.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import OrderStatus, PaymentMethod


class CreateOrderItemDTO(BaseModel):
    """A single requested line item.

    ``unit_price`` is optional: when the client sends the price it saw, the
    service checks it against the catalog instead of trusting it.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int
    unit_price: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item.
    - Each item quantity must be positive.
    - A product appears at most once.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    items: List[CreateOrderItemDTO]
    shipping_address: str = Field(min_length=1)
    phone: str = Field(min_length=7, max_length=20)
    city: str = ""
    notes: str = ""
    payment_method: PaymentMethod = PaymentMethod.COD
    idempotency_key: Optional[str] = Field(default=None, max_length=255)

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("shipping_address", "phone")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be blank.")
        return v

    @model_validator(mode="after")
    def no_duplicate_products(self):
        """Prevent duplicate product IDs in the same order."""
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        return self


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    notes: str = ""
