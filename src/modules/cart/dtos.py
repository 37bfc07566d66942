"""Cart DTOs."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from modules.orders.constants import PaymentMethod

if TYPE_CHECKING:
    from modules.cart.models import CartItem


class CheckoutDTO(BaseModel):
    """Shipping and payment details supplied at checkout."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    shipping_address: str = Field(min_length=1)
    phone: str = Field(min_length=7, max_length=20)
    city: str = ""
    notes: str = ""
    payment_method: PaymentMethod = PaymentMethod.COD
    idempotency_key: Optional[str] = Field(default=None, max_length=255)


@dataclass(frozen=True)
class Cart:
    items: List[CartItem]

    @property
    def total(self) -> Decimal:
        return sum(
            (item.product.price * item.quantity for item in self.items),
            Decimal("0.00"),
        )

    @property
    def is_empty(self) -> bool:
        return not self.items
