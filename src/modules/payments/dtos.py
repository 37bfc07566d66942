"""Payment DTOs exchanged between ``OrderService`` and a gateway."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentInitiation(BaseModel):
    """What a gateway returns when a payment is started."""

    model_config = ConfigDict(frozen=True)

    reference: str = Field(min_length=1)
    payment_url: str


class PaymentResult(BaseModel):
    """Outcome of a payment as reported by the gateway.

    ``status`` is ``pending`` while the buyer has not finished paying;
    applying a pending result leaves the order untouched.
    """

    model_config = ConfigDict(frozen=True)

    reference: str
    status: Literal["completed", "failed", "pending"]
    transaction_id: Optional[str] = None
    amount: Optional[Decimal] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"
