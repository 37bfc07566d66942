"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate needs:
creation together with items, a locked read, a compare-and-set on status,
status history tracking, idempotency-key look-up and the aggregates used
by the admin dashboard.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem children and OrderStatusHistory
    records.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items.

        ``data`` must include ``user_id``, ``items`` (dicts with
        ``product_id``, ``quantity``, ``unit_price``) and the shipping
        fields.  The repository assigns the order number and computes
        subtotals and ``total_amount``.
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order holding a row lock until the transaction ends."""

    @abstractmethod
    def transition_status(self, id: str, from_status: str, to_status: str) -> bool:
        """Set ``status`` to *to_status* only if it is still *from_status*.

        Returns ``False`` when another writer got there first.
        """

    @abstractmethod
    def add_history(
        self,
        order_id: Any,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Retrieve an order by its idempotency key."""

    @abstractmethod
    def mark_item_reviewed(
        self, order_id: Any, product_id: Any, reviewed: bool = True
    ) -> None:
        """Set the ``reviewed`` flag of the line item of *product_id* in *order_id*."""

    @abstractmethod
    def count(
        self,
        filters: Optional[Dict[str, Any]] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count orders matching *filters*, created strictly after *since*."""

    @abstractmethod
    def revenue(self) -> Decimal:
        """Sum of ``total_amount`` over orders whose money is in hand.

        An order counts when it is not cancelled and its payment is
        completed or it has been delivered (cash collected).
        """

    @abstractmethod
    def recent(self, limit: int = 5) -> List[Order]:
        """The *limit* most recently created orders."""
