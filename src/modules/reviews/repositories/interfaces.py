"""Review repository interface."""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.reviews.models import Review


class IReviewRepository(IRepository["Review"]):
    @abstractmethod
    def find(self, user_id: Any, product_id: Any, order_id: Any) -> Optional[Review]:
        """The review of *user_id* for *product_id* within *order_id*, if any."""

    @abstractmethod
    def list_for_product(self, product_id: Any) -> List[Review]:
        """Visible reviews of a product, newest first."""

    @abstractmethod
    def list_for_user(self, user_id: Any) -> List[Review]:
        """Every review written by a user, hidden ones included."""

    @abstractmethod
    def visible_rating_stats(self, product_id: Any) -> Tuple[Decimal, int]:
        """Mean rating and count of the visible reviews of a product.

        The mean is ``Decimal("0")`` when there are none.
        """
