"""Product repository interface.

Besides CRUD, this is the catalog collaborator of the order flow: it owns
the stock counter and exposes it only through conditional primitives, so
no caller can drive stock below zero.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def decrement_stock(self, id: str, quantity: int) -> bool:
        """Atomically subtract *quantity* if at least that much is in stock.

        Returns ``False`` (and changes nothing) when stock is insufficient
        or the product does not exist.
        """

    @abstractmethod
    def increment_stock(self, id: str, quantity: int) -> bool:
        """Atomically add *quantity* back; ``False`` if the product is gone."""

    @abstractmethod
    def update_rating(self, id: str, rating: Decimal, total_reviews: int) -> None:
        """Store the review aggregates of a product."""

    @abstractmethod
    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count live products matching *filters*."""
