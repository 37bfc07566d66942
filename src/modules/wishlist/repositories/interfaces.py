"""Wishlist repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, List, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.wishlist.models import WishlistItem


class IWishlistRepository(IRepository["WishlistItem"]):
    @abstractmethod
    def items_for(self, user_id: Any) -> List[WishlistItem]:
        """Wishlist entries of a user with their products, newest first."""

    @abstractmethod
    def get_or_create(self, user_id: Any, product_id: Any) -> Tuple[WishlistItem, bool]:
        """Return the entry for *product_id*, creating it when missing."""

    @abstractmethod
    def remove(self, user_id: Any, product_id: Any) -> bool:
        """Delete the entry; ``False`` if there was none."""

    @abstractmethod
    def clear(self, user_id: Any) -> int:
        """Delete every entry of a user and return how many were removed."""
