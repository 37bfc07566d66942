"""Cart repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.cart.models import CartItem


class ICartRepository(IRepository["CartItem"]):
    @abstractmethod
    def items_for(self, user_id: Any) -> List[CartItem]:
        """Cart lines of a user with their products loaded."""

    @abstractmethod
    def lock_items(self, user_id: Any) -> List[CartItem]:
        """Like ``items_for`` but locks the lines until the transaction ends."""

    @abstractmethod
    def get_item(self, user_id: Any, product_id: Any) -> Optional[CartItem]:
        """The line for *product_id*, or ``None``."""

    @abstractmethod
    def remove_item(self, user_id: Any, product_id: Any) -> bool:
        """Delete a line; ``False`` if there was none."""

    @abstractmethod
    def clear(self, user_id: Any) -> int:
        """Delete every line of a user and return how many were removed."""
