"""Wishlist service layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

import structlog

from modules.products.exceptions import ProductNotFound
from modules.wishlist.exceptions import WishlistItemNotFound

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository
    from modules.wishlist.models import WishlistItem
    from modules.wishlist.repositories.interfaces import IWishlistRepository

logger = structlog.get_logger(__name__)


class WishlistService:
    def __init__(
        self,
        wishlist_repository: IWishlistRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._wishlist_repo = wishlist_repository
        self._product_repo = product_repository

    def get_wishlist(self, user_id: Any) -> List[WishlistItem]:
        return self._wishlist_repo.items_for(user_id)

    def add(self, user_id: Any, product_id: Any) -> WishlistItem:
        """Add a product; adding it twice returns the existing entry."""
        if not self._product_repo.get_by_id(str(product_id)):
            raise ProductNotFound(f"Product {product_id} not found.")
        item, created = self._wishlist_repo.get_or_create(user_id, product_id)
        if created:
            logger.info("wishlist.item_added", user_id=user_id, product_id=str(product_id))
        return item

    def remove(self, user_id: Any, product_id: Any) -> None:
        if not self._wishlist_repo.remove(user_id, product_id):
            raise WishlistItemNotFound()
        logger.info("wishlist.item_removed", user_id=user_id, product_id=str(product_id))

    def clear(self, user_id: Any) -> int:
        return self._wishlist_repo.clear(user_id)
