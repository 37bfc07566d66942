from __future__ import annotations

from modules.core.exceptions import NotFound


class WishlistItemNotFound(NotFound):
    default_code = "wishlist_item_not_found"
    default_message = "Product is not in the wishlist."
