"""Cart domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound, ValidationFailed


class CartItemNotFound(NotFound):
    default_code = "cart_item_not_found"
    default_message = "Product is not in the cart."


class EmptyCart(ValidationFailed):
    default_code = "empty_cart"
    default_message = "Cart is empty."
