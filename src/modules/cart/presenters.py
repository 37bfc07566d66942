"""Response shapes for the cart."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from modules.products.dtos import ProductSummaryDTO

if TYPE_CHECKING:
    from modules.cart.dtos import Cart
    from modules.cart.models import CartItem


def present_cart_item(item: CartItem) -> Dict[str, Any]:
    return {
        "product": ProductSummaryDTO.from_entity(item.product).model_dump(mode="json"),
        "quantity": item.quantity,
        "line_total": str(item.product.price * item.quantity),
    }


def present_cart(cart: Cart) -> Dict[str, Any]:
    return {
        "items": [present_cart_item(item) for item in cart.items],
        "item_count": sum(item.quantity for item in cart.items),
        "total": str(cart.total),
    }
