"""Product domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import Conflict, NotFound


class ProductNotFound(NotFound):
    """The requested product does not exist or has been soft-deleted."""

    default_code = "product_not_found"
    default_message = "Product not found."


class InactiveProduct(Conflict):
    """The product is withdrawn from sale."""

    default_code = "product_inactive"
    default_message = "Product is not available for sale."
