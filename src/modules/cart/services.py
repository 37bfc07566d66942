"""Cart service layer.

The cart never holds stock.  ``checkout`` turns the cart into an order
through ``OrderService.create_order`` (which owns every stock rule) and
empties the cart in the same transaction.  The cart lines stay locked
until then, so two checkouts of one cart run one after the other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from django.db import transaction

from modules.cart.dtos import Cart
from modules.cart.exceptions import CartItemNotFound, EmptyCart
from modules.cart.models import CartItem
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import InsufficientStock
from modules.products.exceptions import InactiveProduct, ProductNotFound

if TYPE_CHECKING:
    from modules.cart.dtos import CheckoutDTO
    from modules.cart.repositories.interfaces import ICartRepository
    from modules.orders.models import Order
    from modules.orders.services import OrderService
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CartService:
    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        order_service: OrderService,
    ) -> None:
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._order_service = order_service

    def get_cart(self, user_id: Any) -> Cart:
        return Cart(items=self._cart_repo.items_for(user_id))

    @transaction.atomic
    def add_item(self, user_id: Any, product_id: Any, quantity: int = 1) -> CartItem:
        """Add *quantity* units, merging with an existing line.

        Raises:
            ProductNotFound / InactiveProduct: product cannot be bought.
            InsufficientStock: the resulting line exceeds current stock.
        """
        product = self._purchasable(product_id)
        item = self._cart_repo.get_item(user_id, product_id)
        if item is None:
            item = CartItem(user_id=user_id, product=product, quantity=0)

        self._ensure_stock(product, item.quantity + quantity)
        item.quantity += quantity
        item = self._cart_repo.save(item)
        logger.info(
            "cart.item_added",
            user_id=user_id,
            product_id=str(product_id),
            quantity=item.quantity,
        )
        return item

    @transaction.atomic
    def update_item(self, user_id: Any, product_id: Any, quantity: int) -> CartItem:
        item = self._cart_repo.get_item(user_id, product_id)
        if item is None:
            raise CartItemNotFound()
        product = self._purchasable(product_id)
        self._ensure_stock(product, quantity)

        item.quantity = quantity
        return self._cart_repo.save(item)

    def remove_item(self, user_id: Any, product_id: Any) -> None:
        if not self._cart_repo.remove_item(user_id, product_id):
            raise CartItemNotFound()
        logger.info("cart.item_removed", user_id=user_id, product_id=str(product_id))

    def clear(self, user_id: Any) -> int:
        return self._cart_repo.clear(user_id)

    @transaction.atomic
    def checkout(self, dto: CheckoutDTO) -> Order:
        """Create an order from the cart and empty it.

        A request repeating an earlier ``idempotency_key`` gets the order
        that key created and leaves the cart as it is.

        Raises:
            EmptyCart: nothing to order.
            Every error of ``OrderService.create_order``; the cart is left
            untouched when the order fails.
        """
        items = self._cart_repo.lock_items(dto.user_id)
        if dto.idempotency_key:
            placed = self._order_service.find_by_idempotency_key(
                dto.user_id, dto.idempotency_key
            )
            if placed is not None:
                logger.info(
                    "cart.checkout_replayed",
                    user_id=dto.user_id,
                    order_id=str(placed.id),
                    cart_lines=len(items),
                )
                return placed
        if not items:
            raise EmptyCart()

        order = self._order_service.create_order(
            CreateOrderDTO(
                user_id=dto.user_id,
                items=[
                    CreateOrderItemDTO(product_id=item.product_id, quantity=item.quantity)
                    for item in items
                ],
                shipping_address=dto.shipping_address,
                phone=dto.phone,
                city=dto.city,
                notes=dto.notes,
                payment_method=dto.payment_method,
                idempotency_key=dto.idempotency_key,
            )
        )
        self._cart_repo.clear(dto.user_id)
        logger.info("cart.checked_out", user_id=dto.user_id, order_id=str(order.id))
        return order

    def _purchasable(self, product_id: Any) -> Product:
        product = self._product_repo.get_by_id(str(product_id))
        if not product:
            raise ProductNotFound(f"Product {product_id} not found.")
        if not product.is_active:
            raise InactiveProduct(f"{product.name} is not available for sale.")
        return product

    @staticmethod
    def _ensure_stock(product: Product, quantity: int) -> None:
        if product.stock < quantity:
            raise InsufficientStock(product.name)
