"""In-memory repositories for service-level tests.

Each fake honours its repository interface without touching the database.
Stock and status writes are serialised by a lock so the conditional
primitives behave like their SQL counterparts when exercised from several
threads.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

import uuid6
from django.db import IntegrityError
from django.utils import timezone

from modules.cart.repositories.interfaces import ICartRepository
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository
from modules.payments.dtos import PaymentInitiation, PaymentResult
from modules.payments.gateways.interfaces import IPaymentGateway
from modules.products.models import Product, ProductStatus
from modules.products.repositories.interfaces import IProductRepository
from modules.reviews.repositories.interfaces import IReviewRepository
from modules.wishlist.repositories.interfaces import IWishlistRepository
from shared.domain.events import DomainEventMixin

# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def build_product(**overrides) -> Product:
    """Unsaved ``Product`` instance; only used as a value object by the fakes."""
    fields = {
        "name": "Mustard Oil 1L",
        "price": Decimal("320.00"),
        "stock": 10,
        "status": ProductStatus.ACTIVE,
    }
    fields.update(overrides)
    return Product(**fields)


class InMemoryProductRepository(IProductRepository):
    def __init__(self, products: Optional[List[Product]] = None) -> None:
        self._lock = threading.Lock()
        self._products: Dict[str, Product] = {}
        for product in products or []:
            self.save(product)

    def get_by_id(self, id: str) -> Optional[Product]:
        product = self._products.get(str(id))
        if product is None or product.is_deleted:
            return None
        return product

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        return [p for p in self._products.values() if _matches(p, filters)]

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return len(self.list(filters))

    def save(self, entity: Product) -> Product:
        self._products[str(entity.id)] = entity
        return entity

    def delete(self, id: str) -> bool:
        product = self.get_by_id(id)
        if product is None:
            return False
        product.deleted_at = timezone.now()
        return True

    def decrement_stock(self, id: str, quantity: int) -> bool:
        with self._lock:
            product = self.get_by_id(id)
            if product is None or product.stock < quantity:
                return False
            product.stock -= quantity
            return True

    def increment_stock(self, id: str, quantity: int) -> bool:
        with self._lock:
            product = self._products.get(str(id))
            if product is None:
                return False
            product.stock += quantity
            return True

    def update_rating(self, id: str, rating: Decimal, total_reviews: int) -> None:
        product = self._products[str(id)]
        product.rating = rating
        product.total_reviews = total_reviews

    def stock_of(self, id: Any) -> int:
        return self._products[str(id)].stock


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class _Items:
    """Stands in for the ``order.items`` related manager."""

    def __init__(self, items: List["FakeOrderItem"]) -> None:
        self._items = items

    def all(self) -> List["FakeOrderItem"]:
        return list(self._items)


@dataclass
class FakeOrderItem:
    product_id: Any
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    reviewed: bool = False


class FakeOrder(DomainEventMixin):
    """Plain object carrying the fields and state-machine helpers of ``Order``."""

    is_terminal = Order.is_terminal
    is_paid = Order.is_paid
    can_transition_to = Order.can_transition_to
    can_transition_payment_to = Order.can_transition_payment_to
    is_owned_by = Order.is_owned_by

    def __init__(self, **fields: Any) -> None:
        self.id = uuid6.uuid7()
        self.order_number = Order.generate_order_number()
        self.status = OrderStatus.PENDING
        self.payment_status = PaymentStatus.PENDING
        self.payment_method = PaymentMethod.COD
        self.payment_details: Dict[str, Any] = {}
        self.city = ""
        self.notes = ""
        self.idempotency_key = None
        self.created_at = timezone.now()
        lines = fields.pop("items", [])
        self.__dict__.update(fields)
        self.items = _Items(lines)


class InMemoryOrderRepository(IOrderRepository):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._orders: Dict[str, FakeOrder] = {}
        self.history: List[Dict[str, Any]] = []
        self.published: List[Any] = []

    def create(self, data: Dict[str, Any]) -> FakeOrder:
        lines = [
            FakeOrderItem(
                product_id=line["product_id"],
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                subtotal=line["quantity"] * line["unit_price"],
            )
            for line in data["items"]
        ]
        fields = {key: value for key, value in data.items() if key != "items"}
        order = FakeOrder(
            items=lines,
            total_amount=sum((line.subtotal for line in lines), Decimal("0.00")),
            **fields,
        )
        with self._lock:
            key = order.idempotency_key
            if key and self.get_by_idempotency_key(key):
                raise IntegrityError("orders.idempotency_key")
            self._orders[str(order.id)] = order
        return order

    def get_by_id(self, id: str) -> Optional[FakeOrder]:
        return self._orders.get(str(id))

    def get_for_update(self, id: str) -> Optional[FakeOrder]:
        return self.get_by_id(id)

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[FakeOrder]:
        orders = [o for o in self._orders.values() if _matches(o, filters)]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def save(self, entity: FakeOrder) -> FakeOrder:
        self._orders[str(entity.id)] = entity
        self.published.extend(entity.domain_events)
        entity.clear_domain_events()
        return entity

    def delete(self, id: str) -> bool:
        return self._orders.pop(str(id), None) is not None

    def transition_status(self, id: str, from_status: str, to_status: str) -> bool:
        with self._lock:
            order = self._orders.get(str(id))
            if order is None or order.status != from_status:
                return False
            order.status = to_status
            return True

    def add_history(
        self,
        order_id: Any,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        entry = {
            "order_id": order_id,
            "old_status": old_status,
            "new_status": status,
            "notes": notes,
            "user_id": user_id,
        }
        self.history.append(entry)
        return entry

    def get_by_idempotency_key(self, key: str) -> Optional[FakeOrder]:
        for order in self._orders.values():
            if order.idempotency_key == key:
                return order
        return None

    def mark_item_reviewed(
        self, order_id: Any, product_id: Any, reviewed: bool = True
    ) -> None:
        for item in self._orders[str(order_id)].items.all():
            if str(item.product_id) == str(product_id):
                item.reviewed = reviewed

    def count(
        self,
        filters: Optional[Dict[str, Any]] = None,
        since: Optional[datetime] = None,
    ) -> int:
        orders = self.list(filters)
        if since is not None:
            orders = [o for o in orders if o.created_at > since]
        return len(orders)

    def revenue(self) -> Decimal:
        return sum(
            (
                o.total_amount
                for o in self._orders.values()
                if o.status != OrderStatus.CANCELLED
                and (o.is_paid or o.status == OrderStatus.DELIVERED)
            ),
            Decimal("0.00"),
        )

    def recent(self, limit: int = 5) -> List[FakeOrder]:
        return self.list()[:limit]

    def history_for(self, order_id: Any) -> List[Dict[str, Any]]:
        return [h for h in self.history if str(h["order_id"]) == str(order_id)]


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@dataclass
class FakeReview:
    user_id: Any
    product_id: Any
    order_id: Any
    rating: int
    comment: str = ""
    is_visible: bool = True
    id: Any = field(default_factory=uuid6.uuid7)


class InMemoryReviewRepository(IReviewRepository):
    def __init__(self) -> None:
        self._reviews: Dict[str, Any] = {}

    def get_by_id(self, id: str) -> Optional[Any]:
        return self._reviews.get(str(id))

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Any]:
        return [r for r in self._reviews.values() if _matches(r, filters)]

    def save(self, entity: Any) -> Any:
        existing = self.find(entity.user_id, entity.product_id, entity.order_id)
        if existing is not None and existing.id != entity.id:
            raise IntegrityError("reviews_unique_per_order")
        self._reviews[str(entity.id)] = entity
        return entity

    def delete(self, id: str) -> bool:
        return self._reviews.pop(str(id), None) is not None

    def find(self, user_id: Any, product_id: Any, order_id: Any) -> Optional[Any]:
        for review in self._reviews.values():
            if (
                str(review.user_id) == str(user_id)
                and str(review.product_id) == str(product_id)
                and str(review.order_id) == str(order_id)
            ):
                return review
        return None

    def list_for_product(self, product_id: Any) -> List[Any]:
        return [
            r
            for r in self._reviews.values()
            if str(r.product_id) == str(product_id) and r.is_visible
        ]

    def list_for_user(self, user_id: Any) -> List[Any]:
        return [r for r in self._reviews.values() if str(r.user_id) == str(user_id)]

    def visible_rating_stats(self, product_id: Any) -> Tuple[Decimal, int]:
        ratings = [r.rating for r in self.list_for_product(product_id)]
        if not ratings:
            return Decimal("0"), 0
        return Decimal(sum(ratings)) / len(ratings), len(ratings)


# ---------------------------------------------------------------------------
# Cart / Wishlist
# ---------------------------------------------------------------------------


class InMemoryCartRepository(ICartRepository):
    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], Any] = {}

    def get_by_id(self, id: str) -> Optional[Any]:
        for item in self._items.values():
            if str(item.id) == str(id):
                return item
        return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Any]:
        return [i for i in self._items.values() if _matches(i, filters)]

    def items_for(self, user_id: Any) -> List[Any]:
        return [i for (u, _), i in self._items.items() if u == str(user_id)]

    def lock_items(self, user_id: Any) -> List[Any]:
        return self.items_for(user_id)

    def get_item(self, user_id: Any, product_id: Any) -> Optional[Any]:
        return self._items.get((str(user_id), str(product_id)))

    def save(self, entity: Any) -> Any:
        self._items[(str(entity.user_id), str(entity.product_id))] = entity
        return entity

    def delete(self, id: str) -> bool:
        for key, item in list(self._items.items()):
            if str(item.id) == str(id):
                del self._items[key]
                return True
        return False

    def remove_item(self, user_id: Any, product_id: Any) -> bool:
        return self._items.pop((str(user_id), str(product_id)), None) is not None

    def clear(self, user_id: Any) -> int:
        keys = [key for key in self._items if key[0] == str(user_id)]
        for key in keys:
            del self._items[key]
        return len(keys)


@dataclass
class FakeWishlistItem:
    user_id: Any
    product_id: Any
    id: Any = field(default_factory=uuid6.uuid7)


class InMemoryWishlistRepository(IWishlistRepository):
    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], FakeWishlistItem] = {}

    def get_by_id(self, id: str) -> Optional[FakeWishlistItem]:
        for item in self._items.values():
            if str(item.id) == str(id):
                return item
        return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[FakeWishlistItem]:
        return [i for i in self._items.values() if _matches(i, filters)]

    def items_for(self, user_id: Any) -> List[FakeWishlistItem]:
        return [i for (u, _), i in self._items.items() if u == str(user_id)]

    def get_or_create(self, user_id: Any, product_id: Any) -> Tuple[FakeWishlistItem, bool]:
        key = (str(user_id), str(product_id))
        if key in self._items:
            return self._items[key], False
        item = FakeWishlistItem(user_id=user_id, product_id=product_id)
        self._items[key] = item
        return item, True

    def save(self, entity: FakeWishlistItem) -> FakeWishlistItem:
        self._items[(str(entity.user_id), str(entity.product_id))] = entity
        return entity

    def delete(self, id: str) -> bool:
        item = self.get_by_id(id)
        if item is None:
            return False
        return self.remove(item.user_id, item.product_id)

    def remove(self, user_id: Any, product_id: Any) -> bool:
        return self._items.pop((str(user_id), str(product_id)), None) is not None

    def clear(self, user_id: Any) -> int:
        keys = [key for key in self._items if key[0] == str(user_id)]
        for key in keys:
            del self._items[key]
        return len(keys)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


class StubPaymentGateway(IPaymentGateway):
    """Gateway whose lookup answer is chosen by the test."""

    def __init__(
        self, outcome: str = "completed", amount: Optional[Decimal] = None
    ) -> None:
        self.outcome = outcome
        self.amount = amount
        self.on_initiate: Optional[Callable[[Any], None]] = None
        self.initiated: List[Any] = []
        self.verified: List[str] = []

    def initiate(self, order: Any, amount: Decimal) -> PaymentInitiation:
        reference = f"pidx-{len(self.initiated) + 1}"
        self.initiated.append((order.id, amount))
        if self.on_initiate is not None:
            self.on_initiate(order)
        return PaymentInitiation(
            reference=reference, payment_url=f"https://pay.test/{reference}"
        )

    def verify(self, reference: str) -> PaymentResult:
        self.verified.append(reference)
        return PaymentResult(
            reference=reference,
            status=self.outcome,
            transaction_id="txn-1" if self.outcome == "completed" else None,
            amount=self.amount,
            raw={"status": self.outcome.capitalize()},
        )


def _matches(obj: Any, filters: Optional[Dict[str, Any]]) -> bool:
    for key, expected in (filters or {}).items():
        if str(getattr(obj, key, None)) != str(expected):
            return False
    return True
