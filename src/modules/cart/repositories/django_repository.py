"""Django ORM implementation of the Cart repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.cart.models import CartItem
from modules.cart.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    def get_by_id(self, id: str) -> Optional[CartItem]:
        try:
            return CartItem.objects.select_related("product").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[CartItem]:
        queryset = CartItem.objects.select_related("product")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def items_for(self, user_id: Any) -> List[CartItem]:
        return self.list({"user_id": user_id})

    def lock_items(self, user_id: Any) -> List[CartItem]:
        return list(
            CartItem.objects.select_for_update(of=("self",))
            .select_related("product")
            .filter(user_id=user_id)
        )

    def get_item(self, user_id: Any, product_id: Any) -> Optional[CartItem]:
        try:
            return (
                CartItem.objects.select_related("product")
                .filter(user_id=user_id, product_id=product_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    @transaction.atomic
    def save(self, entity: CartItem) -> CartItem:
        entity.save()
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        try:
            deleted, _ = CartItem.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        return bool(deleted)

    def remove_item(self, user_id: Any, product_id: Any) -> bool:
        try:
            deleted, _ = CartItem.objects.filter(
                user_id=user_id, product_id=product_id
            ).delete()
        except (ValueError, ValidationError):
            return False
        return bool(deleted)

    def clear(self, user_id: Any) -> int:
        deleted, _ = CartItem.objects.filter(user_id=user_id).delete()
        logger.info("cart.cleared", user_id=user_id, removed=deleted)
        return deleted
