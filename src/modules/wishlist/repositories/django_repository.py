"""Django ORM implementation of the Wishlist repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from django.core.exceptions import ValidationError
from django.db import transaction

from modules.wishlist.models import WishlistItem
from modules.wishlist.repositories.interfaces import IWishlistRepository


class WishlistDjangoRepository(IWishlistRepository):
    def get_by_id(self, id: str) -> Optional[WishlistItem]:
        try:
            return WishlistItem.objects.select_related("product").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[WishlistItem]:
        queryset = WishlistItem.objects.select_related("product")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def items_for(self, user_id: Any) -> List[WishlistItem]:
        return self.list({"user_id": user_id, "product__deleted_at__isnull": True})

    @transaction.atomic
    def get_or_create(self, user_id: Any, product_id: Any) -> Tuple[WishlistItem, bool]:
        return WishlistItem.objects.get_or_create(user_id=user_id, product_id=product_id)

    @transaction.atomic
    def save(self, entity: WishlistItem) -> WishlistItem:
        entity.save()
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        try:
            deleted, _ = WishlistItem.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        return bool(deleted)

    def remove(self, user_id: Any, product_id: Any) -> bool:
        try:
            deleted, _ = WishlistItem.objects.filter(
                user_id=user_id, product_id=product_id
            ).delete()
        except (ValueError, ValidationError):
            return False
        return bool(deleted)

    def clear(self, user_id: Any) -> int:
        deleted, _ = WishlistItem.objects.filter(user_id=user_id).delete()
        return deleted
