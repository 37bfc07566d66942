from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class WishlistItem(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="wishlist_items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="wishlist_items",
    )

    class Meta:
        db_table = "wishlist_items"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "product"], name="wishlist_items_unique_product"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}: {self.product_id}"
