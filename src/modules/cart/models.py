"""Shopping cart lines.

A cart is just the set of a user's ``CartItem`` rows.  Nothing here
reserves stock; availability is checked when an item is added and again,
authoritatively, at checkout.
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class CartItem(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    class Meta:
        db_table = "cart_items"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "product"], name="cart_items_unique_product"
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="cart_items_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}: {self.product_id} x{self.quantity}"
