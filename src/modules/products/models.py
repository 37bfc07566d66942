"""Product catalog model.

Rules held at the database level:
- ``price`` is strictly positive.
- ``stock`` is never negative; the check constraint backs up the
  conditional decrement done by the repository.
- Soft delete via ``deleted_at`` (inherited from ``SoftDeleteModel``).

``rating`` / ``total_reviews`` are denormalised aggregates over visible
reviews, written only by ``ReviewService``.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(SoftDeleteModel):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100, default="other", db_index=True)
    unit = models.CharField(max_length=32, blank=True, default="piece")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    total_reviews = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE and not self.is_deleted

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})

    def __str__(self) -> str:
        return f"{self.name} ({self.stock} {self.unit})"
