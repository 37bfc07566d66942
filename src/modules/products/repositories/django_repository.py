"""Django ORM implementation of the Product repository.

Look-ups only see live (not soft-deleted) rows and return ``None`` instead
of raising; the Service Layer decides how to report a missing product.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List live products with optional Django ORM look-ups.

        Examples of valid filters::

            {"status": "active"}
            {"category__iexact": "dairy", "stock__gt": 0}
        """
        queryset = Product.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        queryset = Product.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.count()

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Stock primitives
    # ------------------------------------------------------------------

    def decrement_stock(self, id: str, quantity: int) -> bool:
        """Single ``UPDATE ... WHERE stock >= quantity`` statement.

        The database evaluates the guard and the subtraction together, so
        two concurrent requests for the last unit cannot both match.
        """
        try:
            updated = (
                Product.objects.alive()
                .filter(id=id, stock__gte=quantity)
                .update(stock=F("stock") - quantity, updated_at=timezone.now())
            )
        except (ValueError, ValidationError):
            return False
        return updated == 1

    def increment_stock(self, id: str, quantity: int) -> bool:
        # Soft-deleted products still get their units back
        try:
            updated = Product.objects.filter(id=id).update(
                stock=F("stock") + quantity, updated_at=timezone.now()
            )
        except (ValueError, ValidationError):
            return False
        return updated == 1

    def update_rating(self, id: str, rating: Decimal, total_reviews: int) -> None:
        Product.objects.filter(id=id).update(
            rating=rating, total_reviews=total_reviews, updated_at=timezone.now()
        )
        logger.info(
            "product.rating_updated",
            product_id=str(id),
            rating=str(rating),
            total_reviews=total_reviews,
        )
