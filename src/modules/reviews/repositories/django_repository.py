"""Django ORM implementation of the Review repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Sum

from modules.reviews.models import Review
from modules.reviews.repositories.interfaces import IReviewRepository

logger = structlog.get_logger(__name__)


class ReviewDjangoRepository(IReviewRepository):
    def get_by_id(self, id: str) -> Optional[Review]:
        try:
            return (
                Review.objects.select_related("user", "product", "order")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Review]:
        queryset = Review.objects.select_related("user", "product")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def find(self, user_id: Any, product_id: Any, order_id: Any) -> Optional[Review]:
        try:
            return Review.objects.filter(
                user_id=user_id, product_id=product_id, order_id=order_id
            ).first()
        except (ValueError, ValidationError):
            return None

    def list_for_product(self, product_id: Any) -> List[Review]:
        return self.list({"product_id": product_id, "is_visible": True})

    def list_for_user(self, user_id: Any) -> List[Review]:
        return self.list({"user_id": user_id})

    @transaction.atomic
    def save(self, entity: Review) -> Review:
        """Persist a review.

        Runs in its own savepoint, so a unique-constraint violation leaves
        the caller's transaction usable.
        """
        entity.save()
        logger.info("review.saved", review_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        try:
            deleted, _ = Review.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        return bool(deleted)

    def visible_rating_stats(self, product_id: Any) -> Tuple[Decimal, int]:
        stats = Review.objects.filter(product_id=product_id, is_visible=True).aggregate(
            total=Sum("rating"), count=Count("id")
        )
        count = stats["count"] or 0
        if not count:
            return Decimal("0"), 0
        return Decimal(stats["total"]) / count, count
