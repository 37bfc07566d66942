"""Review service layer.

A user may review a product only through one of their delivered orders
that contains it, once per order.  Every change to a review recomputes the
product's ``rating`` (mean of visible ratings) and ``total_reviews``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, List

import structlog
from django.db import IntegrityError, transaction

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import OrderNotFound
from modules.reviews.dtos import ReviewEligibility
from modules.reviews.exceptions import (
    DuplicateReview,
    ReviewAccessDenied,
    ReviewNotAllowed,
    ReviewNotFound,
)
from modules.reviews.models import Review

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from modules.reviews.dtos import CreateReviewDTO, UpdateReviewDTO
    from modules.reviews.repositories.interfaces import IReviewRepository

logger = structlog.get_logger(__name__)

RATING_QUANTUM = Decimal("0.01")


class ReviewService:
    def __init__(
        self,
        review_repository: IReviewRepository,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._review_repo = review_repository
        self._order_repo = order_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_review(self, dto: CreateReviewDTO) -> Review:
        """Record a review and mark the order line as reviewed.

        Raises:
            OrderNotFound: order missing or owned by someone else.
            ReviewNotAllowed: order not delivered or product not in it.
            DuplicateReview: already reviewed for this order.
        """
        order = self._owned_order(dto.order_id, dto.user_id)
        reason = self._ineligibility(order, dto.product_id)
        if reason:
            raise ReviewNotAllowed(reason)
        if self._review_repo.find(dto.user_id, dto.product_id, dto.order_id):
            raise DuplicateReview()

        review = Review(
            user_id=dto.user_id,
            product_id=dto.product_id,
            order_id=dto.order_id,
            rating=dto.rating,
            comment=dto.comment,
        )
        try:
            review = self._review_repo.save(review)
        except IntegrityError as exc:
            raise DuplicateReview() from exc

        self._order_repo.mark_item_reviewed(dto.order_id, dto.product_id)
        self._refresh_product_rating(dto.product_id)
        logger.info(
            "review.created",
            review_id=str(review.id),
            product_id=str(dto.product_id),
            rating=dto.rating,
        )
        return review

    @transaction.atomic
    def update_review(self, review_id: str, user_id: Any, dto: UpdateReviewDTO) -> Review:
        review = self._get(review_id)
        if str(review.user_id) != str(user_id):
            raise ReviewAccessDenied()

        if dto.rating is not None:
            review.rating = dto.rating
        if dto.comment is not None:
            review.comment = dto.comment
        review = self._review_repo.save(review)

        self._refresh_product_rating(review.product_id)
        logger.info("review.updated", review_id=str(review.id))
        return review

    @transaction.atomic
    def delete_review(self, review_id: str, user_id: Any, *, as_admin: bool = False) -> None:
        """Remove a review; the order line becomes reviewable again."""
        review = self._get(review_id)
        if not as_admin and str(review.user_id) != str(user_id):
            raise ReviewAccessDenied("You can only delete your own reviews.")

        self._review_repo.delete(str(review.id))
        self._order_repo.mark_item_reviewed(review.order_id, review.product_id, False)
        self._refresh_product_rating(review.product_id)
        logger.info("review.deleted", review_id=str(review_id), by_admin=as_admin)

    @transaction.atomic
    def set_visibility(self, review_id: str, visible: bool) -> Review:
        review = self._get(review_id)
        if review.is_visible != visible:
            review.is_visible = visible
            review = self._review_repo.save(review)
            self._refresh_product_rating(review.product_id)
        logger.info("review.visibility_set", review_id=str(review_id), visible=visible)
        return review

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def check_eligibility(self, user_id: Any, order_id: Any, product_id: Any) -> ReviewEligibility:
        """Tell whether *user_id* may review *product_id* for *order_id*.

        Raises:
            OrderNotFound: order missing or owned by someone else.
        """
        order = self._owned_order(order_id, user_id)
        reason = self._ineligibility(order, product_id)
        if reason:
            return ReviewEligibility(can_review=False, has_reviewed=False, reason=reason)

        existing = self._review_repo.find(user_id, product_id, order_id)
        return ReviewEligibility(
            can_review=existing is None,
            has_reviewed=existing is not None,
            review=existing,
        )

    def list_for_product(self, product_id: Any) -> List[Review]:
        return self._review_repo.list_for_product(product_id)

    def list_for_user(self, user_id: Any) -> List[Review]:
        return self._review_repo.list_for_user(user_id)

    def list_all(self) -> List[Review]:
        return self._review_repo.list()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get(self, review_id: str) -> Review:
        review = self._review_repo.get_by_id(str(review_id))
        if not review:
            raise ReviewNotFound()
        return review

    def _owned_order(self, order_id: Any, user_id: Any) -> Order:
        order = self._order_repo.get_by_id(str(order_id))
        if not order or not order.is_owned_by(user_id):
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    @staticmethod
    def _ineligibility(order: Order, product_id: Any) -> str:
        if order.status != OrderStatus.DELIVERED:
            return "You can only review products from delivered orders."
        if not any(str(item.product_id) == str(product_id) for item in order.items.all()):
            return "This product is not part of the order."
        return ""

    def _refresh_product_rating(self, product_id: Any) -> None:
        mean, count = self._review_repo.visible_rating_stats(product_id)
        rating = mean.quantize(RATING_QUANTUM, rounding=ROUND_HALF_UP)
        self._product_repo.update_rating(str(product_id), rating, count)
