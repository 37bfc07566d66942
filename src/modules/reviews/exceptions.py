"""Review domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import Conflict, Forbidden, NotFound


class ReviewNotFound(NotFound):
    default_code = "review_not_found"
    default_message = "Review not found."


class ReviewNotAllowed(Forbidden):
    """The order does not entitle the user to review the product."""

    default_code = "review_not_allowed"
    default_message = "You can only review products from your delivered orders."


class ReviewAccessDenied(Forbidden):
    default_code = "review_access_denied"
    default_message = "You can only change your own reviews."


class DuplicateReview(Conflict):
    default_code = "duplicate_review"
    default_message = "You have already reviewed this product for this order."
