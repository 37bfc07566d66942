"""Review DTOs for the Service Layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from modules.reviews.models import MAX_RATING, MIN_RATING

if TYPE_CHECKING:
    from modules.reviews.models import Review


class CreateReviewDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int
    product_id: UUID
    order_id: UUID
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    comment: str = Field(default="", max_length=2000)


class UpdateReviewDTO(BaseModel):
    """Partial update; ``None`` leaves a field unchanged."""

    model_config = ConfigDict(frozen=True)

    rating: Optional[int] = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    comment: Optional[str] = Field(default=None, max_length=2000)


@dataclass(frozen=True)
class ReviewEligibility:
    """Answer to "may this user review this product for this order?"."""

    can_review: bool
    has_reviewed: bool
    review: Optional[Review] = None
    reason: str = ""
