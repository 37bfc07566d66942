"""Product DTOs for the Service Layer.

Immutable Pydantic v2 models passed from the views to ``ProductService``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.models import ProductStatus

if TYPE_CHECKING:
    from modules.products.models import Product


class CreateProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: str = ""
    category: str = "other"
    unit: str = "piece"
    stock: int = Field(default=0, ge=0)

    @field_validator("name", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be blank.")
        return v


class UpdateProductDTO(BaseModel):
    """Partial update; only fields that are not ``None`` are applied."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)
    status: Optional[ProductStatus] = None


class ProductSummaryDTO(BaseModel):
    """Compact product shape embedded in orders, carts and reviews."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    price: Decimal
    unit: str
    stock: int
    is_available: bool

    @classmethod
    def from_entity(cls, product: Product) -> ProductSummaryDTO:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            unit=product.unit,
            stock=product.stock,
            is_available=product.is_active,
        )

