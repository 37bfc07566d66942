"""Product service layer (Use Cases).

Catalog maintenance for administrators and read access for everyone.
Stock is set explicitly here only by administrators (restocking); the
order flow changes it through the repository's conditional primitives.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.products.exceptions import ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = ("name", "price", "description", "category", "unit", "stock", "status")


class ProductService:
    """Application service for Product use-cases."""

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        product = Product(
            name=dto.name,
            price=dto.price,
            description=dto.description,
            category=dto.category,
            unit=dto.unit,
            stock=dto.stock,
        )
        product = self._repo.save(product)
        logger.info("product.created", product_id=str(product.id), name=product.name)
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Apply the non-``None`` fields of *dto*.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self.get_product(id)
        changed = []
        for field in _UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)
                changed.append(field)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(id), fields=changed)
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.deleted", product_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        """Raises ``ProductNotFound`` if the product does not exist."""
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product
