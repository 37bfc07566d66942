"""Product API views.

Catalog reads are public; writes require an administrator.  Domain
exceptions raised by ``ProductService`` are re-raised as DRF exceptions so
the standard error envelope is applied.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError, validation_error_from_pydantic
from modules.core.permissions import IsStoreAdmin
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer, StockUpdateSerializer
from modules.products.services import ProductService

_PUBLIC_ACTIONS = {"list", "retrieve"}


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Product CRUD operations.

    Writes go through ``ProductService``; the list endpoint reads the live
    queryset directly so filtering, search and ordering stay in SQL.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "description", "category"]
    ordering_fields = ["name", "price", "stock", "rating", "created_at"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.alive()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_permissions(self):
        if self.action in _PUBLIC_ACTIONS:
            return [AllowAny()]
        return [IsAuthenticated(), IsStoreAdmin()]

    def get_queryset(self):
        return Product.objects.alive()

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(str(pk))
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy (admin)
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        data = request.data
        try:
            dto = CreateProductDTO(
                name=data.get("name", ""),
                price=data.get("price", 0),
                description=data.get("description", ""),
                category=data.get("category", "other"),
                unit=data.get("unit", "piece"),
                stock=data.get("stock", 0),
            )
        except PydanticValidationError as exc:
            raise validation_error_from_pydantic(exc) from exc

        product = self._service.create_product(dto)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        data = request.data
        try:
            dto = UpdateProductDTO(
                name=data.get("name"),
                price=data.get("price"),
                description=data.get("description"),
                category=data.get("category"),
                unit=data.get("unit"),
                stock=data.get("stock"),
                status=data.get("status"),
            )
        except PydanticValidationError as exc:
            raise validation_error_from_pydantic(exc) from exc

        try:
            product = self._service.update_product(str(pk), dto)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(ProductSerializer(product).data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/"""
        return self.partial_update(request, pk)

    @action(detail=True, methods=["patch"], url_path="stock")
    def update_stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/stock/: restock to an absolute value."""
        serializer = StockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dto = UpdateProductDTO(stock=serializer.validated_data["stock"])
        try:
            product = self._service.update_product(str(pk), dto)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(ProductSerializer(product).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        try:
            self._service.delete_product(str(pk))
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(status=status.HTTP_204_NO_CONTENT)
