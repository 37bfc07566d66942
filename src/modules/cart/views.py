"""Cart API views.

Every endpoint acts on the caller's own cart.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.cart.dtos import CheckoutDTO
from modules.cart.presenters import present_cart, present_cart_item
from modules.cart.repositories.django_repository import CartDjangoRepository
from modules.cart.serializers import (
    AddCartItemSerializer,
    CheckoutSerializer,
    UpdateCartItemSerializer,
)
from modules.cart.services import CartService
from modules.core.exceptions import DomainError, validation_error_from_pydantic
from modules.orders.models import Order
from modules.orders.presenters import present_order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository


class CartViewSet(ViewSet):
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        product_repository = ProductDjangoRepository()
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            product_repository=product_repository,
            order_service=OrderService(
                order_repository=OrderDjangoRepository(),
                product_repository=product_repository,
            ),
        )

    def retrieve(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        return Response(present_cart(self._service.get_cart(request.user.pk)))

    def clear(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        self._service.clear(request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def add_item(self, request: Request) -> Response:
        """POST /api/v1/cart/items/"""
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            item = self._service.add_item(
                request.user.pk,
                serializer.validated_data["product_id"],
                serializer.validated_data["quantity"],
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(present_cart_item(item), status=status.HTTP_201_CREATED)

    def update_item(self, request: Request, product_id: str) -> Response:
        """PATCH /api/v1/cart/items/{product_id}/"""
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            item = self._service.update_item(
                request.user.pk, product_id, serializer.validated_data["quantity"]
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(present_cart_item(item))

    def remove_item(self, request: Request, product_id: str) -> Response:
        """DELETE /api/v1/cart/items/{product_id}/"""
        try:
            self._service.remove_item(request.user.pk, product_id)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(status=status.HTTP_204_NO_CONTENT)

    def checkout(self, request: Request) -> Response:
        """POST /api/v1/cart/checkout/"""
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CheckoutDTO(
                user_id=request.user.pk,
                idempotency_key=request.headers.get("Idempotency-Key"),
                **serializer.validated_data,
            )
        except PydanticValidationError as exc:
            raise validation_error_from_pydantic(exc) from exc

        replayed = bool(
            dto.idempotency_key
            and Order.objects.filter(idempotency_key=dto.idempotency_key).exists()
        )
        try:
            order = self._service.checkout(dto)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(
            present_order(order),
            status=status.HTTP_200_OK if replayed else status.HTTP_201_CREATED,
        )
