"""Order API views.

Exposes ``OrderService`` via HTTP using a DRF ViewSet.  Domain exceptions
are re-raised as DRF exceptions so every error shares one envelope; the
view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError, validation_error_from_pydantic
from modules.core.permissions import IsStoreAdmin, is_admin
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.presenters import present_order, present_orders
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    UpdateOrderStatusSerializer,
    VerifyPaymentSerializer,
)
from modules.orders.services import OrderService
from modules.payments.gateways import get_payment_gateway
from modules.products.repositories.django_repository import ProductDjangoRepository

_THROTTLE_SCOPES = {
    "create": "order_creation",
    "list": "order_listing",
    "retrieve": "order_listing",
    "initiate_payment": "payment",
    "verify_payment": "payment",
}


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``; writes go through the
    service/repository layer.  Buyers only ever see their own orders.
    """

    permission_classes = [IsAuthenticated]
    filterset_class = OrderFilter
    search_fields = ["order_number", "user__username", "phone", "city"]
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Order.objects.none()

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            payment_gateway=get_payment_gateway(),
        )

    def get_permissions(self):
        if self.action == "partial_update":
            return [IsAuthenticated(), IsStoreAdmin()]
        return super().get_permissions()

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = _THROTTLE_SCOPES.get(self.action)
        return super().get_throttles()

    def get_queryset(self):
        queryset = Order.objects.select_related("user")
        if not is_admin(self.request.user):
            queryset = queryset.filter(user_id=self.request.user.pk)
        return queryset

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        Returns 200 if the key was already used, 201 for new orders.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        idempotency_key = request.headers.get("Idempotency-Key")
        try:
            dto = CreateOrderDTO(
                user_id=request.user.pk,
                items=[
                    CreateOrderItemDTO(
                        product_id=item["product_id"],
                        quantity=item["quantity"],
                        unit_price=item.get("unit_price"),
                    )
                    for item in data["items"]
                ],
                shipping_address=data["shipping_address"],
                phone=data["phone"],
                city=data["city"],
                notes=data["notes"],
                payment_method=data["payment_method"],
                idempotency_key=idempotency_key,
            )
        except PydanticValidationError as exc:
            raise validation_error_from_pydantic(exc) from exc

        replayed = bool(
            idempotency_key
            and Order.objects.filter(idempotency_key=idempotency_key).exists()
        )
        try:
            order = self._service.create_order(dto)
        except DomainError as exc:
            raise exc.as_api_exception() from exc

        return Response(
            present_order(order),
            status=status.HTTP_200_OK if replayed else status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering, search and ordering come from ``filter_backends``;
        results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(present_orders(page))
        return Response(present_orders(queryset))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(
                str(pk), request.user.pk, as_admin=is_admin(request.user)
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(present_order(order))

    # ------------------------------------------------------------------
    # Status Update (admin)
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        ``cancelled`` restores stock exactly like ``/cancel/``.
        """
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.update_status(
                order_id=str(pk),
                new_status=serializer.validated_data["status"],
                notes=serializer.validated_data["notes"],
                actor_id=request.user.pk,
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(present_order(order))

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.cancel_order(
                order_id=str(pk),
                user_id=request.user.pk,
                notes=serializer.validated_data["notes"],
                as_admin=is_admin(request.user),
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(present_order(order))

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="payment/initiate")
    def initiate_payment(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/payment/initiate/"""
        try:
            initiation = self._service.initiate_payment(str(pk), request.user.pk)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(
            {
                "order_id": str(pk),
                "pidx": initiation.reference,
                "payment_url": initiation.payment_url,
            }
        )

    @action(detail=True, methods=["post"], url_path="payment/verify")
    def verify_payment(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/payment/verify/"""
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.verify_payment(
                str(pk),
                serializer.validated_data["pidx"],
                user_id=request.user.pk,
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(present_order(order))
