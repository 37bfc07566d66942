"""Review API views."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError
from modules.core.permissions import IsStoreAdmin, is_admin
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.reviews.dtos import CreateReviewDTO, UpdateReviewDTO
from modules.reviews.models import Review
from modules.reviews.repositories.django_repository import ReviewDjangoRepository
from modules.reviews.serializers import (
    CreateReviewSerializer,
    EligibilityQuerySerializer,
    ReviewSerializer,
    ReviewVisibilitySerializer,
    UpdateReviewSerializer,
)
from modules.reviews.services import ReviewService

_ADMIN_ACTIONS = {"list", "visibility"}


class ReviewViewSet(GenericViewSet):
    """Reviews of delivered purchases.

    Product listings are public; writing requires a login and the admin
    endpoints (full list, visibility) require a staff user.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ReviewSerializer
    queryset = Review.objects.none()
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ReviewService(
            review_repository=ReviewDjangoRepository(),
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_permissions(self):
        if self.action == "for_product":
            return [AllowAny()]
        if self.action in _ADMIN_ACTIONS:
            return [IsAuthenticated(), IsStoreAdmin()]
        return super().get_permissions()

    def create(self, request: Request) -> Response:
        """POST /api/v1/reviews/"""
        serializer = CreateReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dto = CreateReviewDTO(user_id=request.user.pk, **serializer.validated_data)
        try:
            review = self._service.create_review(dto)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/reviews/{pk}/"""
        serializer = UpdateReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dto = UpdateReviewDTO(**serializer.validated_data)
        try:
            review = self._service.update_review(str(pk), request.user.pk, dto)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(ReviewSerializer(review).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/reviews/{pk}/"""
        try:
            self._service.delete_review(
                str(pk), request.user.pk, as_admin=is_admin(request.user)
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(status=status.HTTP_204_NO_CONTENT)

    def list(self, request: Request) -> Response:
        """GET /api/v1/reviews/ (admin)"""
        return Response(ReviewSerializer(self._service.list_all(), many=True).data)

    @action(detail=False, methods=["get"])
    def mine(self, request: Request) -> Response:
        """GET /api/v1/reviews/mine/"""
        reviews = self._service.list_for_user(request.user.pk)
        return Response(ReviewSerializer(reviews, many=True).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"product/(?P<product_id>[0-9a-fA-F-]{36})",
    )
    def for_product(self, request: Request, product_id: str | None = None) -> Response:
        """GET /api/v1/reviews/product/{product_id}/"""
        reviews = self._service.list_for_product(product_id)
        return Response(ReviewSerializer(reviews, many=True).data)

    @action(detail=False, methods=["get"])
    def check(self, request: Request) -> Response:
        """GET /api/v1/reviews/check/?order_id=...&product_id=..."""
        query = EligibilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            eligibility = self._service.check_eligibility(
                request.user.pk,
                query.validated_data["order_id"],
                query.validated_data["product_id"],
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(
            {
                "can_review": eligibility.can_review,
                "has_reviewed": eligibility.has_reviewed,
                "reason": eligibility.reason,
                "review": (
                    ReviewSerializer(eligibility.review).data
                    if eligibility.review
                    else None
                ),
            }
        )

    @action(detail=True, methods=["patch"])
    def visibility(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/reviews/{pk}/visibility/ (admin)"""
        serializer = ReviewVisibilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            review = self._service.set_visibility(
                str(pk), serializer.validated_data["is_visible"]
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(ReviewSerializer(review).data)
