"""Wishlist API views."""

from __future__ import annotations

from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.exceptions import DomainError
from modules.products.dtos import ProductSummaryDTO
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.wishlist.repositories.django_repository import WishlistDjangoRepository
from modules.wishlist.services import WishlistService


class AddWishlistItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


def _present(item) -> dict:
    return {
        "product": ProductSummaryDTO.from_entity(item.product).model_dump(mode="json"),
        "added_at": item.created_at.isoformat(),
    }


class WishlistViewSet(ViewSet):
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = WishlistService(
            wishlist_repository=WishlistDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def list(self, request: Request) -> Response:
        """GET /api/v1/wishlist/"""
        items = self._service.get_wishlist(request.user.pk)
        return Response([_present(item) for item in items])

    def create(self, request: Request) -> Response:
        """POST /api/v1/wishlist/"""
        serializer = AddWishlistItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            item = self._service.add(
                request.user.pk, serializer.validated_data["product_id"]
            )
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(_present(item), status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, product_id: str) -> Response:
        """DELETE /api/v1/wishlist/{product_id}/"""
        try:
            self._service.remove(request.user.pk, product_id)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(status=status.HTTP_204_NO_CONTENT)

    def clear(self, request: Request) -> Response:
        """DELETE /api/v1/wishlist/"""
        self._service.clear(request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
