"""Admin dashboard and user management API views."""

from __future__ import annotations

from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.exceptions import DomainError
from modules.core.permissions import IsStoreAdmin
from modules.dashboard.dtos import UserOutputDTO
from modules.dashboard.repositories import UserDjangoRepository
from modules.dashboard.services import DashboardService
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.products.repositories.django_repository import ProductDjangoRepository


class NewOrdersQuerySerializer(serializers.Serializer):
    since = serializers.DateTimeField()


class _DashboardView(APIView):
    permission_classes = [IsAuthenticated, IsStoreAdmin]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = DashboardService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            user_repository=UserDjangoRepository(),
        )


class DashboardStatsView(_DashboardView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/dashboard/"""
        return Response(self._service.stats())


class NewOrdersCountView(_DashboardView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/new/?since=<ISO timestamp>"""
        query = NewOrdersQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        count = self._service.new_orders_count(query.validated_data["since"])
        return Response({"count": count})


class PendingOrdersCountView(_DashboardView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/pending-count/"""
        return Response({"count": self._service.pending_orders_count()})


class AdminUserListView(_DashboardView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/users/"""
        users = self._service.list_users()
        return Response(
            [UserOutputDTO.from_entity(u).model_dump(mode="json") for u in users]
        )


class ToggleUserStatusView(_DashboardView):
    def put(self, request: Request, pk: int) -> Response:
        """PUT /api/v1/admin/users/{id}/toggle-status/"""
        try:
            user = self._service.toggle_user_active(pk, request.user.pk)
        except DomainError as exc:
            raise exc.as_api_exception() from exc
        return Response(UserOutputDTO.from_entity(user).model_dump(mode="json"))
