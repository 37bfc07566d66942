"""Admin dashboard URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.dashboard.views import (
    AdminUserListView,
    DashboardStatsView,
    NewOrdersCountView,
    PendingOrdersCountView,
    ToggleUserStatusView,
)

urlpatterns = [
    path("admin/dashboard/", DashboardStatsView.as_view(), name="dashboard-stats"),
    path("admin/orders/new/", NewOrdersCountView.as_view(), name="dashboard-new-orders"),
    path(
        "admin/orders/pending-count/",
        PendingOrdersCountView.as_view(),
        name="dashboard-pending-orders",
    ),
    path("admin/users/", AdminUserListView.as_view(), name="admin-users"),
    path(
        "admin/users/<int:pk>/toggle-status/",
        ToggleUserStatusView.as_view(),
        name="admin-user-toggle-status",
    ),
]
