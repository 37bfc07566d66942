"""Role checks shared across modules."""

from __future__ import annotations

from typing import Any

from rest_framework.permissions import BasePermission


def is_admin(user: Any) -> bool:
    """Staff users act as store administrators."""
    return bool(user and user.is_authenticated and user.is_staff)


class IsStoreAdmin(BasePermission):
    message = "Administrator privileges are required."

    def has_permission(self, request, view) -> bool:
        return is_admin(request.user)
