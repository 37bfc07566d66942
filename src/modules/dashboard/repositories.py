"""User access for the admin dashboard.

Users are Django auth users; this is the only place the dashboard reads
or changes them, so it gets its own small repository instead of touching
the ORM from the service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from django.contrib.auth import get_user_model


class IUserRepository(ABC):
    @abstractmethod
    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count users matching *filters*."""

    @abstractmethod
    def list(self) -> List[Any]:
        """Every user, newest first."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[Any]:
        """The user with primary key *id*, or ``None``."""

    @abstractmethod
    def set_active(self, id: Any, active: bool) -> None:
        """Store the user's ``is_active`` flag."""


class UserDjangoRepository(IUserRepository):
    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        queryset = get_user_model().objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.count()

    def list(self) -> List[Any]:
        return list(get_user_model().objects.order_by("-date_joined", "-pk"))

    def get_by_id(self, id: Any) -> Optional[Any]:
        return get_user_model().objects.filter(pk=id).first()

    def set_active(self, id: Any, active: bool) -> None:
        get_user_model().objects.filter(pk=id).update(is_active=active)
