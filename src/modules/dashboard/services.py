"""Admin dashboard read models and user management."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List

import structlog

from modules.dashboard.exceptions import CannotBlockSelf, UserNotFound
from modules.orders.constants import OrderStatus
from modules.orders.presenters import present_orders

if TYPE_CHECKING:
    from modules.dashboard.repositories import IUserRepository
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

RECENT_ORDERS_LIMIT = 5


class DashboardService:
    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        user_repository: IUserRepository,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._user_repo = user_repository

    def stats(self) -> Dict[str, Any]:
        """Headline numbers for the admin home page.

        Revenue only counts money in hand: orders that are not cancelled
        and either paid online or delivered.
        """
        stats = {
            "users": {
                "total": self._user_repo.count(),
                "active": self._user_repo.count({"is_active": True}),
            },
            "products": {
                "total": self._product_repo.count(),
                "out_of_stock": self._product_repo.count({"stock": 0}),
            },
            "orders": {
                "total": self._order_repo.count(),
                "pending": self.pending_orders_count(),
                "revenue": str(self._order_repo.revenue()),
            },
            "recent_orders": present_orders(
                self._order_repo.recent(RECENT_ORDERS_LIMIT)
            ),
        }
        logger.info("dashboard.stats_computed", orders=stats["orders"]["total"])
        return stats

    def new_orders_count(self, since: datetime) -> int:
        """Orders created after *since*; used by the admin UI to poll."""
        return self._order_repo.count(since=since)

    def pending_orders_count(self) -> int:
        return self._order_repo.count({"status": OrderStatus.PENDING})

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self) -> List[Any]:
        return self._user_repo.list()

    def toggle_user_active(self, user_id: Any, actor_id: Any) -> Any:
        """Block an active user or unblock a blocked one.

        Blocked users can no longer authenticate.

        Raises:
            UserNotFound: no such user.
            CannotBlockSelf: an administrator targeting their own account.
        """
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found.")
        if str(user.pk) == str(actor_id):
            raise CannotBlockSelf()

        active = not user.is_active
        self._user_repo.set_active(user.pk, active)
        logger.info(
            "user.unblocked" if active else "user.blocked",
            user_id=user.pk,
            actor_id=actor_id,
        )
        return self._user_repo.get_by_id(user.pk)
