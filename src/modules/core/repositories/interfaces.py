"""Base contract for the per-entity repositories.

Each module declares its own ``I<Entity>Repository(IRepository[Entity])``
next to a Django implementation; services take the interface in their
constructor so ``tests/fakes.py`` can hand them an in-memory store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """``None`` for unknown or malformed ids."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """*filters* are ORM-style look-ups (``{"status": "pending"}``)."""

    @abstractmethod
    def save(self, entity: T) -> T:
        ...

    @abstractmethod
    def delete(self, id: str) -> bool:
        """``False`` when nothing was deleted."""
