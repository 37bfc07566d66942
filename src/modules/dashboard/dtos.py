"""Output shapes for admin user management."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class UserOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    full_name: str
    is_active: bool
    is_staff: bool
    date_joined: datetime

    @classmethod
    def from_entity(cls, user: Any) -> UserOutputDTO:
        return cls(
            id=user.pk,
            username=user.get_username(),
            email=user.email or "",
            full_name=user.get_full_name(),
            is_active=user.is_active,
            is_staff=user.is_staff,
            date_joined=user.date_joined,
        )
