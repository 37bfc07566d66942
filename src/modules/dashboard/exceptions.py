"""Admin user management exceptions."""

from __future__ import annotations

from modules.core.exceptions import Conflict, NotFound


class UserNotFound(NotFound):
    default_code = "user_not_found"
    default_message = "User not found."


class CannotBlockSelf(Conflict):
    """An administrator tried to deactivate their own account."""

    default_code = "cannot_block_self"
    default_message = "You cannot block your own account."
