from enum import Enum
from typing import Optional

from todo_portal.domain.models import User

DEFAULT_ADMIN_GROUP = "sre"


class ViewKind(str, Enum):
    NONE = "none"  # groups not resolved yet
    USER = "user"
    ADMIN = "admin"


def is_admin(user: Optional[User], admin_group: str = DEFAULT_ADMIN_GROUP) -> bool:
    return user is not None and user.in_group(admin_group)


def select_view(user: Optional[User], admin_group: str = DEFAULT_ADMIN_GROUP) -> ViewKind:
    """
    Decide the todo view from the user's group claims.
    Called on every session change; the answer must never be cached across users.
    """
    if user is None or not user.groups_resolved:
        return ViewKind.NONE
    if is_admin(user, admin_group):
        return ViewKind.ADMIN
    return ViewKind.USER
