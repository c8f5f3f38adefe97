from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from todo_portal.domain.models import User


class SessionState(str, Enum):
    UNRESOLVED = "unresolved"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    ERROR = "error"


class SessionMarker(Enum):
    """Distinguished non-error values for Session.error."""
    INVALID = "session-invalid"

    def __repr__(self) -> str:
        return "SESSION_INVALID"


# "No user resolved yet, or the server rejected the session."
SESSION_INVALID = SessionMarker.INVALID

ErrorValue = Union[BaseException, str, dict[str, Any], SessionMarker, None]


@dataclass(frozen=True)
class Session:
    """
    Immutable snapshot of the session controller's state.
    A fresh session has no user and carries the invalid marker, so the login
    prompt shows until the first /user fetch succeeds.
    """
    state: SessionState = SessionState.UNRESOLVED
    user: Optional[User] = None
    error: ErrorValue = SESSION_INVALID
    navigated_to: Optional[str] = None

    @property
    def invalid(self) -> bool:
        return self.error is SESSION_INVALID

    @property
    def has_error(self) -> bool:
        return self.error is not None and not self.invalid
