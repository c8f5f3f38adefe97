from todo_portal.session.controller import SessionController, SessionListener
from todo_portal.session.navigator import BrowserNavigator, Navigator
from todo_portal.session.refresh import RefreshTimer
from todo_portal.session.state import SESSION_INVALID, ErrorValue, Session, SessionState

__all__ = [
    "BrowserNavigator",
    "ErrorValue",
    "Navigator",
    "RefreshTimer",
    "SESSION_INVALID",
    "Session",
    "SessionController",
    "SessionListener",
    "SessionState",
]
