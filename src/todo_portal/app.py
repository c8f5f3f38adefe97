import logging
import threading
from typing import Optional

from todo_portal.api.client import ApiClient, build_api_client
from todo_portal.api.endpoints import Endpoints
from todo_portal.config import Settings
from todo_portal.domain.models import Todo, TodoCollection
from todo_portal.exceptions import TodoPortalError
from todo_portal.result import Result
from todo_portal.session import BrowserNavigator, Navigator, RefreshTimer, Session, SessionController
from todo_portal.views.presentation import TodoView, render_screen
from todo_portal.views.selection import ViewKind, select_view
from todo_portal.views.todos import AdminTodos, UserTodos

logger = logging.getLogger(__name__)


class ViewUnavailable(TodoPortalError):
    """An action was requested for a todo view that is not active."""
    pass


class TodoApp:
    """
    Composes the session controller, the refresh timer and the active todo view.
    Mirrors a mounted page: the user panel (and its refresh timer) is mounted
    while the session is not invalid, and the todo view follows the user's groups.
    """

    STOP_TIMEOUT = 5.0

    def __init__(
        self,
        settings: Settings,
        client: Optional[ApiClient] = None,
        navigator: Optional[Navigator] = None,
        auto_refresh: bool = True,
    ):
        self.settings = settings
        self.endpoints = Endpoints.from_settings(settings)
        self.client = client or build_api_client(settings)
        self.navigator = navigator or BrowserNavigator()
        self.controller = SessionController(
            client=self.client,
            endpoints=self.endpoints,
            navigator=self.navigator,
            logout_method=settings.session.logout_method,
        )
        self.auto_refresh = auto_refresh
        self.timer = RefreshTimer(settings.session.refresh_interval_seconds, self.controller.refresh)
        self.view: Optional[TodoView] = None
        self._view_owner: Optional[str] = None
        self._view_lock = threading.RLock()
        self._unsubscribe = None

    @property
    def session(self) -> Session:
        return self.controller.session

    def start(self) -> Session:
        if self._unsubscribe is None:
            self._unsubscribe = self.controller.subscribe(self._on_session_change)
        return self.controller.start()

    def stop(self) -> None:
        with self._view_lock:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None
        self.timer.stop(timeout=self.STOP_TIMEOUT)
        with self._view_lock:
            self._replace_view(None, None)

    def render(self) -> str:
        return render_screen(self.settings.app.title, self.session, self.view)

    # ----- actions -----
    def refresh(self) -> Session:
        return self.controller.refresh()

    def login(self) -> Session:
        return self.controller.login()

    def logout(self, app_only: bool = False) -> Session:
        return self.controller.logout(app_only=app_only)

    def clear_error(self) -> Session:
        return self.controller.clear_error()

    def create_todo(self, content: str) -> Result[Todo]:
        view = self.view
        if not isinstance(view, UserTodos):
            raise ViewUnavailable("Creating todos is only available to regular users")
        return view.create(content)

    def query_todos(self, username: str) -> Optional[TodoCollection]:
        view = self.view
        if not isinstance(view, AdminTodos):
            raise ViewUnavailable(f"Querying other users' todos requires the '{self.settings.session.admin_group}' group")
        return view.query(username)

    def clear_query(self) -> None:
        view = self.view
        if not isinstance(view, AdminTodos):
            raise ViewUnavailable("No todo query to clear")
        view.clear()

    # ----- mounting -----
    def _on_session_change(self, _session: Session) -> None:
        # Notifications can arrive out of order across threads; always act on the latest state.
        with self._view_lock:
            if self._unsubscribe is None:
                return
            session = self.controller.session
            if self.auto_refresh:
                if session.invalid or session.navigated_to:
                    self.timer.stop()
                else:
                    self.timer.start()
            self._sync_view(session)

    def _sync_view(self, session: Session) -> None:
        with self._view_lock:
            if session.invalid or session.navigated_to:
                kind = ViewKind.NONE
            else:
                kind = select_view(session.user, self.settings.session.admin_group)
            owner = session.user.username if session.user is not None else None

            if self.view is not None and self.view.kind == kind and self._view_owner == owner:
                return

            if kind == ViewKind.USER:
                view = UserTodos(self.client, self.endpoints, self.controller)
            elif kind == ViewKind.ADMIN:
                view = AdminTodos(self.client, self.endpoints, self.controller)
            else:
                view = None
            self._replace_view(view, owner)

    def _replace_view(self, view: Optional[TodoView], owner: Optional[str]) -> None:
        previous = self.view
        if previous is not None:
            previous.unmount()
        self.view = view
        self._view_owner = owner
        if view is not None:
            logger.debug("Mounting %s todos view for %s", view.kind.value, owner)
            view.mount()
