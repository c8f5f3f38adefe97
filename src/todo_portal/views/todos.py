import logging
from typing import Optional, Protocol

from pydantic import ValidationError

from todo_portal.api.client import ApiClient
from todo_portal.api.endpoints import Endpoints
from todo_portal.domain.models import Todo, TodoCollection
from todo_portal.exceptions import ApiError, NetworkError, TodoCreateError
from todo_portal.result import Err, Ok, Result
from todo_portal.views.selection import ViewKind

logger = logging.getLogger(__name__)


class ErrorSink(Protocol):
    def report_error(self, error) -> object:
        ...


class UserTodos:
    """
    The signed-in user's own todos: loaded once on mount, extended by create().
    """

    kind = ViewKind.USER

    def __init__(self, client: ApiClient, endpoints: Endpoints, errors: ErrorSink):
        self.client = client
        self.endpoints = endpoints
        self.errors = errors
        self.collection = TodoCollection()
        self.error: Optional[TodoCreateError] = None
        self.draft = ""
        self.mounted = False

    def mount(self) -> None:
        self.mounted = True
        self.load()

    def unmount(self) -> None:
        self.mounted = False

    def load(self) -> None:
        try:
            collection = TodoCollection.model_validate(self.client.get_json(self.endpoints.todos))
        except (ApiError, ValidationError) as exc:
            self.errors.report_error(exc)
            return
        if not self.mounted:
            logger.debug("Todos arrived after unmount; dropped")
            return
        self.collection = collection

    def create(self, content: Optional[str] = None) -> Result[Todo]:
        todo = Todo.new(self.draft if content is None else content)
        # The form resets before the request, whatever the outcome.
        self.draft = ""

        try:
            response = self.client.post(self.endpoints.todos, todo.model_dump())
        except NetworkError as exc:
            return self._failed(TodoCreateError(None, exc.reason))

        if not 200 <= response.status_code < 300:
            return self._failed(TodoCreateError(response.status_code, response.reason or ""))

        if self.mounted:
            self.collection = self.collection.appended(todo)
            self.error = None
        return Ok(todo)

    def _failed(self, error: TodoCreateError) -> Err:
        logger.warning("%s", error)
        if self.mounted:
            self.error = error
        return Err(error)


class AdminTodos:
    """
    Read-only lookup of any user's todos. Failures belong to the session, not to this view.
    """

    kind = ViewKind.ADMIN

    def __init__(self, client: ApiClient, endpoints: Endpoints, errors: ErrorSink):
        self.client = client
        self.endpoints = endpoints
        self.errors = errors
        self.collection = TodoCollection()
        self.selected_user: Optional[str] = None
        self.draft = ""
        self.mounted = False
        self._latest_query = 0

    def mount(self) -> None:
        self.mounted = True

    def unmount(self) -> None:
        self.mounted = False

    def query(self, username: Optional[str] = None) -> Optional[TodoCollection]:
        username = (self.draft if username is None else username).strip()
        self.draft = ""
        if not username:
            return None

        self._latest_query += 1
        ticket = self._latest_query
        endpoint = self.endpoints.todos_for(username)
        try:
            collection = TodoCollection.model_validate(self.client.get_json(endpoint))
        except (ApiError, ValidationError) as exc:
            self.errors.report_error(exc)
            return None

        if not self.mounted or ticket != self._latest_query:
            logger.debug("Dropping superseded todos for %s", username)
            return None
        self.collection = collection
        self.selected_user = username
        return collection

    def clear(self) -> None:
        self.collection = TodoCollection()
        self.selected_user = None
