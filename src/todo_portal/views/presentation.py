"""
Plain-text rendering of the session and todo views.
Nothing here performs I/O or changes state; actions live on the controller and the views.
"""

import json
import traceback
from typing import Optional, Union

from todo_portal.domain.models import TodoCollection, User
from todo_portal.session.state import ErrorValue, Session
from todo_portal.views.todos import AdminTodos, UserTodos

LOGIN_PROMPT = "Log in to see your todos."
ACTIONS_HELP = "Actions: refresh | logout | logout-app"

TodoView = Union[UserTodos, AdminTodos]


def format_error(error: ErrorValue) -> str:
    """
    Stack trace when the error carries one, else a structured dump, else the raw string.
    """
    if isinstance(error, str):
        return error
    if isinstance(error, BaseException):
        if error.__traceback__ is not None:
            return "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return json.dumps(_exception_record(error), indent=4, default=str)
    try:
        return json.dumps(error, indent=4, default=str)
    except (TypeError, ValueError):
        return str(error)


def _exception_record(error: BaseException) -> dict:
    record = {"type": type(error).__name__, "message": str(error)}
    record.update({key: value for key, value in vars(error).items() if not key.startswith("_")})
    return record


def render_user(user: Optional[User]) -> str:
    data = user.model_dump(exclude_none=True) if user is not None else {}
    return "User details:\n" + json.dumps(data, indent=4)


def render_error(error: ErrorValue) -> str:
    return f"Error:\n{format_error(error)}\n[clear] to dismiss"


def render_todo_list(collection: TodoCollection) -> str:
    if not collection.todos:
        return "No todos"
    return "\n".join(f"- {todo.content}  ({todo.id})" for todo in collection.todos)


def render_user_todos(view: UserTodos) -> str:
    lines = ["Todos:", render_todo_list(view.collection)]
    if view.error is not None:
        lines.append(str(view.error))
    return "\n".join(lines)


def render_admin_todos(view: AdminTodos) -> str:
    lines = ["Todos Administration:"]
    if view.selected_user:
        lines.append(f"Todos for {view.selected_user}")
        lines.append(render_todo_list(view.collection))
    return "\n".join(lines)


def render_view(view: Optional[TodoView]) -> str:
    if isinstance(view, UserTodos):
        return render_user_todos(view)
    if isinstance(view, AdminTodos):
        return render_admin_todos(view)
    return ""


def render_screen(title: str, session: Session, view: Optional[TodoView] = None) -> str:
    blocks = [title]
    if session.navigated_to:
        blocks.append(f"Continue in your browser: {session.navigated_to}")
    elif session.invalid:
        blocks.append(f"{LOGIN_PROMPT}\n[login] to sign in")
    else:
        if session.has_error:
            blocks.append(render_error(session.error))
        blocks.append(render_user(session.user))
        blocks.append(ACTIONS_HELP)
        rendered_view = render_view(view)
        if rendered_view:
            blocks.append(rendered_view)
    return "\n\n".join(blocks)
