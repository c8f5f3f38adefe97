from typing import Mapping, Optional


class TodoPortalError(Exception):
    """Base exception for todo-portal errors."""
    pass


class ConfigError(TodoPortalError):
    """Configuration loading specific errors."""
    pass


class ApiError(TodoPortalError):
    """Errors raised while talking to the todo API."""
    pass


class SessionInvalid(ApiError):
    """
    The API answered 401: there is no usable session.
    Always handed to the session controller, never absorbed by a view.
    """

    def __init__(self, endpoint: str):
        super().__init__(f"Session rejected by {endpoint}")
        self.endpoint = endpoint


class NetworkError(ApiError):
    """The request never produced an HTTP response."""

    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"Request to {endpoint} failed: {reason}")
        self.endpoint = endpoint
        self.reason = reason


class UnexpectedResponse(ApiError):
    """
    A response that is neither empty nor JSON.
    Carries everything needed to diagnose it.
    """

    def __init__(
        self,
        endpoint: str,
        status: int,
        status_text: str,
        headers: Mapping[str, str],
        body: str,
    ):
        self.endpoint = endpoint
        self.status = status
        self.status_text = status_text
        self.headers = dict(headers)
        self.body = body
        super().__init__(f"Unexpected response from {endpoint}\n\n{self.describe()}")

    def describe(self) -> str:
        header_lines = "".join(f"{name}: {value}\n" for name, value in self.headers.items())
        return f"{self.status} {self.status_text}\n{header_lines}\n\n{self.body}"


class TodoCreateError(ApiError):
    """Creating a todo failed; shown next to the form only."""

    def __init__(self, status: Optional[int], status_text: str):
        label = f"{status} - {status_text}" if status is not None else status_text
        super().__init__(f"Error response creating todo: {label}")
        self.status = status
        self.status_text = status_text
