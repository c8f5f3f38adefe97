from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from todo_portal.exceptions import SessionInvalid

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def session_invalid(self) -> bool:
        return isinstance(self.error, SessionInvalid)


Result = Union[Ok[T], Err]
