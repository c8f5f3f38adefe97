from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    Identity resolved from GET /user.
    groups is None until the server has told us; an empty list is a resolved answer.
    """
    model_config = ConfigDict(extra="allow")

    username: str = ""
    groups: Optional[list[str]] = None

    @property
    def groups_resolved(self) -> bool:
        return self.groups is not None

    def in_group(self, group: str) -> bool:
        return group in (self.groups or [])


class Todo(BaseModel):
    id: str
    content: str = ""

    @classmethod
    def new(cls, content: str) -> "Todo":
        return cls(id=str(uuid4()), content=content)


class TodoCollection(BaseModel):
    todos: list[Todo] = Field(default_factory=list)

    def appended(self, todo: Todo) -> "TodoCollection":
        return TodoCollection(todos=[*self.todos, todo])
