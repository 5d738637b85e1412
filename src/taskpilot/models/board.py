"""Board-level domain models: boards, columns, members, labels, comments."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Board(BaseModel):
    """A Trello board or a GitHub repository.

    For GitHub the id is ``"owner/repo"``.
    """

    id: str
    name: str
    description: str | None = None
    url: str = ""
    closed: bool = False
    raw: Any = Field(default=None, repr=False)


class Column(BaseModel):
    """A Trello list, or a synthesized GitHub column."""

    id: str
    name: str
    position: float = 0  # Ascending = earlier in the workflow
    closed: bool = False
    raw: Any = Field(default=None, repr=False)


class Member(BaseModel):
    """A board member or repository collaborator."""

    id: str
    username: str
    display_name: str
    avatar_url: str | None = None
    email: str | None = None  # Trello only
    raw: Any = Field(default=None, repr=False)


class Label(BaseModel):
    """A label. Trello colors are named tokens, GitHub colors are ``#RRGGBB``."""

    id: str
    name: str
    color: str | None = None
    raw: Any = Field(default=None, repr=False)


class Comment(BaseModel):
    """A comment on a task."""

    id: str
    text: str
    author: Member
    created_at: datetime
    raw: Any = Field(default=None, repr=False)
