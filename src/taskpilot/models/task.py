"""Task domain model."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# Status constants
STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in_progress"
STATUS_DONE = "done"
STATUS_ARCHIVED = "archived"

TaskStatus = Literal["open", "in_progress", "done", "archived"]


class Task(BaseModel):
    """A Trello card or GitHub issue in the unified shape.

    ``status`` is derived by the mapper; ``archived`` is the authoritative
    terminal flag.
    """

    id: str  # Trello card id, or GitHub issue number
    number: int = 0  # Display ordinal, 0 when the vendor has none
    title: str
    description: str | None = None
    status: TaskStatus = STATUS_OPEN
    column_id: str
    column_name: str = ""

    created_at: datetime
    updated_at: datetime
    due_date: datetime | None = None
    due_complete: bool = False

    assignee_ids: list[str] = Field(default_factory=list)
    label_ids: list[str] = Field(default_factory=list)

    url: str = ""
    archived: bool = False
    comment_count: int | None = None

    # Vendor payload, kept for fields the unified model does not surface
    raw: Any = Field(default=None, repr=False)

    @property
    def is_terminal(self) -> bool:
        """True for archived or done tasks."""
        return self.archived or self.status in (STATUS_DONE, STATUS_ARCHIVED)
