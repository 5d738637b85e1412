"""Parameter objects for provider operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from .task import Task, TaskStatus

T = TypeVar("T")


class CreateTaskParams(BaseModel):
    """Fields for a new task."""

    title: str = Field(..., min_length=1)
    description: str | None = None
    due_date: datetime | None = None
    assignees: list[str] | None = None
    labels: list[str] | None = None
    position: Literal["top", "bottom"] | None = None


class UpdateTaskParams(BaseModel):
    """Partial update. Only explicitly set fields are sent to the vendor.

    Use ``model_fields_set`` to tell "not given" from "set to None"
    (``due_date=None`` clears the due date).
    """

    title: str | None = None
    description: str | None = None
    column_id: str | None = None
    due_date: datetime | None = None
    due_complete: bool | None = None
    assignees: list[str] | None = None
    labels: list[str] | None = None
    archived: bool | None = None

    def is_set(self, name: str) -> bool:
        return name in self.model_fields_set

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


class TaskFilter(BaseModel):
    """Client-side task filter. All given conditions must match."""

    column_id: str | None = None
    column_name: str | None = None
    assignee: str | None = None
    label: str | None = None
    status: TaskStatus | None = None
    archived: bool | None = None

    def matches(self, task: Task) -> bool:
        if self.column_id is not None and task.column_id != self.column_id:
            return False
        if (
            self.column_name is not None
            and task.column_name.lower() != self.column_name.lower()
        ):
            return False
        if self.assignee is not None and self.assignee not in task.assignee_ids:
            return False
        if self.label is not None and self.label not in task.label_ids:
            return False
        if self.status is not None and task.status != self.status:
            return False
        # Matched against the authoritative flag, not the derived status
        return self.archived is None or task.archived == self.archived

    def apply(self, tasks: list[Task]) -> list[Task]:
        return [t for t in tasks if self.matches(t)]


@dataclass
class BatchResult(Generic[T]):
    """Outcome of a batch operation."""

    success: list[T] = field(default_factory=list)
    failed: list[tuple[str, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
