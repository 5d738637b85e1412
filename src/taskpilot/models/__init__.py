"""Data models."""

from .board import Board, Column, Comment, Label, Member
from .column_config import DEFAULT_STATUS_LABEL_PREFIX, ColumnConfig, ColumnConfigSet
from .credentials import (
    Credentials,
    GitHubAuth,
    TrelloApiKeyAuth,
    TrelloAuth,
    TrelloOAuthAuth,
)
from .operations import BatchResult, CreateTaskParams, TaskFilter, UpdateTaskParams
from .project_config import GitHubProjectConfig, TaskPilotConfig
from .task import (
    STATUS_ARCHIVED,
    STATUS_DONE,
    STATUS_IN_PROGRESS,
    STATUS_OPEN,
    Task,
    TaskStatus,
)

__all__ = [
    "DEFAULT_STATUS_LABEL_PREFIX",
    "STATUS_ARCHIVED",
    "STATUS_DONE",
    "STATUS_IN_PROGRESS",
    "STATUS_OPEN",
    "BatchResult",
    "Board",
    "Column",
    "ColumnConfig",
    "ColumnConfigSet",
    "Comment",
    "CreateTaskParams",
    "Credentials",
    "GitHubAuth",
    "GitHubProjectConfig",
    "Label",
    "Member",
    "Task",
    "TaskFilter",
    "TaskPilotConfig",
    "TaskStatus",
    "TrelloApiKeyAuth",
    "TrelloAuth",
    "TrelloOAuthAuth",
    "UpdateTaskParams",
]
