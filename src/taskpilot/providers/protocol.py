"""Provider protocol for task backends."""

from typing import Literal, Protocol

from ..models import (
    Board,
    Column,
    Comment,
    CreateTaskParams,
    Credentials,
    Label,
    Member,
    Task,
    TaskFilter,
    UpdateTaskParams,
)

ProviderType = Literal["trello", "github", "linear"]


class TaskProvider(Protocol):
    """Interface for task backends.

    This protocol defines the contract that all provider implementations
    must follow. It supports:
    - Trello (boards, lists and cards)
    - GitHub Issues (repositories, synthesized columns and issues)
    - Linear (reserved, not implemented)

    Every operation other than ``set_auth``, ``initialize``, ``validate_auth``
    and ``aclose`` raises
    ``ProviderNotInitializedError`` when called before ``initialize``. GitHub
    ``delete_task`` is the exception: it always raises
    ``UnsupportedOperationError``.
    Vendor failures surface as ``taskpilot.errors`` exceptions; nothing is
    swallowed or replaced by a default value.
    """

    type: ProviderType
    display_name: str

    def set_auth(self, auth: Credentials) -> None:
        """Store credentials for the next initialize()."""
        ...

    async def initialize(self) -> None:
        """Build the vendor client from the configured credentials.

        Raises:
            AuthConfigMissingError: No credentials were set.
        """
        ...

    async def validate_auth(self) -> bool:
        """Check the credentials against the vendor. Never raises."""
        ...

    async def aclose(self) -> None:
        """Release the HTTP client. Safe to call more than once."""
        ...

    async def list_boards(self) -> list[Board]:
        ...

    async def get_board(self, board_id: str) -> Board:
        """Raises NotFoundError if the board does not exist."""
        ...

    async def get_board_columns(self, board_id: str) -> list[Column]:
        ...

    async def list_tasks(self, board_id: str, filter: TaskFilter | None = None) -> list[Task]:
        """List tasks, filtered client-side after the full listing is fetched."""
        ...

    async def get_task(self, task_id: str) -> Task:
        """Raises NotFoundError if the task does not exist."""
        ...

    async def create_task(self, board_id: str, column_id: str, params: CreateTaskParams) -> Task:
        ...

    async def update_task(self, task_id: str, params: UpdateTaskParams) -> Task:
        """Apply a partial update. Empty params leave the task unchanged."""
        ...

    async def delete_task(self, task_id: str) -> None:
        """Raises UnsupportedOperationError when the vendor cannot delete."""
        ...

    async def move_task(self, task_id: str, column_id: str) -> Task:
        ...

    async def archive_task(self, task_id: str) -> Task:
        ...

    async def unarchive_task(self, task_id: str) -> Task:
        ...

    async def list_comments(self, task_id: str) -> list[Comment]:
        ...

    async def add_comment(self, task_id: str, text: str) -> Comment:
        ...

    async def list_members(self, board_id: str) -> list[Member]:
        ...

    async def list_labels(self, board_id: str) -> list[Label]:
        ...

    async def add_label(self, task_id: str, label_id: str) -> None:
        ...

    async def remove_label(self, task_id: str, label_id: str) -> None:
        ...

    async def add_member(self, task_id: str, member_id: str) -> None:
        ...

    async def remove_member(self, task_id: str, member_id: str) -> None:
        ...
