"""Trello implementation of the TaskProvider protocol."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ...errors import (
    APIError,
    AuthConfigMissingError,
    ConfigurationError,
    NotFoundError,
    ProviderNotInitializedError,
)
from ...models import (
    Board,
    Column,
    Comment,
    CreateTaskParams,
    Label,
    Member,
    Task,
    TaskFilter,
    TrelloAuth,
    UpdateTaskParams,
)
from ...utils.rate_limiter import ConcurrencyLimiter
from ..http import DEFAULT_TIMEOUT
from .client import TrelloClient
from .mapper import TrelloMapper

logger = logging.getLogger(__name__)


class TrelloProvider:
    """Provider for Trello boards.

    Trello lists are used as columns directly.
    """

    type = "trello"
    display_name = "Trello"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        limiter: ConcurrencyLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._limiter = limiter
        self._transport = transport
        self._auth: TrelloAuth | None = None
        self._client: TrelloClient | None = None
        self.mapper = TrelloMapper()

    def set_auth(self, auth: TrelloAuth) -> None:
        self._auth = auth

    async def initialize(self) -> None:
        if self._auth is None:
            raise AuthConfigMissingError()
        self._client = TrelloClient(
            self._auth,
            timeout=self._timeout,
            limiter=self._limiter,
            transport=self._transport,
        )
        logger.debug("Trello provider initialized (auth=%s)", self._auth.type)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> TrelloClient:
        if self._client is None:
            raise ProviderNotInitializedError()
        return self._client

    async def validate_auth(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.get_me()
            return True
        except Exception as e:
            logger.debug("Trello auth validation failed: %s", e)
            return False

    async def get_current_member(self) -> Member:
        client = self._ensure_client()
        return self.mapper.to_member(await client.get_me())

    # --- Boards ---

    async def list_boards(self) -> list[Board]:
        client = self._ensure_client()
        return [self.mapper.to_board(b) for b in await client.list_boards()]

    async def get_board(self, board_id: str) -> Board:
        client = self._ensure_client()
        try:
            board = await client.get_board(board_id)
        except APIError as e:
            if e.status_code == 404:
                raise NotFoundError(f"Board {board_id}") from e
            raise
        return self.mapper.to_board(board)

    async def get_board_columns(self, board_id: str) -> list[Column]:
        client = self._ensure_client()
        return [self.mapper.to_column(lst) for lst in await client.list_lists(board_id)]

    # --- Tasks ---

    async def list_tasks(self, board_id: str, filter: TaskFilter | None = None) -> list[Task]:
        client = self._ensure_client()
        card_filter = "closed" if filter and filter.archived is True else "open"
        cards, lists = await asyncio.gather(
            client.list_cards(board_id, filter=card_filter),
            client.list_lists(board_id),
        )
        column_names = {lst["id"]: lst["name"] for lst in lists}

        tasks = [self.mapper.to_task(c, column_names.get(c["idList"])) for c in cards]
        if filter:
            tasks = filter.apply(tasks)
        logger.debug("Listed %d Trello cards on board %s", len(tasks), board_id)
        return tasks

    async def get_task(self, task_id: str) -> Task:
        client = self._ensure_client()
        try:
            card = await client.get_card(task_id)
        except APIError as e:
            if e.status_code == 404:
                raise NotFoundError(f"Card {task_id}") from e
            raise
        return await self._to_task(card)

    async def create_task(self, board_id: str, column_id: str, params: CreateTaskParams) -> Task:
        """Create a card. An empty ``column_id`` means the board's first list."""
        client = self._ensure_client()
        if not column_id:
            columns = await self.get_board_columns(board_id)
            if not columns:
                raise ConfigurationError(f"Board {board_id} has no open lists")
            column_id = columns[0].id
        card = await client.create_card(self.mapper.to_create_card_params(params, column_id))
        logger.info("Created Trello card %s on board %s", card["id"], board_id)
        return await self._to_task(card)

    async def update_task(self, task_id: str, params: UpdateTaskParams) -> Task:
        client = self._ensure_client()
        trello_params = self.mapper.to_update_card_params(params)
        if not trello_params:
            return await self.get_task(task_id)
        card = await client.update_card(task_id, trello_params)
        return await self._to_task(card)

    async def delete_task(self, task_id: str) -> None:
        client = self._ensure_client()
        await client.delete_card(task_id)
        logger.info("Deleted Trello card %s", task_id)

    async def move_task(self, task_id: str, column_id: str) -> Task:
        client = self._ensure_client()
        card = await client.update_card(task_id, {"idList": column_id})
        return await self._to_task(card)

    async def archive_task(self, task_id: str) -> Task:
        client = self._ensure_client()
        return await self._to_task(await client.archive_card(task_id))

    async def unarchive_task(self, task_id: str) -> Task:
        client = self._ensure_client()
        return await self._to_task(await client.unarchive_card(task_id))

    async def _to_task(self, card: dict[str, Any]) -> Task:
        """Map a single card, resolving its list name."""
        client = self._ensure_client()
        trello_list = await client.get_list(card["idList"])
        return self.mapper.to_task(card, trello_list.get("name"))

    # --- Comments ---

    async def list_comments(self, task_id: str) -> list[Comment]:
        client = self._ensure_client()
        return [self.mapper.to_comment(a) for a in await client.get_comments(task_id)]

    async def add_comment(self, task_id: str, text: str) -> Comment:
        client = self._ensure_client()
        return self.mapper.to_comment(await client.add_comment(task_id, text))

    # --- Members and labels ---

    async def list_members(self, board_id: str) -> list[Member]:
        client = self._ensure_client()
        return [self.mapper.to_member(m) for m in await client.list_members(board_id)]

    async def list_labels(self, board_id: str) -> list[Label]:
        client = self._ensure_client()
        return [self.mapper.to_label(lbl) for lbl in await client.list_labels(board_id)]

    async def add_label(self, task_id: str, label_id: str) -> None:
        await self._ensure_client().add_label(task_id, label_id)

    async def remove_label(self, task_id: str, label_id: str) -> None:
        await self._ensure_client().remove_label(task_id, label_id)

    async def add_member(self, task_id: str, member_id: str) -> None:
        await self._ensure_client().add_member(task_id, member_id)

    async def remove_member(self, task_id: str, member_id: str) -> None:
        await self._ensure_client().remove_member(task_id, member_id)
