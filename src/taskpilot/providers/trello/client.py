"""Trello REST API client."""

from __future__ import annotations

from typing import Any

import httpx

from ...models.credentials import TrelloApiKeyAuth, TrelloAuth
from ...utils.rate_limiter import ConcurrencyLimiter
from ..http import DEFAULT_TIMEOUT, BaseAPIClient

TRELLO_API_URL = "https://api.trello.com/1"


class TrelloClient(BaseAPIClient):
    """Trello REST API client.

    Authentication is sent as ``key``/``token`` query parameters. In OAuth
    mode the key is the organization's API key.
    """

    vendor = "Trello"

    def __init__(
        self,
        auth: TrelloAuth,
        base_url: str = TRELLO_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        limiter: ConcurrencyLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.auth = auth
        super().__init__(
            base_url,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=timeout,
            limiter=limiter,
            transport=transport,
        )

    def _auth_params(self) -> dict[str, str]:
        if isinstance(self.auth, TrelloApiKeyAuth):
            return {"key": self.auth.api_key, "token": self.auth.token}
        return {"key": self.auth.org_api_key, "token": self.auth.token}

    # --- Members ---

    async def get_me(self) -> dict[str, Any]:
        return await self.get("/members/me")

    async def get_member(self, member_id: str) -> dict[str, Any]:
        return await self.get(f"/members/{member_id}")

    # --- Boards ---

    async def list_boards(self, member_id: str = "me") -> list[dict[str, Any]]:
        return await self.get(f"/members/{member_id}/boards", params={"filter": "open"})

    async def get_board(self, board_id: str) -> dict[str, Any]:
        return await self.get(f"/boards/{board_id}")

    async def get_board_actions(
        self, board_id: str, filter: str | None = None, limit: int | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        if filter:
            params["filter"] = filter
        if limit:
            params["limit"] = limit
        return await self.get(f"/boards/{board_id}/actions", params=params)

    async def list_members(self, board_id: str) -> list[dict[str, Any]]:
        return await self.get(f"/boards/{board_id}/members")

    async def list_labels(self, board_id: str) -> list[dict[str, Any]]:
        return await self.get(f"/boards/{board_id}/labels")

    async def get_label(self, label_id: str) -> dict[str, Any]:
        return await self.get(f"/labels/{label_id}")

    # --- Lists ---

    async def list_lists(self, board_id: str) -> list[dict[str, Any]]:
        return await self.get(f"/boards/{board_id}/lists", params={"filter": "open"})

    async def get_list(self, list_id: str) -> dict[str, Any]:
        return await self.get(f"/lists/{list_id}")

    # --- Cards ---

    async def list_cards(self, board_id: str, filter: str = "open") -> list[dict[str, Any]]:
        return await self.get(f"/boards/{board_id}/cards", params={"filter": filter})

    async def list_cards_by_list(self, list_id: str) -> list[dict[str, Any]]:
        return await self.get(f"/lists/{list_id}/cards", params={"filter": "open"})

    async def get_card(self, card_id: str) -> dict[str, Any]:
        return await self.get(f"/cards/{card_id}")

    async def create_card(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self.post("/cards", json=params)

    async def update_card(self, card_id: str, params: dict[str, Any]) -> dict[str, Any]:
        return await self.put(f"/cards/{card_id}", json=params)

    async def delete_card(self, card_id: str) -> None:
        await self.delete(f"/cards/{card_id}")

    async def archive_card(self, card_id: str) -> dict[str, Any]:
        return await self.update_card(card_id, {"closed": True})

    async def unarchive_card(self, card_id: str) -> dict[str, Any]:
        return await self.update_card(card_id, {"closed": False})

    # --- Card sub-resources ---

    async def get_comments(self, card_id: str) -> list[dict[str, Any]]:
        return await self.get(f"/cards/{card_id}/actions", params={"filter": "commentCard"})

    async def add_comment(self, card_id: str, text: str) -> dict[str, Any]:
        return await self.post(f"/cards/{card_id}/actions/comments", json={"text": text})

    async def add_label(self, card_id: str, label_id: str) -> None:
        await self.post(f"/cards/{card_id}/idLabels", json={"value": label_id})

    async def remove_label(self, card_id: str, label_id: str) -> None:
        await self.delete(f"/cards/{card_id}/idLabels/{label_id}")

    async def add_member(self, card_id: str, member_id: str) -> None:
        await self.post(f"/cards/{card_id}/idMembers", json={"value": member_id})

    async def remove_member(self, card_id: str, member_id: str) -> None:
        await self.delete(f"/cards/{card_id}/idMembers/{member_id}")
