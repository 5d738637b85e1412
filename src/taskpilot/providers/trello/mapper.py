"""Translation between Trello wire payloads and the unified models.

Everything here is pure: no I/O, and each call builds fresh models.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from ...models import (
    STATUS_ARCHIVED,
    STATUS_DONE,
    STATUS_OPEN,
    Board,
    Column,
    Comment,
    CreateTaskParams,
    Label,
    Member,
    Task,
    TaskStatus,
    UpdateTaskParams,
)
from ...utils.datetime import from_iso, from_iso_or_none, to_iso


class TrelloMapper:
    """Map Trello boards, lists, cards, members, labels and actions."""

    def to_task(self, card: dict[str, Any], column_name: str | None = None, number: int = 0) -> Task:
        """Map a card.

        Trello has no per-card ordinal in a single fetch, so ``number`` is 0
        unless the caller assigns one.
        """
        last_activity = from_iso(card["dateLastActivity"])
        return Task(
            id=card["id"],
            number=number,
            title=card["name"],
            description=card.get("desc") or None,
            status=self.infer_status(card),
            column_id=card["idList"],
            column_name=column_name or "",
            created_at=_created_from_id(card["id"]) or last_activity,
            updated_at=last_activity,
            due_date=from_iso_or_none(card.get("due")),
            due_complete=bool(card.get("dueComplete")),
            assignee_ids=list(card.get("idMembers") or []),
            label_ids=list(card.get("idLabels") or []),
            url=card.get("url", ""),
            archived=bool(card.get("closed")),
            comment_count=(card.get("badges") or {}).get("comments"),
            raw=card,
        )

    def to_board(self, board: dict[str, Any]) -> Board:
        return Board(
            id=board["id"],
            name=board["name"],
            description=board.get("desc") or None,
            url=board.get("url", ""),
            closed=bool(board.get("closed")),
            raw=board,
        )

    def to_column(self, trello_list: dict[str, Any]) -> Column:
        return Column(
            id=trello_list["id"],
            name=trello_list["name"],
            position=trello_list.get("pos", 0),
            closed=bool(trello_list.get("closed")),
            raw=trello_list,
        )

    def to_member(self, member: dict[str, Any]) -> Member:
        return Member(
            id=member["id"],
            username=member.get("username", ""),
            display_name=member.get("fullName") or member.get("username", ""),
            avatar_url=member.get("avatarUrl") or None,
            email=member.get("email"),
            raw=member,
        )

    def to_label(self, label: dict[str, Any]) -> Label:
        return Label(
            id=label["id"],
            name=label.get("name") or "",
            color=label.get("color") or None,
            raw=label,
        )

    def to_comment(self, action: dict[str, Any]) -> Comment:
        """Map a ``commentCard`` action."""
        creator = action.get("memberCreator") or {}
        return Comment(
            id=action["id"],
            text=(action.get("data") or {}).get("text") or "",
            author=Member(
                id=creator.get("id", ""),
                username=creator.get("username", ""),
                display_name=creator.get("fullName", ""),
                avatar_url=None,
                raw=action.get("memberCreator"),
            ),
            created_at=from_iso(action["date"]),
            raw=action,
        )

    def to_create_card_params(self, params: CreateTaskParams, column_id: str) -> dict[str, Any]:
        result: dict[str, Any] = {"name": params.title, "idList": column_id}
        if params.description is not None:
            result["desc"] = params.description
        if params.due_date is not None:
            result["due"] = to_iso(params.due_date)
        if params.assignees:
            result["idMembers"] = params.assignees
        if params.labels:
            result["idLabels"] = params.labels
        if params.position:
            result["pos"] = params.position
        return result

    def to_update_card_params(self, params: UpdateTaskParams) -> dict[str, Any]:
        """Only fields the caller explicitly set are included."""
        result: dict[str, Any] = {}
        if params.is_set("title") and params.title is not None:
            result["name"] = params.title
        if params.is_set("description"):
            result["desc"] = params.description or ""
        if params.is_set("column_id") and params.column_id is not None:
            result["idList"] = params.column_id
        if params.is_set("due_date"):
            # None clears the due date
            result["due"] = to_iso(params.due_date) if params.due_date else None
        if params.is_set("due_complete") and params.due_complete is not None:
            result["dueComplete"] = params.due_complete
        if params.is_set("assignees") and params.assignees is not None:
            result["idMembers"] = params.assignees
        if params.is_set("labels") and params.labels is not None:
            result["idLabels"] = params.labels
        if params.is_set("archived") and params.archived is not None:
            result["closed"] = params.archived
        return result

    def infer_status(self, card: dict[str, Any]) -> TaskStatus:
        """Closed beats due-complete. The card's list plays no part."""
        if card.get("closed"):
            return STATUS_ARCHIVED
        if card.get("dueComplete"):
            return STATUS_DONE
        return STATUS_OPEN


def _created_from_id(object_id: str) -> datetime | None:
    """Trello ids are Mongo ObjectIds; the first 4 bytes are the creation time."""
    if len(object_id) != 24:
        return None
    try:
        return datetime.fromtimestamp(int(object_id[:8], 16), tz=UTC)
    except ValueError:
        return None
