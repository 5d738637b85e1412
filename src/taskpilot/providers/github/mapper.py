"""Translation between GitHub issue payloads and the unified models.

GitHub has no columns. The mapper places each issue into a column from the
injected column configuration using its open/closed state and its status
labels. Status labels encode workflow position only and are hidden from
the task's labels.

Everything here is pure: no I/O, and each call builds fresh models.
"""

from __future__ import annotations

from typing import Any

from ...models import (
    DEFAULT_STATUS_LABEL_PREFIX,
    STATUS_DONE,
    STATUS_IN_PROGRESS,
    STATUS_OPEN,
    Board,
    Column,
    ColumnConfig,
    ColumnConfigSet,
    Comment,
    CreateTaskParams,
    Label,
    Member,
    Task,
    TaskStatus,
    UpdateTaskParams,
)
from ...utils.datetime import from_iso, from_iso_or_none

IN_PROGRESS_HINTS = ("progress", "doing")


class GitHubMapper:
    """Map GitHub repositories, issues, users, labels and comments."""

    def __init__(
        self,
        columns: ColumnConfigSet | None = None,
        status_label_prefix: str = DEFAULT_STATUS_LABEL_PREFIX,
    ) -> None:
        self.columns = columns or ColumnConfigSet()
        self.status_label_prefix = status_label_prefix

    def set_column_configs(self, columns: ColumnConfigSet) -> None:
        self.columns = columns

    def set_status_label_prefix(self, prefix: str) -> None:
        self.status_label_prefix = prefix

    # --- Inference ---

    def is_status_label(self, name: str) -> bool:
        if self.status_label_prefix and name.startswith(self.status_label_prefix):
            return True
        return name in self.columns.label_names

    def infer_column(self, issue: dict[str, Any]) -> ColumnConfig | None:
        """Pick the column for an issue.

        Order: closed state, then the first label (in API order) bound to a
        column, then the unlabeled default column.
        """
        if issue["state"] == "closed":
            return self.columns.closed_column

        for label in issue.get("labels") or []:
            column = self.columns.for_label(label["name"])
            if column is not None:
                return column

        return self.columns.default_column

    def infer_status(self, issue: dict[str, Any], column: ColumnConfig | None) -> TaskStatus:
        if issue["state"] == "closed":
            return STATUS_DONE
        if column is None:
            return STATUS_OPEN
        if column.status is not None:
            return column.status
        # Name heuristic, only for columns without an explicit status
        name = column.name.lower()
        if any(hint in name for hint in IN_PROGRESS_HINTS):
            return STATUS_IN_PROGRESS
        return STATUS_OPEN

    # --- Vendor to domain ---

    def to_task(self, issue: dict[str, Any], column: ColumnConfig | None = None) -> Task:
        """Map an issue. ``column`` overrides inference when given."""
        column = column or self.infer_column(issue)
        closed = issue["state"] == "closed"
        milestone = issue.get("milestone") or {}

        return Task(
            id=str(issue["number"]),
            number=issue["number"],
            title=issue["title"],
            description=issue.get("body"),
            status=self.infer_status(issue, column),
            column_id=column.id if column else "open",
            column_name=column.name if column else ("Closed" if closed else "Open"),
            created_at=from_iso(issue["created_at"]),
            updated_at=from_iso(issue["updated_at"]),
            due_date=from_iso_or_none(milestone.get("due_on")),
            due_complete=closed,
            assignee_ids=[str(a["id"]) for a in issue.get("assignees") or []],
            label_ids=[
                str(label["id"])
                for label in issue.get("labels") or []
                if not self.is_status_label(label["name"])
            ],
            url=issue.get("html_url", ""),
            archived=closed,
            comment_count=issue.get("comments"),
            raw=issue,
        )

    def to_board(self, repo: dict[str, Any]) -> Board:
        return Board(
            id=repo["full_name"],
            name=repo["name"],
            description=repo.get("description"),
            url=repo.get("html_url", ""),
            closed=bool(repo.get("archived")),
            raw=repo,
        )

    def to_column(self, config: ColumnConfig, position: int) -> Column:
        return Column(id=config.id, name=config.name, position=position, closed=False, raw=config)

    def to_member(self, user: dict[str, Any]) -> Member:
        return Member(
            id=str(user["id"]),
            username=user["login"],
            display_name=user.get("name") or user["login"],
            avatar_url=user.get("avatar_url"),
            raw=user,
        )

    def to_label(self, label: dict[str, Any]) -> Label:
        return Label(
            id=str(label["id"]),
            name=label["name"],
            color=f"#{label['color']}" if label.get("color") else None,
            raw=label,
        )

    def to_comment(self, comment: dict[str, Any]) -> Comment:
        user = comment.get("user")
        if user:
            author = self.to_member(user)
        else:
            # Deleted ("ghost") accounts come back as null
            author = Member(id="0", username="unknown", display_name="Unknown")
        return Comment(
            id=str(comment["id"]),
            text=comment.get("body") or "",
            author=author,
            created_at=from_iso(comment["created_at"]),
            raw=comment,
        )

    def filter_non_status_labels(self, labels: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [label for label in labels if not self.is_status_label(label["name"])]

    # --- Domain to vendor ---

    def to_create_issue_params(
        self,
        params: CreateTaskParams,
        column: ColumnConfig | None = None,
        label_names: list[str] | None = None,
        assignees: list[str] | None = None,
    ) -> dict[str, Any]:
        """Build the create payload.

        ``label_names`` and ``assignees`` are already-resolved label names
        and logins.
        """
        result: dict[str, Any] = {"title": params.title}
        if params.description is not None:
            result["body"] = params.description

        labels = list(label_names or [])
        if column is not None and column.label_name and column.label_name not in labels:
            labels.append(column.label_name)
        if labels:
            result["labels"] = labels
        if assignees:
            result["assignees"] = assignees
        return result

    def status_labels_for_move(
        self, current_labels: list[str], target: ColumnConfig | None
    ) -> list[str]:
        """Strip every configured status label, then add the target's."""
        configured = self.columns.label_names
        labels = [name for name in current_labels if name not in configured]
        if target is not None and target.label_name:
            labels.append(target.label_name)
        return labels

    def to_move_params(self, issue: dict[str, Any], target: ColumnConfig) -> dict[str, Any]:
        """Build the PATCH payload that moves an issue into ``target``.

        ``state`` is only included when the open/closed state must change,
        since state transitions fire notifications.
        """
        current = [label["name"] for label in issue.get("labels") or []]
        result: dict[str, Any] = {"labels": self.status_labels_for_move(current, target)}

        is_closed = issue["state"] == "closed"
        if is_closed != target.is_closed_state:
            result["state"] = "closed" if target.is_closed_state else "open"
        return result

    def to_update_issue_params(
        self,
        params: UpdateTaskParams,
        issue: dict[str, Any],
        target: ColumnConfig | None = None,
        label_names: list[str] | None = None,
    ) -> dict[str, Any]:
        """Build the PATCH payload for a partial update.

        ``label_names`` replaces the issue's non-status labels; status
        labels are kept unless ``target`` moves the issue. Assignees are not
        part of the payload, they go through the assignees sub-resource.
        """
        result: dict[str, Any] = {}
        if params.is_set("title") and params.title is not None:
            result["title"] = params.title
        if params.is_set("description"):
            result["body"] = params.description

        current = [label["name"] for label in issue.get("labels") or []]
        if label_names is not None or target is not None:
            if label_names is not None:
                kept_status = [name for name in current if self.is_status_label(name)]
                labels = list(label_names) + [n for n in kept_status if n not in label_names]
            else:
                labels = current
            if target is not None:
                labels = self.status_labels_for_move(labels, target)
            if labels != current:
                result["labels"] = labels

        is_closed = issue["state"] == "closed"
        want_closed = is_closed
        if target is not None:
            want_closed = target.is_closed_state
        if params.is_set("archived") and params.archived is not None:
            want_closed = params.archived
        if want_closed != is_closed:
            result["state"] = "closed" if want_closed else "open"

        return result
