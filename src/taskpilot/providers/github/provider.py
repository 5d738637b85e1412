"""GitHub Issues implementation of the TaskProvider protocol."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from ...errors import (
    APIError,
    AuthConfigMissingError,
    ConfigurationError,
    NotFoundError,
    ProviderNotInitializedError,
    UnsupportedOperationError,
)
from ...models import (
    Board,
    Column,
    ColumnConfig,
    ColumnConfigSet,
    Comment,
    CreateTaskParams,
    GitHubAuth,
    Label,
    Member,
    Task,
    TaskFilter,
    UpdateTaskParams,
)
from ...utils.rate_limiter import ConcurrencyLimiter
from ..http import DEFAULT_TIMEOUT
from .client import GitHubClient
from .mapper import GitHubMapper

logger = logging.getLogger(__name__)

# Task ids are issue numbers, optionally qualified: "42", "#42", "owner/repo#42"
ISSUE_REF_PATTERN = re.compile(r"^(?:(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)#|#)?(?P<number>\d+)$")


@dataclass
class IssueRef:
    """Resolved location of an issue."""

    owner: str
    repo: str
    number: int

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_id(board_id: str) -> tuple[str, str]:
    """Split an ``owner/repo`` board id.

    Raises:
        ConfigurationError: Not exactly two non-empty segments.
    """
    parts = board_id.split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError(f'Invalid board ID format: "{board_id}". Expected "owner/repo".')
    return parts[0], parts[1]


class GitHubProvider:
    """Provider for GitHub Issues.

    Columns are synthesized from a column configuration set with
    ``set_column_configs``. Task ids are issue numbers in the repository set
    with ``set_repo``, or fully qualified ``owner/repo#123`` references.
    """

    type = "github"
    display_name = "GitHub Issues"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        limiter: ConcurrencyLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._limiter = limiter
        self._transport = transport
        self._auth: GitHubAuth | None = None
        self._client: GitHubClient | None = None
        self._repo: tuple[str, str] | None = None
        self._columns = ColumnConfigSet()
        self.mapper = GitHubMapper(self._columns)

    # --- Configuration ---

    def set_auth(self, auth: GitHubAuth) -> None:
        self._auth = auth

    def set_repo(self, owner: str, repo: str) -> None:
        if not owner or not repo:
            raise ConfigurationError("Repository owner and name are required")
        self._repo = (owner, repo)

    def set_column_configs(
        self, configs: ColumnConfigSet | Iterable[ColumnConfig | dict[str, Any]]
    ) -> None:
        """Validate and install the column configuration.

        Raises:
            ConfigurationError: Duplicate ids or label names, or more than
                one closed-state column.
        """
        if not isinstance(configs, ColumnConfigSet):
            try:
                configs = ColumnConfigSet.model_validate(
                    [c.model_dump() if isinstance(c, ColumnConfig) else c for c in configs]
                )
            except ValidationError as e:
                raise ConfigurationError(f"Invalid column configuration: {e}") from e
        self._columns = configs
        self.mapper.set_column_configs(configs)
        logger.debug("GitHub column configuration set: %s", [c.id for c in configs])

    def get_column_configs(self) -> ColumnConfigSet:
        return self._columns

    def set_status_label_prefix(self, prefix: str) -> None:
        self.mapper.set_status_label_prefix(prefix)

    # --- Lifecycle ---

    async def initialize(self) -> None:
        if self._auth is None:
            raise AuthConfigMissingError()
        self._client = GitHubClient(
            self._auth,
            timeout=self._timeout,
            limiter=self._limiter,
            transport=self._transport,
        )
        logger.debug("GitHub provider initialized (auth=%s)", self._auth.type)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> GitHubClient:
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
            logger.debug("GitHub auth validation failed: %s", e)
            return False

    async def get_current_member(self) -> Member:
        client = self._ensure_client()
        return self.mapper.to_member(await client.get_me())

    # --- Helpers ---

    def _issue_ref(self, task_id: str) -> IssueRef:
        match = ISSUE_REF_PATTERN.match(task_id.strip())
        if match is None:
            raise NotFoundError(f"Issue {task_id}")
        number = int(match.group("number"))
        if match.group("owner"):
            return IssueRef(match.group("owner"), match.group("repo"), number)
        if self._repo is None:
            raise ConfigurationError(
                "Repository not set. Call set_repo() or use an owner/repo#number task id."
            )
        return IssueRef(self._repo[0], self._repo[1], number)

    def _find_column(self, column_id: str) -> ColumnConfig:
        column = self._columns.get(column_id)
        if column is None:
            raise NotFoundError(f'Column "{column_id}" in configuration')
        return column

    async def _label_names(self, ref: IssueRef, refs: list[str]) -> list[str]:
        """Resolve label ids to names. Non-numeric refs are already names."""
        if not any(r.isdigit() for r in refs):
            return list(refs)
        labels = await self._ensure_client().list_labels(ref.owner, ref.repo)
        by_id = {str(label["id"]): label["name"] for label in labels}
        return [by_id.get(r, r) for r in refs]

    async def _logins(self, ref: IssueRef, refs: list[str]) -> list[str]:
        """Resolve member ids to logins. Non-numeric refs are already logins."""
        if not any(r.isdigit() for r in refs):
            return list(refs)
        users = await self._ensure_client().list_collaborators(ref.owner, ref.repo)
        by_id = {str(user["id"]): user["login"] for user in users}
        return [by_id.get(r, r) for r in refs]

    async def _fetch_issue(self, ref: IssueRef) -> dict[str, Any]:
        try:
            return await self._ensure_client().get_issue(ref.owner, ref.repo, ref.number)
        except APIError as e:
            if e.status_code in (404, 410):
                raise NotFoundError(f"Issue {ref.repository}#{ref.number}") from e
            raise

    # --- Boards ---

    async def list_boards(self) -> list[Board]:
        client = self._ensure_client()
        return [self.mapper.to_board(r) for r in await client.list_user_repos()]

    async def list_org_boards(self, org: str) -> list[Board]:
        client = self._ensure_client()
        return [self.mapper.to_board(r) for r in await client.list_org_repos(org)]

    async def get_board(self, board_id: str) -> Board:
        client = self._ensure_client()
        owner, repo = parse_repo_id(board_id)
        try:
            repository = await client.get_repo(owner, repo)
        except APIError as e:
            if e.status_code == 404:
                raise NotFoundError(f"Repository {board_id}") from e
            raise
        return self.mapper.to_board(repository)

    async def get_board_columns(self, board_id: str) -> list[Column]:
        self._ensure_client()
        parse_repo_id(board_id)
        return [self.mapper.to_column(c, i) for i, c in enumerate(self._columns)]

    # --- Tasks ---

    async def list_tasks(self, board_id: str, filter: TaskFilter | None = None) -> list[Task]:
        client = self._ensure_client()
        owner, repo = parse_repo_id(board_id)

        state = "closed" if filter and filter.archived is True else "all"
        issues = await client.list_issues(owner, repo, state=state)

        tasks = [self.mapper.to_task(issue) for issue in issues]
        if filter:
            tasks = filter.apply(tasks)
        logger.debug("Listed %d GitHub issues in %s/%s", len(tasks), owner, repo)
        return tasks

    async def get_task(self, task_id: str) -> Task:
        self._ensure_client()
        return self.mapper.to_task(await self._fetch_issue(self._issue_ref(task_id)))

    async def create_task(self, board_id: str, column_id: str, params: CreateTaskParams) -> Task:
        client = self._ensure_client()
        owner, repo = parse_repo_id(board_id)
        ref = IssueRef(owner, repo, 0)
        column = self._find_column(column_id) if column_id else self._columns.default_column

        label_names = await self._label_names(ref, params.labels) if params.labels else None
        assignees = await self._logins(ref, params.assignees) if params.assignees else None
        payload = self.mapper.to_create_issue_params(params, column, label_names, assignees)

        issue = await client.create_issue(owner, repo, payload)
        logger.info("Created GitHub issue %s/%s#%d", owner, repo, issue["number"])

        if column is not None and column.is_closed_state:
            issue = await client.close_issue(owner, repo, issue["number"])
        return self.mapper.to_task(issue, column)

    async def update_task(self, task_id: str, params: UpdateTaskParams) -> Task:
        """Apply a partial update.

        The issue is read, a new label set and state are computed, then
        written back. There is no version check, so a concurrent edit made
        between the read and the write is overwritten.
        """
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        if params.is_empty:
            return self.mapper.to_task(await self._fetch_issue(ref))

        issue = await self._fetch_issue(ref)
        target = (
            self._find_column(params.column_id)
            if params.is_set("column_id") and params.column_id
            else None
        )
        label_names = None
        if params.is_set("labels") and params.labels is not None:
            label_names = await self._label_names(ref, params.labels)
        if params.is_set("due_date") or params.is_set("due_complete"):
            logger.debug("GitHub issues have no due date; ignoring due fields for %s", task_id)

        payload = self.mapper.to_update_issue_params(params, issue, target, label_names)
        if payload:
            issue = await client.update_issue(ref.owner, ref.repo, ref.number, payload)

        if params.is_set("assignees") and params.assignees is not None:
            issue = await self._sync_assignees(ref, issue, params.assignees) or issue

        # An explicit archived flag can contradict the target column
        if target is not None and (issue["state"] == "closed") != target.is_closed_state:
            target = None
        return self.mapper.to_task(issue, target)

    async def _sync_assignees(
        self, ref: IssueRef, issue: dict[str, Any], wanted: list[str]
    ) -> dict[str, Any] | None:
        """Reconcile assignees through the add/remove sub-resource."""
        client = self._ensure_client()
        desired = await self._logins(ref, wanted)
        current = [a["login"] for a in issue.get("assignees") or []]
        to_add = [login for login in desired if login not in current]
        to_remove = [login for login in current if login not in desired]

        latest = None
        if to_add:
            latest = await client.add_assignees_to_issue(ref.owner, ref.repo, ref.number, to_add)
        if to_remove:
            latest = await client.remove_assignees_from_issue(
                ref.owner, ref.repo, ref.number, to_remove
            )
        return latest

    async def delete_task(self, task_id: str) -> None:
        raise UnsupportedOperationError(
            f"GitHub Issues cannot be deleted via the API. Issue #{task_id} can only be "
            "closed (archive_task)."
        )

    async def move_task(self, task_id: str, column_id: str) -> Task:
        """Move an issue into a configured column.

        Every configured status label is removed, the target's label is
        added, and the state only changes when the target's closed-ness
        differs. This is a read-then-write without a version check.
        """
        client = self._ensure_client()
        column = self._find_column(column_id)
        ref = self._issue_ref(task_id)

        issue = await self._fetch_issue(ref)
        payload = self.mapper.to_move_params(issue, column)
        issue = await client.update_issue(ref.owner, ref.repo, ref.number, payload)
        logger.info("Moved %s#%d to column %s", ref.repository, ref.number, column.id)
        return self.mapper.to_task(issue, column)

    async def archive_task(self, task_id: str) -> Task:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        issue = await client.close_issue(ref.owner, ref.repo, ref.number)
        return self.mapper.to_task(issue, self._columns.closed_column)

    async def unarchive_task(self, task_id: str) -> Task:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        issue = await client.reopen_issue(ref.owner, ref.repo, ref.number)
        return self.mapper.to_task(issue)

    # --- Comments ---

    async def list_comments(self, task_id: str) -> list[Comment]:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        comments = await client.list_comments(ref.owner, ref.repo, ref.number)
        return [self.mapper.to_comment(c) for c in comments]

    async def add_comment(self, task_id: str, text: str) -> Comment:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        comment = await client.create_comment(ref.owner, ref.repo, ref.number, text)
        return self.mapper.to_comment(comment)

    # --- Members and labels ---

    async def list_members(self, board_id: str) -> list[Member]:
        client = self._ensure_client()
        owner, repo = parse_repo_id(board_id)
        return [self.mapper.to_member(u) for u in await client.list_collaborators(owner, repo)]

    async def list_labels(self, board_id: str) -> list[Label]:
        """List the repository's labels, without status labels."""
        client = self._ensure_client()
        owner, repo = parse_repo_id(board_id)
        labels = await client.list_labels(owner, repo)
        return [self.mapper.to_label(lbl) for lbl in self.mapper.filter_non_status_labels(labels)]

    async def add_label(self, task_id: str, label_id: str) -> None:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        names = await self._label_names(ref, [label_id])
        await client.add_labels_to_issue(ref.owner, ref.repo, ref.number, names)

    async def remove_label(self, task_id: str, label_id: str) -> None:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        [name] = await self._label_names(ref, [label_id])
        await client.remove_label_from_issue(ref.owner, ref.repo, ref.number, name)

    async def add_member(self, task_id: str, member_id: str) -> None:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        logins = await self._logins(ref, [member_id])
        await client.add_assignees_to_issue(ref.owner, ref.repo, ref.number, logins)

    async def remove_member(self, task_id: str, member_id: str) -> None:
        client = self._ensure_client()
        ref = self._issue_ref(task_id)
        logins = await self._logins(ref, [member_id])
        await client.remove_assignees_from_issue(ref.owner, ref.repo, ref.number, logins)
