"""Tests for GitHubProvider against a mocked GitHub API."""

import json

import httpx
import pytest
import pytest_asyncio

from taskpilot.errors import (
    APIError,
    AuthConfigMissingError,
    ConfigurationError,
    NotFoundError,
    ProviderNotInitializedError,
    UnsupportedOperationError,
)
from taskpilot.models import (
    ColumnConfig,
    ColumnConfigSet,
    CreateTaskParams,
    GitHubAuth,
    TaskFilter,
    UpdateTaskParams,
)
from taskpilot.providers.github import GitHubProvider, parse_repo_id
from taskpilot.utils.rate_limiter import ConcurrencyLimiter


class FakeGitHub:
    """Routes requests by (method, path) and records them."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, response) -> None:
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        return [r for r in self.requests if method is None or r.method == method]

    def body(self, request: httpx.Request) -> dict:
        return json.loads(request.content)


def label(id: int, name: str) -> dict:
    return {"id": id, "name": name, "color": "ededed"}


def issue(number: int = 1, state: str = "open", labels=None, **extra) -> dict:
    return {
        "number": number,
        "title": f"Issue {number}",
        "body": None,
        "state": state,
        "labels": labels or [],
        "assignees": [],
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
        "html_url": f"https://github.com/octo/repo/issues/{number}",
        "comments": 0,
        **extra,
    }


COLUMNS = [
    ColumnConfig(id="todo", name="To Do"),
    ColumnConfig(id="doing", name="Doing", label_name="status:doing"),
    ColumnConfig(id="review", name="Review", label_name="status:review"),
    ColumnConfig(id="done", name="Done", is_closed_state=True),
]

ISSUE_PATH = "/repos/octo/repo/issues/5"


@pytest.fixture
def api() -> FakeGitHub:
    return FakeGitHub()


@pytest_asyncio.fixture
async def provider(api: FakeGitHub):
    provider = GitHubProvider(transport=httpx.MockTransport(api), limiter=ConcurrencyLimiter())
    provider.set_auth(GitHubAuth(token="t"))
    provider.set_repo("octo", "repo")
    provider.set_column_configs(COLUMNS)
    await provider.initialize()
    yield provider
    await provider.aclose()


class TestLifecycle:
    """Tests for initialization and authentication."""

    @pytest.mark.asyncio
    async def test_calls_before_initialize_raise(self):
        """Operations before initialize() raise ProviderNotInitializedError."""
        provider = GitHubProvider()
        with pytest.raises(ProviderNotInitializedError):
            await provider.list_boards()
        with pytest.raises(ProviderNotInitializedError):
            await provider.get_task("1")

    @pytest.mark.asyncio
    async def test_initialize_without_auth(self):
        """initialize() without credentials raises AuthConfigMissingError."""
        with pytest.raises(AuthConfigMissingError):
            await GitHubProvider().initialize()

    def test_not_initialized_is_not_a_vendor_error(self):
        """Misuse errors sit outside the vendor error tree."""
        assert issubclass(ProviderNotInitializedError, RuntimeError)
        assert not issubclass(ProviderNotInitializedError, APIError)

    @pytest.mark.asyncio
    async def test_validate_auth(self, provider: GitHubProvider, api: FakeGitHub):
        """validate_auth reports success and failure without raising."""
        api.on("GET", "/user", (200, {"id": 1, "login": "octocat"}))
        assert await provider.validate_auth() is True

        api.on("GET", "/user", (401, {"message": "Bad credentials"}))
        assert await provider.validate_auth() is False

    @pytest.mark.asyncio
    async def test_validate_auth_before_initialize(self):
        """validate_auth is False when there is no client yet."""
        assert await GitHubProvider().validate_auth() is False

    @pytest.mark.asyncio
    async def test_current_member(self, provider: GitHubProvider, api: FakeGitHub):
        """get_current_member maps the authenticated user."""
        api.on("GET", "/user", (200, {"id": 1, "login": "octocat", "name": "Mona"}))
        member = await provider.get_current_member()
        assert (member.username, member.display_name) == ("octocat", "Mona")


class TestConfiguration:
    """Tests for column configuration and board ids."""

    def test_invalid_column_config_rejected(self):
        """Two closed-state columns are rejected when set."""
        provider = GitHubProvider()
        with pytest.raises(ConfigurationError):
            provider.set_column_configs(
                [
                    {"id": "a", "name": "A", "is_closed_state": True},
                    {"id": "b", "name": "B", "is_closed_state": True},
                ]
            )

    def test_duplicate_label_names_rejected(self):
        """Two columns cannot share a status label."""
        provider = GitHubProvider()
        with pytest.raises(ConfigurationError):
            provider.set_column_configs(
                [
                    {"id": "a", "name": "A", "label_name": "x"},
                    {"id": "b", "name": "B", "label_name": "x"},
                ]
            )

    def test_accepts_config_set(self):
        """A ready ColumnConfigSet is installed as is."""
        provider = GitHubProvider()
        configs = ColumnConfigSet(COLUMNS)
        provider.set_column_configs(configs)
        assert provider.get_column_configs() is configs

    @pytest.mark.parametrize("board_id", ["octo", "octo/repo/extra", "/repo", "octo/"])
    def test_parse_repo_id_rejects_bad_ids(self, board_id: str):
        """Board ids must be owner/repo."""
        with pytest.raises(ConfigurationError):
            parse_repo_id(board_id)

    @pytest.mark.asyncio
    async def test_board_columns_follow_configuration(self, provider: GitHubProvider):
        """Columns come from the configuration in order."""
        columns = await provider.get_board_columns("octo/repo")
        assert [c.id for c in columns] == ["todo", "doing", "review", "done"]
        assert [c.position for c in columns] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_board_columns_reject_bad_board_id(self, provider: GitHubProvider):
        """An invalid board id is a configuration error."""
        with pytest.raises(ConfigurationError):
            await provider.get_board_columns("not-a-repo")

    @pytest.mark.asyncio
    async def test_unqualified_id_without_repo(self, api: FakeGitHub):
        """Plain issue numbers need a repository."""
        provider = GitHubProvider(transport=httpx.MockTransport(api), limiter=ConcurrencyLimiter())
        provider.set_auth(GitHubAuth(token="t"))
        await provider.initialize()
        with pytest.raises(ConfigurationError):
            await provider.get_task("5")
        await provider.aclose()
        assert api.requests == []


class TestReads:
    """Tests for boards and task reads."""

    @pytest.mark.asyncio
    async def test_list_org_boards(self, provider: GitHubProvider, api: FakeGitHub):
        """Organization repositories map to boards."""
        api.on(
            "GET",
            "/orgs/octo/repos",
            (200, [{"full_name": "octo/repo", "name": "repo", "html_url": "u"}]),
        )

        boards = await provider.list_org_boards("octo")

        assert [b.id for b in boards] == ["octo/repo"]
        assert api.calls("GET")[0].url.params["type"] == "all"

    @pytest.mark.asyncio
    async def test_get_board_not_found(self, provider: GitHubProvider, api: FakeGitHub):
        """A missing repository raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await provider.get_board("octo/missing")

    @pytest.mark.asyncio
    async def test_get_task_not_found_chains_api_error(
        self, provider: GitHubProvider, api: FakeGitHub
    ):
        """A missing issue raises NotFoundError caused by the APIError."""
        with pytest.raises(NotFoundError) as exc_info:
            await provider.get_task("5")
        assert isinstance(exc_info.value.__cause__, APIError)

    @pytest.mark.asyncio
    async def test_get_task_with_qualified_id(self, provider: GitHubProvider, api: FakeGitHub):
        """owner/repo#number ids override the configured repository."""
        api.on("GET", "/repos/other/proj/issues/7", (200, issue(7)))
        task = await provider.get_task("other/proj#7")
        assert task.number == 7

    @pytest.mark.asyncio
    async def test_list_tasks_filters_by_column_name(
        self, provider: GitHubProvider, api: FakeGitHub
    ):
        """Filtering is client-side and case-insensitive on column names."""

        def issues(request: httpx.Request) -> httpx.Response:
            assert request.url.params["state"] == "all"
            return httpx.Response(
                200,
                json=[
                    issue(1),
                    issue(2, labels=[label(1, "status:doing")]),
                    issue(3, pull_request={"url": "x"}, labels=[label(1, "status:doing")]),
                    issue(4, state="closed"),
                ],
            )

        api.on("GET", "/repos/octo/repo/issues", issues)
        tasks = await provider.list_tasks("octo/repo", TaskFilter(column_name="doing"))
        assert [t.number for t in tasks] == [2]

        everything = await provider.list_tasks("octo/repo")
        assert [t.number for t in everything] == [1, 2, 4]

    @pytest.mark.asyncio
    async def test_list_archived_tasks_queries_closed(
        self, provider: GitHubProvider, api: FakeGitHub
    ):
        """archived=True asks GitHub for closed issues only."""

        def issues(request: httpx.Request) -> httpx.Response:
            assert request.url.params["state"] == "closed"
            return httpx.Response(200, json=[issue(4, state="closed")])

        api.on("GET", "/repos/octo/repo/issues", issues)
        tasks = await provider.list_tasks("octo/repo", TaskFilter(archived=True))
        assert [t.column_id for t in tasks] == ["done"]

    @pytest.mark.asyncio
    async def test_list_labels_hides_status_labels(
        self, provider: GitHubProvider, api: FakeGitHub
    ):
        """Status labels are not offered as labels."""
        api.on(
            "GET",
            "/repos/octo/repo/labels",
            (200, [label(1, "status:doing"), label(2, "bug"), label(3, "status:other")]),
        )
        labels = await provider.list_labels("octo/repo")
        assert [lbl.name for lbl in labels] == ["bug"]


class TestMove:
    """Tests for moving issues between columns."""

    @pytest.mark.asyncio
    async def test_move_between_open_columns_keeps_state(
        self, provider: GitHubProvider, api: FakeGitHub
    ):
        """Moving between open columns does not send state."""
        api.on("GET", ISSUE_PATH, (200, issue(5, labels=[label(1, "status:doing"), label(2, "bug")])))
        api.on(
            "PATCH",
            ISSUE_PATH,
            (200, issue(5, labels=[label(2, "bug"), label(3, "status:review")])),
        )

        task = await provider.move_task("5", "review")

        [patch_request] = api.calls("PATCH")
        assert api.body(patch_request) == {"labels": ["bug", "status:review"]}
        assert task.column_id == "review"
        assert task.label_ids == ["2"]

    @pytest.mark.asyncio
    async def test_move_to_closed_column_closes(self, provider: GitHubProvider, api: FakeGitHub):
        """Moving to the closed column closes the issue."""
        api.on("GET", ISSUE_PATH, (200, issue(5, labels=[label(1, "status:doing")])))
        api.on("PATCH", ISSUE_PATH, (200, issue(5, state="closed")))

        task = await provider.move_task("5", "done")

        [patch_request] = api.calls("PATCH")
        assert api.body(patch_request) == {"labels": [], "state": "closed"}
        assert task.status == "done"
        assert task.archived is True

    @pytest.mark.asyncio
    async def test_move_to_unknown_column(self, provider: GitHubProvider, api: FakeGitHub):
        """An unknown column raises NotFoundError before any request."""
        with pytest.raises(NotFoundError):
            await provider.move_task("5", "nope")
        assert api.requests == []


class TestWrites:
    """Tests for create, update, archive and delete."""

    @pytest.mark.asyncio
    async def test_delete_is_unsupported_without_request(
        self, provider: GitHubProvider, api: FakeGitHub
    ):
        """GitHub issues cannot be deleted; nothing is sent."""
        with pytest.raises(UnsupportedOperationError):
            await provider.delete_task("5")
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_delete_is_unsupported_before_initialize(self):
        """delete_task is unsupported even on an uninitialized provider."""
        with pytest.raises(UnsupportedOperationError):
            await GitHubProvider().delete_task("1")

    @pytest.mark.asyncio
    async def test_create_in_labeled_column(self, provider: GitHubProvider, api: FakeGitHub):
        """Creating in a labeled column adds its status label."""
        api.on(
            "POST",
            "/repos/octo/repo/issues",
            (201, issue(9, labels=[label(1, "status:doing")])),
        )

        task = await provider.create_task("octo/repo", "doing", CreateTaskParams(title="New"))

        [post] = api.calls("POST")
        assert api.body(post) == {"title": "New", "labels": ["status:doing"]}
        assert task.column_id == "doing"

    @pytest.mark.asyncio
    async def test_create_in_closed_column_closes(self, provider: GitHubProvider, api: FakeGitHub):
        """Creating in the closed column creates then closes the issue."""
        api.on("POST", "/repos/octo/repo/issues", (201, issue(9)))
        api.on("PATCH", "/repos/octo/repo/issues/9", (200, issue(9, state="closed")))

        task = await provider.create_task("octo/repo", "done", CreateTaskParams(title="Done already"))

        [patch_request] = api.calls("PATCH")
        assert api.body(patch_request) == {"state": "closed"}
        assert task.status == "done"

    @pytest.mark.asyncio
    async def test_create_resolves_label_ids(self, provider: GitHubProvider, api: FakeGitHub):
        """Numeric label ids are resolved to names."""
        api.on("GET", "/repos/octo/repo/labels", (200, [label(2, "bug"), label(3, "ui")]))
        api.on("POST", "/repos/octo/repo/issues", (201, issue(9, labels=[label(3, "ui")])))

        await provider.create_task("octo/repo", "", CreateTaskParams(title="New", labels=["3"]))

        [post] = api.calls("POST")
        assert api.body(post)["labels"] == ["ui"]

    @pytest.mark.asyncio
    async def test_empty_update_only_reads(self, provider: GitHubProvider, api: FakeGitHub):
        """An empty update returns the current task without writing."""
        api.on("GET", ISSUE_PATH, (200, issue(5)))

        task = await provider.update_task("5", UpdateTaskParams())

        assert task.number == 5
        assert api.calls("PATCH") == []

    @pytest.mark.asyncio
    async def test_update_syncs_assignees(self, provider: GitHubProvider, api: FakeGitHub):
        """Assignee changes go through the assignees sub-resource."""
        api.on("GET", ISSUE_PATH, (200, issue(5, assignees=[{"id": 1, "login": "ada"}])))
        api.on("POST", f"{ISSUE_PATH}/assignees", (201, issue(5)))
        api.on("DELETE", f"{ISSUE_PATH}/assignees", (200, issue(5, assignees=[{"id": 2, "login": "bob"}])))

        task = await provider.update_task("5", UpdateTaskParams(assignees=["bob"]))

        [post] = api.calls("POST")
        [delete] = api.calls("DELETE")
        assert api.body(post) == {"assignees": ["bob"]}
        assert api.body(delete) == {"assignees": ["ada"]}
        assert api.calls("PATCH") == []
        assert task.assignee_ids == ["2"]

    @pytest.mark.asyncio
    async def test_archive_and_unarchive(self, provider: GitHubProvider, api: FakeGitHub):
        """Archive closes the issue, unarchive reopens it."""
        responses = iter([issue(5, state="closed"), issue(5)])
        api.on("PATCH", ISSUE_PATH, lambda request: httpx.Response(200, json=next(responses)))

        archived = await provider.archive_task("5")
        restored = await provider.unarchive_task("5")

        states = [api.body(r)["state"] for r in api.calls("PATCH")]
        assert states == ["closed", "open"]
        assert (archived.column_id, archived.archived) == ("done", True)
        assert (restored.column_id, restored.archived) == ("todo", False)

    @pytest.mark.asyncio
    async def test_add_member_resolves_login(self, provider: GitHubProvider, api: FakeGitHub):
        """Numeric member ids are resolved to logins."""
        api.on("GET", "/repos/octo/repo/collaborators", (200, [{"id": 7, "login": "octocat"}]))
        api.on("POST", f"{ISSUE_PATH}/assignees", (201, issue(5)))

        await provider.add_member("5", "7")

        [post] = api.calls("POST")
        assert api.body(post) == {"assignees": ["octocat"]}

    @pytest.mark.asyncio
    async def test_add_comment(self, provider: GitHubProvider, api: FakeGitHub):
        """Comments are created and mapped."""
        api.on(
            "POST",
            f"{ISSUE_PATH}/comments",
            (
                201,
                {
                    "id": 11,
                    "body": "hello",
                    "user": {"id": 1, "login": "octocat"},
                    "created_at": "2024-01-01T00:00:00Z",
                },
            ),
        )
        comment = await provider.add_comment("5", "hello")
        assert (comment.id, comment.text, comment.author.username) == ("11", "hello", "octocat")


class TestSubResources:
    """Tests for comments, members and label removal."""

    @pytest.mark.asyncio
    async def test_list_members(self, provider: GitHubProvider, api: FakeGitHub):
        """Collaborators are the repository's members."""
        api.on(
            "GET",
            "/repos/octo/repo/collaborators",
            (200, [{"id": 7, "login": "octocat"}, {"id": 8, "login": "ada", "name": "Ada"}]),
        )

        members = await provider.list_members("octo/repo")

        assert [(m.id, m.display_name) for m in members] == [("7", "octocat"), ("8", "Ada")]
        [request] = api.calls("GET")
        assert request.url.params["per_page"] == "100"

    @pytest.mark.asyncio
    async def test_list_comments_drains_pages(self, provider: GitHubProvider, api: FakeGitHub):
        """Every page of comments is fetched and mapped in order."""

        def comments(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            count = 100 if page == 1 else 2
            start = (page - 1) * 100
            return httpx.Response(
                200,
                json=[
                    {
                        "id": start + i,
                        "body": f"c{start + i}",
                        "user": {"id": 1, "login": "octocat"},
                        "created_at": "2024-01-01T00:00:00Z",
                    }
                    for i in range(count)
                ],
            )

        api.on("GET", f"{ISSUE_PATH}/comments", comments)

        result = await provider.list_comments("5")

        assert len(result) == 102
        assert (result[0].text, result[-1].text) == ("c0", "c101")
        assert [int(r.url.params["page"]) for r in api.calls("GET")] == [1, 2]

    @pytest.mark.asyncio
    async def test_remove_label_quotes_name(self, provider: GitHubProvider, api: FakeGitHub):
        """Label removal deletes by URL-quoted name."""
        api.on("DELETE", f"{ISSUE_PATH}/labels/needs review", (200, []))

        await provider.remove_label("5", "needs review")

        [delete] = api.calls("DELETE")
        assert delete.url.raw_path.decode() == f"{ISSUE_PATH}/labels/needs%20review"

    @pytest.mark.asyncio
    async def test_remove_label_resolves_id(self, provider: GitHubProvider, api: FakeGitHub):
        """A numeric label id is resolved to its name first."""
        api.on("GET", "/repos/octo/repo/labels", (200, [label(2, "bug")]))
        api.on("DELETE", f"{ISSUE_PATH}/labels/bug", (200, []))

        await provider.remove_label("5", "2")

        [delete] = api.calls("DELETE")
        assert delete.url.path == f"{ISSUE_PATH}/labels/bug"

    @pytest.mark.asyncio
    async def test_remove_member_sends_body(self, provider: GitHubProvider, api: FakeGitHub):
        """Unassigning sends a DELETE with the logins in the body."""
        api.on("DELETE", f"{ISSUE_PATH}/assignees", (200, issue(5)))

        await provider.remove_member("5", "octocat")

        [delete] = api.calls("DELETE")
        assert delete.url.path == f"{ISSUE_PATH}/assignees"
        assert api.body(delete) == {"assignees": ["octocat"]}
