"""Tests for the GitHub REST client."""

import json

import httpx
import pytest

from taskpilot.models import GitHubAuth
from taskpilot.providers.github import GitHubClient
from taskpilot.utils.rate_limiter import ConcurrencyLimiter


def make_client(handler) -> GitHubClient:
    return GitHubClient(
        GitHubAuth(token="t"),
        transport=httpx.MockTransport(handler),
        limiter=ConcurrencyLimiter(),
    )


def issue(number: int, **extra) -> dict:
    return {"number": number, "title": f"Issue {number}", "state": "open", **extra}


class TestPagination:
    """Tests for draining paginated list endpoints."""

    @pytest.mark.asyncio
    async def test_drains_until_short_page(self):
        """Pages of 100, 100, 37 take three requests and yield 237 items."""
        sizes = {1: 100, 2: 100, 3: 37}
        pages: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            assert request.url.params["per_page"] == "100"
            pages.append(page)
            start = (page - 1) * 100
            return httpx.Response(
                200, json=[{"id": start + i, "name": f"l{start + i}"} for i in range(sizes[page])]
            )

        client = make_client(handler)
        labels = await client.list_labels("octo", "repo")
        await client.aclose()

        assert pages == [1, 2, 3]
        assert len(labels) == 237
        assert [label["id"] for label in labels[:3]] == [0, 1, 2]
        assert labels[-1]["id"] == 236

    @pytest.mark.asyncio
    async def test_exact_multiple_needs_one_empty_page(self):
        """A full final page is followed by one empty request."""
        pages: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            pages.append(page)
            return httpx.Response(200, json=[{"id": i} for i in range(100)] if page == 1 else [])

        client = make_client(handler)
        users = await client.list_collaborators("octo", "repo")
        await client.aclose()

        assert pages == [1, 2]
        assert len(users) == 100

    @pytest.mark.asyncio
    async def test_empty_listing(self):
        """An empty first page stops immediately."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[])

        client = make_client(handler)
        assert await client.list_user_repos() == []
        await client.aclose()
        assert len(calls) == 1


class TestIssues:
    """Tests for issue endpoints."""

    @pytest.mark.asyncio
    async def test_list_issues_excludes_pull_requests(self):
        """Entries with a pull_request key are dropped."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["state"] == "all"
            return httpx.Response(
                200,
                json=[
                    issue(1),
                    issue(2, pull_request={"url": "https://api.github.com/pulls/2"}),
                    issue(3),
                ],
            )

        client = make_client(handler)
        issues = await client.list_issues("octo", "repo", state="all")
        await client.aclose()

        assert [i["number"] for i in issues] == [1, 3]

    @pytest.mark.asyncio
    async def test_update_issue_uses_patch(self):
        """Updates are sent as PATCH with a JSON body."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=issue(5, state="closed"))

        client = make_client(handler)
        await client.close_issue("octo", "repo", 5)
        await client.aclose()

        assert seen[0].method == "PATCH"
        assert seen[0].url.path == "/repos/octo/repo/issues/5"
        assert json.loads(seen[0].content) == {"state": "closed"}

    @pytest.mark.asyncio
    async def test_remove_label_quotes_name(self):
        """Label names are URL-encoded in the path."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        client = make_client(handler)
        await client.remove_label_from_issue("octo", "repo", 5, "status:in progress")
        await client.aclose()

        assert seen[0].method == "DELETE"
        assert seen[0].url.raw_path.decode() == "/repos/octo/repo/issues/5/labels/status%3Ain%20progress"

    @pytest.mark.asyncio
    async def test_remove_assignees_sends_body(self):
        """Removing assignees is a DELETE with a JSON body."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=issue(5))

        client = make_client(handler)
        await client.remove_assignees_from_issue("octo", "repo", 5, ["octocat"])
        await client.aclose()

        assert seen[0].method == "DELETE"
        assert json.loads(seen[0].content) == {"assignees": ["octocat"]}

    @pytest.mark.asyncio
    async def test_create_comment(self):
        """Comments are posted with a body field."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 9, "body": "hi"})

        client = make_client(handler)
        result = await client.create_comment("octo", "repo", 5, "hi")
        await client.aclose()

        assert result["id"] == 9
        assert seen[0].url.path == "/repos/octo/repo/issues/5/comments"
        assert json.loads(seen[0].content) == {"body": "hi"}
