"""GitHub REST API client."""

from __future__ import annotations

import logging
import math
from typing import Any, Literal
from urllib.parse import quote

import httpx

from ...errors import RateLimitError, TaskPilotError
from ...models.credentials import GitHubAuth
from ...utils.datetime import now_utc
from ...utils.rate_limiter import ConcurrencyLimiter
from ..http import DEFAULT_TIMEOUT, BaseAPIClient, parse_int_header

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
PAGE_SIZE = 100

IssueState = Literal["open", "closed", "all"]


class GitHubClient(BaseAPIClient):
    """GitHub REST API client.

    Provides a thin wrapper around the GitHub REST API with:
    - Bearer token authentication
    - Full pagination draining for list endpoints
    - Rate limit detection on 403 responses
    """

    vendor = "GitHub"

    def __init__(
        self,
        auth: GitHubAuth,
        base_url: str = GITHUB_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        limiter: ConcurrencyLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the GitHub client.

        Args:
            auth: Token credential (PAT or OAuth)
            base_url: API base URL (use a custom one for Enterprise)
            timeout: Per-request timeout in seconds
            limiter: Concurrency gate (default: the process-wide gate)
            transport: Optional httpx transport, used by tests
        """
        self.auth = auth
        super().__init__(
            base_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Content-Type": "application/json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            timeout=timeout,
            limiter=limiter,
            transport=transport,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.auth.token}"}

    def classify_error(self, response: httpx.Response) -> TaskPilotError:
        # Primary rate limit: 403 with no remaining quota
        if (
            response.status_code == 403
            and response.headers.get("X-RateLimit-Remaining") == "0"
        ):
            reset = parse_int_header(response.headers.get("X-RateLimit-Reset"))
            retry_after = (
                max(0, math.ceil(reset - now_utc().timestamp())) if reset is not None else None
            )
            return RateLimitError(retry_after)
        return super().classify_error(response)

    async def _drain(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Fetch every page of a list endpoint, in vendor order."""
        items: list[Any] = []
        page = 1
        while True:
            data = await self.get(path, params={**(params or {}), "per_page": PAGE_SIZE, "page": page})
            items.extend(data)
            if len(data) < PAGE_SIZE:
                break
            page += 1
        logger.debug("Drained %d items from %s in %d page(s)", len(items), path, page)
        return items

    # --- Users ---

    async def get_me(self) -> dict[str, Any]:
        return await self.get("/user")

    # --- Repositories ---

    async def list_user_repos(self) -> list[dict[str, Any]]:
        return await self._drain(
            "/user/repos", {"type": "all", "sort": "updated", "direction": "desc"}
        )

    async def list_org_repos(self, org: str) -> list[dict[str, Any]]:
        return await self._drain(
            f"/orgs/{org}/repos", {"type": "all", "sort": "updated", "direction": "desc"}
        )

    async def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        return await self.get(f"/repos/{owner}/{repo}")

    async def list_labels(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return await self._drain(f"/repos/{owner}/{repo}/labels")

    async def list_collaborators(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return await self._drain(f"/repos/{owner}/{repo}/collaborators")

    # --- Issues ---

    async def list_issues(
        self, owner: str, repo: str, state: IssueState = "open"
    ) -> list[dict[str, Any]]:
        """List issues, excluding pull requests (the endpoint returns both)."""
        items = await self._drain(
            f"/repos/{owner}/{repo}/issues",
            {"state": state, "filter": "all", "sort": "updated", "direction": "desc"},
        )
        return [item for item in items if "pull_request" not in item]

    async def get_issue(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        return await self.get(f"/repos/{owner}/{repo}/issues/{number}")

    async def create_issue(self, owner: str, repo: str, params: dict[str, Any]) -> dict[str, Any]:
        return await self.post(f"/repos/{owner}/{repo}/issues", json=params)

    async def update_issue(
        self, owner: str, repo: str, number: int, params: dict[str, Any]
    ) -> dict[str, Any]:
        return await self.patch(f"/repos/{owner}/{repo}/issues/{number}", json=params)

    async def close_issue(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        return await self.update_issue(owner, repo, number, {"state": "closed"})

    async def reopen_issue(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        return await self.update_issue(owner, repo, number, {"state": "open"})

    # --- Issue labels ---

    async def add_labels_to_issue(
        self, owner: str, repo: str, number: int, labels: list[str]
    ) -> list[dict[str, Any]]:
        return await self.post(f"/repos/{owner}/{repo}/issues/{number}/labels", json={"labels": labels})

    async def remove_label_from_issue(
        self, owner: str, repo: str, number: int, label_name: str
    ) -> None:
        await self.delete(f"/repos/{owner}/{repo}/issues/{number}/labels/{quote(label_name, safe='')}")

    # --- Issue assignees ---

    async def add_assignees_to_issue(
        self, owner: str, repo: str, number: int, assignees: list[str]
    ) -> dict[str, Any]:
        return await self.post(
            f"/repos/{owner}/{repo}/issues/{number}/assignees", json={"assignees": assignees}
        )

    async def remove_assignees_from_issue(
        self, owner: str, repo: str, number: int, assignees: list[str]
    ) -> dict[str, Any]:
        return await self.delete(
            f"/repos/{owner}/{repo}/issues/{number}/assignees", json={"assignees": assignees}
        )

    # --- Comments ---

    async def list_comments(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        return await self._drain(f"/repos/{owner}/{repo}/issues/{number}/comments")

    async def create_comment(self, owner: str, repo: str, number: int, body: str) -> dict[str, Any]:
        return await self.post(f"/repos/{owner}/{repo}/issues/{number}/comments", json={"body": body})
