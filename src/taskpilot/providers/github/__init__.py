"""GitHub Issues provider."""

from .client import GITHUB_API_URL, GITHUB_API_VERSION, GitHubClient
from .mapper import GitHubMapper
from .provider import GitHubProvider, IssueRef, parse_repo_id

__all__ = [
    "GITHUB_API_URL",
    "GITHUB_API_VERSION",
    "GitHubClient",
    "GitHubMapper",
    "GitHubProvider",
    "IssueRef",
    "parse_repo_id",
]
