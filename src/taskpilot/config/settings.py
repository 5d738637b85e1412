"""Application settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from ..errors import AuthConfigMissingError
from ..models import Credentials, GitHubAuth, TrelloApiKeyAuth, TrelloOAuthAuth


class Settings(BaseSettings):
    """Application settings."""

    provider: Literal["trello", "github"] | None = Field(
        default=None,
        description="Backend to use (falls back to taskpilot.yml)",
    )

    project_root: Path = Field(
        default=Path(),
        description="Path to project root containing taskpilot.yml",
    )

    trello_api_key: str | None = None
    trello_token: str | None = None
    trello_org_api_key: str | None = None
    trello_auth_mode: Literal["apikey", "oauth"] = "apikey"

    github_token: str | None = None
    github_auth_type: Literal["pat", "oauth"] = "pat"

    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout in seconds",
    )

    max_concurrency: int = Field(
        default=10,
        ge=1,
        description="Maximum vendor requests in flight",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    debug: bool = Field(
        default=False,
        description="Include raw vendor error bodies in error output",
    )

    model_config = {
        "env_prefix": "TASKPILOT_",
    }


def credentials_from_settings(settings: Settings, provider: str) -> Credentials:
    """Build the credential object for ``provider`` from settings.

    Raises:
        AuthConfigMissingError: The required secrets are not configured.
    """
    if provider == "github":
        if not settings.github_token:
            raise AuthConfigMissingError("GitHub token not configured (TASKPILOT_GITHUB_TOKEN)")
        return GitHubAuth(type=settings.github_auth_type, token=settings.github_token)

    if provider == "trello":
        if settings.trello_auth_mode == "oauth":
            if not settings.trello_token or not settings.trello_org_api_key:
                raise AuthConfigMissingError(
                    "Trello OAuth needs TASKPILOT_TRELLO_TOKEN and TASKPILOT_TRELLO_ORG_API_KEY"
                )
            return TrelloOAuthAuth(
                token=settings.trello_token, org_api_key=settings.trello_org_api_key
            )
        if not settings.trello_api_key or not settings.trello_token:
            raise AuthConfigMissingError(
                "Trello needs TASKPILOT_TRELLO_API_KEY and TASKPILOT_TRELLO_TOKEN"
            )
        return TrelloApiKeyAuth(api_key=settings.trello_api_key, token=settings.trello_token)

    raise AuthConfigMissingError(f"No credentials known for provider '{provider}'")
