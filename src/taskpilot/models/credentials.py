"""Credential objects consumed by the vendor clients.

Each credential shape carries a ``type`` discriminator so a credential can
be narrowed with ``isinstance`` or validated from a plain dict.
"""

from typing import Literal

from pydantic import BaseModel, Field


class TrelloApiKeyAuth(BaseModel):
    """Trello developer API key plus user token."""

    type: Literal["apikey"] = "apikey"
    api_key: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)


class TrelloOAuthAuth(BaseModel):
    """Trello OAuth token, sent with the organization's API key."""

    type: Literal["oauth"] = "oauth"
    token: str = Field(..., min_length=1)
    org_api_key: str = Field(..., min_length=1)


class GitHubAuth(BaseModel):
    """GitHub personal access token or OAuth token.

    Both are sent the same way, as a bearer token.
    """

    type: Literal["pat", "oauth"] = "pat"
    token: str = Field(..., min_length=1)


Credentials = TrelloApiKeyAuth | TrelloOAuthAuth | GitHubAuth
TrelloAuth = TrelloApiKeyAuth | TrelloOAuthAuth
