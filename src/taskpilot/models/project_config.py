"""Configuration models for taskpilot.yml."""

from pydantic import BaseModel, Field, field_validator

from .column_config import DEFAULT_STATUS_LABEL_PREFIX, ColumnConfigSet


class GitHubProjectConfig(BaseModel):
    """GitHub-specific section: status label prefix and column layout."""

    status_label_prefix: str = DEFAULT_STATUS_LABEL_PREFIX
    columns: ColumnConfigSet = Field(default_factory=ColumnConfigSet.default)

    @field_validator("columns", mode="before")
    @classmethod
    def empty_columns_use_default(cls, v):
        """An explicit empty list falls back to the default layout."""
        if v is None or (isinstance(v, list) and not v):
            return ColumnConfigSet.default()
        return v


class TaskPilotConfig(BaseModel):
    """Root configuration model for taskpilot.yml."""

    version: int = 1
    provider: str | None = None
    board: str | None = Field(
        default=None,
        description="Default board id (owner/repo for GitHub)",
    )
    github: GitHubProjectConfig = Field(default_factory=GitHubProjectConfig)

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str | None) -> str | None:
        if v is not None and v not in ("trello", "github"):
            raise ValueError(f"Unknown provider '{v}' (expected 'trello' or 'github')")
        return v

    @classmethod
    def default(cls) -> "TaskPilotConfig":
        return cls()
