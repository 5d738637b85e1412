"""GitHub Column Configuration models.

GitHub issues have no native column, only labels and an open/closed state.
A column configuration is the user-authored mapping that turns those into
an ordered set of workflow columns.
"""

from pydantic import BaseModel, Field, RootModel, field_validator, model_validator

from .task import TaskStatus

DEFAULT_STATUS_LABEL_PREFIX = "status:"


class ColumnConfig(BaseModel):
    """A single synthesized column.

    ``label_name`` is the status label that places an open issue in this
    column. ``is_closed_state`` marks the column holding closed issues.
    ``status`` pins the task status for this column; when omitted the
    status is inferred from the column name.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    label_name: str | None = None
    is_closed_state: bool = False
    status: TaskStatus | None = None

    @field_validator("label_name")
    @classmethod
    def validate_label_name(cls, v: str | None) -> str | None:
        """Label names must be non-empty when present."""
        if v is not None and not v.strip():
            raise ValueError("label_name cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_status(self) -> "ColumnConfig":
        """Only closed issues are done, so status must agree with the column kind."""
        if self.status is None:
            return self
        if self.is_closed_state and self.status != "done":
            raise ValueError("The closed-state column can only have status 'done'")
        if not self.is_closed_state and self.status not in ("open", "in_progress"):
            raise ValueError("Open columns can only have status 'open' or 'in_progress'")
        return self


class ColumnConfigSet(RootModel[list[ColumnConfig]]):
    """Ordered, validated list of column configurations."""

    root: list[ColumnConfig] = Field(default_factory=list)

    @field_validator("root")
    @classmethod
    def validate_columns(cls, v: list[ColumnConfig]) -> list[ColumnConfig]:
        """Validate cross-column constraints."""
        ids = [c.id for c in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Column IDs must be unique")

        if sum(1 for c in v if c.is_closed_state) > 1:
            raise ValueError("At most one column can be the closed state")

        label_names = [c.label_name for c in v if c.label_name is not None]
        if len(label_names) != len(set(label_names)):
            raise ValueError("Duplicate label_name found across columns")

        return v

    def __iter__(self):  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def get(self, column_id: str) -> ColumnConfig | None:
        for column in self.root:
            if column.id == column_id:
                return column
        return None

    @property
    def closed_column(self) -> ColumnConfig | None:
        for column in self.root:
            if column.is_closed_state:
                return column
        return None

    @property
    def default_column(self) -> ColumnConfig | None:
        """The bucket for open issues with no status label yet."""
        for column in self.root:
            if not column.is_closed_state and column.label_name is None:
                return column
        return None

    @property
    def label_names(self) -> set[str]:
        return {c.label_name for c in self.root if c.label_name is not None}

    def for_label(self, label_name: str) -> ColumnConfig | None:
        for column in self.root:
            if column.label_name == label_name:
                return column
        return None

    @classmethod
    def default(cls) -> "ColumnConfigSet":
        """Default three-column layout."""
        return cls(
            [
                ColumnConfig(id="todo", name="To Do"),
                ColumnConfig(
                    id="in_progress",
                    name="In Progress",
                    label_name=f"{DEFAULT_STATUS_LABEL_PREFIX}in-progress",
                    status="in_progress",
                ),
                ColumnConfig(id="done", name="Done", is_closed_state=True),
            ]
        )
