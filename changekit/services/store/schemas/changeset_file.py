"""Changeset record as stored in .changesets/{timestamp}-pr-{pr}.md."""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

CHANGE_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
    "other",
)


class ChangesetRecord(BaseModel):
    """One accepted change: metadata block plus free-text description."""

    title: str = Field(..., min_length=1, description="PR title, e.g. 'feat: add widget'")
    pr: int = Field(..., gt=0, description="Pull request number")
    author: str = Field(..., min_length=1, description="PR author login")
    type: str = Field(default="other", description="Change type token (feat, fix, ...) or free-form")
    breaking: bool = Field(default=False, description="Breaks backward compatibility")
    branch: str | None = Field(default=None, description="Branch the changeset was authored on")
    description: str = Field(default="", description="Body; falls back to the title")
    filename: str | None = Field(
        default=None,
        description="File name in the changesets dir; set by the store, never serialized",
    )

    model_config = {"extra": "ignore", "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _default_description(cls, data: Any) -> Any:
        if isinstance(data, dict):
            description = data.get("description")
            if description is None or not str(description).strip():
                data = {**data, "description": data.get("title") or ""}
        return data

    @field_validator("title", "author", mode="before")
    @classmethod
    def _strip_required(cls, value: Any) -> Any:
        # YAML may hand back ints or dates for unquoted scalars
        if value is None or isinstance(value, (dict, list)):
            return value
        return str(value).strip()

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            return "other"
        return str(value).strip()

    @field_validator("branch", mode="before")
    @classmethod
    def _empty_branch_is_none(cls, value: Any) -> str | None:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value: Any) -> str:
        return str(value).strip()

    def metadata(self) -> dict[str, Any]:
        """Fields written to the metadata block, in file order."""
        data: dict[str, Any] = {
            "title": self.title,
            "pr": self.pr,
            "author": self.author,
            "type": self.type,
            "breaking": self.breaking,
        }
        if self.branch is not None:
            data["branch"] = self.branch
        return data
