"""
ChangeForge — Changelog run options and intermediate values.

ChangelogConfig is validated once at the start of a run; every pipeline
step works against these typed values.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from changeforge.models.forge import CommitRef

DEFAULT_HOST = "github.com"
INTEGRATION_BRANCH = "integration"
UPCOMING_TITLE = "upcoming"


class ChangelogConfig(BaseModel):
    """Caller-supplied options for one changelog run."""

    host: str = Field(default=DEFAULT_HOST, min_length=1)
    owner: str = Field(min_length=1)
    repository: str = Field(min_length=1)
    changelog_branch: str = Field(min_length=1)
    changelog_path: str = Field(min_length=1)
    parse_jira_references: bool = False
    jira_url: str | None = None
    integration_branch: str = Field(default=INTEGRATION_BRANCH, min_length=1)

    @field_validator("changelog_path")
    @classmethod
    def strip_leading_slash(cls, v: str) -> str:
        v = v.lstrip("/")
        if not v:
            raise ValueError("changelog_path must name a file")
        return v

    @field_validator("jira_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v

    @model_validator(mode="after")
    def jira_url_required(self) -> ChangelogConfig:
        if self.parse_jira_references and not self.jira_url:
            raise ValueError("jira_url is required when parse_jira_references is enabled")
        return self


class Range(BaseModel):
    """One release's worth of commits: base (older) to head (newer)."""

    model_config = ConfigDict(frozen=True)

    title: str
    base: CommitRef
    head: CommitRef


class ChangelogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    pr_number: str
    title: str


class ChangelogDocument(BaseModel):
    markdown_text: str
    existing_sha: str | None = None
