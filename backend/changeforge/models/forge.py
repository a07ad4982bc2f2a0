"""
ChangeForge — Typed GitHub data model.

The GitHub client converts raw API payloads into these models at the
boundary. No raw dicts leak into the changelog pipeline.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CommitRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str = Field(min_length=1)


class Tag(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    commit: CommitRef

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Tag:
        return cls(name=data["name"], commit=CommitRef(sha=data["commit"]["sha"]))


class Branch(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    commit: CommitRef

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Branch:
        return cls(name=data["name"], commit=CommitRef(sha=data["commit"]["sha"]))


class CommitRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    sha: str
    message: str
    committer_date: datetime

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CommitRecord:
        commit = data["commit"]
        return cls(
            sha=data["sha"],
            message=commit.get("message") or "",
            committer_date=commit["committer"]["date"],
        )


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    full_name: str
    html_url: str = ""
    default_branch: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Repository:
        return cls(
            owner=data["owner"]["login"],
            name=data["name"],
            full_name=data.get("full_name") or f"{data['owner']['login']}/{data['name']}",
            html_url=data.get("html_url", ""),
            default_branch=data.get("default_branch", ""),
        )


class ExistingDocument(BaseModel):
    """A file already present on the target branch. `sha` is the update token."""

    path: str
    sha: str
    content: str = ""


class FileContentRequest(BaseModel):
    """Body of a contents PUT call; updates if `sha` is present."""

    message: str
    content: str  # base64
    branch: str
    sha: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
