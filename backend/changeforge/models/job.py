"""
ChangeForge — Publish result and run output contracts.

Every changelog run returns a PublishResult with full traceability:
timings, section counts, and the hash of the published document.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class PublishState(str, enum.Enum):
    RECEIVED = "RECEIVED"
    REPOSITORY_FOUND = "REPOSITORY_FOUND"
    EXISTING_DOC_CHECKED = "EXISTING_DOC_CHECKED"
    REFS_FETCHED = "REFS_FETCHED"
    RANGES_BUILT = "RANGES_BUILT"
    SECTIONS_RENDERED = "SECTIONS_RENDERED"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


class StepTiming(BaseModel):
    step: str
    duration_ms: int
    status: str = "ok"  # ok | skipped | failed
    detail: str = ""


class SectionSummary(BaseModel):
    title: str
    base_sha: str
    head_sha: str
    entries: int = 0


class PublishResult(BaseModel):
    """Complete output contract for every changelog run."""

    run_id: str
    repository: str
    path: str
    branch: str
    updated: bool = False  # True when an existing file was overwritten
    previous_sha: str | None = None
    content_hash: str = ""  # SHA-256 of the rendered Markdown
    size_bytes: int = 0
    url: str = ""
    sections: list[SectionSummary] = Field(default_factory=list)
    timings: list[StepTiming] = Field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return sum(s.entries for s in self.sections)
