"""ChangeForge data models — typed contracts for the entire pipeline."""

from changeforge.models.forge import (
    Branch,
    CommitRecord,
    CommitRef,
    ExistingDocument,
    FileContentRequest,
    Repository,
    Tag,
)
from changeforge.models.changelog import (
    ChangelogConfig,
    ChangelogDocument,
    ChangelogEntry,
    Range,
)
from changeforge.models.job import (
    PublishResult,
    PublishState,
    SectionSummary,
    StepTiming,
)

__all__ = [
    "Branch",
    "CommitRecord",
    "CommitRef",
    "ExistingDocument",
    "FileContentRequest",
    "Repository",
    "Tag",
    "ChangelogConfig",
    "ChangelogDocument",
    "ChangelogEntry",
    "Range",
    "PublishResult",
    "PublishState",
    "SectionSummary",
    "StepTiming",
]
