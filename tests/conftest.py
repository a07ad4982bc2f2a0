"""Shared test configuration and fixtures for ChangeForge test suite."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add backend to Python path so imports work
backend_dir = str(Path(__file__).parent.parent / "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from changeforge.models.forge import Branch, CommitRecord, CommitRef, Repository, Tag  # noqa: E402


def make_tag(name: str, sha: str | None = None) -> Tag:
    return Tag(name=name, commit=CommitRef(sha=sha or f"sha-{name}"))


def make_branch(name: str, sha: str) -> Branch:
    return Branch(name=name, commit=CommitRef(sha=sha))


def make_commit(message: str, sha: str = "c0ffee", date: datetime | None = None) -> CommitRecord:
    return CommitRecord(
        sha=sha,
        message=message,
        committer_date=date or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def repository():
    return Repository(
        owner="acme",
        name="widgets",
        full_name="acme/widgets",
        html_url="https://github.com/acme/widgets",
        default_branch="main",
    )
