"""
ChangeForge — Markdown changelog renderer.

Document layout:

  ## Change Log

  ### upcoming (2024-05-02 09:30:00 UTC)
  - [#42](https://github.com/acme/widgets/pull/42) Add feature Z

  ### v1.1.0 (2024-04-18 16:03:11 UTC)
  ...
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from changeforge.models.changelog import ChangelogEntry

NEW_LINE = "\n"
CHANGELOG_TITLE = "## Change Log" + NEW_LINE
RELEASE_HEADING = "###"


def pull_request_url(host: str, owner: str, repository: str) -> str:
    """Base URL that a PR number is appended to."""
    return f"https://{host}/{owner}/{repository}/pull/"


def format_commit_date(value: datetime) -> str:
    """Locale-independent UTC timestamp. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def render_entry(entry: ChangelogEntry, pr_url: str) -> str:
    return f"- [#{entry.pr_number}]({pr_url}{entry.pr_number}) {entry.title}{NEW_LINE}"


def render_section(
    title: str,
    committer_date: datetime,
    entries: Iterable[ChangelogEntry],
    pr_url: str,
) -> str:
    lines = [f"{NEW_LINE}{RELEASE_HEADING} {title} ({format_commit_date(committer_date)}){NEW_LINE}"]
    lines.extend(render_entry(e, pr_url) for e in entries)
    return "".join(lines)


def render_document(sections: Iterable[str]) -> str:
    return CHANGELOG_TITLE + "".join(sections)
