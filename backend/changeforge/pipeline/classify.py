"""
ChangeForge — Merge-commit classification.

Only GitHub-style pull request merges become changelog entries:

  Merge pull request #42 from owner/feature-branch
  <blank line>
  Add feature Z
  <blank line>
  (anything further is ignored)

Direct pushes, squash merges and rebases are skipped without error.
"""

from __future__ import annotations

from typing import Iterable

from changeforge.models.changelog import ChangelogEntry
from changeforge.models.forge import CommitRecord

MERGE_PREFIX = "Merge pull request #"
PARAGRAPH_BREAK = "\n\n"


def classify_commit(message: str) -> ChangelogEntry | None:
    """Extract a ChangelogEntry from a merge commit message, or None."""
    if not message.startswith(MERGE_PREFIX):
        return None

    parts = message.split(PARAGRAPH_BREAK)
    if len(parts) < 2 or not parts[1]:
        return None
    merge_line, title = parts[0], parts[1]

    after_hash = merge_line.split("#", 1)[1]
    if " " not in after_hash:
        return None
    pr_number = after_hash.split(" ", 1)[0]
    if not pr_number:
        return None

    return ChangelogEntry(pr_number=pr_number, title=title)


def extract_entries(commits: Iterable[CommitRecord]) -> list[ChangelogEntry]:
    """Entries for the qualifying commits, in comparison order."""
    entries = []
    for commit in commits:
        entry = classify_commit(commit.message)
        if entry is not None:
            entries.append(entry)
    return entries
