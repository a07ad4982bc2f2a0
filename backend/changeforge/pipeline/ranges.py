"""
ChangeForge — Commit range selection.

Turns the repository's tags (plus the integration branch, when present)
into the ranges summarised by the changelog, newest first:

  upcoming  : newest tag     → integration branch tip
  <tag N>   : tag N-1        → tag N
  ...
  <tag 2>   : tag 1          → tag 2

The oldest tag only ever appears as a base.
"""

from __future__ import annotations

from typing import Iterable

from changeforge.models.changelog import UPCOMING_TITLE, Range
from changeforge.models.forge import Branch, Tag
from changeforge.pipeline.ordering import sort_tags_newest_first


def select_ranges(tags: Iterable[Tag], integration_branch: Branch | None = None) -> list[Range]:
    ordered = sort_tags_newest_first(tags)
    if not ordered:
        return []

    ranges: list[Range] = []
    if integration_branch is not None:
        ranges.append(
            Range(title=UPCOMING_TITLE, base=ordered[0].commit, head=integration_branch.commit)
        )

    for i in range(len(ordered) - 1):
        head, base = ordered[i], ordered[i + 1]
        ranges.append(Range(title=head.name, base=base.commit, head=head.commit))

    return ranges


def find_branch(branches: Iterable[Branch], name: str) -> Branch | None:
    """Exact-name lookup; None when the branch does not exist."""
    for branch in branches:
        if branch.name == name:
            return branch
    return None
