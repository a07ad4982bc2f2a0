"""
ChangeForge — Issue tracker reference annotation.

Rewrites JIRA-style keys (three letters, hyphen, digits) as Markdown
links into the tracker:  ABC-123 → [ABC-123](<jira_url>/browse/ABC-123)
"""

from __future__ import annotations

import re

ISSUE_KEY = re.compile(r"[A-Za-z]{3}-\d+")


def annotate_references(text: str, enabled: bool, base_url: str | None) -> str:
    if not enabled or not base_url:
        return text

    base_url = base_url.rstrip("/")
    # each key links to itself, so "ABC-1 and DEF-2" keeps both keys distinct
    return ISSUE_KEY.sub(lambda m: f"[{m.group(0)}]({base_url}/browse/{m.group(0)})", text)
