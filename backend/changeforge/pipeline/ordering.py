"""
ChangeForge — Version ordering for tag names.

Tags are compared by the numeric runs embedded in their names, so
"asset-version-1.0.2" and "v1.0.2" are the same version. Where one
sequence is a prefix of the other, the shorter one sorts first:
"1.2.3" < "1.2.3.4".
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable

from changeforge.models.forge import Tag

_DIGITS = re.compile(r"\d+")


def version_segments(name: str) -> tuple[int, ...]:
    """Numeric segments of a tag name, e.g. "v1.0.2" -> (1, 0, 2)."""
    return tuple(int(d) for d in _DIGITS.findall(name))


def compare_tags(a: str, b: str) -> int:
    """Return -1, 0 or 1 ordering two tag names by version."""
    va, vb = version_segments(a), version_segments(b)
    for x, y in zip(va, vb):
        if x != y:
            return -1 if x < y else 1
    return (len(va) > len(vb)) - (len(va) < len(vb))


def sort_tags_newest_first(tags: Iterable[Tag]) -> list[Tag]:
    # sorted() is stable under reverse=True, equal versions keep input order
    by_name = cmp_to_key(compare_tags)
    return sorted(tags, key=lambda t: by_name(t.name), reverse=True)
