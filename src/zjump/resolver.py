"""Common-root resolution for a match set."""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

from zjump.paths import is_bare_root

if TYPE_CHECKING:
    from collections.abc import Iterable

    from zjump.matcher import MatchResult


def common_root(paths: Iterable[str], pattern: re.Pattern[str] | None = None) -> str | None:
    """Directory prefix shared by every path, or None.

    The shortest path is tried first; if it is not a prefix of all the
    others, the deepest directory they share is used instead, provided it
    still matches `pattern` (when given). Bare filesystem or drive roots
    never count.
    """
    keys = list(paths)
    if not keys:
        return None

    shortest = min(keys, key=len)
    if is_bare_root(shortest):
        return None
    if all(k.startswith(shortest) for k in keys):
        return shortest

    try:
        shared = os.path.commonpath(keys)
    except ValueError:
        return None  # mixed absolute/relative or different drives
    if not shared or is_bare_root(shared):
        return None
    if pattern is not None and not pattern.search(shared):
        return None
    return shared


def choose_target(result: MatchResult) -> str:
    """The directory to jump to: the common root if any, else the best match."""
    pattern = None
    if result.pattern:
        pattern = re.compile(result.pattern, 0 if result.case_sensitive else re.IGNORECASE)
    return common_root(result.matches, pattern) or result.best
