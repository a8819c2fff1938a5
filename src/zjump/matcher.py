"""Match engine: turn pattern fragments into ranked directory matches.

Fragments are literal substrings that must appear in order:

    build_pattern(["foo", "bar"])   ->  foo.*bar
    build_pattern(["foo"], cwd="/src")  ->  ^/src.*foo

Every record is tried case-sensitively first. Only paths that miss are
retried case-insensitively, and the insensitive set is used only when the
sensitive one is empty.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from zjump.errors import NoMatch
from zjump.scoring import Policy, score

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from zjump.models import Record

logger = logging.getLogger("zjump.matcher")


def build_pattern(fragments: Sequence[str], cwd: str | None = None) -> str:
    """Join escaped fragments with `.*`; anchor under `cwd` when given."""
    pattern = ".*".join(re.escape(f) for f in fragments)
    if cwd is not None:
        prefix = "^" + re.escape(cwd)
        pattern = f"{prefix}.*{pattern}" if pattern else prefix
    return pattern


@dataclass
class _MatchSet:
    matches: dict[str, float] = field(default_factory=dict)
    best: str | None = None
    best_score: float | None = None

    def add(self, path: str, value: float, policy: Policy) -> None:
        self.matches[path] = value
        if policy.is_better(value, self.best_score):
            self.best = path
            self.best_score = value


@dataclass
class MatchResult:
    """The chosen match set and its best-scoring path."""

    matches: dict[str, float]
    best: str
    policy: Policy = Policy.FRECENCY
    case_sensitive: bool = True
    pattern: str = ""               # expression the matches were selected with

    def ranked(self) -> list[tuple[float, str]]:
        """(score, path) pairs ordered worst first, so the best entry is last."""
        return sorted(
            ((s, p) for p, s in self.matches.items()),
            key=lambda item: item[0],
            reverse=self.policy.lower_is_better,
        )


def match(
    records: Iterable[Record],
    fragments: Sequence[str],
    policy: Policy = Policy.FRECENCY,
    now: int = 0,
    cwd: str | None = None,
) -> MatchResult:
    """Score and match `records` against `fragments`.

    Raises NoMatch if no path matches, in either case mode.
    """
    pattern = build_pattern(fragments, cwd)
    exact = re.compile(pattern)
    folded = re.compile(pattern, re.IGNORECASE)

    sensitive = _MatchSet()
    insensitive = _MatchSet()
    for record in records:
        value = score(record, now, policy)
        if exact.search(record.path):
            sensitive.add(record.path, value, policy)
        elif folded.search(record.path):
            insensitive.add(record.path, value, policy)

    if sensitive.best is not None:
        chosen, case_sensitive = sensitive, True
    elif insensitive.best is not None:
        chosen, case_sensitive = insensitive, False
    else:
        raise NoMatch(fragments)

    logger.debug(
        "pattern %r: %d match(es), case %s, best %s",
        pattern, len(chosen.matches), "sensitive" if case_sensitive else "insensitive", chosen.best,
    )
    return MatchResult(
        matches=chosen.matches,
        best=chosen.best,
        policy=policy,
        case_sensitive=case_sensitive,
        pattern=pattern,
    )


def complete(records: Iterable[Record], query: str) -> list[str]:
    """Paths matching a completion query, smart-case.

    Words in `query` are fragments; matching ignores case unless the query
    contains an uppercase letter.
    """
    pattern = build_pattern(query.split())
    flags = 0 if any(c.isupper() for c in query) else re.IGNORECASE
    compiled = re.compile(pattern, flags)
    return [r.path for r in records if compiled.search(r.path)]
