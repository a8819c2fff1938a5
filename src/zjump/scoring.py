"""Frecency scoring for directory records.

Three ranking policies:

    FRECENCY  rank weighted by how long ago the directory was visited (default)
    RANK      raw accumulated rank
    RECENT    seconds since the last visit; the smallest value is the best

Callers never compare scores directly: Policy.is_better knows which direction
wins, so the inverted scale of RECENT stays in one place.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zjump.models import Record

HOUR = 3600
DAY = 86400
WEEK = 604800


class Policy(str, Enum):
    """Ranking policy used when scoring matches."""

    FRECENCY = "frecency"
    RANK = "rank"
    RECENT = "recent"

    @classmethod
    def from_flags(cls, rank_only: bool = False, recent_only: bool = False) -> Policy:
        """Map the CLI's mutually exclusive flags onto a policy."""
        if rank_only and recent_only:
            msg = "rank-only and recent-only ranking are mutually exclusive"
            raise ValueError(msg)
        if rank_only:
            return cls.RANK
        if recent_only:
            return cls.RECENT
        return cls.FRECENCY

    @property
    def lower_is_better(self) -> bool:
        return self is Policy.RECENT

    def is_better(self, candidate: float, current: float | None) -> bool:
        """True if `candidate` beats `current` (None means nothing seen yet).

        Ties keep the current best.
        """
        if current is None:
            return True
        if self.lower_is_better:
            return candidate < current
        return candidate > current


def frecency(rank: float, age: float) -> float:
    """Weight `rank` by the `age` in seconds of the last visit."""
    if age < HOUR:
        return rank * 4
    if age < DAY:
        return rank * 2
    if age < WEEK:
        return rank / 2
    return rank / 4


def score(record: Record, now: int, policy: Policy = Policy.FRECENCY) -> float:
    """Comparable score of `record` at time `now` under `policy`."""
    if policy is Policy.RANK:
        return record.rank
    if policy is Policy.RECENT:
        return now - record.time
    return frecency(record.rank, now - record.time)
