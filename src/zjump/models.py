"""Data model for the directory database."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any

# Field names of the on-disk table, in write order.
FIELDS = ("path", "rank", "time")


def format_rank(rank: float) -> str:
    """Render a rank for the data file: "3" for whole ranks, "2.97" otherwise."""
    if float(rank).is_integer():
        return str(int(rank))
    return repr(float(rank))


@dataclass(frozen=True)
class Record:
    """One visited directory: its path, accumulated rank and last access time."""

    path: str
    rank: float = 1.0
    time: int = 0                  # seconds since epoch of the last visit

    def __post_init__(self) -> None:
        if not self.path:
            msg = "record path must not be empty"
            raise ValueError(msg)
        if not math.isfinite(self.rank) or self.rank < 0:
            msg = f"record rank must be a finite number >= 0, got {self.rank!r} for {self.path}"
            raise ValueError(msg)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Record:
        """Build a record from a table row; raises KeyError/ValueError on bad data."""
        seconds = float(row["time"])
        if not math.isfinite(seconds):
            msg = f"record time must be a finite number, got {row['time']!r}"
            raise ValueError(msg)
        return cls(path=row["path"], rank=float(row["rank"]), time=int(seconds))

    def to_row(self) -> dict[str, str]:
        return {
            "path": self.path,
            "rank": format_rank(self.rank),
            "time": str(self.time),
        }

    def visited(self, now: int) -> Record:
        """Return this record after one more visit at `now`."""
        return replace(self, rank=self.rank + 1, time=now)

    def scaled(self, factor: float) -> Record:
        return replace(self, rank=self.rank * factor)
