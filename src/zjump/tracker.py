"""Update operation: record a directory visit and age the database.

The update is a chain of pure stages over a record list:

    visit()       bump or append the visited path
    total_rank()  sum of ranks after the bump
    age()         when the sum exceeds MAX_TOTAL_RANK, scale every rank by
                  AGING_FACTOR and drop records that fall below RANK_FLOOR

record_visit() wires them to path resolution and the RecordStore.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from zjump.errors import InvalidPath
from zjump.models import Record
from zjump.paths import resolve_path, strip_trailing_sep
from zjump.store import RecordStore, read_legacy

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from zjump.config import ZConfig

logger = logging.getLogger("zjump.tracker")

MAX_TOTAL_RANK = 9000
AGING_FACTOR = 0.99
RANK_FLOOR = 1.0


@dataclass
class VisitResult:
    """Outcome of one update."""

    path: str
    recorded: bool                  # False when the path is home or excluded
    rank: float = 0.0               # rank of the visited path after the update
    total: float = 0.0              # total rank before aging
    aged: bool = False
    dropped: list[str] = field(default_factory=list)


def visit(records: Iterable[Record], path: str, now: int) -> list[Record]:
    """Return `records` with one visit to `path` at `now` applied."""
    updated: list[Record] = []
    found = False
    for record in records:
        if record.path == path:
            record = record.visited(now)
            found = True
        updated.append(record)
    if not found:
        updated.append(Record(path=path, rank=1.0, time=now))
    return updated


def total_rank(records: Iterable[Record]) -> float:
    return sum(r.rank for r in records)


def age(
    records: Iterable[Record],
    factor: float = AGING_FACTOR,
    floor: float = RANK_FLOOR,
) -> tuple[list[Record], list[str]]:
    """Scale every rank by `factor`; drop records whose rank ends below `floor`.

    Returns the surviving records and the paths that were dropped.
    """
    kept: list[Record] = []
    dropped: list[str] = []
    for record in records:
        scaled = record.scaled(factor)
        if scaled.rank < floor:
            dropped.append(record.path)
        else:
            kept.append(scaled)
    return kept, dropped


def update(records: Iterable[Record], path: str, now: int) -> tuple[list[Record], VisitResult]:
    """Apply a visit plus aging to `records` without touching disk."""
    visited = visit(records, path, now)
    total = total_rank(visited)
    rank = next(r.rank for r in visited if r.path == path)
    result = VisitResult(path=path, recorded=True, rank=rank, total=total)
    if total > MAX_TOTAL_RANK:
        visited, result.dropped = age(visited)
        result.aged = True
        result.rank = next((r.rank for r in visited if r.path == path), 0.0)
    return visited, result


def record_visit(
    cfg: ZConfig,
    path: str | Path,
    now: int | None = None,
    store: RecordStore | None = None,
) -> VisitResult:
    """Record a visit to directory `path` in the configured data file.

    Raises InvalidPath (store untouched) if `path` cannot be resolved.
    """
    resolved = resolve_path(path, resolve_symlinks=cfg.resolve_symlinks)
    if cfg.is_excluded(resolved):
        logger.debug("not recording excluded directory %s", resolved)
        return VisitResult(path=resolved, recorded=False)

    store = store or RecordStore.from_config(cfg)
    now = int(time.time()) if now is None else now
    records, result = update(store.load(), resolved, now)
    if result.aged:
        logger.info(
            "aged database: total rank %.2f > %d, dropped %d records",
            result.total, MAX_TOTAL_RANK, len(result.dropped),
        )
    store.save(records)
    logger.debug("recorded %s (rank %.2f)", resolved, result.rank)
    return result


def forget(records: Iterable[Record], path: str) -> tuple[list[Record], bool]:
    """Remove `path` from `records`. Returns the remaining records and whether it was present."""
    records = list(records)
    kept = [r for r in records if r.path != path]
    return kept, len(kept) != len(records)


def remove_path(cfg: ZConfig, path: str, store: RecordStore | None = None) -> bool:
    """Delete the record for `path` from the data file. True if one existed."""
    try:
        target = resolve_path(path, resolve_symlinks=cfg.resolve_symlinks)
    except InvalidPath:
        # The directory may be gone already; match on the literal path.
        target = strip_trailing_sep(os.path.abspath(os.path.expanduser(path)))

    store = store or RecordStore.from_config(cfg)
    kept, removed = forget(store.load(), target)
    if removed:
        store.save(kept)
        logger.info("removed %s", target)
    return removed


def merge(records: Iterable[Record], incoming: Iterable[Record]) -> list[Record]:
    """Fold `incoming` into `records`: ranks add up, the newest time wins."""
    by_path = {r.path: r for r in records}
    for record in incoming:
        seen = by_path.get(record.path)
        if seen is not None:
            record = Record(record.path, seen.rank + record.rank, max(seen.time, record.time))
        by_path[record.path] = record
    return list(by_path.values())


def import_legacy(cfg: ZConfig, source: Path, store: RecordStore | None = None) -> tuple[int, int]:
    """Merge a pipe-delimited data file into the store.

    Returns (records imported, malformed lines skipped).
    """
    incoming, skipped = read_legacy(source)
    store = store or RecordStore.from_config(cfg)
    store.save(merge(store.load(), incoming))
    logger.info("imported %d records from %s (%d skipped)", len(incoming), source, skipped)
    return len(incoming), skipped
