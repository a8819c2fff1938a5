"""Read and write the directory database.

RecordStore is the public API:
    store = RecordStore(Path("~/.z").expanduser())
    records = store.load()
    store.save(records)

Data file layout (CSV, one record per row):

    path,rank,time
    /home/alice/src/zjump,14,1760000000
    /home/alice/Downloads,2.97,1759000000

save() never writes in place: rows go to a sibling temp file which then
replaces the data file, so a crash mid-write leaves the previous file intact.
"""

from __future__ import annotations

import csv
import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from zjump.errors import StoreIsDirectory, StoreUnreadable
from zjump.models import FIELDS, Record

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import TextIO

    from zjump.config import ZConfig

logger = logging.getLogger("zjump.store")


class RecordStore:
    """CSV-backed store of directory records."""

    def __init__(self, path: Path | str, *, owner: str | None = None) -> None:
        self.path = Path(path)
        self.owner = owner

    @classmethod
    def from_config(cls, cfg: ZConfig) -> RecordStore:
        return cls(cfg.data_file, owner=cfg.owner)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def load(self) -> list[Record]:
        """Load all records. A missing data file is created empty."""
        path = self.path
        if path.is_dir():
            raise StoreIsDirectory(path)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch()
            logger.info("created empty data file %s", path)
            return []

        try:
            with path.open(newline="", encoding="utf-8") as f:
                records = self._parse(f)
        except UnicodeDecodeError as exc:
            raise StoreUnreadable(path, "not valid UTF-8") from exc
        except csv.Error as exc:
            raise StoreUnreadable(path, str(exc)) from exc
        except OSError as exc:
            raise StoreUnreadable(path, exc.strerror or str(exc)) from exc

        logger.debug("loaded %d records from %s", len(records), path)
        return records

    def _parse(self, f: TextIO) -> list[Record]:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return []  # zero-byte file

        missing = [name for name in FIELDS if name not in reader.fieldnames]
        if missing:
            if any("|" in name for name in reader.fieldnames):
                reason = "looks like a classic z (path|rank|time) file; move it aside and run `zjump import-z` on it"
                raise StoreUnreadable(self.path, reason)
            raise StoreUnreadable(self.path, f"missing column(s): {', '.join(missing)}")

        by_path: dict[str, Record] = {}
        for row in reader:
            try:
                record = Record.from_row(row)
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreUnreadable(self.path, f"line {reader.line_num}: {exc}") from exc
            seen = by_path.get(record.path)
            if seen is not None:
                # Duplicate rows (e.g. hand edits) collapse into one record.
                record = Record(record.path, seen.rank + record.rank, max(seen.time, record.time))
            by_path[record.path] = record
        return list(by_path.values())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, records: Iterable[Record]) -> None:
        """Atomically replace the data file with `records`."""
        path = self.path
        if path.is_dir():
            raise StoreIsDirectory(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write to tmp then rename for atomicity
        tmp = path.with_name(f"{path.name}.{os.getpid()}.tmp")
        count = 0
        try:
            with tmp.open("w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=FIELDS, lineterminator="\n")
                writer.writeheader()
                for record in records:
                    writer.writerow(record.to_row())
                    count += 1
                f.flush()
                os.fsync(f.fileno())
            self._chown(tmp)
            tmp.replace(path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("saved %d records to %s", count, path)

    def _chown(self, tmp: Path) -> None:
        """Hand the file back to the owner when running as root (sudo)."""
        if not self.owner or not hasattr(os, "geteuid") or os.geteuid() != 0:
            return
        import pwd

        try:
            entry = pwd.getpwnam(self.owner)
            shutil.chown(tmp, user=entry.pw_uid, group=entry.pw_gid)
        except (KeyError, OSError) as exc:
            logger.warning("could not chown %s to %s: %s", tmp, self.owner, exc)


def read_legacy(path: Path) -> tuple[list[Record], int]:
    """Parse a pipe-delimited `path|rank|time` file.

    Returns the records and the number of malformed lines skipped.
    """
    records: list[Record] = []
    skipped = 0
    with path.open(encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.rstrip("\n")
            if not line.strip():
                continue
            # Paths may contain "|", so split from the right.
            parts = line.rsplit("|", 2)
            if len(parts) != 3:
                skipped += 1
                continue
            try:
                records.append(Record.from_row(dict(zip(FIELDS, parts, strict=True))))
            except ValueError:
                skipped += 1
    return records, skipped
