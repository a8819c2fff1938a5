"""Error taxonomy for zjump.

Every failure the library reports is a ZjumpError. The CLI turns these into
click exceptions; nothing here is retried.
"""

from __future__ import annotations

from pathlib import Path


class ZjumpError(Exception):
    """Base class for all zjump errors."""


class StoreIsDirectory(ZjumpError):
    """The configured data file path is occupied by a directory."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"data file {self.path} is a directory")


class StoreUnreadable(ZjumpError):
    """The data file exists but could not be parsed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot read data file {self.path}: {reason}")


class InvalidPath(ZjumpError):
    """A path passed to the update operation could not be resolved."""

    def __init__(self, path: Path | str, reason: str = "no such directory") -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class NoMatch(ZjumpError):
    """No stored directory matched the query."""

    def __init__(self, fragments: list[str] | tuple[str, ...]) -> None:
        self.fragments = list(fragments)
        shown = " ".join(self.fragments) or "(empty query)"
        super().__init__(f"no match for {shown}")
