"""Path normalisation and home directory resolution."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from zjump.errors import InvalidPath

logger = logging.getLogger("zjump.paths")

# "/", "//", "C:", "C:\", "C:/" and friends.
_BARE_ROOT_RE = re.compile(r"^(?:[A-Za-z]:)?[\\/]*$")


def is_bare_root(path: str) -> bool:
    """True for a filesystem or drive root, which is too broad to jump to."""
    return bool(_BARE_ROOT_RE.match(path))


def strip_trailing_sep(path: str) -> str:
    """Drop trailing separators, keeping a bare root intact."""
    seps = os.sep + (os.altsep or "")
    stripped = path.rstrip(seps)
    if not stripped and path:
        return os.sep
    return stripped


def home_dir(owner: str | None = None, env: dict[str, str] | None = None) -> Path:
    """Home directory the database belongs to.

    With an owner (e.g. under sudo) this is the owner's home, so the data file
    does not move to root's home.
    """
    if owner:
        expanded = os.path.expanduser(f"~{owner}")
        if expanded != f"~{owner}":
            return Path(expanded)
        logger.warning("unknown owner %r, using the current user's home", owner)
    home = (env or {}).get("HOME")
    return Path(home) if home else Path.home()


def resolve_path(path: str | Path, *, resolve_symlinks: bool = True) -> str:
    """Return the absolute, normalised form of a directory path.

    Symlinks are followed unless `resolve_symlinks` is False, in which case
    the path is only normalised lexically. Raises InvalidPath if the path
    does not name an existing directory.
    """
    raw = os.path.expanduser(str(path))
    if not raw:
        raise InvalidPath(path, "empty path")
    if resolve_symlinks:
        try:
            resolved = str(Path(raw).resolve(strict=True))
        except FileNotFoundError as exc:
            raise InvalidPath(path) from exc
        except (OSError, RuntimeError) as exc:
            raise InvalidPath(path, str(exc)) from exc
    else:
        resolved = os.path.abspath(raw)
    if not os.path.isdir(resolved):
        raise InvalidPath(path, "not a directory")
    return strip_trailing_sep(resolved)
