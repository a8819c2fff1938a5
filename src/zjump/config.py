"""ZConfig: per-user configuration for the directory database.

Settings come from three layers, later ones winning:

    built-in defaults
    zjump.toml            # $ZJUMP_CONFIG, else $XDG_CONFIG_HOME/zjump/zjump.toml,
                          # else ~/.config/zjump/zjump.toml
    environment           # _Z_CMD, _Z_DATA, _Z_NO_RESOLVE_SYMLINKS,
                          # _Z_NO_PROMPT_COMMAND, _Z_EXCLUDE_DIRS, _Z_OWNER

zjump.toml example:

    [zjump]
    cmd = "z"                     # name of the shell jump function
    data = "~/.z"                 # data file location
    resolve_symlinks = true
    install_hook = true           # record every directory change
    exclude_dirs = ["/tmp", "~/scratch"]
    # owner = "alice"             # keep using alice's data file under sudo

The config object is passed explicitly to the store, tracker and matcher;
only load_config() looks at the process environment.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from zjump.paths import home_dir, strip_trailing_sep

_CONFIG_FILENAME = "zjump.toml"
_DEFAULT_CMD = "z"
_DEFAULT_DATA_NAME = ".z"


@dataclass
class ZConfig:
    """Resolved configuration for one user's directory database."""

    data_file: Path
    home: Path
    cmd: str = _DEFAULT_CMD
    resolve_symlinks: bool = True
    install_hook: bool = True
    exclude_dirs: frozenset[str] = field(default_factory=frozenset)
    owner: str | None = None
    source: Path | None = None          # zjump.toml that was read, if any

    def is_excluded(self, path: str) -> bool:
        """True if `path` must never be recorded (home or an excluded dir).

        With symlink resolution on, `path` is physical, so the symlink-free
        forms of home and the excluded dirs are compared too.
        """
        excluded = {strip_trailing_sep(str(self.home)), *self.exclude_dirs}
        if self.resolve_symlinks:
            excluded |= {os.path.realpath(p) for p in excluded}
        return path in excluded


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Location of zjump.toml for this environment."""
    env = os.environ if env is None else env
    explicit = env.get("ZJUMP_CONFIG")
    if explicit:
        return Path(explicit).expanduser()
    xdg = env.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "zjump" / _CONFIG_FILENAME
    return home_dir(env=dict(env)) / ".config" / "zjump" / _CONFIG_FILENAME


def _expand(path: str, home: Path) -> str:
    if path == "~" or path.startswith("~/"):
        path = str(home) + path[1:]
    return strip_trailing_sep(os.path.expanduser(path))


def _split_dirs(value: str) -> list[str]:
    return [p for p in value.split(os.pathsep) if p]


def load_config(
    env: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
) -> ZConfig:
    """Build a ZConfig from zjump.toml (if present) and the environment."""
    env = os.environ if env is None else env
    path = Path(config_path) if config_path else default_config_path(env)

    raw: dict[str, Any] = {}
    source: Path | None = None
    if path.is_file():
        with path.open("rb") as f:
            raw = tomllib.load(f)
        source = path
    section = raw.get("zjump", {})

    owner = env.get("_Z_OWNER") or section.get("owner") or None
    home = home_dir(owner, env=dict(env))

    data = env.get("_Z_DATA") or section.get("data")
    data_file = Path(_expand(str(data), home)) if data else home / _DEFAULT_DATA_NAME

    resolve_symlinks = bool(section.get("resolve_symlinks", True))
    if env.get("_Z_NO_RESOLVE_SYMLINKS"):
        resolve_symlinks = False

    install_hook = bool(section.get("install_hook", True))
    if env.get("_Z_NO_PROMPT_COMMAND"):
        install_hook = False

    excluded = list(section.get("exclude_dirs", []))
    if env.get("_Z_EXCLUDE_DIRS"):
        excluded.extend(_split_dirs(env["_Z_EXCLUDE_DIRS"]))

    return ZConfig(
        data_file=data_file,
        home=home,
        cmd=env.get("_Z_CMD") or section.get("cmd", _DEFAULT_CMD),
        resolve_symlinks=resolve_symlinks,
        install_hook=install_hook,
        exclude_dirs=frozenset(_expand(str(d), home) for d in excluded),
        owner=owner,
        source=source,
    )


def init_config(path: Path) -> Path:
    """Write a default zjump.toml at `path`. Raises if it already exists."""
    if path.exists():
        msg = f"{_CONFIG_FILENAME} already exists at {path}"
        raise FileExistsError(msg)

    content = """\
[zjump]
# cmd = "z"                   # name of the shell jump function
# data = "~/.z"               # data file location
# resolve_symlinks = true     # record physical paths
# install_hook = true         # record every directory change from the prompt hook
# exclude_dirs = []           # directories that are never recorded
# owner = ""                  # keep using this user's data file under sudo
"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path
