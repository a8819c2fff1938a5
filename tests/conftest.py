"""
Pytest configuration and fixtures for zjump tests.
"""

from pathlib import Path

import pytest

from zjump.config import ZConfig

_ENV_VARS = (
    "_Z_CMD",
    "_Z_DATA",
    "_Z_NO_RESOLVE_SYMLINKS",
    "_Z_NO_PROMPT_COMMAND",
    "_Z_EXCLUDE_DIRS",
    "_Z_OWNER",
    "ZJUMP_CONFIG",
    "XDG_CONFIG_HOME",
)


@pytest.fixture(autouse=True)
def isolate_env(tmp_path: Path, monkeypatch):
    """Keep tests away from the real ~/.z and ~/.config/zjump.

    HOME points at a fresh directory and every zjump variable is cleared,
    with ZJUMP_CONFIG aimed at a file that does not exist.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ZJUMP_CONFIG", str(tmp_path / "no-such-zjump.toml"))
    return home


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "state" / "z.csv"


@pytest.fixture
def cfg(tmp_path: Path, data_file: Path) -> ZConfig:
    """Explicit config: data file under tmp_path, home at tmp_path/home."""
    return ZConfig(
        data_file=data_file,
        home=(tmp_path / "home").resolve(),
    )


@pytest.fixture
def make_dir(tmp_path: Path):
    """Create a directory below tmp_path/tree and return its resolved path."""

    def _make(rel: str) -> Path:
        path = tmp_path / "tree" / rel
        path.mkdir(parents=True, exist_ok=True)
        return path.resolve()

    return _make
