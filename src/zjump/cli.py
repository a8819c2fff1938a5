"""zjump CLI: frecency-ranked directory jumping.

Commands:
    zjump add PATH               record a visit to PATH (called by the prompt hook)
    zjump query FRAGMENT...      print the best matching directory
    zjump query -l [FRAGMENT...] list matches with their scores
    zjump remove [PATH]          forget a directory
    zjump complete QUERY...      tab-completion candidates
    zjump import-z FILE          merge a pipe-delimited z data file
    zjump status                 data file and configuration summary
    zjump init bash|zsh          print shell integration
    zjump config init            write a default zjump.toml
"""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path

import click

from zjump.config import ZConfig, default_config_path, init_config, load_config
from zjump.errors import ZjumpError
from zjump.matcher import complete as complete_paths
from zjump.matcher import match
from zjump.models import format_rank
from zjump.paths import resolve_path
from zjump.resolver import choose_target
from zjump.scoring import Policy
from zjump.shell import SHELLS, render_init
from zjump.store import RecordStore
from zjump.tracker import MAX_TOTAL_RANK, import_legacy, record_visit, remove_path, total_rank

logger = logging.getLogger("zjump.cli")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> ZConfig:
    ctx = click.get_current_context()
    config_path = (ctx.find_root().obj or {}).get("config_path")
    try:
        return load_config(config_path=config_path)
    except Exception as exc:
        raise click.ClickException(f"bad configuration: {exc}") from exc


def _format_score(value: float) -> str:
    return format_rank(round(value, 2))


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="zjump")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Path to zjump.toml")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """zjump: jump to frecent directories."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(message)s",
            stream=sys.stderr,
        )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------------------------------------------------------------------------
# zjump add / remove
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("path")
def add(path: str) -> None:
    """Record a visit to PATH."""
    cfg = _load_cfg()
    try:
        result = record_visit(cfg, path)
    except ZjumpError as exc:
        raise click.ClickException(str(exc)) from exc
    if result.aged:
        logger.info("aging dropped: %s", ", ".join(result.dropped) or "nothing")


@cli.command()
@click.argument("path", required=False)
def remove(path: str | None) -> None:
    """Forget PATH (default: the current directory)."""
    cfg = _load_cfg()
    target = path or os.getcwd()
    try:
        removed = remove_path(cfg, target)
    except ZjumpError as exc:
        raise click.ClickException(str(exc)) from exc
    if not removed:
        raise click.ClickException(f"{target} is not in the database")
    click.echo(f"Removed {target}", err=True)


# ---------------------------------------------------------------------------
# zjump query
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("fragments", nargs=-1)
@click.option("--rank", "-r", "rank_only", is_flag=True, help="Rank by visit count only")
@click.option("--recent", "-t", "recent_only", is_flag=True, help="Rank by recency only")
@click.option("--list", "-l", "list_only", is_flag=True, help="List matches instead of choosing one")
@click.option("--current", "-c", is_flag=True, help="Only match below the current directory")
def query(
    fragments: tuple[str, ...],
    rank_only: bool,
    recent_only: bool,
    list_only: bool,
    current: bool,
) -> None:
    """Print the directory best matching FRAGMENTS, in order.

    \b
    zjump query foo          # best directory containing "foo"
    zjump query foo bar      # "foo" somewhere before "bar"
    zjump query -r foo       # highest rank only
    zjump query -t foo       # most recently visited
    zjump query -l foo       # list all matches with scores
    zjump query -c foo       # only below the current directory
    """
    try:
        policy = Policy.from_flags(rank_only=rank_only, recent_only=recent_only)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    cfg = _load_cfg()
    try:
        cwd = resolve_path(os.getcwd(), resolve_symlinks=cfg.resolve_symlinks) if current else None
        records = RecordStore.from_config(cfg).load()
        result = match(records, fragments, policy=policy, now=int(time.time()), cwd=cwd)
    except ZjumpError as exc:
        raise click.ClickException(str(exc)) from exc

    if list_only or not fragments:
        for value, path in result.ranked():
            click.echo(f"{_format_score(value):<10} {path}")
        return
    click.echo(choose_target(result))


@cli.command()
@click.argument("words", nargs=-1)
def complete(words: tuple[str, ...]) -> None:
    """Print completion candidates for WORDS (smart case)."""
    cfg = _load_cfg()
    try:
        records = RecordStore.from_config(cfg).load()
    except ZjumpError as exc:
        raise click.ClickException(str(exc)) from exc
    for path in complete_paths(records, " ".join(words)):
        click.echo(path)


# ---------------------------------------------------------------------------
# zjump import-z
# ---------------------------------------------------------------------------


@cli.command("import-z")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_z(source: Path) -> None:
    """Merge a pipe-delimited path|rank|time data file into the database."""
    cfg = _load_cfg()
    try:
        imported, skipped = import_legacy(cfg, source)
    except ZjumpError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Imported {imported} records from {source}")
    if skipped:
        click.echo(f"Skipped {skipped} malformed line(s)", err=True)


# ---------------------------------------------------------------------------
# zjump status
# ---------------------------------------------------------------------------


@cli.command()
def status() -> None:
    """Show the data file, record count and configuration."""
    from rich.console import Console
    from rich.table import Table

    cfg = _load_cfg()
    try:
        records = RecordStore.from_config(cfg).load()
    except ZjumpError as exc:
        raise click.ClickException(str(exc)) from exc

    console = Console()
    table = Table(title="zjump", show_header=True, header_style="bold")
    table.add_column("Setting", style="dim", no_wrap=True)
    table.add_column("Value")

    table.add_row("Data file", str(cfg.data_file))
    table.add_row("Config", str(cfg.source) if cfg.source else "[dim]defaults[/dim]")
    table.add_row("Records", str(len(records)))
    total = total_rank(records)
    table.add_row("Total rank", f"{_format_score(total)} / {MAX_TOTAL_RANK}")
    table.add_row("", "")
    table.add_row("Command", cfg.cmd)
    table.add_row("Resolve symlinks", "yes" if cfg.resolve_symlinks else "no")
    table.add_row("Prompt hook", "yes" if cfg.install_hook else "no")
    if cfg.owner:
        table.add_row("Owner", cfg.owner)
    excluded = ", ".join(sorted(cfg.exclude_dirs))
    table.add_row("Excluded", excluded or "[dim]none[/dim]")

    console.print(table)


# ---------------------------------------------------------------------------
# zjump init / config
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("shell", type=click.Choice(SHELLS))
def init(shell: str) -> None:
    """Print shell integration for SHELL.

    \b
    eval "$(zjump init bash)"
    """
    cfg = _load_cfg()
    try:
        click.echo(render_init(shell, cfg), nl=False)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.group()
def config() -> None:
    """Manage zjump.toml."""


@config.command("init")
@click.option("--path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Where to write zjump.toml (default: the user config dir)")
def config_init(path: Path | None) -> None:
    """Write a commented default zjump.toml."""
    ctx = click.get_current_context()
    target = path or (ctx.find_root().obj or {}).get("config_path") or default_config_path()
    try:
        written = init_config(Path(target))
    except FileExistsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created {written}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
