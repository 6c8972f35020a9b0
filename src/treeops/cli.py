"""CLI commands using Typer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from treeops.context import AppContext
    from treeops.types import FileNode, OperationOutcome

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from treeops import __version__
from treeops.config import load_config, parse_mode
from treeops.context import create_context
from treeops.credentials import lookup_groupname, lookup_username
from treeops.errors import TreeOpsError, UnknownIdentityError
from treeops.types import ErrorPolicy

app = typer.Typer(
    name="treeops",
    help="Recursive copy, chmod, chown and remove for directory trees",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


@dataclass
class _GlobalOptions:
    config_path: Path | None = None
    verbose: bool = False


_options = _GlobalOptions()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"treeops v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-V", help="Enable debug logging")
    ] = False,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to config.yaml")
    ] = None,
) -> None:
    """Recursive copy, chmod, chown and remove for directory trees."""
    _options.config_path = config
    _options.verbose = verbose
    _configure_logging(verbose)


# ============================================================================
# Helpers
# ============================================================================


def show_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def show_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")


def _build_context(_context: AppContext | None) -> AppContext:
    """Return the injected context or build one from the config file.

    Raises:
        typer.Exit: If the config file cannot be loaded.
    """
    if _context is not None:
        return _context

    try:
        config = load_config(_options.config_path)
    except (FileNotFoundError, ValueError) as e:
        show_error(str(e))
        raise typer.Exit(1) from e

    if not _options.verbose:
        logging.getLogger("treeops").setLevel(config.log_level)
    return create_context(config=config)


def _policy(continue_on_error: bool) -> ErrorPolicy | None:
    return ErrorPolicy.CONTINUE if continue_on_error else None


def _report(outcome: OperationOutcome, verb: str) -> None:
    """Print the outcome of an operation.

    Raises:
        typer.Exit: If the outcome recorded errors.
    """
    if outcome.success:
        show_success(f"{verb} {outcome.visited} entries under {outcome.root}")
        return
    for error in outcome.errors:
        err_console.print(f"[yellow]![/yellow] {error}")
    show_error(f"{verb} {outcome.visited} entries, {len(outcome.errors)} failed")
    raise typer.Exit(1)


# ============================================================================
# Tree Commands
# ============================================================================


@app.command("copy")
def copy_cmd(
    source: Annotated[Path, typer.Argument(help="File or directory to copy")],
    destination: Annotated[Path, typer.Argument(help="Root path of the copy")],
    continue_on_error: Annotated[
        bool, typer.Option("--continue-on-error", help="Keep going past failing entries")
    ] = False,
    _context=None,
) -> None:
    """Copy a directory tree."""
    ctx = _build_context(_context)
    policy = _policy(continue_on_error)
    try:
        outcome = ctx.filesystem.copy(destination, source, policy=policy)
    except TreeOpsError as e:
        show_error(str(e))
        raise typer.Exit(1) from e
    _report(outcome, "Copied")


@app.command("chmod")
def chmod_cmd(
    root: Annotated[Path, typer.Argument(help="Root of the tree")],
    mode: Annotated[str, typer.Argument(help="Octal permission bits, e.g. 755")],
    continue_on_error: Annotated[
        bool, typer.Option("--continue-on-error", help="Keep going past failing entries")
    ] = False,
    _context=None,
) -> None:
    """Set permission bits on every entry of a tree."""
    try:
        bits = parse_mode(mode)
    except ValueError as e:
        show_error(str(e))
        raise typer.Exit(1) from e

    ctx = _build_context(_context)
    policy = _policy(continue_on_error)
    try:
        outcome = ctx.filesystem.chmod(root, bits, policy=policy)
    except TreeOpsError as e:
        show_error(str(e))
        raise typer.Exit(1) from e
    _report(outcome, "Changed mode of")


@app.command("chown")
def chown_cmd(
    root: Annotated[Path, typer.Argument(help="Root of the tree")],
    user: Annotated[str, typer.Argument(help="New owner name")],
    group: Annotated[str, typer.Argument(help="New group name")],
    continue_on_error: Annotated[
        bool, typer.Option("--continue-on-error", help="Keep going past failing entries")
    ] = False,
    _context=None,
) -> None:
    """Set owner and group on every entry of a tree."""
    ctx = _build_context(_context)
    policy = _policy(continue_on_error)
    try:
        outcome = ctx.filesystem.chown(root, user, group, policy=policy)
    except TreeOpsError as e:
        show_error(str(e))
        raise typer.Exit(1) from e
    _report(outcome, "Changed owner of")


@app.command("remove")
def remove_cmd(
    root: Annotated[Path, typer.Argument(help="Path to remove")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
    continue_on_error: Annotated[
        bool, typer.Option("--continue-on-error", help="Keep going past failing entries")
    ] = False,
    _context=None,
) -> None:
    """Remove a path and everything beneath it."""
    if not yes and not typer.confirm(f"Remove {root} and everything beneath it?"):
        raise typer.Abort()

    ctx = _build_context(_context)
    policy = _policy(continue_on_error)
    try:
        outcome = ctx.filesystem.remove(root, policy=policy)
    except TreeOpsError as e:
        show_error(str(e))
        raise typer.Exit(1) from e
    _report(outcome, "Removed")


@app.command("owner")
def owner_cmd(
    path: Annotated[Path, typer.Argument(help="Path to inspect")],
    _context=None,
) -> None:
    """Print the owner and group names of a path."""
    ctx = _build_context(_context)
    try:
        username, groupname = ctx.filesystem.get_file_credentials(path)
    except TreeOpsError as e:
        show_error(str(e))
        raise typer.Exit(1) from e
    console.print(f"{username}:{groupname}")


def _name_or_id(lookup: Callable[[int], str], value: int) -> str:
    try:
        return lookup(value)
    except UnknownIdentityError:
        return str(value)


def _node_row(node: FileNode, root: Path) -> tuple[str, ...]:
    relative = node.relative_to(root)
    return (
        node.kind.value,
        f"{node.mode:04o}",
        _name_or_id(lookup_username, node.uid),
        _name_or_id(lookup_groupname, node.gid),
        str(node.size),
        "." if relative == Path(".") else str(relative),
    )


@app.command("ls")
def ls_cmd(
    root: Annotated[Path, typer.Argument(help="Root of the tree")],
    _context=None,
) -> None:
    """List every entry of a tree."""
    ctx = _build_context(_context)

    table = Table(title=str(root))
    table.add_column("Kind", style="cyan")
    table.add_column("Mode")
    table.add_column("Owner")
    table.add_column("Group")
    table.add_column("Size", justify="right")
    table.add_column("Path", style="green")

    try:
        for node in ctx.filesystem.scan(root):
            table.add_row(*_node_row(node, root))
    except TreeOpsError as e:
        show_error(str(e))
        raise typer.Exit(1) from e
    console.print(table)


if __name__ == "__main__":
    app()
