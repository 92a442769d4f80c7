"""Tree mirroring commands.

Provides commands to print, watch, and mutate a mirrored local directory.
Every mutation goes through TreeMirror, so the printed tree is always
re-derived from disk after the change.
"""

import asyncio
from collections.abc import Callable, Coroutine
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer

from treemirror.backend.local import LocalBackend
from treemirror.cli.display import print_snapshot, print_snapshot_json
from treemirror.core.config import MirrorConfig, load_config_or_default
from treemirror.core.errors import TreeMirrorError
from treemirror.core.mirror import TreeMirror
from treemirror.tree.models import TreeSnapshot
from treemirror.utils.formatting import print_error, print_info, print_success

T = TypeVar("T")

app = typer.Typer(
    help="Print, watch, and modify a mirrored directory tree.",
    invoke_without_command=True,
    no_args_is_help=True,
)

RootArgument = Annotated[
    Path,
    typer.Argument(
        help="Directory to mirror.",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config.toml."),
]


class OutputFormat(str, Enum):
    """Output format options for tree display."""

    TREE = "tree"
    JSON = "json"


@app.command()
def show(
    root: RootArgument,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TREE,
) -> None:
    """Walk a directory once and print its tree."""
    mirror = TreeMirror(LocalBackend(root))
    snapshot = _run_or_exit(mirror.refresh)

    if output_format == OutputFormat.JSON:
        print_snapshot_json(snapshot)
        return
    print_snapshot(snapshot, label=str(root))


@app.command()
def watch(
    root: RootArgument,
    interval: Annotated[
        int | None,
        typer.Option(
            "--interval",
            "-i",
            min=1,
            help="Polling period in milliseconds (overrides config).",
        ),
    ] = None,
    count: Annotated[
        int | None,
        typer.Option(
            "--count",
            "-n",
            min=1,
            help="Stop after printing this many trees.",
        ),
    ] = None,
    config_path: ConfigOption = None,
) -> None:
    """Print the tree, then reprint it whenever it changes."""
    config = _load_config_or_exit(config_path)
    if interval is not None:
        config = MirrorConfig(interval=interval)

    print_info(f"Watching {root} every {config.interval} ms (Ctrl+C to stop)")
    try:
        printed = asyncio.run(_watch(root, config, count))
    except KeyboardInterrupt:
        print_info("Stopped watching.")
        return
    except TreeMirrorError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Printed {printed} tree(s).")


@app.command()
def mkdir(
    root: RootArgument,
    name: Annotated[str, typer.Argument(help="Directory name to create under root.")],
) -> None:
    """Create a directory under root (no error if it exists)."""
    mirror = TreeMirror(LocalBackend(root))
    _run_or_exit(lambda: mirror.create_directory(name))
    print_snapshot(mirror.get_snapshot(), label=str(root))
    print_success(f"Directory '{name}' is present.")


@app.command()
def touch(
    root: RootArgument,
    name: Annotated[str, typer.Argument(help="File name to create under root.")],
) -> None:
    """Create an empty file under root (no error if it exists)."""
    mirror = TreeMirror(LocalBackend(root))
    _run_or_exit(lambda: mirror.create_file(name))
    print_snapshot(mirror.get_snapshot(), label=str(root))
    print_success(f"File '{name}' is present.")


@app.command()
def clear(
    root: RootArgument,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete everything inside root."""
    if not yes:
        confirmed = typer.confirm(
            f"Delete everything inside {root}?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    mirror = TreeMirror(LocalBackend(root))
    _run_or_exit(mirror.remove_all)
    print_snapshot(mirror.get_snapshot(), label=str(root))
    print_success(f"Cleared {root}.")


# === Private helper functions ===


def _load_config_or_exit(path: Path | None) -> MirrorConfig:
    """Load config or exit with an error message."""
    try:
        return load_config_or_default(path)
    except TreeMirrorError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _run_or_exit(operation: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Run a mirror coroutine to completion, exiting with code 1 on failure."""
    try:
        return asyncio.run(operation())
    except (TreeMirrorError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


async def _watch(root: Path, config: MirrorConfig, count: int | None) -> int:
    """Print the tree on start and after every change.

    Snapshots arrive on every tick; a tree is only reprinted when its
    content differs from the last one printed.

    Returns:
        Number of trees printed.
    """
    async with TreeMirror(LocalBackend(root), config) as mirror:
        changes: asyncio.Queue[TreeSnapshot] = asyncio.Queue()
        last: TreeSnapshot | None = None
        printed = 0
        cancel = mirror.subscribe(lambda: changes.put_nowait(mirror.get_snapshot()))
        try:
            await mirror.refresh()
            while count is None or printed < count:
                snapshot = await changes.get()
                if last is not None and snapshot.root == last.root:
                    continue
                print_snapshot(snapshot, label=str(root))
                last = snapshot
                printed += 1
        finally:
            cancel()
    return printed
