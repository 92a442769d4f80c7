"""Configuration commands.

Provides commands to display and initialize the mirror configuration
file at ~/.config/treemirror/config.toml.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from treemirror.core.config import (
    MirrorConfig,
    MirrorConfigError,
    load_config_or_default,
    save_config,
)
from treemirror.core.paths import get_config_path
from treemirror.core.subscriptions import DEFAULT_INTERVAL_MS
from treemirror.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the mirror configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.toml."),
    ] = None,
) -> None:
    """Show the effective configuration."""
    path = config_path or get_config_path()
    try:
        config = load_config_or_default(path)
    except MirrorConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    source = str(path) if path.exists() else "built-in defaults"

    table = Table(
        title="Mirror Configuration",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_column("Description", style="muted")
    table.add_row("interval", f"{config.interval} ms", "Polling period")

    console.print(table)
    console.print(f"[dim]Source: {source}[/dim]")


@app.command()
def init(
    interval: Annotated[
        int,
        typer.Option(
            "--interval",
            "-i",
            min=1,
            help="Polling period in milliseconds.",
        ),
    ] = DEFAULT_INTERVAL_MS,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.toml."),
    ] = None,
) -> None:
    """Write a config file with the given settings."""
    path = config_path or get_config_path()
    if path.exists() and not force:
        print_info(f"Config already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=0)

    try:
        saved = save_config(MirrorConfig(interval=interval), path)
    except MirrorConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
