"""CLI interface for repackage."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from repackage import __version__
from repackage.config import RepackageConfig
from repackage.core.errors import RepackageError
from repackage.core.orchestrator import dot_crate as repackage_dot_crate

app = typer.Typer(
    name="repackage",
    help="Repackage a .crate file so that it exports the same crate under a different name.",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"repackage {__version__}")
        raise typer.Exit()


@app.command()
def main(
    dot_crate: Annotated[
        Path,
        typer.Argument(
            help="Path to the .crate file to repackage",
            exists=True,
            file_okay=True,
            dir_okay=False,
        ),
    ],
    new_name: Annotated[
        str,
        typer.Argument(help="Crate name to repackage as"),
    ],
    old_name: Annotated[
        str | None,
        typer.Option("--old-name", "-o", help="Expected current crate name (inferred from the file name if omitted)"),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a YAML config file", exists=True, dir_okay=False),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every archive entry"),
    ] = False,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
) -> None:
    """Repackage DOT_CRATE as NEW_NAME, writing the result next to it."""
    _configure_logging(verbose)

    try:
        config = RepackageConfig.load(config_path)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        err_console.print(f"[red]Invalid config: {e}[/red]")
        raise typer.Exit(1) from e

    try:
        repackaged = repackage_dot_crate(dot_crate, old_name, new_name, config=config)
    except RepackageError as e:
        err_console.print(f"[red]Repackaging failed: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(f"[green]Repackaged crate written to {repackaged}[/green]")


if __name__ == "__main__":
    app()
