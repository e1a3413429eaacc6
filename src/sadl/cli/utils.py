"""
SADL CLI Utilities.

Shared utility functions used across CLI modules.
"""

import logging
import platform
from pathlib import Path
from typing import NoReturn

import typer

from sadl.core.errors import SadlError

__version__ = "0.4.0"

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_version() -> str:
    """Get SADL version from package metadata."""
    try:
        from importlib.metadata import version

        return version("sadl")
    except Exception:
        return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"SADL version {get_version()}")
        typer.echo("")
        typer.echo("Environment:")
        typer.echo(
            f"  Python:        {platform.python_implementation()} {platform.python_version()}"
        )
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")

        from sadl.core.extensions import get_registry

        typer.echo("")
        typer.echo(f"Extensions:      {', '.join(get_registry().names()) or 'none'}")
        raise typer.Exit()


def configure_logging(level: str | int) -> None:
    """Configure the root logger; later calls only change the level."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def print_human_diagnostics(errors: list[str], warnings: list[str]) -> None:
    """Print diagnostics in human-readable format."""
    if errors:
        typer.echo("Validation failed:\n", err=True)
        for err in errors:
            typer.echo(f"ERROR: {err}", err=True)

    if warnings:
        typer.echo("Validation warnings:\n", err=False)
        for warn in warnings:
            typer.echo(f"WARNING: {warn}", err=False)

    if not errors and not warnings:
        typer.echo("OK: spec is valid.")


def fail(error: SadlError, file: Path | None = None) -> NoReturn:
    """Print a compiler error and exit non-zero."""
    prefix = f"{file}: " if file is not None and not error.context else ""
    typer.echo(f"{prefix}{error}", err=True)
    raise typer.Exit(code=1)
