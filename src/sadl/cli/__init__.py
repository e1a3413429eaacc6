"""
SADL CLI Package.

This package contains the typer application:

- project.py: parse, validate, decompile and tokens commands
- utils.py: Shared utilities (version, logging, diagnostics)
"""

import logging

import typer

from sadl.cli.project import (
    decompile_command,
    parse_command,
    tokens_command,
    validate_command,
)
from sadl.cli.utils import __version__, configure_logging, get_version, version_callback

app = typer.Typer(
    help="""SADL – Simple API Definition Language compiler

Commands:
  • parse       Parse a file and show its model
  • validate    Validate a file, directory, or sadl.toml project
  • decompile   Print normalized SADL source
  • tokens      Print the token stream
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log parser and validator activity",
    ),
) -> None:
    """SADL CLI main callback for global options."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


app.command(name="parse")(parse_command)
app.command(name="validate")(validate_command)
app.command(name="decompile")(decompile_command)
app.command(name="tokens")(tokens_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = [
    "__version__",
    "app",
    "main",
    "get_version",
    "version_callback",
]
