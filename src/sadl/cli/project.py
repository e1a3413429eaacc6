"""
Project commands for SADL CLI.

Commands for compiling SADL sources:
- parse: Parse one file and show its model
- validate: Parse and validate a file, directory, or sadl.toml project
- decompile: Print normalized SADL source for a file
- tokens: Print the scanner's token stream for a file
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.table import Table

from sadl.cli.utils import configure_logging, fail, print_human_diagnostics
from sadl.core.errors import SadlError, ValidationError
from sadl.core.lexer import TokenType, tokenize
from sadl.core.manifest import MANIFEST_NAME, discover_sources, load_manifest
from sadl.core.model import Model
from sadl.core.parser import parse_file
from sadl.core.refactor import convert_inline_enums
from sadl.core.unparser import decompile
from sadl.core.values import json_default

logger = logging.getLogger(__name__)

console = Console()

ExtensionOption = Annotated[
    list[str] | None,
    typer.Option("--extension", "-x", help="Enable a bundled extension (repeatable)"),
]


# =============================================================================
# Helper Functions
# =============================================================================


def _resolve_sources(path: Path, extensions: list[str]) -> tuple[list[Path], list[str], bool]:
    """
    Work out which files to compile for ``path``.

    A directory holding a sadl.toml (or the manifest itself) is compiled as a
    project: its sources, extensions, validation switch and logging level
    come from the manifest.

    Returns:
        Tuple of (files, extensions, validate)
    """
    manifest_path = None
    if path.is_dir() and (path / MANIFEST_NAME).exists():
        manifest_path = path / MANIFEST_NAME
    elif path.is_file() and path.name == MANIFEST_NAME:
        manifest_path = path

    if manifest_path is not None:
        manifest = load_manifest(manifest_path)
        if not logging.getLogger().isEnabledFor(logging.DEBUG):
            configure_logging(manifest.logging.level)
        logger.debug(f"Loaded manifest for project '{manifest.name}'")
        files = discover_sources(manifest_path.parent, manifest)
        return files, [*manifest.parser.extensions, *extensions], manifest.parser.validate

    if path.is_dir():
        return sorted(path.rglob("*.sadl")), extensions, True
    return [path], extensions, True


def _print_summary(model: Model) -> None:
    title = model.name or "(unnamed)"
    if model.version:
        title += f" v{model.version}"
    console.print(f"[bold]{title}[/bold]")
    if model.namespace:
        console.print(f"[dim]namespace {model.namespace}[/dim]")
    if model.comment:
        console.print(f"[dim]{model.comment}[/dim]")

    if model.types:
        table = Table(title="Types")
        table.add_column("Name")
        table.add_column("Type")
        table.add_column("Comment", style="dim")
        for td in model.types:
            table.add_row(td.name, td.type, td.comment)
        console.print(table)

    if model.http:
        table = Table(title="HTTP")
        table.add_column("Method")
        table.add_column("Path")
        table.add_column("Name")
        table.add_column("Expect")
        for hd in model.http:
            expected = str(hd.expected.status) if hd.expected else ""
            table.add_row(hd.method.value, hd.path, hd.name or "", expected)
        console.print(table)

    if model.operations:
        table = Table(title="Actions")
        table.add_column("Name")
        table.add_column("Input")
        table.add_column("Output")
        table.add_column("Exceptions")
        for op in model.operations:
            table.add_row(op.name, op.input or "", op.output or "", ", ".join(op.exceptions))
        console.print(table)

    if model.examples:
        console.print(f"\n[dim]{len(model.examples)} example(s)[/dim]")


# =============================================================================
# Commands
# =============================================================================


def parse_command(
    file: Annotated[Path, typer.Argument(help="SADL source file", exists=True, dir_okay=False)],
    output_json: Annotated[bool, typer.Option("--json", help="Output the model as JSON")] = False,
    output_yaml: Annotated[bool, typer.Option("--yaml", help="Output the model as YAML")] = False,
    extension: ExtensionOption = None,
    no_validate: Annotated[
        bool, typer.Option("--no-validate", help="Skip the validation pass")
    ] = False,
) -> None:
    """
    Parse a SADL file and show the resulting model.

    Examples:
        sadl parse api.sadl            # Summary tables
        sadl parse api.sadl --json     # Full model as JSON
    """
    try:
        model = parse_file(file, extensions=extension or [], validate=not no_validate)
    except SadlError as e:
        fail(e, file)

    if output_json:
        typer.echo(json.dumps(model.to_dict(), indent=2, default=json_default))
    elif output_yaml:
        typer.echo(yaml.safe_dump(model.to_dict(), default_flow_style=False, sort_keys=False))
    else:
        _print_summary(model)


def validate_command(
    path: Annotated[
        Path,
        typer.Argument(help="SADL file, directory, or sadl.toml (default: current directory)"),
    ] = Path("."),
    extension: ExtensionOption = None,
) -> None:
    """
    Parse and validate SADL sources.

    A directory containing sadl.toml is validated as a project; any other
    directory is searched for *.sadl files.
    """
    if not path.exists():
        typer.echo(f"No such file or directory: {path}", err=True)
        raise typer.Exit(code=1)

    files, extensions, validate = _resolve_sources(path, extension or [])
    if not files:
        typer.echo(f"No SADL sources found in {path}", err=True)
        raise typer.Exit(code=1)

    errors: list[str] = []
    warnings: list[str] = []
    for f in files:
        try:
            model = parse_file(f, extensions=extensions, validate=validate)
        except ValidationError as e:
            errors.extend(f"{f}: {err}" for err in e.errors)
            continue
        except SadlError as e:
            errors.append(str(e))
            continue
        warnings.extend(f"{f}: {warn}" for warn in model.warnings)

    print_human_diagnostics(errors, warnings)
    if errors:
        raise typer.Exit(code=1)


def decompile_command(
    file: Annotated[Path, typer.Argument(help="SADL source file", exists=True, dir_okay=False)],
    inline_enums: Annotated[
        bool,
        typer.Option("--inline-enums", help="Hoist inline enum fields into top-level types"),
    ] = False,
    extension: ExtensionOption = None,
) -> None:
    """Print the normalized SADL source of a file."""
    try:
        model = parse_file(file, extensions=extension or [])
        if inline_enums:
            model = convert_inline_enums(model)
    except SadlError as e:
        fail(e, file)
    typer.echo(decompile(model), nl=False)


def tokens_command(
    file: Annotated[Path, typer.Argument(help="SADL source file", exists=True, dir_okay=False)],
    comments: Annotated[
        bool, typer.Option("--comments/--no-comments", help="Include comment tokens")
    ] = True,
) -> None:
    """Print the token stream of a file, one token per line."""
    text = file.read_text(encoding="utf-8")
    for token in tokenize(text, file):
        if not comments and token.type in (TokenType.LINE_COMMENT, TokenType.BLOCK_COMMENT):
            continue
        typer.echo(f"{token.line}:{token.column}\t{token.type.name}\t{token.value!r}")
