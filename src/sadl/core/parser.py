"""
Entry points for compiling SADL source into a validated Model.

    source text -> Parser -> Schema -> Model -> validate_model -> Model
"""

import logging
from pathlib import Path

from .dsl_parser_impl import parse_sadl
from .extensions import Extension, get_registry
from .model import Model
from .validator import validate_model

logger = logging.getLogger(__name__)


def _make_extensions(extensions: list[str | Extension] | None) -> list[Extension]:
    """Instantiate named extensions; extension objects are used as given."""
    registry = get_registry()
    result: list[Extension] = []
    for ext in extensions or []:
        result.append(registry.create(ext) if isinstance(ext, str) else ext)
    return result


def parse_string(
    source: str,
    file: Path | str = "<string>",
    extensions: list[str | Extension] | None = None,
    validate: bool = True,
) -> Model:
    """
    Parse SADL source text into a Model.

    Args:
        source: SADL source text
        file: Source path used in diagnostics and as the default schema name
        extensions: Extension names (from the registry) or instances to enable
        validate: Run the validation pass (and each extension's validation)

    Returns:
        The assembled Model

    Raises:
        ParseError: On lexical or syntax errors
        ModelError: On duplicate type, http or action names
        ValidationError: On semantic errors, if ``validate`` is set
    """
    enabled = _make_extensions(extensions)
    schema = parse_sadl(source, file, enabled)
    logger.debug(f"Parsed {file}: {len(schema.types)} types, {len(schema.http)} http")

    model = Model(schema, extensions={ext.name: ext.result() for ext in enabled})
    if validate:
        model.warnings = validate_model(model, enabled)
        for warning in model.warnings:
            logger.warning(f"{file}: {warning}")
    return model


def parse_file(
    path: Path | str,
    extensions: list[str | Extension] | None = None,
    validate: bool = True,
) -> Model:
    """
    Read and parse a SADL file.

    The schema name defaults to the file's stem when the source has no
    ``name`` directive.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        source = f.read()
    return parse_string(source, path, extensions=extensions, validate=validate)
