"""
SADL - Simple API Definition Language.

A compiler front end for SADL: it scans and parses schema source, assembles
an indexed Model of types, HTTP bindings, actions and examples, and
validates it for use by code generators.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

# Re-export commonly used types for convenience
from .core import ir
from .core.errors import ModelError, ParseError, SadlError, ValidationError
from .core.model import Model
from .core.parser import parse_file, parse_string


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    # In editable mode, read directly from pyproject.toml for live updates
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    # Fall back to installed metadata
    try:
        return _metadata_version("sadl")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "Model",
    "parse_file",
    "parse_string",
    "SadlError",
    "ParseError",
    "ModelError",
    "ValidationError",
]
