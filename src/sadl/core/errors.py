"""
Error types for SADL scanning, parsing, model construction, and validation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class SadlError(Exception):
    """Base exception for all SADL errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(SadlError):
    """
    Raised when SADL source cannot be scanned or parsed.

    Examples:
    - Unterminated string or bad escape character
    - Unexpected token
    - Wrong number of generic type parameters
    - Unrecognized option key
    - Unknown directive
    """

    pass


class ModelError(SadlError):
    """
    Raised when a Schema cannot be assembled into a Model.

    Examples:
    - Duplicate type names (including base type names)
    - Duplicate http or action names
    - Conflicting type definitions during refactoring
    """

    pass


class ValidationError(SadlError):
    """
    Raised when a Model fails semantic validation.

    All problems found in one pass are reported together; the individual
    messages are available in ``errors``.
    """

    def __init__(
        self,
        message: str,
        context: Optional["ErrorContext"] = None,
        errors: list[str] | None = None,
    ):
        self.errors = errors if errors is not None else [message]
        super().__init__(message, context)


class ExtensionError(SadlError):
    """Raised when an extension cannot be registered or enabled."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path (or pseudo-path) of the source where the error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source excerpt around the error
        length: Width of the offending token, used for the highlight marker
        snippet_start: Line number of the first snippet line
    """

    file: Path | str
    line: int
    column: int
    snippet: str | None = None
    length: int = 1
    snippet_start: int | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "api.sadl:10:5" followed by the snippet
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        start_line = self.snippet_start if self.snippet_start is not None else max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            # Highlight the offending token
            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^" * max(1, self.length))

        return "\n".join(formatted)


def source_snippet(source: str, line: int, context_lines: int = 2) -> tuple[str, int]:
    """
    Extract the lines around ``line`` from ``source``.

    Returns:
        Tuple of (snippet text, line number of the first snippet line)
    """
    lines = source.split("\n")
    start = max(1, line - context_lines)
    end = min(len(lines), line + context_lines)
    return "\n".join(lines[start - 1 : end]), start


def make_parse_error(
    message: str,
    file: Path | str,
    line: int,
    column: int,
    source: str | None = None,
    length: int = 1,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        file: Source file path
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        source: Full source text, used to build the snippet
        length: Width of the offending token

    Returns:
        ParseError with context attached
    """
    snippet = None
    start = None
    if source:
        snippet, start = source_snippet(source, line)
    context = ErrorContext(
        file=file,
        line=line,
        column=column,
        snippet=snippet,
        length=length,
        snippet_start=start,
    )
    return ParseError(message, context)


def make_validation_error(errors: list[str], file: Path | str | None = None) -> ValidationError:
    """
    Helper to create a ValidationError from a list of problems.

    Validation errors are structural, so no token position is attached.
    """
    header = "Validation failed"
    if file:
        header += f" for {file}"
    message = f"{header}:\n" + "\n".join(f"  - {err}" for err in errors)
    return ValidationError(message, errors=list(errors))
