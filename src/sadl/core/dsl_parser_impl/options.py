"""
Option list parsing for SADL.

An option list is the parenthesized suffix attached to most productions:

    (required, min=0, max=100, pattern="^[a-z]+$", x_tag="value")

Keys are matched case-insensitively. ``x_`` keys are free-form annotations
and are always accepted; every other key must be acceptable for the context
the list appears in.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ..lexer import TokenType

# Acceptable option keys per base type at the type-definition level
TYPE_OPTIONS: dict[str, frozenset[str]] = {
    "Bytes": frozenset({"minsize", "maxsize"}),
    "String": frozenset({"minsize", "maxsize", "pattern", "values"}),
    "Array": frozenset({"minsize", "maxsize"}),
    "Map": frozenset({"minsize", "maxsize"}),
    **{
        name: frozenset({"min", "max"})
        for name in ("Int8", "Int16", "Int32", "Int64", "Float32", "Float64", "Decimal")
    },
}

# Acceptable option keys per base type on struct fields; every field also
# accepts required and default
FIELD_OPTIONS: dict[str, frozenset[str]] = {
    **TYPE_OPTIONS,
    "String": frozenset({"minsize", "maxsize", "pattern", "values", "reference"}),
    "UUID": frozenset({"reference"}),
}

FIELD_COMMON_OPTIONS = frozenset({"required", "default"})

HTTP_OPTIONS = frozenset({"operation"})
HTTP_PARAM_OPTIONS = frozenset({"header", "default"})
NO_OPTIONS: frozenset[str] = frozenset()


@dataclass
class Options:
    """Parse-time accumulator for one option list."""

    required: bool = False
    default: Any = None
    pattern: str | None = None
    values: list[str] | None = None
    min_size: int | None = None
    max_size: int | None = None
    min: Decimal | None = None
    max: Decimal | None = None
    operation: str | None = None
    action: str | None = None
    reference: str | None = None
    header: str | None = None
    name: str | None = None
    annotations: dict[str, str] = field(default_factory=dict)


class OptionsParserMixin:
    """
    Mixin providing option list parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        get_token: Any
        unget_token: Any
        error: Any
        syntax_error: Any
        end_of_file_error: Any
        expect_string: Any
        expect_equals_number: Any
        expect_equals_int32: Any
        expect_equals_string: Any
        expect_equals_string_array: Any
        expect_equals_identifier: Any
        parse_equals_literal: Any

    def parse_options(self, context: str, acceptable: frozenset[str] | set[str]) -> Options:
        """
        Parse an optional option list.

        If the next token is not ``(`` it is pushed back and empty options are
        returned.

        Args:
            context: Name used in "Unrecognized option" diagnostics
            acceptable: Lower-case keys accepted in this context

        Raises:
            ParseError: On an unrecognized key or malformed value
        """
        options = Options()
        token = self.get_token()
        if token.type != TokenType.OPEN_PAREN:
            self.unget_token()
            return options

        while True:
            token = self.get_token()
            if token.type == TokenType.CLOSE_PAREN:
                return options
            if token.type in (TokenType.COMMA, TokenType.NEWLINE):
                continue
            if token.type == TokenType.EOF:
                raise self.end_of_file_error()
            if token.type != TokenType.SYMBOL:
                raise self.syntax_error(token)

            key = token.value.lower()
            if key.startswith("x_"):
                options.annotations[token.value] = self.parse_extended_option()
            elif key in acceptable:
                self._parse_option_value(options, key)
            else:
                raise self.error(f"Unrecognized option for {context}: {token.value}", token)

    def _parse_option_value(self, options: Options, key: str) -> None:
        if key == "min":
            options.min = self.expect_equals_number()
        elif key == "max":
            options.max = self.expect_equals_number()
        elif key == "minsize":
            options.min_size = self.expect_equals_int32()
        elif key == "maxsize":
            options.max_size = self.expect_equals_int32()
        elif key == "pattern":
            options.pattern = self.expect_equals_string()
        elif key == "values":
            options.values = self.expect_equals_string_array()
        elif key == "required":
            options.required = True
        elif key == "default":
            options.default = self.parse_equals_literal()
        elif key == "operation":
            options.operation = self.expect_equals_identifier()
        elif key == "action":
            options.action = self.expect_equals_identifier()
        elif key == "reference":
            options.reference = self.expect_equals_identifier()
        elif key == "header":
            options.header = self.expect_equals_string()
        elif key == "name":
            options.name = self.expect_equals_identifier()
        else:
            raise self.error(f"Unrecognized option: {key}")

    def parse_extended_option(self) -> str:
        """Parse the optional ``="value"`` of an ``x_`` annotation."""
        token = self.get_token()
        if token.type == TokenType.EQUALS:
            return self.expect_string()
        self.unget_token()
        return ""
