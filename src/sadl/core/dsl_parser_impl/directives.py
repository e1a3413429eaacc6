"""
Top-level directive parsing for SADL.

Handles the small directives (name, namespace, version, base, x_ annotations),
``action``, ``example``, and delegation to registered extensions.
"""

from typing import TYPE_CHECKING, Any

from .. import ir
from ..errors import ParseError
from ..lexer import Token, TokenType
from .options import NO_OPTIONS

if TYPE_CHECKING:
    from ..extensions import Extension

BUILTIN_DIRECTIVES = (
    "name",
    "namespace",
    "version",
    "base",
    "type",
    "http",
    "action",
    "example",
)

EXAMPLE_OPTIONS = frozenset({"name"})


class DirectiveParserMixin:
    """
    Mixin providing top-level directive parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        extensions: dict[str, Extension]
        get_token: Any
        unget_token: Any
        expect: Any
        expect_identifier: Any
        expect_string: Any
        expect_text: Any
        error: Any
        syntax_error: Any
        end_of_file_error: Any
        end_of_statement: Any
        parse_options: Any
        parse_extended_option: Any
        parse_literal_value: Any

    def expected_directive_error(self, token: Token) -> ParseError:
        """Error listing every directive valid at top level, extensions included."""
        names = [*BUILTIN_DIRECTIVES, *self.extensions]
        return self.error("Expected one of " + ", ".join(f"'{n}'" for n in names), token)

    def parse_name_directive(self) -> str:
        return self.expect_text()

    def parse_namespace_directive(self) -> str:
        """Parse a namespace, either a string or dotted symbols (``com.example.api``)."""
        namespace = self.expect_text()
        while True:
            token = self.get_token()
            if token.type != TokenType.DOT:
                self.unget_token()
                return namespace
            namespace += "." + self.expect_identifier()

    def parse_version_directive(self) -> str:
        token = self.get_token()
        if token.type in (TokenType.NUMBER, TokenType.SYMBOL, TokenType.STRING):
            return token.value
        if token.type == TokenType.EOF:
            raise self.end_of_file_error()
        raise self.error(f"Bad version value: {token.value}", token)

    def parse_base_directive(self) -> str:
        return self.expect_string()

    def parse_annotation_directive(self) -> str:
        """Parse the optional value of a top-level ``x_`` annotation."""
        return self.parse_extended_option()

    def parse_action_directive(self, comment: str) -> ir.OperationDef:
        """
        Parse a transport-agnostic operation.

        Examples:
            action ping()
            action getItem(GetItemRequest) GetItemResponse
            action deleteItem(DeleteItemRequest) except NotFound, Unauthorized
        """
        name = self.expect_identifier()
        self.expect(TokenType.OPEN_PAREN)
        input_type = None
        token = self.get_token()
        if token.type == TokenType.SYMBOL:
            input_type = token.value
            self.expect(TokenType.CLOSE_PAREN)
        elif token.type != TokenType.CLOSE_PAREN:
            if token.type == TokenType.EOF:
                raise self.end_of_file_error()
            raise self.syntax_error(token)

        output_type = None
        exceptions: list[str] = []
        token = self.get_token()
        if token.type == TokenType.SYMBOL and token.value != "except":
            output_type = token.value
            token = self.get_token()
        if token.type == TokenType.SYMBOL and token.value == "except":
            exceptions.append(self.expect_identifier())
            while True:
                token = self.get_token()
                if token.type != TokenType.COMMA:
                    self.unget_token()
                    break
                exceptions.append(self.expect_identifier())
        else:
            self.unget_token()

        options = self.parse_options("action", NO_OPTIONS)
        comment = self.end_of_statement(comment)
        return ir.OperationDef(
            name=name,
            input=input_type,
            output=output_type,
            exceptions=exceptions,
            comment=comment,
            annotations=options.annotations,
        )

    def parse_example_directive(self, comment: str) -> ir.ExampleDef:
        """
        Parse ``example Target (name=label) literal``.

        The literal may span several lines.
        """
        target = self.expect_identifier()
        options = self.parse_options("example", EXAMPLE_OPTIONS)
        value = self.parse_literal_value()
        comment = self.end_of_statement(comment)
        return ir.ExampleDef(
            target=target,
            name=options.name,
            example=value,
            comment=comment,
            annotations=options.annotations,
        )

    def parse_extension_directive(self, token: Token, comment: str) -> None:
        """Hand the live parser to the extension registered for this directive."""
        extension = self.extensions.get(token.value)
        if extension is None:
            raise self.expected_directive_error(token)
        extension.parse_directive(self, comment)
