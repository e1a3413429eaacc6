"""
Literal value parsing for SADL.

Literals appear in ``default=`` options and ``example`` directives. The
grammar is JSON-shaped and recursive:

    literal := STRING | NUMBER | true | false | null | SYMBOL
             | "[" literal ("," literal)* "]"
             | "{" STRING ":" literal ("," STRING ":" literal)* "}"

Every number becomes a ``decimal.Decimal``; narrowing to the target type
happens during validation.
"""

from typing import TYPE_CHECKING, Any

from ..lexer import Token, TokenType
from ..values import parse_decimal

# Tokens that may separate the items of a multi-line array or object literal
_LITERAL_SEPARATORS = (TokenType.COMMA, TokenType.NEWLINE, TokenType.LINE_COMMENT)


class LiteralParserMixin:
    """
    Mixin providing literal value parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        get_token: Any
        expect: Any
        error: Any
        syntax_error: Any
        end_of_file_error: Any

    def parse_equals_literal(self) -> Any:
        """Parse ``= literal``."""
        self.expect(TokenType.EQUALS)
        return self.parse_literal_value()

    def parse_literal_value(self) -> Any:
        return self.parse_literal(self.get_token())

    def parse_literal(self, token: Token) -> Any:
        if token.type == TokenType.SYMBOL:
            return self.parse_literal_symbol(token)
        if token.type == TokenType.STRING:
            return token.value
        if token.type == TokenType.NUMBER:
            return self.parse_literal_number(token)
        if token.type == TokenType.OPEN_BRACKET:
            return self.parse_literal_array()
        if token.type == TokenType.OPEN_BRACE:
            return self.parse_literal_object()
        if token.type == TokenType.EOF:
            raise self.end_of_file_error()
        raise self.syntax_error(token)

    def parse_literal_symbol(self, token: Token) -> Any:
        """true, false and null are keywords; any other bare word is a string."""
        if token.value == "true":
            return True
        if token.value == "false":
            return False
        if token.value == "null":
            return None
        return token.value

    def parse_literal_number(self, token: Token) -> Any:
        try:
            return parse_decimal(token.value)
        except ValueError:
            raise self.error(f"Not a valid number: {token.value}", token) from None

    def parse_literal_array(self) -> list[Any]:
        items: list[Any] = []
        while True:
            token = self.get_token()
            if token.type == TokenType.CLOSE_BRACKET:
                return items
            if token.type in _LITERAL_SEPARATORS:
                continue
            items.append(self.parse_literal(token))

    def parse_literal_object(self) -> dict[str, Any]:
        """Parse a JSON-style object. Keys must be strings."""
        obj: dict[str, Any] = {}
        while True:
            token = self.get_token()
            if token.type == TokenType.CLOSE_BRACE:
                return obj
            if token.type in _LITERAL_SEPARATORS:
                continue
            if token.type == TokenType.EOF:
                raise self.end_of_file_error()
            if token.type != TokenType.STRING:
                raise self.error(f"Object key must be a string, found {token.type.name}", token)
            key = token.value
            self.expect(TokenType.COLON)
            obj[key] = self.parse_literal_value()
