"""
Base parser class for SADL.

Provides the token stream navigator (one-token pushback over the lazy
scanner), comment handling, and error generation used by all parser mixins.
"""

from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..errors import ParseError, make_parse_error
from ..lexer import Lexer, Token, TokenType
from ..values import parse_decimal

if TYPE_CHECKING:
    from .. import ir
    from ..extensions import Extension


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins and extensions.

    Extensions receive the live parser and pull further tokens through these
    methods.
    """

    file: Path | str
    source: str

    def get_token(self) -> Token: ...
    def unget_token(self) -> None: ...
    def peek_token(self) -> Token: ...
    def expect(self, token_type: TokenType) -> Token: ...
    def expect_identifier(self) -> str: ...
    def expect_string(self) -> str: ...
    def expect_text(self) -> str: ...
    def expect_int32(self) -> int: ...
    def error(self, message: str, token: Token | None = None) -> ParseError: ...
    def syntax_error(self, token: Token | None = None) -> ParseError: ...
    def merge_comment(self, comment1: str, comment2: str) -> str: ...
    def end_of_statement(self, comment: str) -> str: ...
    def parse_trailing_comment(self, comment: str) -> str: ...
    def is_block_done(self, comment: str) -> tuple[bool, str]: ...

    # Methods from other mixins that may be called cross-mixin
    def parse_options(self, context: str, acceptable: frozenset[str] | set[str]) -> Any: ...
    def parse_literal_value(self) -> Any: ...
    def parse_type_spec(self) -> Any: ...
    def build_type_spec(self, parsed: Any, options: Any) -> ir.TypeSpec: ...


INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    Tokens are pulled from the scanner on demand. Block comments are dropped
    here, before any grammar rule sees them, and UNDEFINED tokens become a
    ParseError at the point they are consumed. The parser may look one token
    ahead and push it back once before consuming further.
    """

    def __init__(
        self,
        text: str,
        file: Path | str = "<string>",
        extensions: dict[str, Extension] | None = None,
    ):
        """
        Initialize parser.

        Args:
            text: SADL source text
            file: Source file path (for error reporting)
            extensions: Directive extensions keyed by directive name
        """
        self.source = text
        self.file = file
        self.extensions: dict[str, Extension] = dict(extensions or {})
        self._tokens: Iterator[Token] = iter(Lexer(text, file))
        self._pushed_back: Token | None = None
        self.last_token: Token | None = None
        self._eof: Token | None = None

    # -------------------------------------------------------------------------
    # Token navigation
    # -------------------------------------------------------------------------

    def _scan(self) -> Token:
        if self._eof is not None:
            return self._eof
        while True:
            token = next(self._tokens)
            if token.type == TokenType.BLOCK_COMMENT:
                continue
            if token.type == TokenType.EOF:
                self._eof = token
            return token

    def get_token(self) -> Token:
        """
        Consume and return the next significant token.

        Returns the EOF token (repeatedly) once the source is exhausted.

        Raises:
            ParseError: If the scanner reported a lexical error
        """
        if self._pushed_back is not None:
            token = self._pushed_back
            self._pushed_back = None
        else:
            token = self._scan()
        self.last_token = token
        if token.type == TokenType.UNDEFINED:
            raise self.error(token.value if token.value else "Syntax error", token)
        return token

    def unget_token(self) -> None:
        """Push the last consumed token back. Only one token may be pushed back."""
        if self._pushed_back is not None:
            raise RuntimeError("Only one token may be pushed back")
        if self.last_token is None:
            raise RuntimeError("No token to push back")
        self._pushed_back = self.last_token

    def peek_token(self) -> Token:
        """Return the next token without consuming it."""
        token = self.get_token()
        self.unget_token()
        return token

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def error(self, message: str, token: Token | None = None) -> ParseError:
        """Build a ParseError pointing at ``token`` (default: the last token)."""
        token = token or self.last_token
        if token is None:
            return make_parse_error(message, self.file, 1, 1, self.source)
        return make_parse_error(
            message,
            self.file,
            token.line,
            token.column,
            self.source,
            token.width,
        )

    def syntax_error(self, token: Token | None = None) -> ParseError:
        return self.error("Syntax error", token)

    def end_of_file_error(self) -> ParseError:
        return self.error("Unexpected end of file")

    # -------------------------------------------------------------------------
    # Expectations
    # -------------------------------------------------------------------------

    def _check_not_eof(self, token: Token) -> None:
        if token.type == TokenType.EOF:
            raise self.end_of_file_error()

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            ParseError: If token doesn't match
        """
        token = self.get_token()
        if token.type == token_type:
            return token
        self._check_not_eof(token)
        raise self.error(f"Expected {token_type.name}, found {token.type.name}", token)

    def assert_identifier(self, token: Token) -> str:
        if token.type == TokenType.SYMBOL:
            return token.value
        self._check_not_eof(token)
        raise self.error(f"Expected symbol, found {token.type.name}", token)

    def expect_identifier(self) -> str:
        return self.assert_identifier(self.get_token())

    def assert_string(self, token: Token) -> str:
        if token.type == TokenType.STRING:
            return token.value
        self._check_not_eof(token)
        raise self.error(f"Expected string, found {token.type.name}", token)

    def expect_string(self) -> str:
        return self.assert_string(self.get_token())

    def expect_text(self) -> str:
        """Expect a symbol or a string."""
        token = self.get_token()
        if token.is_text():
            return token.value
        self._check_not_eof(token)
        raise self.error(f"Expected symbol or string, found {token.type.name}", token)

    def expect_number(self) -> Decimal:
        token = self.get_token()
        if token.type != TokenType.NUMBER:
            self._check_not_eof(token)
            raise self.error(f"Expected number, found {token.type.name}", token)
        try:
            return parse_decimal(token.value)
        except ValueError:
            raise self.error(f"Not a valid number: {token.value}", token) from None

    def expect_int32(self) -> int:
        value = self.expect_number()
        if value != value.to_integral_value() or not INT32_MIN <= value <= INT32_MAX:
            raise self.error(f"Expected a 32-bit integer, found {value}")
        return int(value)

    def expect_equals(self) -> None:
        self.expect(TokenType.EQUALS)

    def expect_equals_identifier(self) -> str:
        self.expect_equals()
        return self.expect_identifier()

    def expect_equals_string(self) -> str:
        self.expect_equals()
        return self.expect_string()

    def expect_equals_number(self) -> Decimal:
        self.expect_equals()
        return self.expect_number()

    def expect_equals_int32(self) -> int:
        self.expect_equals()
        return self.expect_int32()

    def expect_equals_string_array(self) -> list[str]:
        """Parse ``= ["a", "b", ...]``."""
        self.expect_equals()
        self.expect(TokenType.OPEN_BRACKET)
        values: list[str] = []
        while True:
            token = self.get_token()
            if token.type == TokenType.CLOSE_BRACKET:
                return values
            if token.type == TokenType.STRING:
                values.append(token.value)
            elif token.type in (TokenType.COMMA, TokenType.NEWLINE):
                continue
            else:
                self._check_not_eof(token)
                raise self.syntax_error(token)

    # -------------------------------------------------------------------------
    # Comments and statement boundaries
    # -------------------------------------------------------------------------

    def merge_comment(self, comment1: str, comment2: str) -> str:
        """Join two comments with a single space."""
        return f"{comment1} {comment2}".strip()

    def end_of_statement(self, comment: str) -> str:
        """
        Consume the end of a statement and return the comment with any
        trailing line comment merged in.

        A statement ends at a newline, a semicolon, the end of the file, or
        (left unconsumed) the closing brace of the enclosing block.

        Raises:
            ParseError: If anything else follows the statement
        """
        while True:
            token = self.get_token()
            if token.type == TokenType.LINE_COMMENT:
                comment = self.merge_comment(comment, token.value)
            elif token.type in (TokenType.NEWLINE, TokenType.EOF):
                return comment
            elif token.type == TokenType.SEMICOLON:
                return self.parse_trailing_comment(comment)
            elif token.type == TokenType.CLOSE_BRACE:
                self.unget_token()
                return comment
            else:
                raise self.syntax_error(token)

    def parse_trailing_comment(self, comment: str) -> str:
        """Merge a line comment if it is the very next token."""
        token = self.get_token()
        if token.type == TokenType.LINE_COMMENT:
            return self.merge_comment(comment, token.value)
        self.unget_token()
        return comment

    def is_block_done(self, comment: str) -> tuple[bool, str]:
        """
        Skip blank lines and gather comments inside a brace block.

        Returns:
            Tuple of (True if the closing brace was consumed, gathered comment)

        Raises:
            ParseError: On end of file before the block is closed
        """
        while True:
            token = self.get_token()
            if token.type == TokenType.CLOSE_BRACE:
                return True, comment
            if token.type == TokenType.EOF:
                raise self.end_of_file_error()
            if token.type == TokenType.LINE_COMMENT:
                comment = self.merge_comment(comment, token.value)
            elif token.type not in (TokenType.NEWLINE, TokenType.SEMICOLON):
                self.unget_token()
                return False, comment
