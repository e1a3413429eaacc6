"""
Scanner for SADL source.

Converts raw source text into a lazy stream of tokens with source location
tracking. Newlines are significant and are returned as tokens. The scanner
never raises: lexical problems are returned as UNDEFINED tokens whose value
is the diagnostic message, and the parser decides when to fail.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class TokenType(Enum):
    """Token types in SADL source."""

    # Special
    UNDEFINED = "UNDEFINED"
    EOF = "EOF"

    # Comments
    LINE_COMMENT = "LINE_COMMENT"
    BLOCK_COMMENT = "BLOCK_COMMENT"

    # Literals
    SYMBOL = "SYMBOL"
    NUMBER = "NUMBER"
    STRING = "STRING"

    # Punctuation
    COLON = ":"
    SEMICOLON = ";"
    COMMA = ","
    AT = "@"
    DOT = "."
    EQUALS = "="
    DOLLAR = "$"
    QUOTE = "'"
    SLASH = "/"
    QUESTION = "?"
    OPEN_BRACE = "{"
    CLOSE_BRACE = "}"
    OPEN_BRACKET = "["
    CLOSE_BRACKET = "]"
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    OPEN_ANGLE = "<"
    CLOSE_ANGLE = ">"
    HASH = "#"
    AMPERSAND = "&"
    STAR = "*"
    BACKQUOTE = "`"
    TILDE = "~"
    BANG = "!"
    PLUS = "+"
    PERCENT = "%"
    PIPE = "|"
    CARET = "^"
    BACKSLASH = "\\"

    # Whitespace that matters
    NEWLINE = "NEWLINE"


PUNCTUATION: dict[str, TokenType] = {
    tt.value: tt
    for tt in TokenType
    if len(tt.value) == 1
}

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


@dataclass
class Token:
    """
    A single token in SADL source.

    Attributes:
        type: Type of token
        value: Text of the token (unescaped for strings, the diagnostic for UNDEFINED)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def width(self) -> int:
        """Number of columns to highlight when reporting an error at this token."""
        if self.type in (TokenType.NEWLINE, TokenType.EOF, TokenType.UNDEFINED):
            return 1
        if self.type == TokenType.STRING:
            return len(self.value) + 2
        return max(1, len(self.value.split("\n")[0]))

    def is_text(self) -> bool:
        return self.type in (TokenType.SYMBOL, TokenType.STRING)


def is_symbol_char(ch: str | None, first: bool) -> bool:
    """Identifiers start with a letter and continue with letters, digits, or '_'."""
    if ch is None:
        return False
    if ch.isascii() and ch.isalpha():
        return True
    if first:
        return False
    return (ch.isascii() and ch.isdigit()) or ch == "_"


def strip_common_prefix(text: str) -> str:
    """Remove the leading whitespace shared by every line of a text block."""
    lines = text.split("\n")
    widths = [len(line) - len(line.lstrip(" \t")) for line in lines if line.strip()]
    if not widths:
        return text
    prefix = min(widths)
    if prefix == 0:
        return text
    return "\n".join(line[prefix:] for line in lines)


class Lexer:
    """
    Scanner for SADL source.

    Call ``scan()`` repeatedly until an EOF token is returned, or iterate the
    lexer to get tokens lazily.
    """

    def __init__(self, text: str, file: Path | str = "<string>"):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
        """
        self.text = text
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> str | None:
        """Consume the current character, updating line/column."""
        ch = self.current_char()
        if ch is not None:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1
        return ch

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.scan()
            yield token
            if token.type == TokenType.EOF:
                return

    def scan(self) -> Token:
        """Return the next token. Never raises."""
        while True:
            ch = self.current_char()
            line, column = self.line, self.column
            if ch is None:
                return Token(TokenType.EOF, "", line, column)
            if ch == "\n":
                self.advance()
                return Token(TokenType.NEWLINE, "\n", line, column)
            if ch in (" ", "\t", "\r", "\f", "\v"):
                self.advance()
                continue
            if is_symbol_char(ch, True):
                return self.read_symbol()
            if ch.isdigit() or ch == "-":
                return self.read_number()
            if ch == "/":
                return self.read_comment()
            if ch == '"':
                return self.read_string()
            self.advance()
            if ch not in PUNCTUATION:
                return Token(TokenType.UNDEFINED, f"Unexpected character: {ch!r}", line, column)
            return Token(PUNCTUATION[ch], ch, line, column)

    def read_symbol(self) -> Token:
        """Read an identifier."""
        line, column = self.line, self.column
        start = self.pos
        self.advance()
        while is_symbol_char(self.current_char(), False):
            self.advance()
        return Token(TokenType.SYMBOL, self.text[start : self.pos], line, column)

    def read_number(self) -> Token:
        """Read a number: optional leading '-', digits, at most one '.'."""
        line, column = self.line, self.column
        start = self.pos
        self.advance()
        seen_dot = False
        while True:
            ch = self.current_char()
            if ch is not None and ch.isdigit():
                self.advance()
            elif ch == ".":
                self.advance()
                if seen_dot:
                    return Token(
                        TokenType.UNDEFINED,
                        f"Malformed number: {self.text[start : self.pos]}",
                        line,
                        column,
                    )
                seen_dot = True
            else:
                break
        return Token(TokenType.NUMBER, self.text[start : self.pos], line, column)

    def read_comment(self) -> Token:
        """Read a line comment, a block comment, or a lone slash."""
        line, column = self.line, self.column
        self.advance()  # skip '/'
        ch = self.current_char()
        if ch == "/":
            self.advance()
            start = self.pos
            while self.current_char() not in (None, "\n"):
                self.advance()
            text = self.text[start : self.pos].strip()
            return Token(TokenType.LINE_COMMENT, text, line, column)
        if ch == "*":
            self.advance()
            end = self.text.find("*/", self.pos)
            if end < 0:
                while self.current_char() is not None:
                    self.advance()
                return Token(TokenType.UNDEFINED, "Unterminated block comment", line, column)
            text = self.text[self.pos : end]
            while self.pos < end + 2:
                self.advance()
            return Token(TokenType.BLOCK_COMMENT, text, line, column)
        return Token(TokenType.SLASH, "/", line, column)

    def _read_escape(self, chars: list[str]) -> str | None:
        """
        Consume an escape sequence (the backslash is already consumed).

        Returns:
            None on success, otherwise a diagnostic message
        """
        ch = self.advance()
        if ch is None:
            return "Unterminated string"
        simple = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\", "/": "/"}
        if ch in simple:
            chars.append(simple[ch])
            return None
        if ch == "u":
            digits = self.text[self.pos : self.pos + 4]
            if len(digits) < 4:
                return "Unterminated string"
            if not all(c in HEX_DIGITS for c in digits):
                return "Unicode escape must contain 4 hex digits"
            code = int(digits, 16)
            for _ in range(4):
                self.advance()
            chars.append(chr(code))
            return None
        return f"Bad escape char in string: \\{ch}"

    def read_string(self) -> Token:
        """Read a double-quoted string, or a text block opened by three quotes."""
        line, column = self.line, self.column
        self.advance()  # skip opening quote
        if self.current_char() == '"' and self.peek_char() == '"':
            self.advance()
            self.advance()
            return self.read_text_block(line, column)

        chars: list[str] = []
        while True:
            ch = self.current_char()
            if ch is None:
                return Token(TokenType.UNDEFINED, "Unterminated string", line, column)
            self.advance()
            if ch == '"':
                return Token(TokenType.STRING, "".join(chars), line, column)
            if ch == "\\":
                problem = self._read_escape(chars)
                if problem:
                    return Token(TokenType.UNDEFINED, problem, line, column)
            else:
                chars.append(ch)

    def read_text_block(self, line: int, column: int) -> Token:
        """Read the body of a text block; the opening quotes are consumed."""
        while True:
            ch = self.advance()
            if ch is None:
                return Token(
                    TokenType.UNDEFINED,
                    "Unexpected end of file while scanning text block",
                    line,
                    column,
                )
            if ch == "\n":
                break
            if ch not in (" ", "\t", "\r"):
                return Token(
                    TokenType.UNDEFINED,
                    f"Expected newline to start the text block, encountered '{ch}'",
                    line,
                    column,
                )

        chars: list[str] = []
        while True:
            ch = self.current_char()
            if ch is None:
                return Token(TokenType.UNDEFINED, "Unterminated string", line, column)
            if ch == '"' and self.peek_char() == '"' and self.peek_char(2) == '"':
                for _ in range(3):
                    self.advance()
                return Token(TokenType.STRING, strip_common_prefix("".join(chars)), line, column)
            self.advance()
            if ch == "\\":
                problem = self._read_escape(chars)
                if problem:
                    return Token(TokenType.UNDEFINED, problem, line, column)
            elif ch != "\r":
                chars.append(ch)


def tokenize(text: str, file: Path | str = "<string>") -> list[Token]:
    """
    Convenience function to tokenize SADL text.

    Args:
        text: Source text
        file: Source file path

    Returns:
        List of tokens ending with EOF
    """
    return list(Lexer(text, file))
