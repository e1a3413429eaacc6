"""
Property-based tests using Hypothesis.

These check scanner, parser and decompiler invariants over generated
input rather than hand-picked examples.
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from sadl.core.errors import SadlError
from sadl.core.lexer import Lexer, TokenType, tokenize
from sadl.core.parser import parse_string
from sadl.core.unparser import decompile, quote
from sadl.core.values import decimal_from_json, decimal_to_json, format_decimal

# Printable text without lone surrogates
TEXT = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=20)

FRAGMENTS = st.sampled_from(
    [
        "type", "Foo", "Bar", "Struct", "Enum", "Union", "Array", "Map", "String", "Int32",
        "Decimal", "UnitValue", "http", "GET", "POST", "expect", "except", "action",
        "example", "name", "namespace", "required", "default", "maxsize", "pattern",
        "{", "}", "(", ")", "<", ">", "[", "]", ",", ";", "=", ":", '"x"', '"/a/{b}"',
        "1", "-2.5", "true", "null", "//", "/*", "\n", "x_note",
    ]
)

FIELD_TYPES = st.sampled_from(
    ["String", "Int32", "Int64", "Bool", "Decimal", "Timestamp", "UUID", "Bytes",
     "Array<String>", "Map<String,Int32>"]
)


def lower_words(min_size: int = 1) -> st.SearchStrategy[str]:
    return st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=min_size, max_size=8)


@st.composite
def struct_fields(draw) -> list[str]:
    names = draw(st.lists(lower_words(), min_size=1, max_size=5, unique=True))
    lines = []
    for name in names:
        field_type = draw(FIELD_TYPES)
        choice = draw(st.sampled_from(["none", "required", "default"]))
        options = ""
        if choice == "required":
            options = " (required)"
        elif choice == "default" and field_type == "String":
            options = f" (default={quote(draw(TEXT))})"
        elif choice == "default" and field_type == "Int32":
            options = f" (default={draw(st.integers(min_value=-1000, max_value=1000))})"
        elif choice == "default" and field_type == "Decimal":
            value = draw(
                st.decimals(
                    min_value=-1000, max_value=1000, places=2, allow_nan=False, allow_infinity=False
                )
            )
            options = f" (default={format_decimal(value)})"
        lines.append(f"    f{name} {field_type}{options}")
    return lines


@st.composite
def sadl_sources(draw) -> str:
    """Generate a valid SADL source with structs, enums and constrained strings."""
    suffixes = draw(st.lists(lower_words(), min_size=1, max_size=4, unique=True))
    blocks = [f"name {draw(st.sampled_from(['api', 'shop', 'store']))}"]
    for suffix in suffixes:
        type_name = "T" + suffix
        comment = draw(st.one_of(st.just(""), lower_words()))
        header = f"// {comment}\n" if comment else ""
        kind = draw(st.sampled_from(["struct", "enum", "string"]))
        if kind == "struct":
            body = "\n".join(draw(struct_fields()))
            blocks.append(f"{header}type {type_name} Struct {{\n{body}\n}}")
        elif kind == "enum":
            symbols = draw(
                st.lists(
                    st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=1, max_size=6),
                    min_size=1,
                    max_size=4,
                    unique=True,
                )
            )
            body = "\n".join(f"    S{symbol}" for symbol in symbols)
            blocks.append(f"{header}type {type_name} Enum {{\n{body}\n}}")
        else:
            maxsize = draw(st.integers(min_value=1, max_value=100))
            blocks.append(f"{header}type {type_name} String (maxsize={maxsize})")
    return "\n\n".join(blocks) + "\n"


class TestLexerProperties:
    """Property-based tests for the SADL scanner."""

    @given(st.text(max_size=1000))
    @settings(max_examples=200)
    def test_scan_never_raises_and_ends_with_eof(self, text: str) -> None:
        """Invariant: scanning any text terminates with EOF and never raises."""
        lexer = Lexer(text)
        tokens = []
        for _ in range(len(text) + 2):
            token = lexer.scan()
            tokens.append(token)
            if token.type == TokenType.EOF:
                break
        assert tokens[-1].type == TokenType.EOF

    @given(st.text(max_size=500))
    @settings(max_examples=100)
    def test_token_positions_valid(self, text: str) -> None:
        for token in tokenize(text):
            assert token.line >= 1
            assert token.column >= 1

    @given(st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,15}", fullmatch=True))
    def test_identifier_roundtrip(self, identifier: str) -> None:
        tokens = tokenize(identifier)
        assert tokens[0].type == TokenType.SYMBOL
        assert tokens[0].value == identifier
        assert tokens[-1].type == TokenType.EOF

    @given(st.integers(min_value=-999999, max_value=999999))
    def test_number_roundtrip(self, number: int) -> None:
        token = tokenize(str(number))[0]
        assert token.type == TokenType.NUMBER
        assert token.value == str(number)

    @given(TEXT)
    @settings(max_examples=200)
    def test_quoted_string_roundtrip(self, content: str) -> None:
        """Invariant: any quoted string scans back to its content."""
        token = tokenize(quote(content))[0]
        assert token.type == TokenType.STRING
        assert token.value == content


class TestParserProperties:
    """Property-based tests for the SADL parser and validator."""

    @given(st.text(max_size=300))
    @settings(max_examples=200)
    def test_arbitrary_text_raises_only_sadl_errors(self, text: str) -> None:
        try:
            parse_string(text)
        except SadlError:
            pass

    @given(st.lists(FRAGMENTS, max_size=40).map(" ".join))
    @settings(max_examples=300)
    def test_token_soup_raises_only_sadl_errors(self, source: str) -> None:
        try:
            parse_string(source)
        except SadlError:
            pass


class TestDecompileProperties:
    @given(sadl_sources())
    @settings(max_examples=100)
    def test_decompile_then_reparse_preserves_schema(self, source: str) -> None:
        model = parse_string(source)
        text = decompile(model)
        reparsed = parse_string(text)
        assert reparsed.schema == model.schema
        assert decompile(reparsed) == text


class TestDecimalProperties:
    @given(st.decimals(allow_nan=False, allow_infinity=False, min_value=-10**15, max_value=10**15))
    def test_json_roundtrip(self, value: Decimal) -> None:
        assert decimal_from_json(decimal_to_json(value)) == value

    @given(st.integers(min_value=-10**30, max_value=10**30))
    def test_raw_json_number(self, value: int) -> None:
        assert decimal_from_json(str(value)) == Decimal(value)
