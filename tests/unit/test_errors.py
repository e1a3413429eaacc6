"""Tests for error types and error context formatting."""

from sadl.core.errors import (
    ErrorContext,
    ModelError,
    ParseError,
    SadlError,
    ValidationError,
    make_parse_error,
    make_validation_error,
    source_snippet,
)


class TestErrorContext:
    def test_location_only(self):
        context = ErrorContext(file="api.sadl", line=3, column=7)
        assert context.format() == "api.sadl:3:7"

    def test_snippet_with_marker(self):
        source = "name foo\ntype Foo Strin\ntype Bar Int32\n"
        error = make_parse_error("Syntax error", "api.sadl", 2, 10, source, length=5)
        lines = str(error).split("\n")
        assert lines[0] == "api.sadl:2:10"
        assert lines[1] == "   1 | name foo"
        assert lines[2] == "   2 | type Foo Strin"
        assert lines[3] == " " * 16 + "^^^^^"
        assert lines[-1] == "Syntax error"

    def test_source_snippet_bounds(self):
        source = "a\nb\nc\nd\ne"
        assert source_snippet(source, 1) == ("a\nb\nc", 1)
        assert source_snippet(source, 5) == ("c\nd\ne", 3)


class TestErrorTypes:
    def test_hierarchy(self):
        assert issubclass(ParseError, SadlError)
        assert issubclass(ModelError, SadlError)
        assert issubclass(ValidationError, SadlError)

    def test_message_without_context(self):
        error = ModelError("Duplicate type: Foo")
        assert str(error) == "Duplicate type: Foo"
        assert error.context is None

    def test_validation_error_collects_messages(self):
        error = make_validation_error(["first", "second"], file="api.sadl")
        assert error.errors == ["first", "second"]
        assert str(error) == "Validation failed for api.sadl:\n  - first\n  - second"

    def test_single_validation_message(self):
        assert ValidationError("only").errors == ["only"]
