"""
SADL Parser Package.

This package provides a modular recursive-descent parser for SADL.
The parser is built using mixins to separate parsing logic by construct type,
so each grammar area can be read and tested on its own.

The main exports are:
- Parser: The complete parser class
- parse_sadl: Convenience function to parse SADL source into a Schema

Usage:
    from sadl.core.dsl_parser_impl import parse_sadl

    schema = parse_sadl(text, file)
"""

import logging
from pathlib import Path

from .. import ir
from ..errors import ExtensionError
from ..lexer import TokenType
from .base import BaseParser, ParserProtocol
from .directives import BUILTIN_DIRECTIVES, DirectiveParserMixin
from .http import HttpParserMixin, parameter_source, path_template_problem, template_variables
from .literals import LiteralParserMixin
from .options import Options, OptionsParserMixin
from .types import ParsedTypeSpec, TypeParserMixin

logger = logging.getLogger(__name__)


class Parser(
    BaseParser,
    LiteralParserMixin,
    OptionsParserMixin,
    TypeParserMixin,
    HttpParserMixin,
    DirectiveParserMixin,
):
    """
    Complete SADL Parser.

    This class composes all parser mixins to provide full SADL parsing capability.
    Each mixin provides parsing for a specific construct type:

    - LiteralParserMixin: JSON-shaped literals for defaults and examples
    - OptionsParserMixin: Parenthesized option lists
    - TypeParserMixin: Type directives, type specs, struct/enum/union bodies
    - HttpParserMixin: HTTP bindings with expect/except responses
    - DirectiveParserMixin: Small directives, actions, examples, extensions
    """

    def add_extension(self, extension) -> None:
        """
        Register a directive extension on this parser.

        Raises:
            ExtensionError: If an extension with the same name is registered
        """
        if extension.name in self.extensions:
            raise ExtensionError(f"Extension already exists: {extension.name}")
        if extension.name in BUILTIN_DIRECTIVES:
            raise ExtensionError(f"Extension name shadows a directive: {extension.name}")
        self.extensions[extension.name] = extension

    def parse(self) -> ir.Schema:
        """
        Parse the entire source unit and return its Schema.

        Line comments between directives accumulate and attach to the next
        directive. Comments attached to ``name``, ``namespace`` and ``version``
        become the schema comment.

        Returns:
            Schema with all parsed declarations
        """
        name = ""
        if isinstance(self.file, Path) or (self.file and not str(self.file).startswith("<")):
            name = Path(self.file).stem
        namespace = ""
        version = ""
        base = ""
        schema_comment = ""
        types: list[ir.TypeDef] = []
        http: list[ir.HttpDef] = []
        operations: list[ir.OperationDef] = []
        examples: list[ir.ExampleDef] = []
        annotations: dict[str, str] = {}

        comment = ""
        while True:
            token = self.get_token()
            if token.type == TokenType.EOF:
                break
            if token.type == TokenType.LINE_COMMENT:
                comment = self.merge_comment(comment, token.value)
                continue
            if token.type in (TokenType.NEWLINE, TokenType.SEMICOLON):
                continue
            if token.type != TokenType.SYMBOL:
                raise self.expected_directive_error(token)

            directive = token.value
            logger.debug(f"Parsing directive '{directive}' at line {token.line}")
            if directive == "name":
                name = self.parse_name_directive()
                schema_comment = self.merge_comment(schema_comment, self.end_of_statement(comment))
            elif directive == "namespace":
                namespace = self.parse_namespace_directive()
                schema_comment = self.merge_comment(schema_comment, self.end_of_statement(comment))
            elif directive == "version":
                version = self.parse_version_directive()
                schema_comment = self.merge_comment(schema_comment, self.end_of_statement(comment))
            elif directive == "base":
                base = self.parse_base_directive()
                schema_comment = self.merge_comment(schema_comment, self.end_of_statement(comment))
            elif directive == "type":
                types.append(self.parse_type_directive(comment))
            elif directive == "http":
                http.append(self.parse_http_directive(comment))
            elif directive == "action":
                operations.append(self.parse_action_directive(comment))
            elif directive == "example":
                examples.append(self.parse_example_directive(comment))
            elif directive.startswith("x_"):
                annotations[directive] = self.parse_annotation_directive()
                self.end_of_statement("")
            else:
                self.parse_extension_directive(token, comment)
            comment = ""

        return ir.Schema(
            name=name,
            namespace=namespace,
            version=version,
            comment=schema_comment,
            base=base,
            types=types,
            http=http,
            operations=operations,
            examples=examples,
            annotations=annotations,
        )


def parse_sadl(text: str, file: Path | str = "<string>", extensions=None) -> ir.Schema:
    """
    Parse SADL source text.

    Args:
        text: SADL source text
        file: Source file path (for error reporting and the default schema name)
        extensions: Extension instances to enable for this parse

    Returns:
        The parsed, unvalidated Schema
    """
    parser = Parser(text, file)
    for extension in extensions or []:
        parser.add_extension(extension)
    return parser.parse()


__all__ = [
    "Parser",
    "parse_sadl",
    "BaseParser",
    "ParserProtocol",
    "LiteralParserMixin",
    "OptionsParserMixin",
    "TypeParserMixin",
    "HttpParserMixin",
    "DirectiveParserMixin",
    "Options",
    "ParsedTypeSpec",
    "parameter_source",
    "path_template_problem",
    "template_variables",
]
