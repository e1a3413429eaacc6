"""
GraphQL directive extension.

Maps GraphQL queries onto existing actions:

    graphql "/graphql" {
        // Look up one item
        getItem(id String) Item (action=getItem)
        listItems(limit Int32, skip String) ItemListing (action=listItems)
    }

Each query names the action (or named http operation) that provides it.
The argument and return types must resolve in the Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ..core import ir
from ..core.dsl_parser_impl.options import NO_OPTIONS
from ..core.lexer import TokenType
from ..core.validator import check_spec

if TYPE_CHECKING:
    from ..core.dsl_parser_impl.base import ParserProtocol
    from ..core.model import Model

QUERY_OPTIONS = frozenset({"action"})


class GraphQLParam(BaseModel):
    name: str
    type: str

    model_config = ConfigDict(frozen=True)


class GraphQLQuery(BaseModel):
    """A query: arguments, return type and the action that provides it."""

    name: str
    params: list[GraphQLParam] = Field(default_factory=list)
    returns: ir.TypeSpec
    action: str | None = None
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class GraphQLSchema(BaseModel):
    path: str = ""
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)
    queries: list[GraphQLQuery] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class GraphQLExtension:
    """Parses ``graphql`` directives and checks them against the Model."""

    name = "graphql"

    def __init__(self) -> None:
        self.path = ""
        self.comment = ""
        self.annotations: dict[str, str] = {}
        self.queries: list[GraphQLQuery] = []

    def result(self) -> GraphQLSchema:
        return GraphQLSchema(
            path=self.path,
            comment=self.comment,
            annotations=self.annotations,
            queries=self.queries,
        )

    def parse_directive(self, parser: ParserProtocol, comment: str) -> None:
        self.path = parser.expect_string()
        options = parser.parse_options("graphql", NO_OPTIONS)
        self.annotations.update(options.annotations)
        comment = parser.merge_comment(self.comment, comment)

        token = parser.get_token()
        if token.type == TokenType.OPEN_BRACE:
            comment = parser.parse_trailing_comment(comment)
            while True:
                done, query_comment = parser.is_block_done("")
                if done:
                    break
                self.queries.append(self._parse_query(parser, query_comment))
        else:
            parser.unget_token()
        self.comment = parser.end_of_statement(comment)

    def _parse_query(self, parser: ParserProtocol, comment: str) -> GraphQLQuery:
        name = parser.expect_identifier()
        params = self._parse_params(parser)
        parsed = parser.parse_type_spec()
        options = parser.parse_options("graphql", QUERY_OPTIONS)
        comment = parser.merge_comment(comment, parsed.comment)
        comment = parser.end_of_statement(comment)
        return GraphQLQuery(
            name=name,
            params=params,
            returns=parser.build_type_spec(parsed, options),
            action=options.action,
            comment=comment,
            annotations=options.annotations,
        )

    def _parse_params(self, parser: ParserProtocol) -> list[GraphQLParam]:
        """Parse ``(name Type, ...)``; the list is optional."""
        params: list[GraphQLParam] = []
        token = parser.get_token()
        if token.type != TokenType.OPEN_PAREN:
            parser.unget_token()
            return params
        while True:
            token = parser.get_token()
            if token.type == TokenType.CLOSE_PAREN:
                return params
            if token.type in (TokenType.COMMA, TokenType.NEWLINE):
                continue
            if token.type != TokenType.SYMBOL:
                raise parser.syntax_error(token)
            params.append(GraphQLParam(name=token.value, type=parser.expect_identifier()))

    def validate(self, model: Model) -> list[str]:
        errors: list[str] = []
        for query in self.queries:
            if query.action is None:
                errors.append(f"GraphQL query '{query.name}' has no action")
            elif (
                model.find_operation(query.action) is None
                and model.find_http(query.action) is None
            ):
                errors.append(
                    f"GraphQL query '{query.name}' has an undefined action: '{query.action}'"
                )
            for param in query.params:
                if model.find_type(param.type) is None:
                    errors.append(
                        f"Undefined type '{param.type}' in argument '{param.name}' "
                        f"of GraphQL query '{query.name}'"
                    )
            context = f"return of GraphQL query '{query.name}'"
            check_spec(model, query.returns, context, errors, [])
        return errors
