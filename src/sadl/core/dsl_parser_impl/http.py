"""
HTTP binding parsing for SADL.

    http METHOD "path-template" (options) {
        param Type (options)
        ...
        expect STATUS (options) { output Type (options) ... }
        except STATUS? Type (options)
    }

Input parameters are classified by looking at the path template: a
``header=`` option wins, then a ``{name}`` placeholder in the path, then a
``key={name}`` pair in the query suffix. Anything else is the body.
"""

import re
from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import TokenType
from .options import HTTP_OPTIONS, HTTP_PARAM_OPTIONS, NO_OPTIONS, Options

_TEMPLATE_VARIABLE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


def template_variables(path_template: str) -> list[str]:
    """Return the ``{name}`` variables of a path template (path and query parts)."""
    return re.findall(r"\{([^{}]*)\}", path_template)


def path_template_problem(path_template: str) -> str | None:
    """
    Check brace balance and variable names of a path template.

    Returns:
        A description of the first problem found, or None if the template is valid
    """
    start = -1
    for i, ch in enumerate(path_template):
        if ch == "{":
            if start >= 0:
                return f"nested '{{' at offset {i}"
            start = i
        elif ch == "}":
            if start < 0:
                return f"unbalanced '}}' at offset {i}"
            variable = path_template[start + 1 : i]
            if not _TEMPLATE_VARIABLE_RE.match(variable):
                return f"bad variable name '{variable}'"
            start = -1
    if start >= 0:
        return f"unterminated '{{' at offset {start}"
    return None


def parameter_source(path_template: str, name: str) -> tuple[str, str | None]:
    """
    Classify a parameter by where ``{name}`` appears in the path template.

    Returns:
        ("path", None), ("query", query_key), or ("body", None)
    """
    path, _, query = path_template.partition("?")
    placeholder = "{" + name + "}"
    if placeholder in path:
        return "path", None
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if sep and value == placeholder:
            return "query", key
    return "body", None


class HttpParserMixin:
    """
    Mixin providing ``http`` directive parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        get_token: Any
        unget_token: Any
        assert_identifier: Any
        expect: Any
        expect_identifier: Any
        expect_string: Any
        expect_int32: Any
        error: Any
        syntax_error: Any
        merge_comment: Any
        end_of_statement: Any
        parse_trailing_comment: Any
        is_block_done: Any
        parse_options: Any
        parse_type_spec: Any
        build_type_spec: Any

    def parse_http_directive(self, comment: str) -> ir.HttpDef:
        method_token = self.get_token()
        method = self.assert_identifier(method_token).upper()
        if method not in ir.HttpMethod.__members__:
            raise self.error(f"HTTP 'method' invalid: {method_token.value}", method_token)

        path = self.expect_string()
        problem = path_template_problem(path)
        if problem:
            raise self.error(f"Bad path template ({problem}): {path}")

        options = self.parse_options("http", HTTP_OPTIONS)
        self.expect(TokenType.OPEN_BRACE)
        comment = self.parse_trailing_comment(comment)

        inputs: list[ir.HttpParamSpec] = []
        expected: ir.HttpExpectedSpec | None = None
        exceptions: list[ir.HttpExceptionSpec] = []
        while True:
            done, item_comment = self.is_block_done("")
            if done:
                break
            token = self.get_token()
            keyword = self.assert_identifier(token)
            if keyword == "expect":
                if expected is not None:
                    raise self.error("Only one 'expect' is allowed per http operation", token)
                expected = self.parse_http_expected(item_comment)
            elif keyword == "except":
                exceptions.append(self.parse_http_exception(item_comment))
            else:
                inputs.append(self.parse_http_param(keyword, path, item_comment))

        comment = self.end_of_statement(comment)
        return ir.HttpDef(
            method=ir.HttpMethod(method),
            path=path,
            name=options.operation,
            inputs=inputs,
            expected=expected,
            exceptions=exceptions,
            comment=comment,
            annotations=options.annotations,
        )

    def parse_http_param(
        self,
        name: str,
        path_template: str | None,
        comment: str,
    ) -> ir.HttpParamSpec:
        """
        Parse ``name Type (header="X", default=literal)``.

        With a ``path_template`` the parameter is an input and is classified
        against the template; without one it is a response output, which is
        a header if it has a ``header`` option and the body otherwise.
        """
        parsed = self.parse_type_spec()
        options = self.parse_options("HttpParam", HTTP_PARAM_OPTIONS)
        spec = self.build_type_spec(parsed, Options())
        comment = self.merge_comment(comment, parsed.comment)
        comment = self.end_of_statement(comment)

        path_bound = False
        query = None
        if options.header is None and path_template is not None:
            source, key = parameter_source(path_template, name)
            path_bound = source == "path"
            query = key if source == "query" else None

        return ir.HttpParamSpec(
            name=name,
            spec=spec,
            default=options.default,
            path=path_bound,
            query=query,
            header=options.header,
            comment=comment,
            annotations={**parsed.options.annotations, **options.annotations},
        )

    def parse_http_expected(self, comment: str) -> ir.HttpExpectedSpec:
        """
        Parse the success response after ``expect``.

        Forms:
            expect 200 { item Item; etag String (header="ETag") }
            expect 200 Item
            expect 204
        """
        status = self.expect_int32()
        options = self.parse_options("HttpResponse", NO_OPTIONS)
        outputs: list[ir.HttpParamSpec] = []

        token = self.get_token()
        if token.type == TokenType.OPEN_BRACE:
            comment = self.parse_trailing_comment(comment)
            while True:
                done, item_comment = self.is_block_done("")
                if done:
                    break
                name_token = self.get_token()
                name = self.assert_identifier(name_token)
                if name in ("expect", "except"):
                    raise self.syntax_error(name_token)
                outputs.append(self.parse_http_param(name, None, item_comment))
        elif token.type == TokenType.SYMBOL:
            self.unget_token()
            parsed = self.parse_type_spec()
            outputs.append(
                ir.HttpParamSpec(name="body", spec=self.build_type_spec(parsed, Options()))
            )
        else:
            self.unget_token()

        comment = self.end_of_statement(comment)
        return ir.HttpExpectedSpec(
            status=status,
            outputs=outputs,
            comment=comment,
            annotations=options.annotations,
        )

    def parse_http_exception(self, comment: str) -> ir.HttpExceptionSpec:
        """Parse ``except 404 NotFound`` or ``except NotFound``."""
        token = self.get_token()
        status = None
        if token.type == TokenType.NUMBER:
            self.unget_token()
            status = self.expect_int32()
            type_name = self.expect_identifier()
        else:
            type_name = self.assert_identifier(token)
        options = self.parse_options("HttpException", NO_OPTIONS)
        comment = self.end_of_statement(comment)
        return ir.HttpExceptionSpec(
            status=status,
            type=type_name,
            comment=comment,
            annotations=options.annotations,
        )
