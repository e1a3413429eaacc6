"""
Type specification parsing for SADL.

Handles ``type`` directives and the recursive type-spec grammar shared by
struct fields, union variants, and HTTP parameters:

    typeSpec := IDENT ("<" IDENT ("," IDENT)* ">")?
              | "Struct" options? "{" fieldDef* "}"
              | "Enum" options? "{" enumElem* "}"
              | "Union" options? "{" variantDef* "}"

Each function returns the node it built; nothing is accumulated on the parser.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import Token, TokenType
from .options import FIELD_COMMON_OPTIONS, FIELD_OPTIONS, NO_OPTIONS, TYPE_OPTIONS, Options

# Number of generic parameters each parameterized type takes (-1: any number)
GENERIC_ARITY = {
    "Array": 1,
    "Map": 2,
    "UnitValue": 2,
    "Union": -1,
}

BODY_TYPES = ("Struct", "Enum", "Union")


@dataclass
class ParsedTypeSpec:
    """The pieces of a type spec before options are applied."""

    name: str
    token: Token
    params: list[str] | None = None
    fields: list[ir.StructFieldDef] = field(default_factory=list)
    elements: list[ir.EnumElementDef] = field(default_factory=list)
    variants: list[ir.UnionVariantDef] | None = None
    options: Options = field(default_factory=Options)
    comment: str = ""


class TypeParserMixin:
    """
    Mixin providing type spec parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        get_token: Any
        unget_token: Any
        assert_identifier: Any
        expect_identifier: Any
        error: Any
        syntax_error: Any
        end_of_file_error: Any
        merge_comment: Any
        end_of_statement: Any
        parse_trailing_comment: Any
        is_block_done: Any
        parse_options: Any

    def parse_type_directive(self, comment: str) -> ir.TypeDef:
        """
        Parse ``type Name TypeSpec (options)``.

        Examples:
            type Name String (maxsize=100)
            type Tags Array<String> (maxsize=20)
            type Item Struct { id String (required) }
        """
        name = self.expect_identifier()
        parsed = self.parse_type_spec()
        if parsed.name not in ir.BASE_TYPES:
            raise self.error(f"Super type must be a base type: {parsed.name}", parsed.token)

        options = self.parse_options(parsed.name, TYPE_OPTIONS.get(parsed.name, NO_OPTIONS))
        annotations = {**parsed.options.annotations, **options.annotations}
        spec = self.build_type_spec(parsed, options)
        comment = self.merge_comment(comment, parsed.comment)
        comment = self.end_of_statement(comment)
        return ir.TypeDef(name=name, spec=spec, comment=comment, annotations=annotations)

    def parse_type_spec(self) -> ParsedTypeSpec:
        """
        Parse a type name with its generic parameters or its body.

        The name is not resolved here; it may be a base type or any other
        type name, including one defined later in the source.
        """
        name_token = self.get_token()
        name = self.assert_identifier(name_token)
        token = self.get_token()

        if token.type == TokenType.OPEN_ANGLE:
            params = self._parse_type_params(name)
            return ParsedTypeSpec(name=name, token=name_token, params=params)

        if name in BODY_TYPES:
            options = Options()
            if token.type != TokenType.OPEN_BRACE:
                self.unget_token()
                options = self.parse_options(name, NO_OPTIONS)
                token = self.get_token()
                if token.type != TokenType.OPEN_BRACE:
                    self.unget_token()
                    return ParsedTypeSpec(name=name, token=name_token, options=options)

            parsed = ParsedTypeSpec(name=name, token=name_token, options=options)
            parsed.comment = self.parse_trailing_comment("")
            if name == "Struct":
                parsed.fields = self._parse_struct_body()
            elif name == "Enum":
                parsed.elements = self._parse_enum_body()
            else:
                parsed.variants = self._parse_union_body()
            parsed.comment = self.parse_trailing_comment(parsed.comment)
            return parsed

        self.unget_token()
        return ParsedTypeSpec(name=name, token=name_token)

    def _parse_type_params(self, name: str) -> list[str]:
        """Parse ``<A, B, ...>``; the opening angle is already consumed."""
        if name not in GENERIC_ARITY:
            raise self.syntax_error()
        expected = GENERIC_ARITY[name]
        params: list[str] = []
        while True:
            token = self.get_token()
            if token.type == TokenType.CLOSE_ANGLE:
                if expected >= 0 and len(params) != expected:
                    raise self.error(
                        f"Syntax error: {name} takes {expected} type parameter(s), found {len(params)}",
                        token,
                    )
                return params
            if token.type == TokenType.COMMA:
                continue
            if token.type == TokenType.EOF:
                raise self.end_of_file_error()
            params.append(self.assert_identifier(token))

    # -------------------------------------------------------------------------
    # Bodies
    # -------------------------------------------------------------------------

    def _parse_struct_body(self) -> list[ir.StructFieldDef]:
        fields: list[ir.StructFieldDef] = []
        while True:
            field_def = self.parse_struct_field_def()
            if field_def is None:
                return fields
            fields.append(field_def)

    def parse_struct_field_def(self) -> ir.StructFieldDef | None:
        """
        Parse one struct field, or return None at the closing brace.

        The acceptable options depend on the field's base type: String fields
        take pattern/values/minsize/maxsize/reference, numeric fields min/max,
        Bytes/Array/Map minsize/maxsize, UUID reference. Every field takes
        required and default.
        """
        done, comment = self.is_block_done("")
        if done:
            return None
        name = self.expect_identifier()
        parsed = self.parse_type_spec()
        acceptable = FIELD_OPTIONS.get(parsed.name, NO_OPTIONS) | FIELD_COMMON_OPTIONS
        options = self.parse_options(parsed.name, acceptable)
        spec = self.build_type_spec(parsed, options)
        comment = self.merge_comment(comment, parsed.comment)
        comment = self.end_of_statement(comment)
        return ir.StructFieldDef(
            name=name,
            spec=spec,
            required=options.required,
            default=options.default,
            comment=comment,
            annotations={**parsed.options.annotations, **options.annotations},
        )

    def _parse_enum_body(self) -> list[ir.EnumElementDef]:
        elements: list[ir.EnumElementDef] = []
        while True:
            element = self.parse_enum_element_def()
            if element is None:
                return elements
            elements.append(element)

    def parse_enum_element_def(self) -> ir.EnumElementDef | None:
        """Parse one enum symbol, or return None at the closing brace."""
        comment = ""
        while True:
            token = self.get_token()
            if token.type == TokenType.CLOSE_BRACE:
                return None
            if token.type == TokenType.LINE_COMMENT:
                comment = self.merge_comment(comment, token.value)
            elif token.type in (TokenType.SEMICOLON, TokenType.NEWLINE, TokenType.COMMA):
                continue
            elif token.type == TokenType.EOF:
                raise self.end_of_file_error()
            else:
                symbol = self.assert_identifier(token)
                break
        options = self.parse_options("Enum", NO_OPTIONS)
        comment = self.parse_trailing_comment(comment)
        return ir.EnumElementDef(symbol=symbol, comment=comment, annotations=options.annotations)

    def _parse_union_body(self) -> list[ir.UnionVariantDef]:
        variants: list[ir.UnionVariantDef] = []
        while True:
            done, comment = self.is_block_done("")
            if done:
                return variants
            name = self.expect_identifier()
            parsed = self.parse_type_spec()
            options = self.parse_options("Union", NO_OPTIONS)
            comment = self.merge_comment(comment, parsed.comment)
            comment = self.end_of_statement(comment)
            variants.append(
                ir.UnionVariantDef(
                    name=name,
                    spec=self.build_type_spec(parsed, options),
                    comment=comment,
                    annotations={**parsed.options.annotations, **options.annotations},
                )
            )

    # -------------------------------------------------------------------------
    # Building specs
    # -------------------------------------------------------------------------

    def build_type_spec(self, parsed: ParsedTypeSpec, options: Options) -> ir.TypeSpec:
        """Combine a parsed type spec with its options into an IR TypeSpec."""
        name = parsed.name
        if name in ir.NUMBER_TYPES:
            return ir.NumberSpec(type=name, min=options.min, max=options.max)
        if name == "String":
            return ir.StringSpec(
                pattern=options.pattern,
                values=options.values,
                min_size=options.min_size,
                max_size=options.max_size,
                reference=options.reference,
            )
        if name == "Bytes":
            return ir.BytesSpec(min_size=options.min_size, max_size=options.max_size)
        if name == "UUID":
            return ir.UUIDSpec(reference=options.reference)
        if name == "Array":
            items = self.array_params(parsed.params)
            return ir.ArraySpec(items=items, min_size=options.min_size, max_size=options.max_size)
        if name == "Map":
            keys, items = self.map_params(parsed.params)
            return ir.MapSpec(
                keys=keys,
                items=items,
                min_size=options.min_size,
                max_size=options.max_size,
            )
        if name == "UnitValue":
            value, unit = self.unit_value_params(parsed.params)
            return ir.UnitValueSpec(value=value, unit=unit)
        if name == "Struct":
            return ir.StructSpec(fields=parsed.fields)
        if name == "Enum":
            return ir.EnumSpec(elements=parsed.elements)
        if name == "Union":
            if parsed.variants is not None:
                return ir.UnionSpec(variants=parsed.variants)
            return ir.UnionSpec(
                variants=[
                    ir.UnionVariantDef(name=param, spec=ir.base_spec(param))
                    for param in parsed.params or []
                ]
            )
        return ir.base_spec(name)

    def array_params(self, params: list[str] | None) -> str:
        if not params:
            return "Any"
        if len(params) == 1:
            return params[0]
        raise self.syntax_error()

    def map_params(self, params: list[str] | None) -> tuple[str, str]:
        if not params:
            return "String", "Any"
        if len(params) == 2:
            return params[0], params[1]
        raise self.syntax_error()

    def unit_value_params(self, params: list[str] | None) -> tuple[str, str]:
        if not params:
            return "Decimal", "String"
        if len(params) == 2:
            return params[0], params[1]
        raise self.syntax_error()
