"""
Indexed model over a parsed Schema.

The Model seeds a name index with every base type, then adds the schema's
TypeDefs. Type references anywhere in the IR are plain names resolved
against this index, which is what makes forward and recursive references
work.
"""

import logging
import re
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from . import ir
from .errors import ModelError
from .values import UUID, Timestamp, UnitValue, format_decimal, is_integral, parse_decimal

logger = logging.getLogger(__name__)

# Implicit bounds of the integer types
INTEGER_LIMITS: dict[str, tuple[int, int]] = {
    "Int8": (-(2**7), 2**7 - 1),
    "Int16": (-(2**15), 2**15 - 1),
    "Int32": (-(2**31), 2**31 - 1),
    "Int64": (-(2**63), 2**63 - 1),
}

# A {TypeName} reference embedded in a String pattern
PATTERN_REFERENCE_RE = re.compile(r"\{([A-Za-z][A-Za-z0-9_]*)\}")


class Model:
    """
    A Schema plus its type, http, operation and example indexes.

    Raises:
        ModelError: On construction, if a type name is defined twice (base
            type names included), or an http or action name is reused
    """

    def __init__(self, schema: ir.Schema, extensions: dict[str, Any] | None = None):
        self.schema = schema
        self.extensions: dict[str, Any] = dict(extensions or {})
        self.warnings: list[str] = []
        self._types: dict[str, ir.TypeDef] = {
            name: ir.TypeDef(name=name, spec=ir.base_spec(name)) for name in ir.BASE_TYPES
        }
        self._http: dict[str, ir.HttpDef] = {}
        self._operations: dict[str, ir.OperationDef] = {}

        for td in schema.types:
            if td.name in self._types:
                raise ModelError(f"Duplicate type: {td.name}")
            self._types[td.name] = td
        for hd in schema.http:
            if hd.name is None:
                continue
            if hd.name in self._http:
                raise ModelError(f"Duplicate http action: {hd.name}")
            self._http[hd.name] = hd
        for op in schema.operations:
            if op.name in self._operations:
                raise ModelError(f"Duplicate action: {op.name}")
            self._operations[op.name] = op

        logger.debug(
            f"Built model '{schema.name}': {len(schema.types)} types, "
            f"{len(schema.http)} http, {len(schema.operations)} actions"
        )

    # -------------------------------------------------------------------------
    # Schema accessors
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def namespace(self) -> str:
        return self.schema.namespace

    @property
    def version(self) -> str:
        return self.schema.version

    @property
    def comment(self) -> str:
        return self.schema.comment

    @property
    def base(self) -> str:
        return self.schema.base

    @property
    def annotations(self) -> dict[str, str]:
        return self.schema.annotations

    @property
    def types(self) -> list[ir.TypeDef]:
        return self.schema.types

    @property
    def http(self) -> list[ir.HttpDef]:
        return self.schema.http

    @property
    def operations(self) -> list[ir.OperationDef]:
        return self.schema.operations

    @property
    def examples(self) -> list[ir.ExampleDef]:
        return self.schema.examples

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible form of the schema plus extension payloads."""
        data = self.schema.model_dump(mode="json", exclude_none=True)
        if self.extensions:
            data["extensions"] = {
                name: (
                    payload.model_dump(mode="json", exclude_none=True)
                    if isinstance(payload, BaseModel)
                    else payload
                )
                for name, payload in self.extensions.items()
            }
        return data

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_type(self, name: str) -> ir.TypeDef | None:
        """Look up a type by name; base types always resolve."""
        return self._types.get(name)

    def find_http(self, name: str) -> ir.HttpDef | None:
        return self._http.get(name)

    def find_operation(self, name: str) -> ir.OperationDef | None:
        return self._operations.get(name)

    def find_example(self, name: str) -> ir.ExampleDef | None:
        for example in self.schema.examples:
            if example.name == name:
                return example
        return None

    def resolve(self, spec: ir.TypeSpec) -> ir.TypeSpec | None:
        """
        Follow references until a base-typed spec is reached.

        Returns:
            The resolved spec, or None for an undefined name or a reference cycle
        """
        seen: set[str] = set()
        while isinstance(spec, ir.RefSpec):
            if spec.type in seen:
                return None
            seen.add(spec.type)
            td = self.find_type(spec.type)
            if td is None:
                return None
            spec = td.spec
        return spec

    def resolve_name(self, name: str) -> ir.TypeSpec | None:
        return self.resolve(ir.base_spec(name))

    def is_numeric_type(self, spec: ir.TypeSpec | str) -> bool:
        """True if the type spec (or named type) resolves to one of the number types."""
        resolved = self.resolve_name(spec) if isinstance(spec, str) else self.resolve(spec)
        return resolved is not None and resolved.type in ir.NUMBER_TYPES

    def expand_pattern(self, pattern: str) -> tuple[str, list[str]]:
        """
        Replace ``{TypeName}`` references in a pattern with that type's pattern.

        Expansion is one level deep: the referenced type must be a String
        with a pattern of its own, and its ``^``/``$`` anchors are dropped
        before embedding. Regex quantifiers such as ``{2,4}`` are left alone.

        Returns:
            Tuple of (expanded pattern, problems)
        """
        problems: list[str] = []

        def substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            td = self.find_type(name)
            if td is None or not isinstance(td.spec, ir.StringSpec) or not td.spec.pattern:
                problems.append(
                    f"Pattern reference '{{{name}}}' must name a String type with a pattern"
                )
                return match.group(0)
            return td.spec.pattern.removeprefix("^").removesuffix("$")

        return PATTERN_REFERENCE_RE.sub(substitute, pattern), problems

    # -------------------------------------------------------------------------
    # Type equivalence
    # -------------------------------------------------------------------------

    def equivalent_type_names(self, name1: str, name2: str) -> bool:
        if name1 == name2:
            return True
        td1 = self.find_type(name1)
        td2 = self.find_type(name2)
        if td1 is None or td2 is None:
            return False
        return self.equivalent_types(td1.spec, td2.spec)

    def equivalent_types(self, spec1: ir.TypeSpec, spec2: ir.TypeSpec) -> bool:
        """
        Compare two specs structurally.

        Enum symbols and String values compare as sets; struct fields compare
        by name, requiredness and type, in order.
        """
        if spec1.type != spec2.type:
            return False
        match spec1:
            case ir.StringSpec():
                return (
                    spec1.pattern == spec2.pattern
                    and spec1.min_size == spec2.min_size
                    and spec1.max_size == spec2.max_size
                    and spec1.reference == spec2.reference
                    and set(spec1.values or []) == set(spec2.values or [])
                    and (spec1.values is None) == (spec2.values is None)
                )
            case ir.UUIDSpec():
                return spec1.reference == spec2.reference
            case ir.BytesSpec():
                return spec1.min_size == spec2.min_size and spec1.max_size == spec2.max_size
            case ir.NumberSpec():
                return spec1.min == spec2.min and spec1.max == spec2.max
            case ir.ArraySpec():
                return (
                    spec1.min_size == spec2.min_size
                    and spec1.max_size == spec2.max_size
                    and self.equivalent_type_names(spec1.items, spec2.items)
                )
            case ir.MapSpec():
                return (
                    spec1.min_size == spec2.min_size
                    and spec1.max_size == spec2.max_size
                    and self.equivalent_type_names(spec1.keys, spec2.keys)
                    and self.equivalent_type_names(spec1.items, spec2.items)
                )
            case ir.UnitValueSpec():
                return self.equivalent_type_names(
                    spec1.value, spec2.value
                ) and self.equivalent_type_names(spec1.unit, spec2.unit)
            case ir.EnumSpec():
                return len(spec1.elements) == len(spec2.elements) and set(spec1.symbols) == set(
                    spec2.symbols
                )
            case ir.UnionSpec():
                names1 = {(v.name, v.spec.type) for v in spec1.variants}
                names2 = {(v.name, v.spec.type) for v in spec2.variants}
                return len(spec1.variants) == len(spec2.variants) and names1 == names2
            case ir.StructSpec():
                if len(spec1.fields) != len(spec2.fields):
                    return False
                for f1, f2 in zip(spec1.fields, spec2.fields):
                    if f1.name != f2.name or f1.required != f2.required:
                        return False
                    if not self.equivalent_types(f1.spec, f2.spec):
                        return False
                return True
        return True

    # -------------------------------------------------------------------------
    # Value validation
    # -------------------------------------------------------------------------

    def validate_value(self, context: str, type_name: str, value: Any) -> list[str]:
        """
        Check a literal value against a named type.

        Returns:
            List of problems (empty if the value is valid)
        """
        td = self.find_type(type_name)
        if td is None:
            return [f"Undefined type: {type_name}"]
        return self.validate_against_spec(context or type_name, td.spec, value)

    def validate_against_spec(self, context: str, spec: ir.TypeSpec, value: Any) -> list[str]:
        """
        Check a literal value against a type spec.

        Literal numbers arrive as Decimal and narrowing happens here; strings
        stand in for Timestamp, UUID and UnitValue values.

        Returns:
            List of problems (empty if the value is valid)
        """
        context = context or spec.type
        match spec:
            case ir.BoolSpec():
                if isinstance(value, bool):
                    return []
                return [f"{context}: Not valid: {_pretty(value)}"]
            case ir.NumberSpec():
                return self._validate_number(context, spec, value)
            case ir.StringSpec():
                return self._validate_string(context, spec, value)
            case ir.BytesSpec():
                return self._validate_bytes(context, spec, value)
            case ir.TimestampSpec():
                return self._validate_parsed(context, spec, value, Timestamp)
            case ir.UUIDSpec():
                return self._validate_parsed(context, spec, value, UUID)
            case ir.UnitValueSpec():
                return self._validate_unit_value(context, spec, value)
            case ir.AnySpec():
                return []
            case ir.ArraySpec():
                return self._validate_array(context, spec, value)
            case ir.MapSpec():
                return self._validate_map(context, spec, value)
            case ir.EnumSpec():
                if isinstance(value, str) and value in spec.symbols:
                    return []
                return [f"{context}: Not valid: {_pretty(value)}"]
            case ir.UnionSpec():
                return self._validate_union(context, spec, value)
            case ir.StructSpec():
                return self._validate_struct(context, spec, value)
            case ir.RefSpec():
                td = self.find_type(spec.type)
                if td is None:
                    return [f"{context}: no such type '{spec.type}'"]
                return self.validate_against_spec(context, td.spec, value)
        return []

    def _validate_number(self, context: str, spec: ir.NumberSpec, value: Any) -> list[str]:
        if isinstance(value, bool) or not isinstance(value, (Decimal, int, float)):
            return [f"{context}: Not a number: {_pretty(value)}"]
        number = value if isinstance(value, Decimal) else parse_decimal(str(value))

        low, high = spec.min, spec.max
        if spec.type in INTEGER_LIMITS:
            if not is_integral(number):
                return [f"{context}: Not an integer: {format_decimal(number)}"]
            type_low, type_high = INTEGER_LIMITS[spec.type]
            low = Decimal(type_low) if low is None else low
            high = Decimal(type_high) if high is None else high
        if low is not None and number < low:
            return [f"{context}: Numeric value less than the minimum allowed ({format_decimal(low)})"]
        if high is not None and number > high:
            return [
                f"{context}: Numeric value greater than the maximum allowed ({format_decimal(high)})"
            ]
        return []

    def _validate_string(self, context: str, spec: ir.StringSpec, value: Any) -> list[str]:
        if not isinstance(value, str):
            return [_fail(context, spec, value, "not a string")]
        if spec.min_size is not None and len(value) < spec.min_size:
            return [_fail(context, spec, value, f"'minsize={spec.min_size}' constraint failed")]
        if spec.max_size is not None and len(value) > spec.max_size:
            return [_fail(context, spec, value, f"'maxsize={spec.max_size}' constraint failed")]
        if spec.values is not None:
            if value in spec.values:
                return []
            return [_fail(context, spec, value, f"'values={spec.values}' constraint failed")]
        if spec.pattern:
            pattern, _ = self.expand_pattern(spec.pattern)
            try:
                matcher = re.compile(pattern)
            except re.error:
                return [
                    _fail(context, spec, value, f"Bad pattern in String type: {spec.pattern!r}")
                ]
            if not matcher.search(value):
                return [_fail(context, spec, value, f"'pattern={spec.pattern!r}' constraint failed")]
        return []

    def _validate_bytes(self, context: str, spec: ir.BytesSpec, value: Any) -> list[str]:
        if not isinstance(value, (str, bytes)):
            return [_fail(context, spec, value, "not a byte string")]
        if spec.min_size is not None and len(value) < spec.min_size:
            return [_fail(context, spec, value, f"'minsize={spec.min_size}' constraint failed")]
        if spec.max_size is not None and len(value) > spec.max_size:
            return [_fail(context, spec, value, f"'maxsize={spec.max_size}' constraint failed")]
        return []

    def _validate_parsed(self, context: str, spec: ir.TypeSpec, value: Any, kind: Any) -> list[str]:
        if isinstance(value, kind):
            return []
        if isinstance(value, str):
            try:
                kind.parse(value)
                return []
            except ValueError:
                pass
        return [_fail(context, spec, value, "format invalid")]

    def _validate_unit_value(self, context: str, spec: ir.UnitValueSpec, value: Any) -> list[str]:
        if isinstance(value, UnitValue):
            unit_value = value
        elif isinstance(value, str):
            try:
                unit_value = UnitValue.parse(value)
            except ValueError:
                return [f"{context}: Not valid: {_pretty(value)}"]
        else:
            return [f"{context}: Not valid: {_pretty(value)}"]
        problems = self.validate_value(f"{context}.value", spec.value, unit_value.value)
        problems += self.validate_value(f"{context}.unit", spec.unit, unit_value.unit)
        return problems

    def _validate_array(self, context: str, spec: ir.ArraySpec, value: Any) -> list[str]:
        if not isinstance(value, list):
            return [f"{context}: Not an Array: {_pretty(value)}"]
        problems: list[str] = []
        if spec.items != "Any":
            for i, item in enumerate(value):
                problems += self.validate_value(f"{context}[{i}]", spec.items, item)
        if spec.max_size is not None and len(value) > spec.max_size:
            problems.append(f"{context}: Array is too large (maxsize={spec.max_size})")
        if spec.min_size is not None and len(value) < spec.min_size:
            problems.append(f"{context}: Array is too small (minsize={spec.min_size})")
        return problems

    def _validate_map(self, context: str, spec: ir.MapSpec, value: Any) -> list[str]:
        if not isinstance(value, dict):
            return [f"{context}: Not a Map: {_pretty(value)}"]
        problems: list[str] = []
        # object keys are always strings, so only String and Enum key types constrain them
        key_spec = self.resolve_name(spec.keys) if spec.keys != "String" else None
        check_keys = key_spec is not None and key_spec.type in ("String", "Enum")
        for key, item in value.items():
            if check_keys:
                problems += self.validate_value(f"{context} key {key!r}", spec.keys, key)
            if spec.items != "Any":
                problems += self.validate_value(f"{context}[{key!r}]", spec.items, item)
        if spec.max_size is not None and len(value) > spec.max_size:
            problems.append(f"{context}: Map is too large (maxsize={spec.max_size})")
        if spec.min_size is not None and len(value) < spec.min_size:
            problems.append(f"{context}: Map is too small (minsize={spec.min_size})")
        return problems

    def _validate_union(self, context: str, spec: ir.UnionSpec, value: Any) -> list[str]:
        for variant in spec.variants:
            if not self.validate_against_spec(f"{context}.{variant.name}", variant.spec, value):
                return []
        return [f"{context}: Value matches no variant of the Union: {_pretty(value)}"]

    def _validate_struct(self, context: str, spec: ir.StructSpec, value: Any) -> list[str]:
        if not isinstance(value, dict):
            return [f"{context}: Not a Struct: {_pretty(value)}"]
        problems: list[str] = []
        for key in value:
            if spec.find_field(key) is None:
                problems.append(f"Undefined field in {context}: '{key}'")
        for f in spec.fields:
            if f.name in value:
                problems += self.validate_against_spec(f"{context}.{f.name}", f.spec, value[f.name])
            elif f.required:
                problems.append(f"{context} missing required field '{f.name}'")
        return problems


def _pretty(value: Any) -> str:
    if isinstance(value, Decimal):
        return format_decimal(value)
    return repr(value)


def _fail(context: str, spec: ir.TypeSpec, value: Any, message: str) -> str:
    return f"{context}: not a valid {spec.type} ({message}): {_pretty(value)}"
