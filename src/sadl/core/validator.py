"""
Semantic validation for SADL models.

Runs after the Model index is built, so every type reference can be
resolved. Each ``validate_*`` function walks one part of the model and
returns its problems; ``validate_model`` gathers them all and raises a
single ValidationError.
"""

import logging
import re
from collections.abc import Iterable
from typing import Any

from . import ir
from .dsl_parser_impl.http import template_variables
from .errors import make_validation_error
from .model import Model

logger = logging.getLogger(__name__)

# Named types a UnitValue unit may resolve to
UNIT_TYPES = ("String", "Enum")


def _duplicates(names: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for name in names:
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    return dupes


def _check_name(model: Model, name: str, context: str, errors: list[str]) -> None:
    if model.find_type(name) is None:
        errors.append(f"Undefined type '{name}' in {context}")


def _check_bounds(spec: Any, context: str, errors: list[str]) -> None:
    low = getattr(spec, "min", None)
    high = getattr(spec, "max", None)
    if low is not None and high is not None and low > high:
        errors.append(f"Minimum is greater than maximum in {context}")
    low = getattr(spec, "min_size", None)
    high = getattr(spec, "max_size", None)
    if low is not None and high is not None and low > high:
        errors.append(f"minsize is greater than maxsize in {context}")
    if low is not None and low < 0:
        errors.append(f"minsize cannot be negative in {context}")


def _check_string(model: Model, spec: ir.StringSpec, context: str, errors: list[str]) -> None:
    if spec.pattern is not None and spec.values is not None:
        errors.append(f"Cannot have both pattern and values in {context}")
    if spec.pattern:
        pattern, problems = model.expand_pattern(spec.pattern)
        errors.extend(f"{problem} in {context}" for problem in problems)
        try:
            re.compile(pattern)
        except re.error as e:
            errors.append(f"Bad pattern {spec.pattern!r} in {context}: {e}")
    if spec.reference is not None:
        _check_name(model, spec.reference, f"reference of {context}", errors)


def check_spec(
    model: Model,
    spec: ir.TypeSpec,
    context: str,
    errors: list[str],
    warnings: list[str],
    path: str = "",
) -> None:
    """
    Check one type spec, recursing into inline structs, enums and unions.

    Args:
        model: Model used to resolve type names
        spec: The type spec to check
        context: Human-readable location, e.g. "struct field 'Foo.b'"
        errors: Problems are appended here
        warnings: Non-fatal observations are appended here
        path: Dotted name of the element owning the type spec, e.g. "Foo.b"
    """
    _check_bounds(spec, context, errors)
    match spec:
        case ir.RefSpec():
            _check_name(model, spec.type, context, errors)
        case ir.StringSpec():
            _check_string(model, spec, context, errors)
        case ir.UUIDSpec():
            if spec.reference is not None:
                _check_name(model, spec.reference, f"reference of {context}", errors)
        case ir.ArraySpec():
            _check_name(model, spec.items, f"items of {context}", errors)
        case ir.MapSpec():
            _check_name(model, spec.keys, f"keys of {context}", errors)
            _check_name(model, spec.items, f"items of {context}", errors)
        case ir.UnitValueSpec():
            _check_unit_value(model, spec, context, errors)
        case ir.StructSpec():
            _check_struct(model, spec, path or context, errors, warnings)
        case ir.EnumSpec():
            if not spec.elements:
                warnings.append(f"Enum has no elements in {context}")
            for symbol in _duplicates(spec.symbols):
                errors.append(f"Duplicate enum symbol '{symbol}' in {context}")
        case ir.UnionSpec():
            for name in _duplicates([v.name for v in spec.variants]):
                errors.append(f"Duplicate union variant '{name}' in {context}")
            for variant in spec.variants:
                check_spec(
                    model,
                    variant.spec,
                    f"{context} variant '{variant.name}'",
                    errors,
                    warnings,
                    f"{path}.{variant.name}" if path else variant.name,
                )


def _check_unit_value(
    model: Model, spec: ir.UnitValueSpec, context: str, errors: list[str]
) -> None:
    if model.find_type(spec.value) is None:
        errors.append(f"Undefined type '{spec.value}' in value of {context}")
    elif not model.is_numeric_type(spec.value):
        errors.append(f"UnitValue value type must be numeric in {context}: {spec.value}")

    if model.find_type(spec.unit) is None:
        errors.append(f"Undefined type '{spec.unit}' in unit of {context}")
        return
    unit = model.resolve_name(spec.unit)
    if unit is None or unit.type not in UNIT_TYPES:
        errors.append(f"UnitValue unit type must be a String or Enum in {context}: {spec.unit}")


def _check_struct(
    model: Model,
    spec: ir.StructSpec,
    owner: str,
    errors: list[str],
    warnings: list[str],
) -> None:
    for name in _duplicates([f.name for f in spec.fields]):
        errors.append(f"Duplicate field '{name}' in struct '{owner}'")
    for f in spec.fields:
        field_context = f"struct field '{owner}.{f.name}'"
        check_spec(model, f.spec, field_context, errors, warnings, f"{owner}.{f.name}")
        if f.default is None:
            continue
        if f.required:
            errors.append(f"Cannot have a default value for required field {field_context}")
            continue
        problems = model.validate_against_spec(f"{owner}.{f.name}", f.spec, f.default)
        errors.extend(f"Bad default value for {field_context}: {p}" for p in problems)


def validate_types(model: Model) -> tuple[list[str], list[str]]:
    """
    Validate every TypeDef.

    Checks:
    - Struct field types, Array items and Map keys/items resolve
    - Required fields have no default; defaults satisfy the field's type
    - String pattern and values are not combined; patterns compile after
      ``{TypeName}`` expansion; references resolve
    - UnitValue value types are numeric and unit types String or Enum
    - No duplicate field, symbol or variant names

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []
    for td in model.types:
        check_spec(model, td.spec, f"type '{td.name}'", errors, warnings, td.name)
    return errors, warnings


def _http_label(hd: ir.HttpDef) -> str:
    return hd.name or f"{hd.method.value} {hd.path}"


def validate_http(model: Model) -> tuple[list[str], list[str]]:
    """
    Validate every HTTP binding.

    Checks:
    - POST/PUT have at most one body parameter; GET/DELETE have none
    - Every path template variable is bound to an input parameter
    - Parameter, output and exception types resolve; defaults are valid
    - At most one body output in the expected response

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for hd in model.http:
        label = _http_label(hd)

        for name in _duplicates([p.name for p in hd.inputs]):
            errors.append(f"Duplicate parameter '{name}' in http '{label}'")
        for param in hd.inputs:
            context = f"http parameter '{label}.{param.name}'"
            check_spec(model, param.spec, context, errors, warnings, f"{label}.{param.name}")
            if param.default is not None:
                problems = model.validate_against_spec(
                    f"{label}.{param.name}", param.spec, param.default
                )
                errors.extend(f"Bad default value for {context}: {p}" for p in problems)

        body = [p.name for p in hd.body_inputs]
        if hd.method in ir.BODY_METHODS:
            if len(body) > 1:
                errors.append(
                    f"HTTP {hd.method.value} '{label}' has more than one body parameter: "
                    + ", ".join(body)
                )
        elif body:
            errors.append(
                f"HTTP {hd.method.value} '{label}' parameters must be bound to the path, "
                f"query or a header: {', '.join(body)}"
            )

        bound = {p.name for p in hd.inputs if p.path or p.query}
        for variable in template_variables(hd.path):
            if variable not in bound:
                errors.append(
                    f"Path template variable '{variable}' of http '{label}' "
                    "has no matching input parameter"
                )

        if hd.expected is None:
            warnings.append(f"HTTP '{label}' has no expected response")
        else:
            outputs = hd.expected.outputs
            if not 100 <= hd.expected.status <= 599:
                errors.append(f"Bad HTTP status {hd.expected.status} in http '{label}'")
            body_outputs = [p.name for p in outputs if p.is_body]
            if len(body_outputs) > 1:
                errors.append(
                    f"HTTP '{label}' expected response has more than one body output: "
                    + ", ".join(body_outputs)
                )
            for output in outputs:
                check_spec(
                    model, output.spec, f"http output '{label}.{output.name}'", errors, warnings
                )

        for exc in hd.exceptions:
            if exc.status is not None and not 100 <= exc.status <= 599:
                errors.append(f"Bad HTTP status {exc.status} in http '{label}'")
            _check_name(model, exc.type, f"exception of http '{label}'", errors)

    return errors, warnings


def validate_operations(model: Model) -> tuple[list[str], list[str]]:
    """
    Validate every action: input, output and exception types must resolve.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []
    for op in model.operations:
        context = f"action '{op.name}'"
        if op.input is not None:
            _check_name(model, op.input, f"input of {context}", errors)
        if op.output is not None:
            _check_name(model, op.output, f"output of {context}", errors)
        for exc in op.exceptions:
            _check_name(model, exc, f"exceptions of {context}", errors)
    return errors, warnings


def validate_examples(model: Model) -> tuple[list[str], list[str]]:
    """
    Validate every example against its target type.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []
    for example in model.examples:
        label = example.name or example.target
        if model.find_type(example.target) is None:
            errors.append(f"Undefined type '{example.target}' in example '{label}'")
            continue
        problems = model.validate_value(label, example.target, example.example)
        errors.extend(f"Bad example '{label}': {p}" for p in problems)
    names = [e.name for e in model.examples if e.name]
    for name in _duplicates(names):
        errors.append(f"Duplicate example name: {name}")
    return errors, warnings


def validate_model(model: Model, extensions: Iterable[Any] = ()) -> list[str]:
    """
    Run every validation pass over the model.

    Args:
        model: The model to validate
        extensions: Extensions whose own ``validate`` pass should run too

    Returns:
        List of warnings

    Raises:
        ValidationError: With every problem found, if any
    """
    errors: list[str] = []
    warnings: list[str] = []
    for check in (validate_types, validate_http, validate_operations, validate_examples):
        errs, warns = check(model)
        errors.extend(errs)
        warnings.extend(warns)
    for extension in extensions:
        errors.extend(extension.validate(model))

    logger.info(
        f"Validated '{model.name}': {len(errors)} error(s), {len(warnings)} warning(s)"
    )
    if errors:
        raise make_validation_error(errors)
    return warnings
