"""
Decompile a Model back into SADL source.

The output is normalized rather than a copy of the original text: every
comment becomes a ``//`` line above the element it documents, unions use
the brace form, and the expected response of an http binding is always a
block. Reparsing the output yields an equal Schema.
"""

import re
from decimal import Decimal
from typing import Any

from . import ir
from .model import Model
from .values import format_decimal

INDENT = "    "

IDENTIFIER = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def quote(text: str) -> str:
    """Quote a string using only the escapes the scanner accepts."""
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def format_literal(value: Any) -> str:
    """Render a literal value (default or example) as SADL source."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format_decimal(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, list):
        return "[" + ", ".join(format_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        items = (f"{quote(str(k))}: {format_literal(v)}" for k, v in value.items())
        return "{" + ", ".join(items) + "}"
    return quote(str(value))


def format_annotations(annotations: dict[str, str]) -> list[str]:
    return [f"{key}={quote(value)}" if value else key for key, value in annotations.items()]


def _option_suffix(options: list[str]) -> str:
    return f" ({', '.join(options)})" if options else ""


def _comment_lines(comment: str, indent: str) -> list[str]:
    return [f"{indent}// {comment}"] if comment else []


def _spec_options(spec: ir.TypeSpec) -> list[str]:
    """The constraint options carried by a spec, in source order."""
    options: list[str] = []
    match spec:
        case ir.NumberSpec():
            if spec.min is not None:
                options.append(f"min={format_decimal(spec.min)}")
            if spec.max is not None:
                options.append(f"max={format_decimal(spec.max)}")
        case ir.StringSpec():
            if spec.pattern is not None:
                options.append(f"pattern={quote(spec.pattern)}")
            if spec.values is not None:
                options.append("values=[" + ", ".join(quote(v) for v in spec.values) + "]")
            if spec.reference is not None:
                options.append(f"reference={spec.reference}")
        case ir.UUIDSpec():
            if spec.reference is not None:
                options.append(f"reference={spec.reference}")
    min_size = getattr(spec, "min_size", None)
    max_size = getattr(spec, "max_size", None)
    if min_size is not None:
        options.append(f"minsize={min_size}")
    if max_size is not None:
        options.append(f"maxsize={max_size}")
    return options


def format_type_spec(spec: ir.TypeSpec, indent: str = "") -> str:
    """
    Render a spec without its options.

    Inline Struct, Enum and Union bodies span several lines; ``indent`` is
    the indentation of the line the type spec starts on.
    """
    inner = indent + INDENT
    match spec:
        case ir.ArraySpec():
            return f"Array<{spec.items}>"
        case ir.MapSpec():
            return f"Map<{spec.keys},{spec.items}>"
        case ir.UnitValueSpec():
            return f"UnitValue<{spec.value},{spec.unit}>"
        case ir.StructSpec():
            lines = ["Struct {"]
            for f in spec.fields:
                lines.extend(_comment_lines(f.comment, inner))
                options = _spec_options(f.spec)
                if f.required:
                    options.append("required")
                if f.default is not None:
                    options.append(f"default={format_literal(f.default)}")
                options.extend(format_annotations(f.annotations))
                lines.append(
                    f"{inner}{f.name} {format_type_spec(f.spec, inner)}{_option_suffix(options)}"
                )
            lines.append(f"{indent}}}")
            return "\n".join(lines)
        case ir.EnumSpec():
            lines = ["Enum {"]
            for el in spec.elements:
                lines.extend(_comment_lines(el.comment, inner))
                suffix = _option_suffix(format_annotations(el.annotations))
                lines.append(f"{inner}{el.symbol}{suffix}")
            lines.append(f"{indent}}}")
            return "\n".join(lines)
        case ir.UnionSpec():
            lines = ["Union {"]
            for variant in spec.variants:
                lines.extend(_comment_lines(variant.comment, inner))
                options = _spec_options(variant.spec) + format_annotations(variant.annotations)
                lines.append(
                    f"{inner}{variant.name} {format_type_spec(variant.spec, inner)}"
                    f"{_option_suffix(options)}"
                )
            lines.append(f"{indent}}}")
            return "\n".join(lines)
    return spec.type


def format_type_def(td: ir.TypeDef) -> list[str]:
    options = _spec_options(td.spec) + format_annotations(td.annotations)
    lines = _comment_lines(td.comment, "")
    lines.append(f"type {td.name} {format_type_spec(td.spec)}{_option_suffix(options)}")
    return lines


def format_operation(op: ir.OperationDef) -> list[str]:
    line = f"action {op.name}({op.input or ''})"
    if op.output:
        line += f" {op.output}"
    if op.exceptions:
        line += " except " + ", ".join(op.exceptions)
    line += _option_suffix(format_annotations(op.annotations))
    return _comment_lines(op.comment, "") + [line]


def _format_param(param: ir.HttpParamSpec, indent: str) -> list[str]:
    options: list[str] = []
    if param.header is not None:
        options.append(f"header={quote(param.header)}")
    if param.default is not None:
        options.append(f"default={format_literal(param.default)}")
    options.extend(format_annotations(param.annotations))
    lines = _comment_lines(param.comment, indent)
    lines.append(
        f"{indent}{param.name} {format_type_spec(param.spec, indent)}{_option_suffix(options)}"
    )
    return lines


def format_http(hd: ir.HttpDef) -> list[str]:
    options = [f"operation={hd.name}"] if hd.name else []
    options.extend(format_annotations(hd.annotations))
    lines = _comment_lines(hd.comment, "")
    lines.append(f"http {hd.method.value} {quote(hd.path)}{_option_suffix(options)} {{")
    for param in hd.inputs:
        lines.extend(_format_param(param, INDENT))

    if hd.expected is not None:
        expected = hd.expected
        lines.extend(_comment_lines(expected.comment, INDENT))
        suffix = _option_suffix(format_annotations(expected.annotations))
        lines.append(f"{INDENT}expect {expected.status}{suffix} {{")
        for output in expected.outputs:
            lines.extend(_format_param(output, INDENT * 2))
        lines.append(f"{INDENT}}}")

    for exc in hd.exceptions:
        lines.extend(_comment_lines(exc.comment, INDENT))
        status = f"{exc.status} " if exc.status is not None else ""
        suffix = _option_suffix(format_annotations(exc.annotations))
        lines.append(f"{INDENT}except {status}{exc.type}{suffix}")
    lines.append("}")
    return lines


def format_example(example: ir.ExampleDef) -> list[str]:
    options = [f"name={example.name}"] if example.name else []
    options.extend(format_annotations(example.annotations))
    lines = _comment_lines(example.comment, "")
    lines.append(
        f"example {example.target}{_option_suffix(options)} {format_literal(example.example)}"
    )
    return lines


def decompile(model: Model) -> str:
    """
    Generate SADL source for a Model.

    Sections are emitted in a fixed order: header directives and schema
    annotations, types, actions, http bindings, then examples.
    """
    header = _comment_lines(model.comment, "")
    if model.name:
        name = model.name if IDENTIFIER.fullmatch(model.name) else quote(model.name)
        header.append(f"name {name}")
    if model.namespace:
        header.append(f"namespace {quote(model.namespace)}")
    if model.version:
        header.append(f"version {quote(model.version)}")
    if model.base:
        header.append(f"base {quote(model.base)}")
    header.extend(format_annotations(model.annotations))

    blocks: list[list[str]] = []
    if header:
        blocks.append(header)
    blocks.extend(format_type_def(td) for td in model.types)
    blocks.extend(format_operation(op) for op in model.operations)
    blocks.extend(format_http(hd) for hd in model.http)
    blocks.extend(format_example(ex) for ex in model.examples)
    return "\n\n".join("\n".join(block) for block in blocks) + "\n"
