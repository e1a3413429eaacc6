"""
SADL Intermediate Representation (IR) types.

Types are organized into submodules and re-exported from this package.
"""

from .http import (
    BODY_METHODS,
    HttpDef,
    HttpExceptionSpec,
    HttpExpectedSpec,
    HttpMethod,
    HttpParamSpec,
)
from .schema import (
    ExampleDef,
    OperationDef,
    Schema,
)
from .types import (
    BASE_TYPES,
    NUMBER_TYPES,
    AnySpec,
    ArraySpec,
    BoolSpec,
    BytesSpec,
    EnumElementDef,
    EnumSpec,
    MapSpec,
    NumberSpec,
    RefSpec,
    StringSpec,
    StructFieldDef,
    StructSpec,
    TimestampSpec,
    TypeDef,
    TypeSpec,
    UnionSpec,
    UnionVariantDef,
    UnitValueSpec,
    UUIDSpec,
    base_spec,
)

__all__ = [
    # Types
    "BASE_TYPES",
    "NUMBER_TYPES",
    "TypeSpec",
    "AnySpec",
    "ArraySpec",
    "BoolSpec",
    "BytesSpec",
    "EnumElementDef",
    "EnumSpec",
    "MapSpec",
    "NumberSpec",
    "RefSpec",
    "StringSpec",
    "StructFieldDef",
    "StructSpec",
    "TimestampSpec",
    "TypeDef",
    "UnionSpec",
    "UnionVariantDef",
    "UnitValueSpec",
    "UUIDSpec",
    "base_spec",
    # HTTP
    "BODY_METHODS",
    "HttpDef",
    "HttpExceptionSpec",
    "HttpExpectedSpec",
    "HttpMethod",
    "HttpParamSpec",
    # Schema
    "ExampleDef",
    "OperationDef",
    "Schema",
]
