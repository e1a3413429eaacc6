"""
Type specification IR for SADL.

A TypeSpec is a closed tagged union over the SADL base types plus a named
reference to another type. The ``type`` field carries the tag: the base type
name ("String", "Int32", "Struct", ...) or, for a reference, the referenced
type name. References are resolved lazily against the Model's type index, so
forward and self references are allowed.

Examples:
    - String (pattern="^[a-z]+$"): StringSpec(pattern="^[a-z]+$")
    - Array<Item> (maxsize=10): ArraySpec(items="Item", max_size=10)
    - Map<String,Int32>: MapSpec(keys="String", items="Int32")
    - Struct { name String }: StructSpec(fields=[StructFieldDef(...)])
    - Item: RefSpec(type="Item")
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

NUMBER_TYPES = ("Int8", "Int16", "Int32", "Int64", "Float32", "Float64", "Decimal")

NumberTypeName = Literal["Int8", "Int16", "Int32", "Int64", "Float32", "Float64", "Decimal"]

# Every name the type index knows without a TypeDef
BASE_TYPES = (
    "Bool",
    *NUMBER_TYPES,
    "Bytes",
    "String",
    "Timestamp",
    "UUID",
    "Array",
    "Map",
    "Struct",
    "Enum",
    "Union",
    "Any",
    "UnitValue",
)


class BoolSpec(BaseModel):
    """Bool base type."""

    type: Literal["Bool"] = "Bool"

    model_config = ConfigDict(frozen=True)


class NumberSpec(BaseModel):
    """Integer, float, or decimal type with optional inclusive bounds."""

    type: NumberTypeName = "Int32"
    min: Decimal | None = None
    max: Decimal | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_integer(self) -> bool:
        return self.type.startswith("Int")


class StringSpec(BaseModel):
    """
    String type with optional constraints.

    Attributes:
        pattern: Regular expression the value must contain a match for;
            may embed ``{OtherType}`` references to other String patterns
        values: Closed set of permitted values
        min_size: Minimum length
        max_size: Maximum length
        reference: Name of the type the string refers to (field level only)
    """

    type: Literal["String"] = "String"
    pattern: str | None = None
    values: list[str] | None = None
    min_size: int | None = None
    max_size: int | None = None
    reference: str | None = None

    model_config = ConfigDict(frozen=True)


class BytesSpec(BaseModel):
    """Opaque byte sequence with optional size bounds."""

    type: Literal["Bytes"] = "Bytes"
    min_size: int | None = None
    max_size: int | None = None

    model_config = ConfigDict(frozen=True)


class TimestampSpec(BaseModel):
    type: Literal["Timestamp"] = "Timestamp"

    model_config = ConfigDict(frozen=True)


class UUIDSpec(BaseModel):
    type: Literal["UUID"] = "UUID"
    reference: str | None = None

    model_config = ConfigDict(frozen=True)


class AnySpec(BaseModel):
    type: Literal["Any"] = "Any"

    model_config = ConfigDict(frozen=True)


class ArraySpec(BaseModel):
    """Ordered sequence of ``items``, which defaults to Any."""

    type: Literal["Array"] = "Array"
    items: str = "Any"
    min_size: int | None = None
    max_size: int | None = None

    model_config = ConfigDict(frozen=True)


class MapSpec(BaseModel):
    """Mapping from ``keys`` (default String) to ``items`` (default Any)."""

    type: Literal["Map"] = "Map"
    keys: str = "String"
    items: str = "Any"
    min_size: int | None = None
    max_size: int | None = None

    model_config = ConfigDict(frozen=True)


class UnitValueSpec(BaseModel):
    """A numeric ``value`` (default Decimal) qualified by a ``unit`` (default String)."""

    type: Literal["UnitValue"] = "UnitValue"
    value: str = "Decimal"
    unit: str = "String"

    model_config = ConfigDict(frozen=True)


class StructFieldDef(BaseModel):
    """
    A field of a Struct.

    Constraints given in the field's option list (pattern, values, min, max,
    minsize, maxsize, reference) live on the field's ``spec``. ``required``
    and ``default`` are mutually exclusive; this is checked by the validator.
    """

    name: str
    spec: TypeSpec
    required: bool = False
    default: Any = None
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class StructSpec(BaseModel):
    type: Literal["Struct"] = "Struct"
    fields: list[StructFieldDef] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def find_field(self, name: str) -> StructFieldDef | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


class EnumElementDef(BaseModel):
    symbol: str
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class EnumSpec(BaseModel):
    type: Literal["Enum"] = "Enum"
    elements: list[EnumElementDef] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def symbols(self) -> list[str]:
        return [el.symbol for el in self.elements]


class UnionVariantDef(BaseModel):
    """A named variant of a Union. ``Union<A,B>`` names each variant after its type."""

    name: str
    spec: TypeSpec
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class UnionSpec(BaseModel):
    type: Literal["Union"] = "Union"
    variants: list[UnionVariantDef] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class RefSpec(BaseModel):
    """A reference, by name, to a user-defined type."""

    type: str

    model_config = ConfigDict(frozen=True)


_SPEC_TAGS = {
    "Bool": "bool",
    "Bytes": "bytes",
    "String": "string",
    "Timestamp": "timestamp",
    "UUID": "uuid",
    "Any": "any",
    "Array": "array",
    "Map": "map",
    "Struct": "struct",
    "Enum": "enum",
    "Union": "union",
    "UnitValue": "unitvalue",
    **{name: "number" for name in NUMBER_TYPES},
}


def _spec_tag(value: Any) -> str:
    if isinstance(value, dict):
        name = value.get("type")
    else:
        name = getattr(value, "type", None)
    return _SPEC_TAGS.get(name, "ref")


TypeSpec = Annotated[
    Union[
        Annotated[BoolSpec, Tag("bool")],
        Annotated[NumberSpec, Tag("number")],
        Annotated[StringSpec, Tag("string")],
        Annotated[BytesSpec, Tag("bytes")],
        Annotated[TimestampSpec, Tag("timestamp")],
        Annotated[UUIDSpec, Tag("uuid")],
        Annotated[AnySpec, Tag("any")],
        Annotated[ArraySpec, Tag("array")],
        Annotated[MapSpec, Tag("map")],
        Annotated[StructSpec, Tag("struct")],
        Annotated[EnumSpec, Tag("enum")],
        Annotated[UnionSpec, Tag("union")],
        Annotated[UnitValueSpec, Tag("unitvalue")],
        Annotated[RefSpec, Tag("ref")],
    ],
    Discriminator(_spec_tag),
]


class TypeDef(BaseModel):
    """A named, top-level binding of a TypeSpec."""

    name: str
    spec: TypeSpec
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def type(self) -> str:
        """The base type tag of this definition."""
        return self.spec.type


def base_spec(name: str) -> TypeSpec:
    """Return the unconstrained spec for a base type name, or a reference."""
    tag = _SPEC_TAGS.get(name, "ref")
    if tag == "number":
        return NumberSpec(type=name)
    return {
        "bool": BoolSpec,
        "bytes": BytesSpec,
        "string": StringSpec,
        "timestamp": TimestampSpec,
        "uuid": UUIDSpec,
        "any": AnySpec,
        "array": ArraySpec,
        "map": MapSpec,
        "struct": StructSpec,
        "enum": EnumSpec,
        "union": UnionSpec,
        "unitvalue": UnitValueSpec,
    }.get(tag, lambda: RefSpec(type=name))()


# Rebuild models to resolve recursive references
StructFieldDef.model_rebuild()
UnionVariantDef.model_rebuild()
StructSpec.model_rebuild()
UnionSpec.model_rebuild()
TypeDef.model_rebuild()
