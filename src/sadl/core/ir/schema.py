"""
Schema IR for SADL.

The Schema is the raw result of parsing one source unit. It is immutable once
parsing completes and is handed to the Model constructor for indexing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .http import HttpDef
from .types import TypeDef


class OperationDef(BaseModel):
    """
    A transport-agnostic operation declared with ``action``.

    Example:
        action getItem(GetItemRequest) GetItemResponse except NotFound, BadRequest
    """

    name: str
    input: str | None = None
    output: str | None = None
    exceptions: list[str] = Field(default_factory=list)
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class ExampleDef(BaseModel):
    """
    An example value for a type, checked against the type during validation.

    Example:
        example Item (name=minimal) {"id": "item1", "price": 12.50}
    """

    target: str
    name: str | None = None
    example: Any = None
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class Schema(BaseModel):
    """Root of the parse result for one SADL source unit."""

    name: str = ""
    namespace: str = ""
    version: str = ""
    comment: str = ""
    base: str = ""
    types: list[TypeDef] = Field(default_factory=list)
    http: list[HttpDef] = Field(default_factory=list)
    operations: list[OperationDef] = Field(default_factory=list)
    examples: list[ExampleDef] = Field(default_factory=list)
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)
