"""
HTTP binding IR for SADL.

An HttpDef binds an operation to a method and a path template. Inputs are
classified at parse time: a ``header=`` option makes a header parameter, a
``{name}`` placeholder in the path makes a path parameter, a ``key={name}``
pair in the query suffix makes a query parameter, and anything else is the
request body.

Example:
    http GET "/items/{id}?v={version}" (operation=getItem) {
        id String
        version Int32
        ifNoneMatch String (header="If-None-Match")
        expect 200 {
            item Item
            etag String (header="ETag")
        }
        except 404 NotFound
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .types import TypeSpec


class HttpMethod(str, Enum):
    """HTTP methods accepted by the ``http`` directive."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"


# Methods that may carry a request body
BODY_METHODS = frozenset({HttpMethod.POST, HttpMethod.PUT})


class HttpParamSpec(BaseModel):
    """
    An input or output parameter of an HTTP operation.

    Attributes:
        name: Parameter name
        spec: Parameter type
        default: Default literal, if any
        path: True if bound to a ``{name}`` path placeholder
        query: Query-string key the parameter is bound to, if any
        header: Header name the parameter is bound to, if any
    """

    name: str
    spec: TypeSpec
    default: Any = None
    path: bool = False
    query: str | None = None
    header: str | None = None
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def is_body(self) -> bool:
        return not (self.path or self.query or self.header)


class HttpExpectedSpec(BaseModel):
    """The success response: a status code and its header/body outputs."""

    status: int
    outputs: list[HttpParamSpec] = Field(default_factory=list)
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class HttpExceptionSpec(BaseModel):
    """An error response mapping a status code (None if unspecified) to an exception type."""

    status: int | None = None
    type: str
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class HttpDef(BaseModel):
    """An HTTP-bound operation."""

    method: HttpMethod
    path: str
    name: str | None = None
    inputs: list[HttpParamSpec] = Field(default_factory=list)
    expected: HttpExpectedSpec | None = None
    exceptions: list[HttpExceptionSpec] = Field(default_factory=list)
    comment: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def body_inputs(self) -> list[HttpParamSpec]:
        return [p for p in self.inputs if p.is_body]
