"""Descriptors produced by the compiler and consumed by an emitter.

Key classes:
- Type descriptors: PrimitiveType, TypeRef, ListType, MapType, NoValue,
  ResponseChannel
- Declarations: ClassDeclaration, EnumDeclaration (auxiliary types)
- ParameterBinding: one method parameter and where it travels
- MethodDescriptor: one generated interface method
- InterfaceDescriptor: the container handed to the emitter

Everything except InterfaceDescriptor is frozen. Type descriptors compare by
value, but the resolver also hands out the *same* TypeRef object for every
use of a named schema within a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

# Parameter locations
PATH = "path"
QUERY = "query"
HEADER = "header"
BODY = "body"
RESPONSE = "response"


@dataclass(frozen=True)
class PrimitiveType:
    """A built-in type of the target language, e.g. ``int`` or ``Long``."""

    name: str


@dataclass(frozen=True)
class TypeRef:
    """A reference to a declared auxiliary type."""

    name: str


@dataclass(frozen=True)
class ListType:
    item: TypeDescriptor


@dataclass(frozen=True)
class MapType:
    """String-keyed map, from ``additionalProperties``."""

    value: TypeDescriptor


@dataclass(frozen=True)
class NoValue:
    """Absence of a value: void / Unit / None."""


@dataclass(frozen=True)
class ResponseChannel:
    """Low-level response-writing handle; has no schema."""


NO_VALUE = NoValue()
RESPONSE_CHANNEL = ResponseChannel()

TypeDescriptor = Union[PrimitiveType, TypeRef, ListType, MapType, NoValue, ResponseChannel]


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    wire_name: str
    type: TypeDescriptor
    required: bool
    description: str = ""


@dataclass(frozen=True)
class ClassDeclaration:
    name: str
    fields: tuple[FieldDescriptor, ...]
    description: str = ""


@dataclass(frozen=True)
class EnumDeclaration:
    """An enum type.

    Attributes:
        name: Type name.
        value_type: Type of the raw values (string, integer, ...).
        members: ``(CONSTANT_NAME, raw_value)`` pairs in declaration order.
    """

    name: str
    value_type: TypeDescriptor
    members: tuple[tuple[str, Any], ...]
    description: str = ""


Declaration = Union[ClassDeclaration, EnumDeclaration]


@dataclass(frozen=True)
class ParameterBinding:
    """One method parameter.

    Attributes:
        name: Identifier used in code (camelCase).
        wire_name: Name as declared in the document (for annotations).
        location: path, query, header, body or response.
        type: Resolved type descriptor.
        required: Whether callers must supply it.
        default: Default rendered as a string, e.g. ``"20"`` or ``"true"``.
        default_value: The same default as written in the document.
    """

    name: str
    wire_name: str
    location: str
    type: TypeDescriptor
    required: bool
    default: str | None = None
    default_value: Any = None


@dataclass(frozen=True)
class Routing:
    http_method: str
    path: str
    produces: str | None = None
    consumes: str | None = None


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    return_type: TypeDescriptor
    parameters: tuple[ParameterBinding, ...]
    routing: Routing
    summary: str = ""


@dataclass
class InterfaceDescriptor:
    """Top-level output: methods plus the auxiliary types they reference."""

    name: str
    is_interface: bool = True
    title: str = ""
    version: str = ""
    methods: list[MethodDescriptor] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)

    def add_method(self, method: MethodDescriptor) -> None:
        self.methods.append(method)

    def declaration(self, name: str) -> Declaration | None:
        """Look up a declared type by name."""
        for decl in self.declarations:
            if decl.name == name:
                return decl
        return None
