"""Resolve OpenAPI schemas to type descriptors.

Handles:
- primitives (per-target table, with format refinements)
- arrays and string-keyed maps (additionalProperties)
- $ref to named schemas, declared once per run and reused
- inline objects and enums, declared under a derived name
- allOf flattening, single-branch oneOf/anyOf
- recursive schemas (the reference is memoized before fields are resolved)

The resolver only caches frozen PrimitiveType values, which are safe to share
across runs. All per-run state lives in BuildContext, which must not be
shared between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from .errors import UnsupportedSchemaShape
from .loader import get_schemas, ref_name, resolve_ref
from .model import (
    NO_VALUE,
    ClassDeclaration,
    Declaration,
    EnumDeclaration,
    FieldDescriptor,
    ListType,
    MapType,
    PrimitiveType,
    TypeDescriptor,
    TypeRef,
)
from .naming import to_camel, to_constant, to_pascal

logger = logging.getLogger(__name__)

_SCHEMA_PREFIX = "#/components/schemas/"


class BuildContext:
    """Per-run state: memoization table plus the growing declaration list.

    ``declarations`` is normally the InterfaceDescriptor's own list, so every
    declaration made here lands in the output model.
    """

    def __init__(self, spec: dict[str, Any], declarations: list[Declaration] | None = None) -> None:
        self.spec = spec
        self.declarations: list[Declaration] = declarations if declarations is not None else []
        self._refs: dict[str, TypeDescriptor] = {}
        self._inline: dict[int, TypeRef] = {}
        self.resolving: set[str] = set()
        self._taken: set[str] = set()
        # Component names are claimed up front so inline types never steal them
        self._component_names: dict[str, str] = {
            name: self._claim(to_pascal(name) or "Schema") for name in get_schemas(spec)
        }

    def _claim(self, name: str) -> str:
        candidate, n = name, 2
        while candidate in self._taken:
            candidate = f"{name}{n}"
            n += 1
        self._taken.add(candidate)
        return candidate

    def lookup(self, ref: str) -> TypeDescriptor | None:
        return self._refs.get(ref)

    def lookup_inline(self, schema: dict[str, Any]) -> TypeRef | None:
        return self._inline.get(id(schema))

    def reserve_ref(self, ref: str) -> TypeRef:
        """Create and memoize the reference for a named schema."""
        name = ref_name(ref)
        type_name = self._component_names.get(name) if ref.startswith(_SCHEMA_PREFIX) else None
        type_ref = TypeRef(type_name or self._claim(to_pascal(name) or "Schema"))
        self._refs[ref] = type_ref
        return type_ref

    def reserve_inline(self, schema: dict[str, Any], hint: str) -> TypeRef:
        """Create and memoize the reference for an anonymous schema."""
        type_ref = TypeRef(self._claim(to_pascal(hint) or "Inline"))
        self._inline[id(schema)] = type_ref
        return type_ref

    def remember(self, ref: str, type_desc: TypeDescriptor) -> None:
        self._refs[ref] = type_desc

    def declare(self, declaration: Declaration) -> None:
        logger.debug("Declared %s %s", type(declaration).__name__, declaration.name)
        self.declarations.append(declaration)


class TypeResolver(Protocol):
    """Strategy for mapping schemas to one target language's types."""

    def resolve(
        self,
        schema: dict[str, Any] | None,
        context: BuildContext,
        hint: str | None = None,
    ) -> TypeDescriptor:
        ...


@dataclass(frozen=True)
class PrimitiveTable:
    """Built-in type names of a target language.

    ``formats`` refines ``types`` for (type, format) pairs such as
    ("integer", "int64").
    """

    types: dict[str, str]
    formats: dict[tuple[str, str], str] = field(default_factory=dict)
    any_type: str = "Any"
    any_object: str = "Any"

    def lookup(self, schema_type: str, fmt: str | None) -> str | None:
        if fmt and (schema_type, fmt) in self.formats:
            return self.formats[(schema_type, fmt)]
        return self.types.get(schema_type)


PYTHON_PRIMITIVES = PrimitiveTable(
    types={"string": "str", "integer": "int", "number": "float", "boolean": "bool"},
    formats={
        ("string", "binary"): "bytes",
        ("string", "date"): "datetime.date",
        ("string", "date-time"): "datetime.datetime",
        ("string", "uuid"): "uuid.UUID",
    },
    any_type="Any",
    any_object="dict[str, Any]",
)

KOTLIN_PRIMITIVES = PrimitiveTable(
    types={"string": "String", "integer": "Int", "number": "Double", "boolean": "Boolean"},
    formats={
        ("integer", "int64"): "Long",
        ("number", "float"): "Float",
        ("string", "binary"): "ByteArray",
        ("string", "date"): "java.time.LocalDate",
        ("string", "date-time"): "java.time.OffsetDateTime",
        ("string", "uuid"): "java.util.UUID",
    },
    any_type="Any",
    any_object="Map<String, Any>",
)


class SchemaTypeResolver:
    """TypeResolver driven by a PrimitiveTable; one instance per target."""

    def __init__(self, primitives: PrimitiveTable) -> None:
        self.primitives = primitives
        self._builtin: dict[str, PrimitiveType] = {}

    def _builtin_type(self, name: str) -> PrimitiveType:
        if name not in self._builtin:
            self._builtin[name] = PrimitiveType(name)
        return self._builtin[name]

    def resolve(
        self,
        schema: dict[str, Any] | None,
        context: BuildContext,
        hint: str | None = None,
    ) -> TypeDescriptor:
        """Resolve a schema node to a type descriptor.

        ``hint`` names anonymous object/enum schemas that need a declaration.
        A missing schema resolves to NO_VALUE; an empty one to the any type.
        """
        if schema is None:
            return NO_VALUE
        label = hint or "<inline>"

        if "$ref" in schema:
            return self._resolve_ref(schema["$ref"], context)

        inner = _unwrap(schema, label)
        if inner is not schema:
            return self.resolve(inner, context, hint)

        if "allOf" in schema:
            return self._resolve_inline(schema, context, hint)

        if "not" in schema:
            raise UnsupportedSchemaShape(label, "'not' is not supported")

        if "enum" in schema:
            return self._resolve_inline(schema, context, hint)

        schema_type = _schema_type(schema, label)
        if schema_type == "array":
            item_hint = f"{hint}Item" if hint else None
            return ListType(self.resolve(schema.get("items") or {}, context, item_hint))
        if schema_type == "object" or "properties" in schema:
            if schema.get("properties"):
                return self._resolve_inline(schema, context, hint)
            additional = schema.get("additionalProperties")
            if isinstance(additional, dict) and additional:
                value_hint = f"{hint}Value" if hint else None
                return MapType(self.resolve(additional, context, value_hint))
            return self._builtin_type(self.primitives.any_object)
        if schema_type is None:
            return self._builtin_type(self.primitives.any_type)

        name = self.primitives.lookup(schema_type, schema.get("format"))
        if name is None:
            raise UnsupportedSchemaShape(label, f"unknown type {schema_type!r}")
        return self._builtin_type(name)

    def _resolve_ref(self, ref: str, context: BuildContext) -> TypeDescriptor:
        cached = context.lookup(ref)
        if cached is not None:
            return cached

        # A nullable wrapper around an object is declared under the component's name
        target = _unwrap(resolve_ref(context.spec, ref), ref_name(ref))
        if _declares_type(target):
            type_ref = context.reserve_ref(ref)
            self._declare(target, context, type_ref)
            return type_ref

        # Primitive/array/map aliases are inlined, no declaration
        if ref in context.resolving:
            raise UnsupportedSchemaShape(ref_name(ref), "alias refers to itself")
        context.resolving.add(ref)
        try:
            resolved = self.resolve(target, context, to_pascal(ref_name(ref)))
        finally:
            context.resolving.discard(ref)
        context.remember(ref, resolved)
        return resolved

    def _resolve_inline(self, schema: dict[str, Any], context: BuildContext, hint: str | None) -> TypeRef:
        cached = context.lookup_inline(schema)
        if cached is not None:
            return cached
        type_ref = context.reserve_inline(schema, hint or "Inline")
        self._declare(schema, context, type_ref)
        return type_ref

    def _declare(self, schema: dict[str, Any], context: BuildContext, type_ref: TypeRef) -> None:
        description = (schema.get("description") or "").strip()
        if "enum" in schema:
            context.declare(EnumDeclaration(
                name=type_ref.name,
                value_type=self._enum_value_type(schema),
                members=_enum_members(schema["enum"]),
                description=description,
            ))
            return

        if "allOf" in schema:
            schema = _flatten_all_of(context.spec, schema, type_ref.name)
        required = set(schema.get("required") or [])
        fields = []
        for wire_name, prop_schema in (schema.get("properties") or {}).items():
            prop_schema = prop_schema or {}
            field_type = self.resolve(prop_schema, context, type_ref.name + to_pascal(wire_name))
            fields.append(FieldDescriptor(
                name=to_camel(wire_name) or wire_name,
                wire_name=wire_name,
                type=field_type,
                required=wire_name in required,
                description=(prop_schema.get("description") or "").strip(),
            ))
        context.declare(ClassDeclaration(type_ref.name, tuple(fields), description))

    def _enum_value_type(self, schema: dict[str, Any]) -> TypeDescriptor:
        schema_type = schema.get("type")
        if not isinstance(schema_type, str):
            schema_type = "string"
        name = self.primitives.lookup(schema_type, schema.get("format")) or self.primitives.types["string"]
        return self._builtin_type(name)


def _schema_type(schema: dict[str, Any], label: str) -> str | None:
    """Return the schema's type, collapsing OpenAPI 3.1 ``[T, "null"]`` lists."""
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        types = [t for t in schema_type if t != "null"]
        if len(types) > 1:
            raise UnsupportedSchemaShape(label, f"multiple types {types}")
        return types[0] if types else None
    return schema_type


def _declares_type(schema: dict[str, Any]) -> bool:
    """Whether a named schema becomes its own declaration rather than an alias.

    ``schema`` must already be unwrapped.
    """
    if "$ref" in schema:
        return False
    if "allOf" in schema or "enum" in schema:
        return True
    return bool(schema.get("properties"))


# Keywords that give a schema (or allOf member) a shape of its own
_SHAPE_KEYWORDS = (
    "$ref", "type", "properties", "required", "enum", "items",
    "additionalProperties", "allOf", "oneOf", "anyOf", "not",
)


def _unwrap(schema: dict[str, Any], label: str) -> dict[str, Any]:
    """Strip wrappers that do not change the type.

    A oneOf/anyOf with one non-null branch becomes that branch, and an allOf
    whose other members only annotate (description, nullable, ...) becomes
    its one shaped member. Stops at a ``$ref``. Returns ``schema`` itself when
    there is nothing to strip.
    """
    while "$ref" not in schema:
        if "allOf" in schema:
            if schema.get("properties"):
                break
            shaped = [p for p in schema["allOf"] if any(k in p for k in _SHAPE_KEYWORDS)]
            if len(shaped) > 1:
                break
            schema = shaped[0] if shaped else {}
            continue
        key = "oneOf" if "oneOf" in schema else "anyOf" if "anyOf" in schema else None
        if key is None:
            break
        branches = [b for b in schema[key] if b.get("type") != "null"]
        if len(branches) != 1:
            raise UnsupportedSchemaShape(label, f"{key} with {len(branches)} alternatives")
        schema = branches[0]
    return schema


def _is_object_like(schema: dict[str, Any], label: str) -> bool:
    if any(k in schema for k in ("enum", "items", "oneOf", "anyOf", "not")):
        return False
    return _schema_type(schema, label) in (None, "object")


def _flatten_all_of(spec: dict[str, Any], schema: dict[str, Any], label: str) -> dict[str, Any]:
    """Merge allOf members into one object schema; every member must be an object."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    for part in [*schema["allOf"], schema]:
        while "$ref" in part:
            part = resolve_ref(spec, part["$ref"])
        if "allOf" in part and part is not schema:
            part = _flatten_all_of(spec, part, label)
        elif not _is_object_like(part, label):
            raise UnsupportedSchemaShape(label, "allOf member is not an object")
        properties.update(part.get("properties") or {})
        required.extend(part.get("required") or [])
    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "description": schema.get("description", ""),
    }


def _enum_members(values: list[Any]) -> tuple[tuple[str, Any], ...]:
    members = []
    seen: set[str] = set()
    for value in values:
        if value is None:
            continue
        name = base = to_constant(str(value))
        n = 2
        while name in seen:
            name = f"{base}_{n}"
            n += 1
        seen.add(name)
        members.append((name, value))
    return tuple(members)


_RESOLVERS: dict[str, PrimitiveTable] = {
    "python": PYTHON_PRIMITIVES,
    "kotlin": KOTLIN_PRIMITIVES,
}


def resolver_for(target: str) -> SchemaTypeResolver:
    """Return the built-in resolver for a target language."""
    try:
        return SchemaTypeResolver(_RESOLVERS[target])
    except KeyError:
        raise ValueError(f"no type resolver for target {target!r}") from None
