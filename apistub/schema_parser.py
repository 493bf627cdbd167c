"""Extract parameters, request bodies and success responses from operations.

Handles:
- path-item and operation parameter lists (operation entries win on the
  same name + location)
- $ref'd parameters, request bodies and responses
- classification into path, query and header bindings, in that order
- query defaults, rendered to strings for annotation-style emitters
- picking the 2xx response and its media type
"""

from __future__ import annotations

import logging
from typing import Any

from .loader import resolve_ref
from .model import HEADER, PATH, QUERY, ParameterBinding
from .naming import to_camel, to_pascal
from .type_resolver import BuildContext, TypeResolver

logger = logging.getLogger(__name__)

# Locations consumed by the classifier, in emission order
PARAMETER_LOCATIONS = (PATH, QUERY, HEADER)


def _deref(spec: dict[str, Any], node: dict[str, Any]) -> dict[str, Any]:
    """Follow a $ref on a parameter/requestBody/response object, if any."""
    seen: set[str] = set()
    while "$ref" in node and node["$ref"] not in seen:
        seen.add(node["$ref"])
        node = resolve_ref(spec, node["$ref"])
    return node


def render_default(value: Any) -> str | None:
    """Render a schema default the way annotation values expect it."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(render_default(v) or "" for v in value)
    return str(value)


def collect_parameters(
    spec: dict[str, Any],
    path_item: dict[str, Any],
    operation: dict[str, Any],
) -> list[dict[str, Any]]:
    """Merge path-item and operation parameters in declaration order."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in [*(path_item.get("parameters") or []), *(operation.get("parameters") or [])]:
        param = _deref(spec, raw)
        key = (param.get("name", ""), str(param.get("in", "")).lower())
        merged[key] = param
    return list(merged.values())


def _bind(
    param: dict[str, Any],
    location: str,
    resolver: TypeResolver,
    context: BuildContext,
    owner: str,
) -> ParameterBinding:
    wire_name = param.get("name", "")
    schema = param.get("schema") or {}
    param_type = resolver.resolve(schema, context, owner + to_pascal(wire_name))
    name = to_camel(wire_name) or wire_name

    if location == PATH:
        return ParameterBinding(name, wire_name, PATH, param_type, required=True)

    required = bool(param.get("required", False))
    if location == QUERY:
        default_value = schema.get("default")
        return ParameterBinding(
            name, wire_name, QUERY, param_type, required,
            default=render_default(default_value),
            default_value=default_value,
        )
    return ParameterBinding(name, wire_name, HEADER, param_type, required)


def classify_parameters(
    resolver: TypeResolver,
    context: BuildContext,
    path_item: dict[str, Any],
    operation: dict[str, Any],
    owner: str = "",
) -> list[ParameterBinding]:
    """Build path, then query, then header bindings for an operation.

    Locations are matched case-insensitively. Anything else (cookie, unknown)
    is skipped.
    """
    params = collect_parameters(context.spec, path_item, operation)
    by_location: dict[str, list[dict[str, Any]]] = {loc: [] for loc in PARAMETER_LOCATIONS}
    for param in params:
        location = str(param.get("in", "")).lower()
        if location in by_location:
            by_location[location].append(param)
        else:
            logger.debug("Skipping %s parameter %r", location or "unlocated", param.get("name"))

    bindings = []
    for location in PARAMETER_LOCATIONS:
        for param in by_location[location]:
            bindings.append(_bind(param, location, resolver, context, owner))
    return bindings


def select_success_content(spec: dict[str, Any], operation: dict[str, Any]) -> dict[str, Any] | None:
    """Return the content map of the first 2xx response.

    Status codes are compared as strings in ascending order, so "200" wins
    over "201" and both over "2XX" regardless of declaration order.
    """
    responses = operation.get("responses") or {}
    for status in sorted(responses, key=str):
        if str(status).startswith("2"):
            response = _deref(spec, responses[status] or {})
            return response.get("content") or None
    return None


def pick_media_type(content: dict[str, Any] | None) -> tuple[str, dict[str, Any]] | None:
    """Return the first (media type, media object) pair, if any."""
    if not content:
        return None
    media_type, media = next(iter(content.items()))
    return media_type, media or {}


def select_request_body(
    spec: dict[str, Any],
    operation: dict[str, Any],
) -> tuple[str, dict[str, Any], bool] | None:
    """Return (media type, schema, required) for the request body, if it has one."""
    body = operation.get("requestBody")
    if not body:
        return None
    body = _deref(spec, body)
    picked = pick_media_type(body.get("content"))
    if picked is None:
        return None
    media_type, media = picked
    schema = media.get("schema")
    if schema is None:
        return None
    return media_type, schema, bool(body.get("required", False))
