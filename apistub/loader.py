"""Load an OpenAPI document and follow its $ref pointers.

JSON files go through the json module, everything else through PyYAML.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import UnresolvableSchemaReference


def load_spec(path: Path | str) -> dict[str, Any]:
    """Load an OpenAPI document from disk."""
    spec_file = Path(path)
    with open(spec_file, encoding="utf-8") as f:
        if spec_file.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    return (spec.get("components") or {}).get("schemas") or {}


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec.

    Raises UnresolvableSchemaReference for external pointers and for
    pointers whose target does not exist.
    """
    if not ref.startswith("#/"):
        raise UnresolvableSchemaReference(ref, "only local references are supported")
    node: Any = spec
    for part in ref[2:].split("/"):
        key = _unescape(part)
        if isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        else:
            raise UnresolvableSchemaReference(ref, f"no {key!r} in document")
    if not isinstance(node, dict):
        raise UnresolvableSchemaReference(ref, "target is not an object")
    return node


def ref_name(ref: str) -> str:
    """Return the last segment of a $ref, e.g. 'Pet' for '#/components/schemas/Pet'."""
    return _unescape(ref.rsplit("/", 1)[-1])
