"""Render an InterfaceDescriptor to source text and write it out.

One jinja2 template per target language; type descriptors and identifiers
are spelled by target-specific filters.
"""

from __future__ import annotations

import keyword
import logging
import re
from pathlib import Path
from typing import Any, Callable

import jinja2

from .config import GeneratorConfig
from .model import (
    BODY,
    HEADER,
    PATH,
    QUERY,
    InterfaceDescriptor,
    ListType,
    MapType,
    NoValue,
    ParameterBinding,
    ResponseChannel,
    TypeDescriptor,
)

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

_TEMPLATES = {
    "python": "python.py.j2",
    "kotlin": "kotlin.kt.j2",
}

_KOTLIN_KEYWORDS = {
    "as", "break", "class", "continue", "do", "else", "false", "for", "fun", "if",
    "in", "interface", "is", "null", "object", "package", "return", "super", "this",
    "throw", "true", "try", "typealias", "typeof", "val", "var", "when", "while",
}

_SPRING_MAPPINGS = {
    "get": "GetMapping",
    "post": "PostMapping",
    "put": "PutMapping",
    "delete": "DeleteMapping",
    "patch": "PatchMapping",
}


def python_type(t: TypeDescriptor) -> str:
    """Spell a type descriptor in Python annotation syntax."""
    if isinstance(t, NoValue):
        return "None"
    if isinstance(t, ResponseChannel):
        return "Any"
    if isinstance(t, ListType):
        return f"list[{python_type(t.item)}]"
    if isinstance(t, MapType):
        return f"dict[str, {python_type(t.value)}]"
    return t.name


def kotlin_type(t: TypeDescriptor) -> str:
    """Spell a type descriptor in Kotlin syntax."""
    if isinstance(t, NoValue):
        return "Unit"
    if isinstance(t, ResponseChannel):
        return "HttpServletResponse"
    if isinstance(t, ListType):
        return f"List<{kotlin_type(t.item)}>"
    if isinstance(t, MapType):
        return f"Map<String, {kotlin_type(t.value)}>"
    return t.name


def python_ident(name: str) -> str:
    if not name:
        return "_"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def kotlin_ident(name: str) -> str:
    if not name or name[0].isdigit() or name in _KOTLIN_KEYWORDS:
        return f"`{name}`"
    return name


def kotlin_str(value: Any) -> str:
    """Quote a value as a Kotlin string literal."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{text}"'


def kotlin_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return kotlin_str(value)


def kotlin_param(p: ParameterBinding) -> str:
    """Render a parameter with its Spring binding annotation."""
    wire = kotlin_str(p.wire_name)
    required = "true" if p.required else "false"
    if p.location == PATH:
        annotation = f"@PathVariable(name = {wire}) "
    elif p.location == QUERY:
        members = [f"required = {required}", f"name = {wire}"]
        if p.default is not None:
            members.append(f"defaultValue = {kotlin_str(p.default)}")
        annotation = f"@RequestParam({', '.join(members)}) "
    elif p.location == HEADER:
        annotation = f"@RequestHeader(required = {required}, name = {wire}) "
    elif p.location == BODY:
        annotation = "@RequestBody " if p.required else "@RequestBody(required = false) "
    else:
        annotation = ""
    nullable = "" if p.required or p.default is not None else "?"
    return f"{annotation}{kotlin_ident(p.name)}: {kotlin_type(p.type)}{nullable}"


def doc_line(text: str) -> str:
    """Collapse a description to one line safe inside a docstring or comment."""
    text = re.sub(r"\s+", " ", text or "").strip()
    return text.replace("\\", "\\\\").replace('"""', "'''").replace("*/", "* /")


def python_param(p: ParameterBinding) -> str:
    """Render a keyword-only parameter with its annotation and default."""
    annotation = python_type(p.type)
    name = python_ident(p.name)
    if p.default_value is not None and not p.required:
        return f"{name}: {annotation} = {p.default_value!r}"
    if p.required:
        return f"{name}: {annotation}"
    return f"{name}: {annotation} | None = None"


def spring_mapping(http_method: str) -> str | None:
    return _SPRING_MAPPINGS.get(http_method.lower())


def _make_env(target: str) -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    filters: dict[str, Callable[..., Any]]
    if target == "kotlin":
        filters = {
            "type_name": kotlin_type,
            "ident": kotlin_ident,
            "kt_str": kotlin_str,
            "kt_literal": kotlin_literal,
            "kt_param": kotlin_param,
        }
        env.globals["spring_mapping"] = spring_mapping
    else:
        filters = {
            "type_name": python_type,
            "ident": python_ident,
            "py_param": python_param,
            "literal": repr,
        }
    filters["doc"] = doc_line
    env.filters.update(filters)
    return env


def render(interface: InterfaceDescriptor, config: GeneratorConfig) -> str:
    """Render the interface descriptor with the template for config.target."""
    env = _make_env(config.target)
    template = env.get_template(_TEMPLATES[config.target])
    return template.render(interface=interface, config=config)


def generate(interface: InterfaceDescriptor, config: GeneratorConfig, output_path: Path | str) -> Path:
    """Render and write the generated source to output_path."""
    output = render(interface, config)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output, encoding="utf-8")
    logger.info(
        "Generated %s (%d methods, %d types)",
        output_path, len(interface.methods), len(interface.declarations),
    )
    return output_path
