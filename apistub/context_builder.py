"""Build the interface descriptor from a parsed OpenAPI document.

Walks every (path, HTTP method) pair in declaration order, builds one
method descriptor per operation and collects them, together with the
auxiliary types the resolver declared, into one InterfaceDescriptor.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from .config import GeneratorConfig
from .errors import ApiStubError, MissingOperationIdentifier
from .loader import get_paths
from .model import (
    BODY,
    NO_VALUE,
    RESPONSE,
    RESPONSE_CHANNEL,
    InterfaceDescriptor,
    MethodDescriptor,
    ParameterBinding,
    Routing,
)
from .naming import to_camel, to_pascal
from .schema_parser import (
    classify_parameters,
    pick_media_type,
    select_request_body,
    select_success_content,
)
from .type_resolver import BuildContext, TypeResolver, resolver_for

logger = logging.getLogger(__name__)

# Operation keys of a path item, in the order they are emitted
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

REQUEST_PARAM = "request"
RESPONSE_PARAM = "response"


def interface_name(spec: dict[str, Any], config: GeneratorConfig) -> str:
    """Name the container: configured name, else Pascal-cased title + 'Api'."""
    if config.interface_name:
        return config.interface_name
    base = to_pascal(str((spec.get("info") or {}).get("title", "")))
    if base.lower().endswith("api"):
        return base[:-3] + "Api"
    return f"{base}Api"


def _deduplicate_parameter_names(
    bindings: list[ParameterBinding], reserved: set[str]
) -> list[ParameterBinding]:
    """Suffix names that clash with an earlier binding or a reserved name.

    'page_size' (query) and 'page-size' (header) both become pageSize;
    the second is renamed pageSize2. The wire name is left alone.
    """
    taken = set(reserved)
    result = []
    for binding in bindings:
        name, n = binding.name, 2
        while name in taken:
            name = f"{binding.name}{n}"
            n += 1
        if name != binding.name:
            logger.debug("Renamed parameter %s to %s", binding.name, name)
            binding = dataclasses.replace(binding, name=name)
        taken.add(name)
        result.append(binding)
    return result


def build_method(
    resolver: TypeResolver,
    context: BuildContext,
    interface: InterfaceDescriptor,
    path: str,
    path_item: dict[str, Any],
    http_method: str,
    operation: dict[str, Any],
    include_response_param: bool = False,
) -> MethodDescriptor:
    """Build one method descriptor and append it to the interface."""
    operation_id = str(operation.get("operationId") or "").strip()
    if not operation_id:
        raise MissingOperationIdentifier(http_method, path)
    name = to_camel(operation_id)
    owner = to_pascal(operation_id)
    spec = context.spec

    # Return type comes from the first media type of the 2xx response
    produced = pick_media_type(select_success_content(spec, operation))
    if produced is not None:
        produces, media = produced
        return_type = resolver.resolve(media.get("schema"), context, f"{owner}Response")
    else:
        produces, return_type = None, NO_VALUE

    params: list[ParameterBinding] = []
    consumes = None
    body = select_request_body(spec, operation)
    if body is not None:
        consumes, schema, required = body
        body_type = resolver.resolve(schema, context, f"{owner}Request")
        params.append(ParameterBinding(REQUEST_PARAM, REQUEST_PARAM, BODY, body_type, required))

    bound = classify_parameters(resolver, context, path_item, operation, owner)

    reserved = {p.name for p in params}
    if include_response_param:
        reserved.add(RESPONSE_PARAM)
    params.extend(_deduplicate_parameter_names(bound, reserved))

    if include_response_param:
        params.append(ParameterBinding(RESPONSE_PARAM, RESPONSE_PARAM, RESPONSE, RESPONSE_CHANNEL, True))

    method = MethodDescriptor(
        name=name,
        return_type=return_type,
        parameters=tuple(params),
        routing=Routing(http_method, path, produces, consumes),
        summary=(operation.get("summary") or operation.get("description") or "").strip(),
    )
    interface.add_method(method)
    logger.debug("Built %s for %s %s", name, http_method.upper(), path)
    return method


def build_interface(
    spec: dict[str, Any],
    config: GeneratorConfig | None = None,
    resolver: TypeResolver | None = None,
) -> InterfaceDescriptor:
    """Compile a whole document into one InterfaceDescriptor.

    Any error aborts the run; nothing partial is returned.
    """
    config = config or GeneratorConfig()
    resolver = resolver or resolver_for(config.target)
    info = spec.get("info") or {}
    interface = InterfaceDescriptor(
        name=interface_name(spec, config),
        is_interface=config.generate_interface,
        title=str(info.get("title", "")),
        version=str(info.get("version", "")),
    )
    context = BuildContext(spec, interface.declarations)

    for path, path_item in get_paths(spec).items():
        path_item = path_item or {}
        for http_method in HTTP_METHODS:
            operation = path_item.get(http_method)
            if operation is None:
                continue
            try:
                build_method(
                    resolver, context, interface, path, path_item, http_method, operation,
                    include_response_param=config.include_response_param,
                )
            except ApiStubError as exc:
                exc.locate(http_method, path, operation.get("operationId"))
                raise

    logger.info(
        "Built %s: %d methods, %d types",
        interface.name, len(interface.methods), len(interface.declarations),
    )
    return interface
