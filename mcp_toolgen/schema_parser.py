"""Extract parameters, request bodies and responses from OpenAPI operations.

Handles:
- Schema kind/format -> Python type name (resolve_schema_type)
- Path-item and operation level parameters, operation wins on (name, in)
- $ref resolution for parameters, request bodies, responses and schemas
- Path parameters not present in the template
- cookie / unknown parameter locations (dropped)
- First 2xx response, falling back to "default"

Nothing here raises for an incomplete operation. Problems are appended to
the caller's ``diagnostics`` list and the element is defaulted or dropped.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import SpecificationError
from .loader import deref, resolve_ref
from .models import LOCATIONS, Parameter, RequestBody, Response

# Opaque object: object schemas, unknown kinds and missing schemas
OPAQUE_TYPE = "Any"

DEFAULT_CONTENT_TYPE = "application/json"

_STRING_FORMATS: dict[str, str] = {
    "date": "datetime",
    "date-time": "datetime",
    "uuid": "UUID",
    "byte": "bytes",
    "binary": "bytes",
}

_NUMBER_FORMATS: dict[str, str] = {
    "float": "float",
    "double": "float",
    "decimal": "Decimal",
}

_SIMPLE_KINDS: dict[str, str] = {
    "integer": "int",
    "boolean": "bool",
}

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def resolve_schema_type(
    spec: dict[str, Any] | None,
    schema: Any,
    _seen: frozenset[str] = frozenset(),
) -> str:
    """Resolve an OpenAPI schema to a Python type name.

    ``spec`` is only consulted for ``$ref`` lookups and may be None.
    """
    if not isinstance(schema, dict) or not schema:
        return OPAQUE_TYPE

    if "$ref" in schema:
        ref = schema["$ref"]
        if not spec or not isinstance(ref, str) or ref in _seen:
            return OPAQUE_TYPE
        try:
            resolved = resolve_ref(spec, ref)
        except SpecificationError:
            return OPAQUE_TYPE
        return resolve_schema_type(spec, resolved, _seen | {ref})

    kind = schema.get("type")
    if isinstance(kind, list):
        # OpenAPI 3.1: ["string", "null"]
        kind = next((k for k in kind if k != "null"), None)
    if not isinstance(kind, str):
        return OPAQUE_TYPE
    kind = kind.lower()

    fmt = schema.get("format")
    fmt = fmt.lower() if isinstance(fmt, str) else ""

    if kind == "string":
        return _STRING_FORMATS.get(fmt, "str")
    if kind == "number":
        return _NUMBER_FORMATS.get(fmt, "float")
    if kind in _SIMPLE_KINDS:
        return _SIMPLE_KINDS[kind]
    if kind == "array":
        item_type = resolve_schema_type(spec, schema.get("items"), _seen)
        return f"list[{item_type}]"
    return OPAQUE_TYPE


def path_placeholders(path: str) -> list[str]:
    """Return the {name} placeholders of a path template in order."""
    return _PLACEHOLDER.findall(path)


def _first_media(content: Any) -> tuple[str | None, dict[str, Any]]:
    """First (content type, media object) pair in document order."""
    if not isinstance(content, dict) or not content:
        return None, {}
    content_type, media = next(iter(content.items()))
    return str(content_type), media if isinstance(media, dict) else {}


def _param_schema(param: dict[str, Any]) -> Any:
    if "schema" in param:
        return param["schema"]
    if "content" in param:
        return _first_media(param["content"])[1].get("schema")
    if "type" in param:
        # Swagger 2.0 style: type/format on the parameter itself
        return param
    return None


def _collect_raw_parameters(
    spec: dict[str, Any],
    sources: list[Any],
    label: str,
    diagnostics: list[str],
) -> list[dict[str, Any]]:
    """Merge parameter lists; later lists override earlier on (name, in)."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw_params in sources:
        if raw_params is None:
            continue
        if not isinstance(raw_params, list):
            diagnostics.append(f"{label}: 'parameters' is not a list; ignored")
            continue
        for raw in raw_params:
            try:
                param = deref(spec, raw)
            except SpecificationError as exc:
                diagnostics.append(f"{label}: parameter skipped ({exc})")
                continue
            if not isinstance(param, dict):
                diagnostics.append(f"{label}: parameter is not a mapping; skipped")
                continue
            name = param.get("name")
            if not isinstance(name, str) or not name:
                diagnostics.append(f"{label}: parameter without a name; skipped")
                continue
            location = str(param.get("in", "query")).lower()
            merged[(name, location)] = param
    return list(merged.values())


def parse_parameters(
    spec: dict[str, Any],
    operation: dict[str, Any],
    path: str,
    path_item: dict[str, Any] | None = None,
    diagnostics: list[str] | None = None,
    label: str = "",
) -> list[Parameter]:
    """Parse path, query and header parameters for an operation.

    Returned in declaration order (path-item level first). Path parameters
    are kept only when the template has a matching placeholder.
    """
    if diagnostics is None:
        diagnostics = []
    label = label or path
    placeholders = set(path_placeholders(path))
    sources = [(path_item or {}).get("parameters"), operation.get("parameters")]

    params: list[Parameter] = []
    for raw in _collect_raw_parameters(spec, sources, label, diagnostics):
        name = raw["name"]
        location = str(raw.get("in", "query")).lower()

        if location not in LOCATIONS:
            diagnostics.append(f"{label}: {location} parameter {name!r} is not supported; dropped")
            continue
        if location == "path" and name not in placeholders:
            diagnostics.append(f"{label}: path parameter {name!r} is not in the path template; dropped")
            continue

        params.append(Parameter(
            name=name,
            resolved_type=resolve_schema_type(spec, _param_schema(raw)),
            location=location,
            required=True if location == "path" else bool(raw.get("required", False)),
            description=str(raw.get("description") or ""),
        ))

    return params


def parse_request_body(
    spec: dict[str, Any],
    operation: dict[str, Any],
    diagnostics: list[str] | None = None,
    label: str = "",
) -> RequestBody | None:
    """Build the RequestBody from the first declared content type."""
    raw = operation.get("requestBody")
    if raw is None:
        return None
    try:
        body = deref(spec, raw)
    except SpecificationError as exc:
        if diagnostics is not None:
            diagnostics.append(f"{label}: request body skipped ({exc})")
        return None
    if not isinstance(body, dict):
        if diagnostics is not None:
            diagnostics.append(f"{label}: request body is not a mapping; skipped")
        return None

    content_type, media = _first_media(body.get("content"))
    content_type = content_type or DEFAULT_CONTENT_TYPE
    schema = media.get("schema")

    return RequestBody(
        content_type=content_type,
        schema_type=resolve_schema_type(spec, schema) if schema else OPAQUE_TYPE,
        required=bool(body.get("required", False)),
        description=str(body.get("description") or f"Request body data in {content_type} format"),
    )


def _select_response(responses: dict[Any, Any]) -> Any:
    for status, response in responses.items():
        if str(status).startswith("2"):
            return response
    return responses.get("default")


def parse_response(
    spec: dict[str, Any],
    operation: dict[str, Any],
    diagnostics: list[str] | None = None,
    label: str = "",
) -> Response | None:
    """Describe the first 2xx response, or the "default" one."""
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return None
    raw = _select_response(responses)
    if raw is None:
        return None
    try:
        response = deref(spec, raw)
    except SpecificationError as exc:
        if diagnostics is not None:
            diagnostics.append(f"{label}: response skipped ({exc})")
        return None
    if not isinstance(response, dict):
        return None

    content_type, media = _first_media(response.get("content"))
    schema = media.get("schema")
    return Response(
        content_type=content_type,
        schema_type=resolve_schema_type(spec, schema) if schema else OPAQUE_TYPE,
        description=str(response.get("description") or ""),
    )
