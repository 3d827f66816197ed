"""Build the ordered Endpoint list from a parsed OpenAPI document.

Paths are walked in declaration order and methods in declaration order
within each path item. Incomplete operations degrade to defaults and are
reported as diagnostics; only a document that cannot be walked at all
raises SpecificationError.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from typing import Any

from .errors import SpecificationError
from .loader import deref, get_paths
from .models import BODY_METHODS, Endpoint, Extraction, Parameter
from .naming import assign_unique_names, build_tool_name
from .schema_parser import parse_parameters, parse_request_body, parse_response

logger = logging.getLogger(__name__)

# Path item keys that are not operations
_PATH_ITEM_FIELDS = {"parameters", "summary", "description", "servers", "$ref"}


def _operations(path_item: dict[str, Any]) -> list[tuple[str, Any]]:
    return [
        (key, value)
        for key, value in path_item.items()
        if isinstance(key, str)
        and key not in _PATH_ITEM_FIELDS
        and not key.startswith("x-")
        and isinstance(value, dict)
    ]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _make_description(method: str, path: str, operation: dict[str, Any]) -> str:
    """summary -> description -> "METHOD path"."""
    return _text(operation.get("summary")) or _text(operation.get("description")) or f"{method} {path}"


def _by_location(params: list[Parameter], location: str) -> tuple[Parameter, ...]:
    return tuple(p for p in params if p.location == location)


def build_endpoint(
    spec: dict[str, Any],
    method: str,
    path: str,
    operation: dict[str, Any],
    path_item: dict[str, Any] | None = None,
    diagnostics: list[str] | None = None,
) -> Endpoint:
    """Build one Endpoint. The tool name is not yet deduplicated."""
    if diagnostics is None:
        diagnostics = []
    method = method.upper()
    label = f"{method} {path}"

    operation_id = operation.get("operationId")
    operation_id = operation_id if isinstance(operation_id, str) else None

    params = parse_parameters(spec, operation, path, path_item, diagnostics, label)

    request_body = parse_request_body(spec, operation, diagnostics, label)
    if request_body is not None and method not in BODY_METHODS:
        diagnostics.append(f"{label}: request body on a {method} operation is ignored")
        request_body = None

    return Endpoint(
        http_method=method,
        path=path,
        tool_name=build_tool_name(method, path, operation_id),
        description=_make_description(method, path, operation),
        path_parameters=_by_location(params, "path"),
        query_parameters=_by_location(params, "query"),
        header_parameters=_by_location(params, "header"),
        request_body=request_body,
        response=parse_response(spec, operation, diagnostics, label),
        operation_id=operation_id,
    )


def extract_endpoints(
    spec: dict[str, Any],
    reserved_names: Iterable[str] = (),
) -> Extraction:
    """Extract every operation of the document as an Endpoint.

    Tool names are made unique in document order; ``reserved_names`` are
    names the emitted module already uses at top level.
    """
    if not isinstance(spec, dict):
        raise SpecificationError("OpenAPI document root must be a mapping")
    paths = get_paths(spec)

    info = spec.get("info") if isinstance(spec.get("info"), dict) else {}
    logger.info(
        "OpenAPI info: %s v%s",
        info.get("title", "untitled"),
        info.get("version", "unknown"),
    )

    diagnostics: list[str] = []
    endpoints: list[Endpoint] = []
    seen: set[tuple[str, str]] = set()

    for path, raw_item in paths.items():
        path = str(path)
        try:
            path_item = deref(spec, raw_item)
        except SpecificationError as exc:
            diagnostics.append(f"{path}: path item skipped ({exc})")
            continue
        if not isinstance(path_item, dict):
            diagnostics.append(f"{path}: path item is not a mapping; skipped")
            continue

        for method, operation in _operations(path_item):
            key = (path, method.upper())
            if key in seen:
                raise SpecificationError(f"Duplicate operation {method.upper()} {path}")
            seen.add(key)
            endpoints.append(build_endpoint(spec, method, path, operation, path_item, diagnostics))

    names = assign_unique_names((e.tool_name for e in endpoints), reserved=reserved_names)
    renamed = []
    for endpoint, name in zip(endpoints, names):
        if name != endpoint.tool_name:
            diagnostics.append(
                f"{endpoint.http_method} {endpoint.path}: tool name {endpoint.tool_name!r}"
                f" already taken; renamed to {name!r}"
            )
            endpoint = dataclasses.replace(endpoint, tool_name=name)
        logger.debug("%s %s -> %s", endpoint.http_method, endpoint.path, endpoint.tool_name)
        renamed.append(endpoint)

    for message in diagnostics:
        logger.warning(message)
    logger.info("Found %d endpoints to convert", len(renamed))

    return Extraction(endpoints=tuple(renamed), diagnostics=tuple(diagnostics))
