"""Build Jinja2 template context from extracted endpoints.

Turns each Endpoint into a tool definition for server.py.j2: Python
argument names, escaped literals, the URL f-string, query pairs and the
httpx call. All Python source fragments are produced here so the template
only lays them out.
"""

from __future__ import annotations

import keyword
import re
from typing import Any

from .models import BODY_METHODS, Endpoint, Parameter, RequestBody

PLACEHOLDER_BASE_URL = "https://api.example.com"

# Top-level names of the generated module; tool functions must not shadow them
RESERVED_MODULE_NAMES = frozenset({
    "json", "httpx", "Annotated", "Any", "Field", "FastMCP", "mcp", "BASE_URL",
    "Exception",
})

# Names the generated function bodies and annotations rely on
_RESERVED_ARG_NAMES = RESERVED_MODULE_NAMES | {"str", "type", "list", "dict"}

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
_INVALID_ARG_CHARS = re.compile(r"[^0-9A-Za-z_]")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_string(text: str) -> str:
    """Escape text for use inside a double-quoted Python string literal."""
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ch == "\x7f":
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    return "".join(out)


def py_string(text: str) -> str:
    """Return a double-quoted Python string literal for text."""
    return f'"{escape_string(text)}"'


def _fstring_text(text: str) -> str:
    """Escape literal text placed inside an f-string."""
    return escape_string(text).replace("{", "{{").replace("}", "}}")


def python_arg_name(raw: str, taken: set[str]) -> str:
    """Map a raw parameter name to a free, valid Python argument name.

    Leading underscores are dropped because MCP argument models cannot
    have private fields. The chosen name is added to ``taken``.
    """
    name = _INVALID_ARG_CHARS.sub("_", raw).lstrip("_")
    if not name or name[0].isdigit():
        name = f"p_{name}"
    if keyword.iskeyword(name) or name in _RESERVED_ARG_NAMES:
        name = f"{name}_"
    candidate = name
    suffix = 2
    while candidate in taken:
        candidate = f"{name}_{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def _param_description(param: Parameter) -> str:
    description = param.description
    if param.resolved_type != "str":
        description = f"{description} (expected type: {param.resolved_type})".strip()
    return description


def _signature_entry(arg: str, description: str, optional: bool = False) -> dict[str, Any]:
    if optional:
        annotation = f"Annotated[str | None, Field(description={py_string(description)})] = None"
    else:
        annotation = f"Annotated[str, Field(description={py_string(description)})]"
    return {"arg": arg, "annotation": annotation, "optional": optional}


def body_arg_name(body: RequestBody) -> str:
    """request_body for JSON payloads, request_data for everything else."""
    return "request_body" if "json" in body.content_type else "request_data"


def build_url_expr(path: str, path_args: dict[str, str], has_base_url: bool) -> str:
    """Build the f-string expression for the request URL.

    Declared path parameters are interpolated; any other text, including
    undeclared placeholders, stays literal.
    """
    pieces = ["{BASE_URL}" if has_base_url else "{_base_url}"]
    pos = 0
    for match in _PLACEHOLDER.finditer(path):
        pieces.append(_fstring_text(path[pos:match.start()]))
        arg = path_args.get(match.group(1))
        pieces.append(f"{{{arg}}}" if arg else _fstring_text(match.group(0)))
        pos = match.end()
    pieces.append(_fstring_text(path[pos:]))
    return 'f"' + "".join(pieces) + '"'


def _call_expr(endpoint: Endpoint, body_arg: str | None) -> str:
    method = endpoint.http_method.upper()
    if method == "GET":
        return "await _client.get(_url)"
    if method == "DELETE":
        return "await _client.delete(_url)"
    if method in BODY_METHODS:
        verb = method.lower()
        if body_arg is None:
            return f"await _client.{verb}(_url)"
        content_type = py_string(endpoint.request_body.content_type)
        return (
            f"await _client.{verb}(_url, content={body_arg},"
            f' headers={{"Content-Type": {content_type}}})'
        )
    return f"await _client.request({py_string(method)}, _url)"


def build_tool(endpoint: Endpoint, has_base_url: bool) -> dict[str, Any]:
    """Build the template definition of one tool function."""
    taken: set[str] = set()
    signature: list[dict[str, Any]] = []

    # path parameters, then body, then required query, then optional query
    path_args: dict[str, str] = {}
    for param in endpoint.path_parameters:
        arg = python_arg_name(param.name, taken)
        path_args[param.name] = arg
        signature.append(_signature_entry(arg, _param_description(param)))

    body_arg = None
    if endpoint.request_body is not None and endpoint.http_method.upper() in BODY_METHODS:
        body_arg = python_arg_name(body_arg_name(endpoint.request_body), taken)
        signature.append(_signature_entry(body_arg, endpoint.request_body.description))

    query: list[dict[str, Any]] = []
    ordered_query = endpoint.required_query_parameters + endpoint.optional_query_parameters
    for param in ordered_query:
        arg = python_arg_name(param.name, taken)
        signature.append(_signature_entry(arg, _param_description(param), optional=not param.required))
        query.append({
            "arg": arg,
            "required": param.required,
            "pair": f'f"{_fstring_text(param.name)}={{{arg}}}"',
        })

    return {
        "name": endpoint.tool_name,
        "description": py_string(endpoint.description),
        "signature": signature,
        "url": build_url_expr(endpoint.path, path_args, has_base_url),
        "query": query,
        "call": _call_expr(endpoint, body_arg),
        "method": py_string(endpoint.http_method.upper()),
        "endpoint": py_string(endpoint.path),
    }


def build_context(
    endpoints: list[Endpoint] | tuple[Endpoint, ...],
    namespace: str,
    base_url: str | None = None,
) -> dict[str, Any]:
    """Build the full template context for server.py.j2."""
    has_base_url = bool(base_url)
    return {
        "namespace": py_string(namespace),
        "namespace_doc": escape_string(namespace),
        "base_url": py_string(base_url) if has_base_url else None,
        "placeholder_base_url": py_string(PLACEHOLDER_BASE_URL),
        "tools": [build_tool(e, has_base_url) for e in endpoints],
        "tool_count": len(endpoints),
    }
