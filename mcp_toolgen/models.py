"""Normalized endpoint model extracted from an OpenAPI document.

Records are frozen and built once per run; renaming goes through
``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass

# Verbs whose generated wrappers accept a request body
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

LOCATIONS = ("path", "query", "header")


@dataclass(frozen=True)
class Parameter:
    name: str
    resolved_type: str
    location: str
    required: bool = False
    description: str = ""


@dataclass(frozen=True)
class RequestBody:
    content_type: str
    schema_type: str
    required: bool = False
    description: str = ""


@dataclass(frozen=True)
class Response:
    content_type: str | None
    schema_type: str
    status_code: str = "200"
    description: str = ""


@dataclass(frozen=True)
class Endpoint:
    """One (path, method) operation; the unit of code generation."""

    http_method: str
    path: str
    tool_name: str
    description: str
    path_parameters: tuple[Parameter, ...] = ()
    query_parameters: tuple[Parameter, ...] = ()
    header_parameters: tuple[Parameter, ...] = ()
    request_body: RequestBody | None = None
    response: Response | None = None
    operation_id: str | None = None

    @property
    def required_query_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.query_parameters if p.required)

    @property
    def optional_query_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.query_parameters if not p.required)


@dataclass(frozen=True)
class Extraction:
    """Endpoints in document order plus non-fatal diagnostics."""

    endpoints: tuple[Endpoint, ...]
    diagnostics: tuple[str, ...] = ()
