"""Shared fixtures for generator tests.

The sample document covers the shapes the extractor has to handle:
$ref parameters and bodies, path-level parameters, header and cookie
parameters, non-JSON bodies and a custom verb.
"""

from __future__ import annotations

import copy
import functools
import importlib.util
import itertools
import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest


PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "components": {
        "schemas": {
            "User": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "format": "uuid"},
                    "name": {"type": "string"},
                },
            },
        },
        "parameters": {
            "Limit": {
                "name": "limit",
                "in": "query",
                "description": "Maximum number of users",
                "schema": {"type": "integer", "format": "int32"},
            },
        },
    },
    "paths": {
        "/users": {
            "get": {
                "summary": "List users",
                "parameters": [
                    {"$ref": "#/components/parameters/Limit"},
                    {"name": "tag", "in": "query", "required": True, "schema": {"type": "string"}},
                ],
                "responses": {
                    "200": {
                        "description": "OK",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/User"},
                                },
                            },
                        },
                    },
                },
            },
            "post": {
                "operationId": "createUser",
                "summary": "Create a user",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/User"}},
                    },
                },
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/users/{id}": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
            ],
            "get": {
                "description": "Fetch one user",
                "parameters": [
                    {"name": "X-Trace", "in": "header", "schema": {"type": "string"}},
                    {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                ],
                "responses": {
                    "default": {
                        "description": "The user",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/User"}},
                        },
                    },
                },
            },
            "delete": {
                "responses": {"204": {"description": "Deleted"}},
            },
        },
        "/users/{userId}/pets/{petId}": {
            "put": {
                "summary": "Replace a pet's notes",
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}},
                    {"name": "userId", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
                "requestBody": {
                    "content": {"text/plain": {"schema": {"type": "string"}}},
                },
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/reports": {
            "x-internal": {"note": "not an operation"},
            "search": {
                "summary": "Search reports",
                "parameters": [
                    {"name": "q", "in": "query", "schema": {"type": "string"}},
                ],
                "responses": {"200": {"description": "OK"}},
            },
        },
    },
}


@pytest.fixture
def petstore() -> dict[str, Any]:
    """A fresh copy of the sample document."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def petstore_file(tmp_path: Path, petstore: dict[str, Any]) -> Path:
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(petstore), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Generated module loading: executes emitted source (needs fastmcp)
# ---------------------------------------------------------------------------

_module_ids = itertools.count()


@pytest.fixture
def load_generated(tmp_path: Path) -> Callable[[str], Any]:
    """Return a callable that imports generated source as a fresh module."""
    pytest.importorskip("fastmcp")

    def _load(source: str) -> Any:
        name = f"generated_tools_{next(_module_ids)}"
        path = tmp_path / f"{name}.py"
        path.write_text(source, encoding="utf-8")
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    return _load


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch) -> Callable[[Callable[[httpx.Request], httpx.Response]], list[httpx.Request]]:
    """Route every httpx.AsyncClient through a MockTransport.

    Usage::

        requests = mock_http(lambda request: httpx.Response(200, json={}))
    """

    def _install(handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Request]:
        seen: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client_cls = functools.partial(httpx.AsyncClient, transport=httpx.MockTransport(_record))
        monkeypatch.setattr(httpx, "AsyncClient", client_cls)
        return seen

    return _install
