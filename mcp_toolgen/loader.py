"""Load and parse an OpenAPI document.

Reads a local file or fetches a URL, parses JSON or YAML, and resolves
local ``$ref`` pointers.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

from .errors import AcquisitionError, SpecificationError

logger = logging.getLogger(__name__)

USER_AGENT = "mcp-toolgen/0.1.0"
_ACCEPT = "application/json, application/yaml, text/plain"


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _fetch(url: str, timeout: float) -> str:
    """Fetch a document over HTTP. One attempt, no retries."""
    logger.info("Fetching OpenAPI document from %s", url)
    try:
        resp = httpx.get(
            url,
            headers={"Accept": _ACCEPT, "User-Agent": USER_AGENT},
            timeout=timeout,
            follow_redirects=True,
        )
    except httpx.TimeoutException as exc:
        raise AcquisitionError(f"Timeout while fetching OpenAPI document from {url}") from exc
    except httpx.HTTPError as exc:
        raise AcquisitionError(f"Error fetching OpenAPI document from {url}: {exc}") from exc

    if not resp.is_success:
        raise AcquisitionError(
            f"Failed to fetch OpenAPI document from {url}."
            f" Status: {resp.status_code} ({resp.reason_phrase})"
        )
    return resp.text


def read_spec_text(source: str, timeout: float = 30.0) -> str:
    """Return the raw document text from a file path or http(s) URL."""
    if _is_url(source):
        text = _fetch(source, timeout)
    else:
        spec_file = Path(source)
        if not spec_file.is_file():
            raise AcquisitionError(f"OpenAPI file not found: {source}")
        logger.info("Reading OpenAPI document from %s", spec_file)
        try:
            text = spec_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise AcquisitionError(f"Cannot read OpenAPI file {source}: {exc}") from exc

    if not text.strip():
        raise AcquisitionError(f"Empty OpenAPI document received from {source}")
    return text


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise SpecificationError(f"Duplicate key {key!r} in OpenAPI document")
        result[key] = value
    return result


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects repeated keys instead of keeping the last one."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            if not isinstance(key_node, yaml.ScalarNode) or key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise SpecificationError(
                    f"Duplicate key {key!r} in OpenAPI document (line {key_node.start_mark.line + 1})"
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def parse_spec(text: str) -> dict[str, Any]:
    """Parse document text (JSON or YAML) into a mapping."""
    stripped = text.strip()
    if not stripped:
        raise SpecificationError("OpenAPI document is empty")

    if stripped.startswith("{"):
        try:
            document = json.loads(stripped, object_pairs_hook=_reject_duplicate_keys)
        except json.JSONDecodeError as exc:
            raise SpecificationError(f"Invalid JSON in OpenAPI document: {exc}") from exc
    else:
        try:
            document = yaml.load(stripped, Loader=_UniqueKeyLoader)
        except yaml.YAMLError as exc:
            raise SpecificationError(f"Invalid YAML in OpenAPI document: {exc}") from exc

    if not isinstance(document, dict):
        raise SpecificationError("OpenAPI document root must be a mapping")
    return document


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Read and parse the OpenAPI document at ``source``."""
    return parse_spec(read_spec_text(source, timeout=timeout))


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract the ``paths`` mapping, which every usable document must have."""
    paths = spec.get("paths")
    if not isinstance(paths, dict):
        raise SpecificationError("OpenAPI document has no 'paths' mapping")
    return paths


def resolve_ref(spec: dict[str, Any], ref: str) -> Any:
    """Resolve a local ``#/...`` pointer in the document."""
    if not ref.startswith("#/"):
        raise SpecificationError(f"Unsupported $ref {ref!r}: only local references are resolved")
    node: Any = spec
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise SpecificationError(f"Unresolvable $ref {ref!r}")
        node = node[part]
    return node


def deref(spec: dict[str, Any], node: Any) -> Any:
    """Follow a chain of ``$ref`` objects until a concrete node is reached."""
    seen: set[str] = set()
    while isinstance(node, dict) and isinstance(node.get("$ref"), str):
        ref = node["$ref"]
        if ref in seen:
            raise SpecificationError(f"Circular $ref {ref!r}")
        seen.add(ref)
        node = resolve_ref(spec, ref)
    return node
