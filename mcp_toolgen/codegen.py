"""Render templates and write generated output.

render_module() produces the tools module text from extracted endpoints;
write_project() puts it on disk next to a requirements file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import jinja2

from .context_builder import build_context
from .models import Endpoint

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Runtime requirements of the generated module
GENERATED_REQUIREMENTS = ("fastmcp>=2.3", "httpx>=0.27")


def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


def render(context: dict[str, Any]) -> str:
    """Render the server template with a prepared context."""
    template = _environment().get_template("server.py.j2")
    return template.render(**context)


def render_module(
    endpoints: list[Endpoint] | tuple[Endpoint, ...],
    namespace: str,
    base_url: str | None = None,
) -> str:
    """Emit the tools module for the endpoints, in the order given."""
    return render(build_context(endpoints, namespace, base_url))


def _write_all(files: dict[Path, str]) -> None:
    """Write every file to a temp sibling, then move them all into place.

    A failed write leaves existing files untouched and no temp files behind.
    """
    pending: list[tuple[Path, Path]] = []
    try:
        for path, text in files.items():
            tmp = path.with_name(f".{path.name}.tmp")
            pending.append((tmp, path))
            tmp.write_text(text, encoding="utf-8")
        for tmp, path in pending:
            os.replace(tmp, path)
    finally:
        for tmp, _ in pending:
            tmp.unlink(missing_ok=True)


def write_project(
    source: str,
    output_dir: Path,
    module_name: str = "server",
    tool_count: int | None = None,
) -> Path:
    """Write the module and requirements.txt into output_dir.

    Safe to re-run: the directory may already exist and every file is
    replaced in one step.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    module_path = output_dir / f"{module_name}.py"
    _write_all({
        module_path: source,
        output_dir / "requirements.txt": "\n".join(GENERATED_REQUIREMENTS) + "\n",
    })

    if tool_count is not None:
        logger.info("Generated %s (%d tools)", module_path, tool_count)
    return module_path
