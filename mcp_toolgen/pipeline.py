"""Run a full generation: load -> extract -> emit -> write.

generate_source() is the pure part and works on an already parsed
document; run() adds reading the document and writing the project.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .codegen import render_module, write_project
from .config import GeneratorOptions
from .context_builder import RESERVED_MODULE_NAMES
from .extractor import extract_endpoints
from .loader import parse_spec, read_spec_text
from .models import Endpoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    source: str
    endpoints: tuple[Endpoint, ...]
    diagnostics: tuple[str, ...] = ()
    module_path: Path | None = None

    @property
    def tool_count(self) -> int:
        return len(self.endpoints)


def generate_source(spec: dict[str, Any], options: GeneratorOptions) -> GenerationResult:
    """Extract endpoints from a parsed document and emit the tools module."""
    extraction = extract_endpoints(spec, reserved_names=RESERVED_MODULE_NAMES)
    source = render_module(extraction.endpoints, options.namespace, options.base_url)
    return GenerationResult(
        source=source,
        endpoints=extraction.endpoints,
        diagnostics=extraction.diagnostics,
    )


def run(options: GeneratorOptions) -> GenerationResult:
    """Generate the MCP server project described by options.

    Raises AcquisitionError or SpecificationError before anything is
    written.
    """
    logger.info("Parsing OpenAPI document: %s", options.source)
    spec = parse_spec(read_spec_text(options.source, timeout=options.timeout))
    result = generate_source(spec, options)
    module_path = write_project(
        result.source,
        options.output_dir,
        module_name=options.module_name,
        tool_count=result.tool_count,
    )
    return dataclasses.replace(result, module_path=module_path)
