"""Entry point: python -m mcp_toolgen

Reads an OpenAPI document (file or URL), generates <output>/server.py.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from .config import DEFAULT_MODULE_NAME, DEFAULT_PROJECT_NAME, DEFAULT_TIMEOUT, GeneratorOptions
from .errors import ToolgenError
from .pipeline import run

logger = logging.getLogger("mcp_toolgen")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.command()
@click.option("-o", "--openapi", "source", required=True, help="Path or http(s) URL of the OpenAPI document.")
@click.option("-out", "--output", required=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory for the generated server.")
@click.option("-n", "--name", "project_name", default=DEFAULT_PROJECT_NAME, show_default=True, help="Project name.")
@click.option("-ns", "--namespace", default="", help="Server namespace (defaults to the project name).")
@click.option("-b", "--base-url", default=None, envvar="MCP_TOOLGEN_BASE_URL", help="Fixed API base URL baked into the generated tools.")
@click.option("--module-name", default=DEFAULT_MODULE_NAME, show_default=True, help="File name (without .py) of the generated module.")
@click.option("--timeout", default=DEFAULT_TIMEOUT, type=float, envvar="MCP_TOOLGEN_TIMEOUT", show_default=True, help="Timeout in seconds when fetching a URL.")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
def main(
    source: str,
    output: Path,
    project_name: str,
    namespace: str,
    base_url: str | None,
    module_name: str,
    timeout: float,
    verbose: bool,
) -> None:
    """Generate an MCP server module from an OpenAPI document."""
    _configure_logging(verbose)
    try:
        options = GeneratorOptions(
            source=source,
            output_dir=output,
            project_name=project_name,
            namespace=namespace,
            base_url=base_url,
            module_name=module_name,
            verbose=verbose,
            timeout=timeout,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    try:
        result = run(options)
    except ToolgenError as exc:
        logger.debug("Generation failed", exc_info=True)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Generated {result.module_path} ({result.tool_count} tools)")
    if result.diagnostics:
        click.echo(f"{len(result.diagnostics)} warnings reported while extracting endpoints")
    if not options.base_url:
        click.echo("No --base-url given: set the API base URL in the generated module before use")


if __name__ == "__main__":
    main()
