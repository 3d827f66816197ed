"""Generation options supplied by the host (CLI or a calling service)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_PROJECT_NAME = "GeneratedMcpServer"
DEFAULT_MODULE_NAME = "server"
DEFAULT_TIMEOUT = 30.0


def normalize_base_url(base_url: str | None) -> str | None:
    """Strip whitespace and trailing slashes; blank values mean no base URL."""
    if base_url is None:
        return None
    base_url = base_url.strip().rstrip("/")
    return base_url or None


@dataclass(frozen=True)
class GeneratorOptions:
    """Everything a generation run needs besides the document itself.

    ``verbose`` only changes logging, never the generated text.
    """

    source: str
    output_dir: Path
    project_name: str = DEFAULT_PROJECT_NAME
    namespace: str = ""
    base_url: str | None = None
    module_name: str = DEFAULT_MODULE_NAME
    verbose: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "base_url", normalize_base_url(self.base_url))
        if not self.namespace:
            object.__setattr__(self, "namespace", self.project_name)
        if not self.namespace.strip():
            raise ValueError("namespace must not be empty")
        if not self.module_name.isidentifier():
            raise ValueError(f"module_name {self.module_name!r} is not a valid Python identifier")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
