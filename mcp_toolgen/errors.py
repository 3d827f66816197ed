"""Exceptions raised by the generator.

Only whole-run failures are exceptions. Problems confined to one operation
are reported as diagnostics by the extractor instead.
"""

from __future__ import annotations


class ToolgenError(Exception):
    """Base class for every error that aborts a generation run."""


class SpecificationError(ToolgenError):
    """The OpenAPI document cannot be parsed into the expected shape."""


class AcquisitionError(ToolgenError):
    """The OpenAPI document could not be read or fetched."""
