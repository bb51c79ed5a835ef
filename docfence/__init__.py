"""Expand table-of-contents and rustdoc fences in markdown templates."""

from .engine import FenceEngine, process_includes
from .errors import (
    DocExtractionError,
    DocNotFoundError,
    DocfenceError,
    FenceConfigError,
    ProjectError,
)

__all__ = [
    "DocExtractionError",
    "DocNotFoundError",
    "DocfenceError",
    "FenceConfigError",
    "FenceEngine",
    "ProjectError",
    "process_includes",
]
