"""Exception hierarchy shared across docfence components."""

from __future__ import annotations


class DocfenceError(RuntimeError):
    """Base class for errors raised by docfence."""


class FenceConfigError(DocfenceError):
    """Raised when a fence body is not valid configuration for its kind."""

    def __init__(self, name: str, line: int, detail: str) -> None:
        super().__init__(f"invalid configuration in fence '{name}' (line {line}): {detail}")
        self.name = name
        self.line = line
        self.detail = detail


class DocExtractionError(DocfenceError):
    """Raised when crate documentation cannot be read or transformed."""


class DocNotFoundError(DocExtractionError):
    """Raised when a source file carries no crate-level documentation."""


class ProjectError(DocfenceError):
    """Raised when Cargo project metadata cannot be resolved."""


__all__ = [
    "DocExtractionError",
    "DocNotFoundError",
    "DocfenceError",
    "FenceConfigError",
    "ProjectError",
]
