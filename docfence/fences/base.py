"""Base class for fence kinds."""

from __future__ import annotations

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, ClassVar, Mapping, Optional

from ..errors import FenceConfigError
from ..models import FenceSpan, IntralinksConfig, Span
from ..project import ProjectResolver


@dataclass
class FenceContext:
    """Inputs shared by every fence of one engine run."""

    base_path: Path
    project_resolver: ProjectResolver
    on_warning: Callable[[str], None]
    intralinks_defaults: Optional[IntralinksConfig] = None


class Fence(ABC):
    """A ``toml`` fence that is replaced by generated content.

    ``aliases`` are matched case-insensitively against the end of the fence
    name. Fences run in ascending ``priority``.
    """

    aliases: ClassVar[tuple[str, ...]] = ()
    priority: ClassVar[int] = 0

    def __init__(self, span: FenceSpan) -> None:
        self.span = span

    @property
    def outer(self) -> Span:
        return self.span.outer

    @classmethod
    def is_match(cls, name: str) -> bool:
        lowered = name.lower()
        return any(lowered.endswith(alias) for alias in cls.aliases)

    @classmethod
    def create(cls, span: FenceSpan, document: str, context: FenceContext) -> "Fence":
        """Parse the fence body and build the fence."""
        body = document[span.inner.start : span.inner.end]
        try:
            data = tomllib.loads(body)
            return cls.from_config(span, data, context)
        except (TypeError, ValueError) as exc:
            raise FenceConfigError(span.name, span.line, str(exc)) from exc

    @classmethod
    @abstractmethod
    def from_config(
        cls, span: FenceSpan, data: Mapping[str, Any], context: FenceContext
    ) -> "Fence":
        """Build the fence from its parsed TOML body."""

    @abstractmethod
    def run(self, document: str, context: FenceContext) -> str:
        """Return the text that replaces the fence's outer span."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.span.name!r}, line={self.span.line})"


__all__ = ["Fence", "FenceContext"]
