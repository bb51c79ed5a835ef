"""Fence importing the crate-level documentation of a Rust source file."""

from __future__ import annotations

from typing import Any, Mapping

from ..errors import DocExtractionError, ProjectError
from ..logging import get_logger
from ..markdown import backtick_fence
from ..models import FenceSpan, RustDocOptions
from ..rustdoc import render_rustdoc
from .base import Fence, FenceContext

logger = get_logger("fences.rustdoc")


class RustDocFence(Fence):
    """Replaced by the transformed crate documentation, or by an error block."""

    aliases = ("rustdoc",)
    priority = 1

    def __init__(self, span: FenceSpan, options: RustDocOptions) -> None:
        super().__init__(span)
        self.options = options

    @classmethod
    def from_config(
        cls, span: FenceSpan, data: Mapping[str, Any], context: FenceContext
    ) -> "RustDocFence":
        options = RustDocOptions.from_mapping(
            data,
            base_path=context.base_path,
            intralinks_defaults=context.intralinks_defaults,
        )
        return cls(span, options)

    def run(self, document: str, context: FenceContext) -> str:
        try:
            project = context.project_resolver.resolve(
                context.base_path, self.options.workspace_project
            )
        except ProjectError as exc:
            if self.options.workspace_project is not None:
                raise
            logger.warning(
                "Failed to resolve the Cargo project for %s: %s", self.options.source, exc
            )
            return error_block(exc)

        try:
            return render_rustdoc(self.options, project, context.on_warning)
        except DocExtractionError as exc:
            logger.warning("Failed to import documentation from %s: %s", self.options.source, exc)
            return error_block(exc)


def error_block(error: Exception) -> str:
    """Fenced block surfacing a failed import in the generated document."""
    message = str(error)
    fence = backtick_fence(message)
    return f"{fence}text\n{message}\n{fence}"


__all__ = ["RustDocFence", "error_block"]
