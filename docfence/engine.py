"""Fence engine: finds fences in a template and splices in their output."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .fences import Fence, FenceContext, find_fences
from .logging import get_logger
from .models import IntralinksConfig, Span
from .project import CargoProjectResolver, ProjectResolver

logger = get_logger("engine")


class FenceEngine:
    """Runs every fence of a document in ascending priority.

    Fences of one priority render against the same document; their outputs
    are spliced in one pass, so later priorities see the result (a TOC sees
    headings brought in by a doc import).
    """

    def __init__(
        self,
        project_resolver: ProjectResolver | None = None,
        on_warning: Optional[Callable[[str], None]] = None,
        intralinks_defaults: IntralinksConfig | None = None,
    ) -> None:
        self.project_resolver = project_resolver or CargoProjectResolver()
        self.on_warning = on_warning or _log_warning
        self.intralinks_defaults = intralinks_defaults

    def process(self, document: str, base_path: Path | str = ".") -> str:
        context = FenceContext(
            base_path=Path(base_path),
            project_resolver=self.project_resolver,
            on_warning=self.on_warning,
            intralinks_defaults=self.intralinks_defaults,
        )
        fences = find_fences(document, context)
        logger.debug("Found %d fences", len(fences))
        if not fences:
            return document

        pending: List[Tuple[Fence, Span]] = [
            (fence, fence.outer) for fence in sorted(fences, key=lambda fence: fence.priority)
        ]
        while pending:
            priority = pending[0][0].priority
            tier = [entry for entry in pending if entry[0].priority == priority]
            pending = pending[len(tier) :]

            replacements: List[Tuple[Span, str]] = []
            for fence, span in tier:
                logger.debug("Running %r (priority %d)", fence, priority)
                replacements.append((span, fence.run(document, context)))
            document = splice(document, replacements)
            pending = [(fence, relocate(span, replacements)) for fence, span in pending]
        return document


def process_includes(
    document: str,
    *,
    base_path: Path | str = ".",
    project_resolver: ProjectResolver | None = None,
    on_warning: Optional[Callable[[str], None]] = None,
    intralinks_defaults: IntralinksConfig | None = None,
) -> str:
    """Return ``document`` with every recognized fence replaced by its output.

    Relative ``source`` paths of doc imports resolve against ``base_path``.
    """
    engine = FenceEngine(
        project_resolver=project_resolver,
        on_warning=on_warning,
        intralinks_defaults=intralinks_defaults,
    )
    return engine.process(document, base_path)


def splice(document: str, replacements: Sequence[Tuple[Span, str]]) -> str:
    """Rebuild ``document`` with non-overlapping spans replaced."""
    parts: List[str] = []
    position = 0
    for span, text in sorted(replacements, key=lambda entry: entry[0].start):
        parts.append(document[position : span.start])
        parts.append(text)
        position = span.end
    parts.append(document[position:])
    return "".join(parts)


def relocate(span: Span, replacements: Sequence[Tuple[Span, str]]) -> Span:
    """Shift ``span`` by the length change of every replacement before it."""
    delta = sum(
        len(text) - len(replaced) for replaced, text in replacements if replaced.end <= span.start
    )
    return span.shifted(delta)


def _log_warning(message: str) -> None:
    logger.warning(message)


__all__ = ["FenceEngine", "process_includes", "relocate", "splice"]
