"""Fence kinds and their discovery in markdown documents."""

from __future__ import annotations

from typing import List, Optional, Tuple, Type

from ..logging import get_logger
from ..models import FenceSpan
from .base import Fence, FenceContext
from .rustdoc import RustDocFence
from .scanner import scan_fences
from .toc import TocFence

logger = get_logger("fences")

FENCE_KINDS: Tuple[Type[Fence], ...] = (TocFence, RustDocFence)


def fence_kind(name: str) -> Optional[Type[Fence]]:
    """Return the fence kind whose alias ends ``name``, if any."""
    for kind in FENCE_KINDS:
        if kind.is_match(name):
            return kind
    return None


def create_fence(span: FenceSpan, document: str, context: FenceContext) -> Optional[Fence]:
    """Build the fence declared at ``span``; None when the name is not recognized."""
    kind = fence_kind(span.name)
    if kind is None:
        logger.debug("Ignoring unrecognized fence '%s' at line %d", span.name, span.line)
        return None
    return kind.create(span, document, context)


def find_fences(document: str, context: FenceContext) -> List[Fence]:
    """Return every recognized fence of ``document`` in document order."""
    fences: List[Fence] = []
    for span in scan_fences(document):
        fence = create_fence(span, document, context)
        if fence is not None:
            fences.append(fence)
    return fences


__all__ = [
    "FENCE_KINDS",
    "Fence",
    "FenceContext",
    "RustDocFence",
    "TocFence",
    "create_fence",
    "fence_kind",
    "find_fences",
]
