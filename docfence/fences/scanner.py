"""Locate ``toml`` fences in a markdown document."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ..markdown import iter_lines
from ..models import FenceSpan, Span

FENCE_TICKS = "```"
FENCE_PREFIX = "```toml "
# The prefix plus a name of at least two characters.
MIN_OPENER_LENGTH = len(FENCE_PREFIX) + 2

_TICK_RUN = re.compile(r"^`{3,}")


def is_candidate_opener(line: str) -> bool:
    return line.startswith(FENCE_PREFIX) and len(line.rstrip()) >= MIN_OPENER_LENGTH


def is_bare_close(line: str) -> bool:
    return line.rstrip() == FENCE_TICKS


def closes_block(line: str, ticks: int) -> bool:
    """Return True when ``line`` closes an ordinary block opened with ``ticks`` backticks."""
    stripped = line.rstrip()
    return len(stripped) >= ticks and stripped == "`" * len(stripped)


def scan_fences(document: str) -> List[FenceSpan]:
    """Return every candidate fence in document order.

    A candidate opener pairs with the first following bare closing line; every
    line in between is body, even one that looks like another opener. An
    opener that is never closed yields nothing. Other code blocks are skipped
    up to a closing line of at least as many backticks as their opening, so
    sample fences inside them are not matched.
    """
    fences: List[FenceSpan] = []
    opener: Tuple[Span, str, int] | None = None
    other_block_ticks: Optional[int] = None

    for number, (span, line) in enumerate(iter_lines(document), start=1):
        if opener is not None:
            if is_bare_close(line):
                open_span, name, open_line = opener
                body_start = _next_line_start(document, open_span.end)
                fences.append(
                    FenceSpan(
                        outer=Span(open_span.start, span.end),
                        inner=Span(body_start, span.start),
                        name=name,
                        line=open_line,
                    )
                )
                opener = None
            continue
        if other_block_ticks is not None:
            if closes_block(line, other_block_ticks):
                other_block_ticks = None
            continue
        if is_candidate_opener(line):
            opener = (span, line[len(FENCE_PREFIX):].strip(), number)
            continue
        ticks = _TICK_RUN.match(line)
        if ticks:
            other_block_ticks = len(ticks.group(0))

    return fences


def _next_line_start(document: str, line_end: int) -> int:
    if document.startswith("\r\n", line_end):
        return line_end + 2
    if line_end < len(document):
        return line_end + 1
    return line_end


__all__ = ["closes_block", "is_bare_close", "is_candidate_opener", "scan_fences"]
