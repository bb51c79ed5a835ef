"""Table-of-contents fence."""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional
from urllib.parse import quote

from ..models import FenceSpan, Heading, TocConfig
from .base import Fence, FenceContext

_HEADING_PATTERN = re.compile(r"^(#+)(?:\s+(.*))?$")
# Everything printable in ASCII stays as-is; controls and non-ASCII get encoded.
_SLUG_SAFE = "".join(chr(code) for code in range(0x20, 0x7F))


class TocFence(Fence):
    """Replaced by a bullet list of the document's headings."""

    aliases = ("toc", "table-of-contents")
    priority = 10

    def __init__(self, span: FenceSpan, config: TocConfig) -> None:
        super().__init__(span)
        self.config = config

    @classmethod
    def from_config(
        cls, span: FenceSpan, data: Mapping[str, Any], context: FenceContext
    ) -> "TocFence":
        return cls(span, TocConfig.from_mapping(data))

    def run(self, document: str, context: FenceContext) -> str:
        return build_toc(document, self.config)


def build_toc(markdown: str, config: TocConfig) -> str:
    """Render the table of contents for ``markdown``."""
    lines = [
        rendered
        for rendered in (format_heading(heading, config) for heading in find_headings(markdown))
        if rendered is not None
    ]
    toc = "\n".join(lines)
    if config.header is not None:
        return f"{config.header}\n\n{toc}"
    return toc


def find_headings(markdown: str) -> List[Heading]:
    """Return headings outside of code fences, in document order."""
    headings: List[Heading] = []
    in_code = False
    for line in markdown.split("\n"):
        was_inside = in_code
        if line.startswith("```"):
            in_code = not in_code
        if was_inside or in_code:
            continue
        heading = parse_heading(line)
        if heading is not None:
            headings.append(heading)
    return headings


def parse_heading(line: str) -> Optional[Heading]:
    match = _HEADING_PATTERN.match(line.rstrip())
    if not match:
        return None
    title = (match.group(2) or "").strip()
    return Heading(depth=len(match.group(1)) - 1, title=title)


def format_heading(heading: Heading, config: TocConfig) -> Optional[str]:
    """Render one TOC line, or ``None`` when the heading is out of range."""
    if heading.depth < config.min_depth:
        return None
    if config.max_depth is not None and heading.depth > config.max_depth:
        return None
    indent = " " * config.indent * (heading.depth - config.min_depth)
    if config.link:
        entry = f"[{heading.title}](#{slugify(heading.title)})"
    else:
        entry = heading.title
    return f"{indent}{config.bullet} {entry}"


def slugify(title: str) -> str:
    return quote(title.replace(" ", "-").lower(), safe=_SLUG_SAFE)


__all__ = ["TocFence", "build_toc", "find_headings", "format_heading", "parse_heading", "slugify"]
