"""Line-level markdown helpers: line spans and fenced code blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple, Union

from .models import Span

_OPENING_PATTERN = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_INDENTED_PATTERN = re.compile(r"^(?: {4}|\t)")
_LIST_ITEM_PATTERN = re.compile(r"^ {0,3}(?:[-+*]|\d{1,9}[.)])(?:\s|$)")
_BACKTICK_RUN = re.compile(r"`+")
CODE_INDENT = "    "

_RUST_TAGS = {
    "",
    "allow_fail",
    "compile_fail",
    "ignore",
    "no_run",
    "rust",
    "should_panic",
    "test_harness",
}


def iter_lines(document: str) -> Iterator[Tuple[Span, str]]:
    """Yield each line's span (terminator excluded) together with its text."""
    position = 0
    for raw in document.split("\n"):
        text = raw[:-1] if raw.endswith("\r") else raw
        yield Span(position, position + len(text)), text
        position += len(raw) + 1


def is_rust_code_block(info: str) -> bool:
    """Return True when a code block's info string denotes Rust code for rustdoc."""
    for tag in info.strip().split(","):
        tag = tag.strip()
        if tag in _RUST_TAGS:
            continue
        if tag.startswith("ignore-") or tag.startswith("edition"):
            continue
        return False
    return True


def backtick_fence(text: str) -> str:
    """Return a backtick fence longer than any backtick run in ``text``."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)
    return "`" * max(3, longest + 1)


@dataclass(frozen=True)
class CodeBlock:
    """A code block; ``closing`` is None when the block runs to the end.

    Indented blocks have an empty ``fence`` and no opening or closing line;
    their ``body`` holds the lines with the code indentation removed.
    """

    span: Span
    indent: str
    fence: str
    info: str
    body: Tuple[str, ...]
    closing: Optional[str]

    @property
    def indented(self) -> bool:
        return not self.fence

    @property
    def is_rust(self) -> bool:
        return is_rust_code_block(self.info)

    @property
    def opening(self) -> str:
        return f"{self.indent}{self.fence}{self.info}"

    def render(self, *, opening: Optional[str] = None, body: Optional[List[str]] = None) -> str:
        """Render the block in its own style with an optional new opening or body."""
        lines = list(self.body if body is None else body)
        if self.indented:
            return "\n".join(f"{CODE_INDENT}{line}" if line else line for line in lines)
        lines.insert(0, self.opening if opening is None else opening)
        if self.closing is not None:
            lines.append(self.closing)
        return "\n".join(lines)

    def render_fenced(self, info: str, body: Optional[List[str]] = None) -> str:
        """Render the block as a fenced block tagged with ``info``."""
        lines = list(self.body if body is None else body)
        if not self.indented:
            return self.render(opening=f"{self.indent}{self.fence}{info}", body=lines)
        fence = backtick_fence("\n".join(lines))
        return "\n".join([f"{fence}{info}", *lines, fence])


def iter_code_blocks(markdown: str) -> Iterator[CodeBlock]:
    """Yield the fenced and indented code blocks of ``markdown`` in order.

    An indented block must follow a blank line (or start the document) and
    is not recognized right after a list item, where the indentation
    continues the item instead.
    """
    lines = list(iter_lines(markdown))
    index = 0
    previous_blank = True
    in_list = False
    while index < len(lines):
        span, line = lines[index]
        if previous_blank and not in_list and line.strip() and _INDENTED_PATTERN.match(line):
            block, index = _indented_block(lines, index)
            yield block
            previous_blank = False
            continue
        match = _OPENING_PATTERN.match(line)
        index += 1
        if line.strip():
            if _LIST_ITEM_PATTERN.match(line):
                in_list = True
            elif not _INDENTED_PATTERN.match(line):
                in_list = False
        previous_blank = not line.strip()
        if not match:
            continue
        fence = match.group("fence")
        info = match.group("info")
        if fence[0] == "`" and "`" in info:
            continue
        closing_pattern = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}\s*$")
        body: List[str] = []
        end = span.end
        closing: Optional[str] = None
        while index < len(lines):
            body_span, body_line = lines[index]
            index += 1
            end = body_span.end
            if closing_pattern.match(body_line):
                closing = body_line
                break
            body.append(body_line)
        yield CodeBlock(
            span=Span(span.start, end),
            indent=match.group("indent"),
            fence=fence,
            info=info,
            body=tuple(body),
            closing=closing,
        )


def _indented_block(lines: List[Tuple[Span, str]], start: int) -> Tuple[CodeBlock, int]:
    # Blank lines belong to the block only when more indented code follows.
    end = start
    index = start
    while index < len(lines):
        line = lines[index][1]
        if _INDENTED_PATTERN.match(line) and line.strip():
            end = index
        elif line.strip():
            break
        index += 1
    body = tuple(_strip_code_indent(text) for _, text in lines[start : end + 1])
    block = CodeBlock(
        span=Span(lines[start][0].start, lines[end][0].end),
        indent="",
        fence="",
        info="",
        body=body,
        closing=None,
    )
    return block, end + 1


def _strip_code_indent(line: str) -> str:
    if not line.strip():
        return ""
    if line.startswith(CODE_INDENT):
        return line[len(CODE_INDENT) :]
    return line[1:] if line.startswith("\t") else line


def split_code_blocks(markdown: str) -> List[Union[str, CodeBlock]]:
    """Split ``markdown`` into alternating text chunks and code blocks.

    Empty text chunks are omitted; joining the text chunks with the original
    text of each block reproduces the input.
    """
    parts: List[Union[str, CodeBlock]] = []
    position = 0
    for block in iter_code_blocks(markdown):
        if block.span.start > position:
            parts.append(markdown[position : block.span.start])
        parts.append(block)
        position = block.span.end
    if position < len(markdown):
        parts.append(markdown[position:])
    return parts


def map_text(markdown: str, func: Callable[[str], str]) -> str:
    """Apply ``func`` to every chunk of ``markdown`` outside code blocks."""
    return "".join(
        func(part) if isinstance(part, str) else markdown[part.span.start : part.span.end]
        for part in split_code_blocks(markdown)
    )


def map_rust_code_blocks(markdown: str, func: Callable[[CodeBlock], str]) -> str:
    """Replace every Rust code block of ``markdown`` with ``func(block)``."""
    output: List[str] = []
    for part in split_code_blocks(markdown):
        if isinstance(part, str):
            output.append(part)
        elif part.is_rust:
            output.append(func(part))
        else:
            output.append(markdown[part.span.start : part.span.end])
    return "".join(output)


__all__ = [
    "CODE_INDENT",
    "CodeBlock",
    "backtick_fence",
    "is_rust_code_block",
    "iter_code_blocks",
    "iter_lines",
    "map_rust_code_blocks",
    "map_text",
    "split_code_blocks",
]
