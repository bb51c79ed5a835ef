"""Extraction of crate-level documentation from Rust sources via tree-sitter."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, List, Optional

import tree_sitter_rust
from tree_sitter import Language, Node, Parser, Tree

from ..errors import DocExtractionError
from ..models import Doc

RUST_LANGUAGE = Language(tree_sitter_rust.language())

_COMMENT_NODES = {"line_comment", "block_comment"}
_ESCAPE_PATTERN = re.compile(r"\\(\r?\n\s*|x[0-9a-fA-F]{2}|u\{[0-9a-fA-F_]+\}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "0": "\0", "'": "'", '"': '"'}


def parse_rust(source_bytes: bytes) -> Tree:
    """Parse Rust source into a tree-sitter tree."""
    return Parser(RUST_LANGUAGE).parse(source_bytes)


def node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def extract_doc_from_source_file(path: Path) -> Optional[Doc]:
    """Return the crate-level doc of the file at ``path``, or None if it has none."""
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocExtractionError(f"cannot open source file {path}: {exc}") from exc
    try:
        return extract_doc_from_source_str(source)
    except DocExtractionError as exc:
        raise DocExtractionError(f"{exc} ({path})") from exc


def extract_doc_from_source_str(source: str) -> Optional[Doc]:
    """Return the crate-level doc of ``source``, or None if it has none.

    Only inner documentation (``//!``, ``/*! */`` and ``#![doc = "..."]``)
    ahead of the first item counts. Single-line values lose one leading space;
    multi-line block values keep their indentation but drop a blank first line.
    """
    source_bytes = source.encode("utf-8")
    tree = parse_rust(source_bytes)
    if tree.root_node.has_error:
        raise DocExtractionError("cannot parse source file")

    lines: List[str] = []
    for value in _inner_doc_values(tree.root_node, source_bytes):
        value_lines = _split_lines(value)
        if not value_lines:
            lines.append("")
        elif len(value_lines) == 1:
            line = value_lines[0]
            lines.append(line[1:] if line.startswith(" ") else line)
        else:
            lines.extend(
                line
                for index, line in enumerate(value_lines)
                if not (index == 0 and not line.strip())
            )

    if not lines:
        return None
    return Doc("\n".join(lines))


def _inner_doc_values(root: Node, source_bytes: bytes) -> Iterator[str]:
    for child in root.children:
        if child.type in _COMMENT_NODES:
            text = node_text(child, source_bytes)
            if text.startswith("//!"):
                yield text[3:].rstrip("\r\n")
            elif text.startswith("/*!") and text.endswith("*/"):
                yield text[3:-2]
        elif child.type == "inner_attribute_item":
            value = _doc_attribute_value(child, source_bytes)
            if value is not None:
                yield value
        else:
            break


def _doc_attribute_value(item: Node, source_bytes: bytes) -> Optional[str]:
    attribute = next((node for node in item.named_children if node.type == "attribute"), None)
    if attribute is None or not attribute.named_children:
        return None
    if node_text(attribute.named_children[0], source_bytes) != "doc":
        return None
    value = attribute.child_by_field_name("value")
    if value is None:
        return None
    if value.type == "raw_string_literal":
        return _raw_string_value(node_text(value, source_bytes))
    if value.type == "string_literal":
        return _string_value(node_text(value, source_bytes))
    # `#![doc = include_str!(...)]` and friends are not literal docs.
    return None


def _raw_string_value(literal: str) -> str:
    hashes = len(literal) - len(literal.rstrip("#"))
    return literal[2 + hashes : len(literal) - 1 - hashes]


def _string_value(literal: str) -> str:
    try:
        return _ESCAPE_PATTERN.sub(_unescape, literal[1:-1])
    except ValueError as exc:
        raise DocExtractionError(f"cannot parse source file: {exc}") from exc


def _unescape(match: re.Match[str]) -> str:
    escape = match.group(1)
    if escape.startswith(("\r\n", "\n")):
        return ""
    if escape.startswith("x") and len(escape) == 3:
        code = int(escape[1:], 16)
        if code > 0x7F:
            raise ValueError(f"invalid ASCII escape '\\{escape}'")
        return chr(code)
    if escape.startswith("u{"):
        code = int(escape[2:-1].replace("_", "") or "-1", 16)
        if not 0 <= code <= 0x10FFFF or 0xD800 <= code <= 0xDFFF:
            raise ValueError(f"invalid unicode escape '\\{escape}'")
        return chr(code)
    if escape not in _SIMPLE_ESCAPES:
        raise ValueError(f"unknown character escape '\\{escape}'")
    return _SIMPLE_ESCAPES[escape]


def _split_lines(value: str) -> List[str]:
    lines = value.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


__all__ = [
    "RUST_LANGUAGE",
    "extract_doc_from_source_file",
    "extract_doc_from_source_str",
    "node_text",
    "parse_rust",
]
