"""Transforms applied to extracted crate documentation."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from ..markdown import CodeBlock, map_rust_code_blocks, map_text, split_code_blocks
from ..models import Doc
from .intralinks import IntralinkResolver, parse_intralink

_DEFINITION_PATTERN = re.compile(
    r"^(?P<indent> {0,3})\[(?P<label>[^\]\n]+)\]:[ \t]*(?P<target>\S+)(?P<rest>[^\n]*)$",
    re.MULTILINE,
)
_FULL_REFERENCE_PATTERN = re.compile(
    r"(?<![!\\])\[(?P<text>[^\[\]\n]+)\]\[(?P<label>[^\[\]\n]+)\]"
)
_INLINE_PATTERN = re.compile(
    r"(?<![!\\])\[(?P<text>[^\[\]\n]+)\]\((?P<target>[^()\s]+(?:\(\))?)\)"
)
_SHORTCUT_PATTERN = re.compile(
    r"(?<![\]!\\])\[(?P<label>`[^`\n]+`|[A-Za-z_:][\w:@]*(?:\(\)|!)?)\](?![\[(:])"
)
_CODE_SPAN_PATTERN = re.compile(r"(`+)(?!`).*?(?<!`)\1(?!`)", re.DOTALL)


class DocTransform(ABC):
    """A step of the documentation pipeline."""

    @abstractmethod
    def transform(self, doc: Doc) -> Doc:
        """Return the transformed documentation."""


class DocTransformRemoveHiddenLines(DocTransform):
    """Drops rustdoc hidden lines (``# ...``) from Rust code blocks."""

    def transform(self, doc: Doc) -> Doc:
        return Doc(map_rust_code_blocks(doc.content, self._process_block))

    @staticmethod
    def _process_block(block: CodeBlock) -> str:
        body: List[str] = []
        for line in block.body:
            stripped = line.lstrip()
            if stripped.startswith("##"):
                body.append(line.replace("#", "", 1))
            elif stripped == "#" or stripped.startswith("# "):
                continue
            else:
                body.append(line)
        return block.render(body=body)


class DocTransformRustMarkdownTag(DocTransform):
    """Tags every Rust code block as ``rust``, fencing indented blocks."""

    def transform(self, doc: Doc) -> Doc:
        return Doc(map_rust_code_blocks(doc.content, self._process_block))

    @staticmethod
    def _process_block(block: CodeBlock) -> str:
        return block.render_fenced("rust")


class DocTransformIntralinks(DocTransform):
    """Rewrites links to crate items into links to their documentation pages.

    Inline links, reference definitions, full references and shortcut links
    are handled; code blocks are left alone. Links that look like item paths
    but cannot be resolved are reported through ``on_warning`` and kept as
    they are.
    """

    def __init__(
        self,
        resolver: IntralinkResolver,
        on_warning: Callable[[str], None],
    ) -> None:
        self.resolver = resolver
        self.on_warning = on_warning
        self.strip_links = resolver.config.strip_links

    def transform(self, doc: Doc) -> Doc:
        definitions = self._collect_definitions(doc.content)

        def process(text: str) -> str:
            return self._process_text(text, definitions)

        return Doc(map_text(doc.content, process))

    def _collect_definitions(self, markdown: str) -> Dict[str, Optional[str]]:
        """Map every reference label to its resolved URL (None if unresolved)."""
        definitions: Dict[str, Optional[str]] = {}
        for part in split_code_blocks(markdown):
            if not isinstance(part, str):
                continue
            for match in _DEFINITION_PATTERN.finditer(part):
                label = _normalize_label(match.group("label"))
                if label in definitions:
                    continue
                target = match.group("target")
                if parse_intralink(target) is None:
                    definitions[label] = target
                else:
                    definitions[label] = self._resolve(target)
        return definitions

    def _process_text(self, text: str, definitions: Dict[str, Optional[str]]) -> str:
        def definition(match: re.Match[str]) -> str:
            target = match.group("target")
            if parse_intralink(target) is None:
                return match.group(0)
            url = definitions.get(_normalize_label(match.group("label")))
            if url is None:
                return match.group(0)
            if self.strip_links:
                return ""
            return f"{match.group('indent')}[{match.group('label')}]: {url}{match.group('rest')}"

        def full_reference(match: re.Match[str]) -> str:
            label = _normalize_label(match.group("label"))
            if label in definitions:
                return self._reference(match.group(0), match.group("text"), label, definitions)
            return self._rewrite(match.group(0), match.group("text"), match.group("label"))

        def inline(match: re.Match[str]) -> str:
            return self._rewrite(match.group(0), match.group("text"), match.group("target"))

        def shortcut(match: re.Match[str]) -> str:
            label_text = match.group("label")
            label = _normalize_label(label_text)
            if label in definitions:
                return self._reference(match.group(0), label_text, label, definitions)
            # Plain `[word]` is only an intralink if it resolves.
            quiet = not label_text.startswith("`") and "::" not in label_text
            return self._rewrite(match.group(0), label_text, label_text, quiet=quiet)

        text = _DEFINITION_PATTERN.sub(definition, text)
        text = _sub_outside_code(_FULL_REFERENCE_PATTERN, full_reference, text)
        text = _sub_outside_code(_INLINE_PATTERN, inline, text)
        return _sub_outside_code(_SHORTCUT_PATTERN, shortcut, text)

    def _reference(
        self, original: str, text: str, label: str, definitions: Dict[str, Optional[str]]
    ) -> str:
        # The rewritten definition carries the URL; only stripping touches the reference.
        url = definitions[label]
        if self.strip_links and url is not None and url.startswith(self.resolver.crate_url):
            return text
        return original

    def _rewrite(self, original: str, text: str, target: str, *, quiet: bool = False) -> str:
        if parse_intralink(target) is None:
            return original
        url = self._resolve(target, quiet=quiet)
        if url is None:
            return original
        if self.strip_links:
            return text
        return f"[{text}]({url})"

    def _resolve(self, target: str, *, quiet: bool = False) -> Optional[str]:
        link = parse_intralink(target)
        url = self.resolver.resolve(link) if link is not None else None
        if url is None and not quiet:
            self.on_warning(
                f"could not resolve intralink '{target}' in {self.resolver.entrypoint}"
            )
        return url


def _normalize_label(label: str) -> str:
    return " ".join(label.split()).lower()


def _sub_outside_code(
    pattern: re.Pattern[str], func: Callable[[re.Match[str]], str], text: str
) -> str:
    spans = [match.span() for match in _CODE_SPAN_PATTERN.finditer(text)]

    def guarded(match: re.Match[str]) -> str:
        if any(start < match.start() < end for start, end in spans):
            return match.group(0)
        return func(match)

    return pattern.sub(guarded, text)


def transform_doc(
    doc: Doc,
    resolver: IntralinkResolver,
    on_warning: Callable[[str], None],
) -> Doc:
    """Run the fixed transform pipeline over ``doc``."""
    transforms: List[DocTransform] = [
        DocTransformRemoveHiddenLines(),
        DocTransformRustMarkdownTag(),
        DocTransformIntralinks(resolver, on_warning),
    ]
    for transform in transforms:
        doc = transform.transform(doc)
    return doc


__all__ = [
    "DocTransform",
    "DocTransformIntralinks",
    "DocTransformRemoveHiddenLines",
    "DocTransformRustMarkdownTag",
    "transform_doc",
]
