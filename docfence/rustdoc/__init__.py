"""Crate documentation import: extraction plus markdown transforms."""

from __future__ import annotations

from typing import Callable

from ..errors import DocNotFoundError
from ..models import Doc, Project, RustDocOptions
from .extract import extract_doc_from_source_file, extract_doc_from_source_str
from .intralinks import IntralinkResolver
from .transform import transform_doc


def render_rustdoc(
    options: RustDocOptions,
    project: Project,
    on_warning: Callable[[str], None],
) -> str:
    """Return the transformed crate-level documentation of ``options.source``."""
    doc = extract_doc_from_source_file(options.source)
    if doc is None:
        raise DocNotFoundError(f"crate-level rustdoc not found in {options.source}")
    resolver = IntralinkResolver(project, options.source, options.intralinks)
    return transform_doc(doc, resolver, on_warning).content


__all__ = [
    "Doc",
    "extract_doc_from_source_file",
    "extract_doc_from_source_str",
    "render_rustdoc",
]
