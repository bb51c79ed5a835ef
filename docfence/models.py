"""Core data models shared across docfence components."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Span:
    """Half-open character range into a document."""

    start: int
    end: int

    def shifted(self, delta: int) -> "Span":
        return Span(self.start + delta, self.end + delta)

    def contains(self, other: "Span") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class FenceSpan:
    """A fence located by the scanner, before its kind is known."""

    outer: Span
    inner: Span
    name: str
    line: int


@dataclass(frozen=True)
class Heading:
    """Markdown heading with a 0-based depth (``#`` is depth 0)."""

    depth: int
    title: str


@dataclass(frozen=True)
class Doc:
    """Documentation text flowing through the transform pipeline."""

    content: str

    def lines(self) -> list[str]:
        return self.content.split("\n")


@dataclass(frozen=True)
class Project:
    """Cargo package the documentation belongs to."""

    package_name: str
    manifest_path: Optional[Path] = None

    @property
    def crate_name(self) -> str:
        return self.package_name.replace("-", "_")


@dataclass(frozen=True)
class TocConfig:
    """Options of a ``toc`` fence."""

    bullet: str = "-"
    indent: int = 4
    max_depth: Optional[int] = None
    min_depth: int = 0
    header: Optional[str] = None
    link: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TocConfig":
        config = cls(
            bullet=_expect(data, "bullet", str, cls.bullet),
            indent=_expect_count(data, "indent", cls.indent),
            max_depth=_expect_count(data, "max_depth", None),
            min_depth=_expect_count(data, "min_depth", cls.min_depth),
            header=_expect(data, "header", str, None),
            link=_expect(data, "link", bool, cls.link),
        )
        if config.max_depth is not None and config.max_depth < config.min_depth:
            raise ValueError("'max_depth' must not be smaller than 'min_depth'")
        return config


@dataclass(frozen=True)
class IntralinksConfig:
    """How crate-internal documentation links are turned into URLs."""

    docs_rs_base_url: str = "https://docs.rs"
    docs_rs_version: str = "latest"
    strip_links: bool = False

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], defaults: "IntralinksConfig | None" = None
    ) -> "IntralinksConfig":
        base = defaults or cls()
        return replace(
            base,
            docs_rs_base_url=_expect(data, "docs_rs_base_url", str, base.docs_rs_base_url),
            docs_rs_version=_expect(data, "docs_rs_version", str, base.docs_rs_version),
            strip_links=_expect(data, "strip_links", bool, base.strip_links),
        )


@dataclass(frozen=True)
class RustDocOptions:
    """Options of a ``rustdoc`` fence."""

    source: Path
    workspace_project: Optional[str] = None
    intralinks: Optional[IntralinksConfig] = None

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        base_path: Path,
        intralinks_defaults: IntralinksConfig | None = None,
    ) -> "RustDocOptions":
        if "source" not in data:
            raise ValueError("missing required key 'source'")
        source = Path(_expect(data, "source", str, ""))
        if not source.is_absolute():
            source = base_path / source
        intralinks_data = _expect(data, "intralinks", dict, None)
        intralinks = intralinks_defaults
        if intralinks_data is not None:
            intralinks = IntralinksConfig.from_mapping(intralinks_data, intralinks_defaults)
        return cls(
            source=source,
            workspace_project=_expect(data, "workspace_project", str, None),
            intralinks=intralinks,
        )


def _expect(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    if key not in data:
        return default
    value = data[key]
    # bool is a subclass of int; keep "indent = true" from slipping through.
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise ValueError(
            f"'{key}' must be of type {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _expect_count(data: Mapping[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    value = _expect(data, key, int, default)
    if value is not None and value < 0:
        raise ValueError(f"'{key}' must not be negative")
    return value


__all__ = [
    "Doc",
    "FenceSpan",
    "Heading",
    "IntralinksConfig",
    "Project",
    "RustDocOptions",
    "Span",
    "TocConfig",
]
