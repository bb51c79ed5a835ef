"""Resolution of crate intralinks into docs.rs URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional

from ..models import IntralinksConfig, Project
from .items import OWNER_KINDS, Item, ItemIndex, ItemPath

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_INTRALINK_PATTERN = re.compile(
    rf"^(?:(?P<disambiguator>[a-z]+)@)?"
    rf"(?P<path>(?:::)?{_IDENT}(?:::{_IDENT})*)"
    rf"(?P<suffix>\(\)|!)?$"
)

_DISAMBIGUATORS: Dict[str, FrozenSet[str]] = {
    "attr": frozenset({"macro"}),
    "const": frozenset({"constant"}),
    "constant": frozenset({"constant"}),
    "derive": frozenset({"macro"}),
    "enum": frozenset({"enum"}),
    "fn": frozenset({"fn", "method", "tymethod"}),
    "function": frozenset({"fn", "method", "tymethod"}),
    "macro": frozenset({"macro"}),
    "method": frozenset({"method", "tymethod"}),
    "mod": frozenset({"mod"}),
    "module": frozenset({"mod"}),
    "static": frozenset({"static"}),
    "struct": frozenset({"struct"}),
    "trait": frozenset({"trait"}),
    "type": frozenset({"type", "struct", "enum", "union", "trait"}),
    "union": frozenset({"union"}),
    "value": frozenset({"constant", "static", "fn", "method", "tymethod", "variant"}),
    "variant": frozenset({"variant"}),
}

PRIMITIVES = frozenset(
    {
        "array", "bool", "char", "f32", "f64", "fn", "i8", "i16", "i32", "i64", "i128",
        "isize", "never", "pointer", "reference", "slice", "str", "tuple", "u8", "u16",
        "u32", "u64", "u128", "unit", "usize",
    }
)
PRIMITIVE_DOCS_URL = "https://doc.rust-lang.org/stable/std"


@dataclass(frozen=True)
class Intralink:
    """A parsed link target that names a Rust item."""

    path: ItemPath
    absolute: bool
    kinds: Optional[FrozenSet[str]]
    primitive: bool = False


def parse_intralink(target: str) -> Optional[Intralink]:
    """Parse ``target`` as an intralink, or return None when it is not one."""
    match = _INTRALINK_PATTERN.match(target.strip().strip("`"))
    if not match:
        return None
    disambiguator = match.group("disambiguator")
    kinds: Optional[FrozenSet[str]] = None
    if disambiguator in ("prim", "primitive"):
        return Intralink(path=(match.group("path"),), absolute=False, kinds=None, primitive=True)
    if disambiguator is not None:
        if disambiguator not in _DISAMBIGUATORS:
            return None
        kinds = _DISAMBIGUATORS[disambiguator]
    suffix = match.group("suffix")
    if suffix == "!":
        kinds = frozenset({"macro"})
    elif suffix == "()":
        kinds = (kinds or _DISAMBIGUATORS["fn"]) & _DISAMBIGUATORS["fn"]

    raw_path = match.group("path")
    absolute = raw_path.startswith("::")
    return Intralink(path=tuple(raw_path.lstrip(":").split("::")), absolute=absolute, kinds=kinds)


class IntralinkResolver:
    """Maps intralinks of one crate to documentation URLs."""

    def __init__(
        self,
        project: Project,
        entrypoint: Path,
        config: Optional[IntralinksConfig] = None,
        *,
        index_factory: Callable[[Path], ItemIndex] = ItemIndex.from_entrypoint,
    ) -> None:
        self.project = project
        self.entrypoint = entrypoint
        self.config = config or IntralinksConfig()
        self._index_factory = index_factory

    @cached_property
    def index(self) -> ItemIndex:
        return self._index_factory(self.entrypoint)

    @property
    def crate_url(self) -> str:
        base = self.config.docs_rs_base_url.rstrip("/")
        return (
            f"{base}/{self.project.package_name}/{self.config.docs_rs_version}"
            f"/{self.project.crate_name}"
        )

    def resolve(self, link: Intralink) -> Optional[str]:
        """Return the URL for ``link`` or None when it does not name a crate item."""
        if link.primitive:
            return _primitive_url(link.path[0]) if link.path[0] in PRIMITIVES else None

        path = self._crate_relative(link)
        if path is None:
            return None
        if not path:
            return f"{self.crate_url}/index.html"
        item = self.index.lookup(path, link.kinds)
        if item is not None:
            return self.item_url(item)
        if len(path) == 1 and not link.absolute and link.kinds is None and path[0] in PRIMITIVES:
            return _primitive_url(path[0])
        return None

    def item_url(self, item: Item) -> str:
        if item.kind == "mod":
            return f"{self.crate_url}/{'/'.join(item.path)}/index.html"
        if item.kind == "macro":
            return f"{self.crate_url}/macro.{item.name}.html"
        if item.kind in ("variant", "method", "tymethod"):
            owner = self.index.lookup(item.path[:-1], OWNER_KINDS)
            if owner is None:
                # inherent impl of a type declared outside the indexed modules
                page = self._page_url(item.path[:-2], "struct", item.path[-2])
            else:
                page = self.item_url(owner)
            return f"{page}#{item.kind}.{item.name}"
        return self._page_url(item.path[:-1], item.kind, item.name)

    def _page_url(self, module_path: ItemPath, kind: str, name: str) -> str:
        directory = "".join(f"{segment}/" for segment in module_path)
        return f"{self.crate_url}/{directory}{kind}.{name}.html"

    def _crate_relative(self, link: Intralink) -> Optional[ItemPath]:
        head, rest = link.path[0], link.path[1:]
        crate_names = {self.project.crate_name, self.project.package_name}
        if link.absolute:
            return rest if head in crate_names else None
        if head in ("crate", "self"):
            return rest
        if head == "super":
            return None
        if head in crate_names and link.path not in self.index:
            return rest
        return link.path


def _primitive_url(name: str) -> str:
    return f"{PRIMITIVE_DOCS_URL}/primitive.{name}.html"


__all__ = ["Intralink", "IntralinkResolver", "PRIMITIVES", "parse_intralink"]
