"""Index of the named items of a crate, built by walking its module tree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from ..logging import get_logger
from .extract import node_text, parse_rust

logger = get_logger("rustdoc.items")

ItemPath = Tuple[str, ...]

# tree-sitter node type -> rustdoc page prefix
_ITEM_KINDS = {
    "const_item": "constant",
    "enum_item": "enum",
    "function_item": "fn",
    "mod_item": "mod",
    "static_item": "static",
    "struct_item": "struct",
    "trait_item": "trait",
    "type_item": "type",
    "union_item": "union",
}

OWNER_KINDS = frozenset({"enum", "struct", "trait", "union"})


@dataclass(frozen=True)
class Item:
    """A named item; ``path`` is relative to the crate root and ends with the name."""

    path: ItemPath
    kind: str

    @property
    def name(self) -> str:
        return self.path[-1]


class ItemIndex:
    """Lookup table from crate-relative paths to items."""

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._items: Dict[ItemPath, List[Item]] = {}
        for item in items:
            self.add(item)

    def add(self, item: Item) -> None:
        entries = self._items.setdefault(item.path, [])
        if item not in entries:
            entries.append(item)

    def lookup(self, path: ItemPath, kinds: Optional[Iterable[str]] = None) -> Optional[Item]:
        wanted = set(kinds) if kinds is not None else None
        for item in self._items.get(tuple(path), []):
            if wanted is None or item.kind in wanted:
                return item
        return None

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._items.values())

    def __contains__(self, path: object) -> bool:
        return path in self._items

    @classmethod
    def from_entrypoint(cls, entrypoint: Path) -> "ItemIndex":
        """Index the crate whose root module is ``entrypoint``."""
        index = cls()
        _CrateWalker(index).walk_file(entrypoint, (), entrypoint.parent)
        logger.debug("Indexed %d items from %s", len(index), entrypoint)
        return index


class _CrateWalker:
    def __init__(self, index: ItemIndex) -> None:
        self.index = index
        self._visited: Set[Path] = set()

    def walk_file(self, path: Path, module_path: ItemPath, module_dir: Path) -> None:
        resolved = path.resolve()
        if resolved in self._visited:
            return
        self._visited.add(resolved)
        try:
            source_bytes = path.read_bytes()
        except OSError as exc:
            logger.debug("Skipping module file %s: %s", path, exc)
            return
        tree = parse_rust(source_bytes)
        self.walk_items(tree.root_node, source_bytes, module_path, module_dir)

    def walk_items(
        self, node: Node, source_bytes: bytes, module_path: ItemPath, module_dir: Path
    ) -> None:
        for child in node.named_children:
            if child.type == "impl_item":
                self._walk_impl(child, source_bytes, module_path)
                continue
            if child.type == "macro_definition":
                name = _field_text(child, "name", source_bytes)
                if name:
                    # Exported macros live at the crate root.
                    self.index.add(Item((name,), "macro"))
                continue
            kind = _ITEM_KINDS.get(child.type)
            name = _field_text(child, "name", source_bytes)
            if kind is None or not name:
                continue
            item_path = module_path + (name,)
            self.index.add(Item(item_path, kind))

            if kind == "mod":
                self._walk_module(child, source_bytes, item_path, module_dir / name)
            elif kind == "enum":
                self._walk_members(child, source_bytes, item_path, {"enum_variant": "variant"})
            elif kind == "trait":
                self._walk_members(
                    child,
                    source_bytes,
                    item_path,
                    {"function_item": "method", "function_signature_item": "tymethod"},
                )

    def _walk_module(
        self, node: Node, source_bytes: bytes, module_path: ItemPath, module_dir: Path
    ) -> None:
        body = node.child_by_field_name("body")
        if body is not None:
            self.walk_items(body, source_bytes, module_path, module_dir)
            return
        name = module_path[-1]
        for candidate in (module_dir.parent / f"{name}.rs", module_dir / "mod.rs"):
            if candidate.is_file():
                self.walk_file(candidate, module_path, module_dir)
                return
        logger.debug("No source file found for module %s", "::".join(module_path))

    def _walk_members(
        self, node: Node, source_bytes: bytes, owner: ItemPath, kinds: Dict[str, str]
    ) -> None:
        body = node.child_by_field_name("body")
        if body is None:
            return
        for member in body.named_children:
            kind = kinds.get(member.type)
            name = _field_text(member, "name", source_bytes)
            if kind and name:
                self.index.add(Item(owner + (name,), kind))

    def _walk_impl(self, node: Node, source_bytes: bytes, module_path: ItemPath) -> None:
        if node.child_by_field_name("trait") is not None:
            return
        owner = _type_name(node.child_by_field_name("type"), source_bytes)
        if owner is None:
            return
        self._walk_members(node, source_bytes, module_path + (owner,), {"function_item": "method"})


def _field_text(node: Node, field: str, source_bytes: bytes) -> Optional[str]:
    child = node.child_by_field_name(field)
    return node_text(child, source_bytes) if child is not None else None


def _type_name(node: Optional[Node], source_bytes: bytes) -> Optional[str]:
    if node is None:
        return None
    if node.type == "generic_type":
        return _type_name(node.child_by_field_name("type"), source_bytes)
    if node.type == "scoped_type_identifier":
        return _field_text(node, "name", source_bytes)
    if node.type == "type_identifier":
        return node_text(node, source_bytes)
    return None


__all__ = ["Item", "ItemIndex", "ItemPath", "OWNER_KINDS"]
