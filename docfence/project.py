"""Cargo manifest lookup used to name the crate behind a doc import."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .errors import ProjectError
from .logging import get_logger
from .models import Project

MANIFEST_NAME = "Cargo.toml"

logger = get_logger("project")


class ProjectResolver(Protocol):
    """Resolves the Cargo package a template belongs to."""

    def resolve(self, base_path: Path, workspace_project: Optional[str] = None) -> Project:
        """Return the project for ``base_path``, optionally a named workspace member."""


class CargoProjectResolver:
    """Reads ``Cargo.toml`` files found from the template directory upwards."""

    def resolve(self, base_path: Path, workspace_project: Optional[str] = None) -> Project:
        manifest = find_manifest(base_path)
        if manifest is None:
            raise ProjectError(f"no {MANIFEST_NAME} found in {base_path} or its parents")

        if workspace_project is None:
            name = _package_name(_read_manifest(manifest))
            if name is None:
                raise ProjectError(f"project has no root package ({manifest})")
            logger.debug("Resolved package %s from %s", name, manifest)
            return Project(package_name=name, manifest_path=manifest)

        workspace_root = find_workspace_root(manifest)
        if workspace_root is None:
            raise ProjectError(
                f"workspace project '{workspace_project}' requested but {manifest} "
                "is not part of a workspace"
            )
        for member in workspace_members(workspace_root):
            if _package_name(_read_manifest(member)) == workspace_project:
                logger.debug("Resolved workspace package %s from %s", workspace_project, member)
                return Project(package_name=workspace_project, manifest_path=member)
        raise ProjectError(f"workspace has no package named '{workspace_project}'")


def find_manifest(start: Path) -> Optional[Path]:
    """Return the nearest ``Cargo.toml`` at or above ``start``."""
    for directory in _ancestors(start):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate
    return None


def find_workspace_root(manifest: Path) -> Optional[Path]:
    """Return the manifest declaring the workspace that ``manifest`` belongs to."""
    for directory in _ancestors(manifest.parent):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file() and "workspace" in _read_manifest(candidate):
            return candidate
    return None


def workspace_members(workspace_manifest: Path) -> List[Path]:
    """Return member manifests of a workspace, root package included."""
    data = _read_manifest(workspace_manifest)
    workspace = data.get("workspace") or {}
    root = workspace_manifest.parent
    excluded = {(root / entry).resolve() for entry in _str_list(workspace.get("exclude"))}

    members: List[Path] = []
    if _package_name(data) is not None:
        members.append(workspace_manifest)
    for pattern in _str_list(workspace.get("members")):
        for directory in sorted(root.glob(pattern)):
            candidate = directory / MANIFEST_NAME
            if directory.resolve() in excluded or not candidate.is_file():
                continue
            if candidate not in members:
                members.append(candidate)
    return members


def _ancestors(start: Path) -> Iterable[Path]:
    start = start.expanduser().resolve()
    if start.is_file():
        start = start.parent
    yield start
    yield from start.parents


def _read_manifest(path: Path) -> Dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ProjectError(f"cannot read {path}: {exc}") from exc


def _package_name(data: Dict[str, Any]) -> Optional[str]:
    package = data.get("package")
    if isinstance(package, dict) and isinstance(package.get("name"), str):
        return package["name"]
    return None


def _str_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


__all__ = [
    "CargoProjectResolver",
    "ProjectResolver",
    "find_manifest",
    "find_workspace_root",
    "workspace_members",
]
