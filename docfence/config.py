"""Configuration loading for docfence (.docfence.yml)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import DocfenceError
from .models import IntralinksConfig

CONFIG_FILE_NAME = ".docfence.yml"


class ConfigError(DocfenceError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DocfenceConfig:
    """Represents the settings defined in .docfence.yml."""

    root: Path
    template: Path
    output: Path
    deny_warnings: bool = False
    intralinks: Optional[IntralinksConfig] = None


def load_config(config_path: Path) -> DocfenceConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        return DocfenceConfig(
            root=root, template=root / "README.tpl.md", output=root / "README.md"
        )

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the root")

    template = _as_str(data.get("template")) or "README.tpl.md"
    output = _as_str(data.get("output")) or "README.md"

    intralinks = None
    intralinks_data = data.get("intralinks")
    if intralinks_data is not None:
        if not isinstance(intralinks_data, dict):
            raise ConfigError("'intralinks' must be a mapping")
        try:
            intralinks = IntralinksConfig.from_mapping(intralinks_data)
        except ValueError as exc:
            raise ConfigError(f"Invalid 'intralinks' section: {exc}") from exc

    return DocfenceConfig(
        root=root,
        template=root / template,
        output=root / output,
        deny_warnings=_as_bool(data.get("deny_warnings")) or False,
        intralinks=intralinks,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    if config_path.name != CONFIG_FILE_NAME:
        return (config_path.parent / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = ["CONFIG_FILE_NAME", "ConfigError", "DocfenceConfig", "load_config"]
