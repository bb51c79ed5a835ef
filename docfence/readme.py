"""README driver: render the template and keep the output file in sync."""

from __future__ import annotations

import difflib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from .config import DocfenceConfig, load_config
from .engine import FenceEngine
from .errors import DocfenceError
from .logging import get_logger
from .project import ProjectResolver

_FALSY_ENV = {"", "0", "false", "no"}


class ReadmeOutdatedError(DocfenceError):
    """Raised in check mode when the output file differs from the rendered template."""

    def __init__(self, path: Path, diff: str) -> None:
        super().__init__(f"{path.name} is not up to date with its template")
        self.path = path
        self.diff = diff


class ReadmeWarningsError(DocfenceError):
    """Raised when warnings were emitted and the configuration denies them."""

    def __init__(self, warnings: List[str]) -> None:
        super().__init__(f"{len(warnings)} warning(s) emitted while rendering")
        self.warnings = list(warnings)


@dataclass
class UpdateOutcome:
    """Result of a README update operation."""

    path: Path
    diff: str
    written: bool


def is_ci(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when running under a CI service (the ``CI`` variable is set)."""
    env = os.environ if environ is None else environ
    return env.get("CI", "").strip().lower() not in _FALSY_ENV


class ReadmeUpdater:
    """Renders a template through the fence engine and updates the output file."""

    def __init__(self, project_resolver: ProjectResolver | None = None) -> None:
        self.project_resolver = project_resolver
        self.logger = get_logger("readme")

    def render(self, config: DocfenceConfig, warnings: Optional[List[str]] = None) -> str:
        """Return the rendered template described by ``config``."""
        template_path = config.template
        if not template_path.exists():
            raise FileNotFoundError(f"Template not found at {template_path}")
        template = template_path.read_text(encoding="utf-8")

        def record(message: str) -> None:
            self.logger.warning(message)
            if warnings is not None:
                warnings.append(message)

        engine = FenceEngine(
            project_resolver=self.project_resolver,
            on_warning=record,
            intralinks_defaults=config.intralinks,
        )
        return engine.process(template, template_path.parent)

    def run(
        self, path: str | Path, *, check: bool = False, deny_warnings: bool = False
    ) -> Optional[UpdateOutcome]:
        """Bring the output file up to date; return None when nothing changed."""
        root = Path(path).expanduser().resolve()
        config = load_config(root)
        self.logger.info("Rendering %s", config.template)

        warnings: List[str] = []
        rendered = self.render(config, warnings)
        if warnings and (deny_warnings or config.deny_warnings):
            raise ReadmeWarningsError(warnings)

        output_path = config.output
        existing = output_path.read_text(encoding="utf-8") if output_path.exists() else ""
        if existing == rendered:
            self.logger.info("%s already up to date", output_path.name)
            return None

        diff = self._diff(existing, rendered, output_path.name)
        if check:
            raise ReadmeOutdatedError(output_path, diff)

        output_path.write_text(rendered, encoding="utf-8")
        self.logger.info("%s updated", output_path)
        return UpdateOutcome(path=output_path, diff=diff, written=True)

    @staticmethod
    def _diff(original: str, updated: str, name: str) -> str:
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"{name} (current)",
            tofile=f"{name} (rendered)",
        )
        return "".join(diff)


__all__ = [
    "ReadmeOutdatedError",
    "ReadmeUpdater",
    "ReadmeWarningsError",
    "UpdateOutcome",
    "is_ci",
]
