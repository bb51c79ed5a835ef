"""Tests for the README driver."""

from __future__ import annotations

import pytest

from docfence.readme import ReadmeOutdatedError, ReadmeUpdater, ReadmeWarningsError, is_ci
from tests._fixtures.crate_builder import CrateBuilder, StaticProjectResolver

TEMPLATE = """
    # my-crate

    ```toml toc
    min_depth = 1
    ```

    ```toml rustdoc
    source = "src/lib.rs"
    ```
"""

LIB_RS = """
    //! ## Overview
    //!
    //! The [`Engine`] does the work.

    pub struct Engine;
"""

EXPECTED = (
    "# my-crate\n\n"
    "- [Overview](#overview)\n\n"
    "## Overview\n\n"
    "The [`Engine`](https://docs.rs/my-crate/latest/my_crate/struct.Engine.html) does the work.\n"
)


@pytest.fixture
def crate(crate_builder: CrateBuilder) -> CrateBuilder:
    crate_builder.write({"README.tpl.md": TEMPLATE, "src/lib.rs": LIB_RS})
    return crate_builder


@pytest.fixture
def updater(project_resolver: StaticProjectResolver) -> ReadmeUpdater:
    return ReadmeUpdater(project_resolver=project_resolver)


def test_run_writes_rendered_readme(crate: CrateBuilder, updater: ReadmeUpdater) -> None:
    outcome = updater.run(crate.path())

    assert outcome is not None
    assert outcome.written is True
    assert outcome.path == crate.path("README.md").resolve()
    assert "+## Overview" in outcome.diff
    assert crate.path("README.md").read_text(encoding="utf-8") == EXPECTED


def test_run_is_a_no_op_when_up_to_date(crate: CrateBuilder, updater: ReadmeUpdater) -> None:
    crate.path("README.md").write_text(EXPECTED, encoding="utf-8")

    assert updater.run(crate.path()) is None
    assert updater.run(crate.path(), check=True) is None


def test_check_mode_reports_diff_without_writing(
    crate: CrateBuilder, updater: ReadmeUpdater
) -> None:
    crate.path("README.md").write_text("# stale\n", encoding="utf-8")

    with pytest.raises(ReadmeOutdatedError) as excinfo:
        updater.run(crate.path(), check=True)

    assert "-# stale" in excinfo.value.diff
    assert crate.path("README.md").read_text(encoding="utf-8") == "# stale\n"


def test_configured_paths_are_used(crate: CrateBuilder, updater: ReadmeUpdater) -> None:
    crate.write({".docfence.yml": "template: README.tpl.md\noutput: docs/OUT.md\n"})
    crate.path("docs").mkdir()

    outcome = updater.run(crate.path())

    assert outcome is not None
    assert crate.path("docs/OUT.md").read_text(encoding="utf-8") == EXPECTED


def test_missing_template(crate_builder: CrateBuilder, updater: ReadmeUpdater) -> None:
    with pytest.raises(FileNotFoundError, match="Template not found"):
        updater.run(crate_builder.path())


def test_warnings_fail_when_denied(crate: CrateBuilder, updater: ReadmeUpdater) -> None:
    crate.write({"src/lib.rs": "//! See [`Missing`].\n"})

    with pytest.raises(ReadmeWarningsError) as excinfo:
        updater.run(crate.path(), deny_warnings=True)

    assert len(excinfo.value.warnings) == 1
    assert not crate.path("README.md").exists()


def test_warnings_can_be_denied_in_config(crate: CrateBuilder, updater: ReadmeUpdater) -> None:
    crate.write({"src/lib.rs": "//! See [`Missing`].\n", ".docfence.yml": "deny_warnings: true\n"})

    with pytest.raises(ReadmeWarningsError):
        updater.run(crate.path())


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, False), ("", False), ("false", False), ("0", False), ("true", True), ("1", True)],
)
def test_is_ci(value: str | None, expected: bool) -> None:
    environ = {} if value is None else {"CI": value}
    assert is_ci(environ) is expected
