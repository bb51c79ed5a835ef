from __future__ import annotations

from pathlib import Path

import pytest

from docfence import cli
from docfence.logging import configure_logging
from tests._fixtures.crate_builder import CrateBuilder

TEMPLATE = "```toml toc\n```\n# Title\n## Section\n"
RENDERED = "- [Title](#title)\n    - [Section](#section)\n# Title\n## Section\n"


@pytest.fixture(autouse=True)
def _no_ci(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CI", raising=False)


def test_parser_accepts_update_options() -> None:
    parser = cli._build_parser()

    args = parser.parse_args(["-v", "update", "project", "--check", "--deny-warnings"])

    assert args.command == "update"
    assert args.path == "project"
    assert args.check is True
    assert args.deny_warnings is True
    assert args.verbose is True


def test_parser_defaults_for_render() -> None:
    args = cli._build_parser().parse_args(["render", "README.tpl.md"])

    assert args.template == "README.tpl.md"
    assert args.output is None
    assert args.verbose is False


def test_render_prints_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    template = tmp_path / "README.tpl.md"
    template.write_text(TEMPLATE, encoding="utf-8")

    cli.main(["render", str(template)])

    assert capsys.readouterr().out == RENDERED


def test_render_writes_output_file(tmp_path: Path) -> None:
    template = tmp_path / "README.tpl.md"
    template.write_text(TEMPLATE, encoding="utf-8")
    output = tmp_path / "README.md"

    cli.main(["render", str(template), "-o", str(output)])

    assert output.read_text(encoding="utf-8") == RENDERED


def test_render_reports_invalid_fences(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    template = tmp_path / "README.tpl.md"
    template.write_text("```toml toc\nindent = -1\n```\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["render", str(template)])

    assert excinfo.value.code == 1
    assert "invalid configuration in fence 'toc'" in capsys.readouterr().err


def test_update_writes_readme_with_cargo_project(
    crate_builder: CrateBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    crate_builder.manifest("my-crate")
    crate_builder.write(
        {
            "README.tpl.md": '```toml rustdoc\nsource = "src/lib.rs"\n```\n',
            "src/lib.rs": "//! Hello from [`Thing`].\n\npub struct Thing;\n",
        }
    )

    cli.main(["update", str(crate_builder.path())])

    readme = crate_builder.path("README.md").read_text(encoding="utf-8")
    assert readme == (
        "Hello from [`Thing`](https://docs.rs/my-crate/latest/my_crate/struct.Thing.html).\n"
    )
    assert "README updated at" in capsys.readouterr().out

    cli.main(["update", str(crate_builder.path())])
    assert "README already up to date" in capsys.readouterr().out


def test_update_check_fails_when_outdated(
    crate_builder: CrateBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    crate_builder.write({"README.tpl.md": TEMPLATE, "README.md": "old\n"})

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["update", str(crate_builder.path()), "--check"])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "README.md is not up to date" in err
    assert "-old" in err
    assert crate_builder.path("README.md").read_text(encoding="utf-8") == "old\n"


def test_update_checks_under_ci(
    crate_builder: CrateBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    crate_builder.write({"README.tpl.md": TEMPLATE})
    monkeypatch.setenv("CI", "true")

    with pytest.raises(SystemExit):
        cli.main(["update", str(crate_builder.path())])

    assert not crate_builder.path("README.md").exists()


def test_update_missing_template(crate_builder: CrateBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["update", str(crate_builder.path())])

    assert excinfo.value.code == 1
    assert "Template not found" in capsys.readouterr().err


def test_log_file_records_debug_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    template = tmp_path / "README.tpl.md"
    template.write_text(TEMPLATE, encoding="utf-8")
    log_file = tmp_path / "docfence.log"

    cli.main(["--log-file", str(log_file), "render", str(template)])
    configure_logging()

    assert capsys.readouterr().out == RENDERED
    log = log_file.read_text(encoding="utf-8")
    assert "DEBUG docfence.engine: Found 1 fences" in log
