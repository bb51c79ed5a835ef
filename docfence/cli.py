"""CLI entrypoints for docfence commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .engine import process_includes
from .errors import DocfenceError
from .logging import configure_logging
from .readme import ReadmeOutdatedError, ReadmeUpdater, ReadmeWarningsError, is_ci


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docfence",
        description="Expand table-of-contents and rustdoc fences in markdown templates.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser(
        "render",
        help="Render a single template and print or write the result.",
    )
    _add_verbose_option(render_parser, suppress_default=True)
    render_parser.add_argument("template", help="Path to the markdown template.")
    render_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the rendered document here instead of standard output.",
    )

    update_parser = subparsers.add_parser(
        "update",
        help="Regenerate the README configured in .docfence.yml.",
    )
    _add_verbose_option(update_parser, suppress_default=True)
    update_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    update_parser.add_argument(
        "--check",
        action="store_true",
        help="Fail instead of writing when the README is out of date (implied under CI).",
    )
    update_parser.add_argument(
        "--deny-warnings",
        action="store_true",
        help="Fail when unresolved intralinks or other warnings are reported.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docfence commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "render":
        template_path = Path(args.template)
        try:
            template = template_path.read_text(encoding="utf-8")
            rendered = process_includes(template, base_path=template_path.parent)
        except OSError as exc:
            parser.exit(1, f"{exc}\n")
        except DocfenceError as exc:
            parser.exit(1, f"docfence render failed: {exc}\n")
        if args.output:
            Path(args.output).write_text(rendered, encoding="utf-8")
        else:
            sys.stdout.write(rendered)
    elif args.command == "update":
        check = bool(args.check) or is_ci()
        try:
            result = ReadmeUpdater().run(
                args.path,
                check=check,
                deny_warnings=bool(args.deny_warnings),
            )
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except ReadmeOutdatedError as exc:
            parser.exit(1, f"{exc}\n{exc.diff}")
        except ReadmeWarningsError as exc:
            parser.exit(1, f"{exc}\n" + "".join(f"  {warning}\n" for warning in exc.warnings))
        except DocfenceError as exc:
            parser.exit(1, f"docfence update failed: {exc}\nRun with --verbose for more details.\n")
        if result is None:
            print("README already up to date")
        else:
            print(f"README updated at {_relativize(result.path)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
