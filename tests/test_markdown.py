"""Tests for docfence.markdown."""

from __future__ import annotations

import pytest

from docfence.markdown import (
    backtick_fence,
    is_rust_code_block,
    iter_code_blocks,
    iter_lines,
    split_code_blocks,
)

_DOC = (
    "# The crate\n\n"
    "Look a this code:\n\n"
    "```\nprintln!(\"first\");\n```\n\n"
    "```rust\nprintln!(\"second\");\n```\n\n"
    "```text\nJust some text.\n```\n\n"
    "```ignore,no_run\nprintln!(\"third\");\n```\n\n"
    "```should_panic\nprintln!(\"fourth\");\n```\n\n"
    "That's ```all```!  Have a nice `day`!\n"
)


def test_iter_code_blocks_finds_rust_blocks() -> None:
    rust_blocks = [
        _DOC[block.span.start : block.span.end]
        for block in iter_code_blocks(_DOC)
        if block.is_rust
    ]
    assert rust_blocks == [
        '```\nprintln!("first");\n```',
        '```rust\nprintln!("second");\n```',
        '```ignore,no_run\nprintln!("third");\n```',
        '```should_panic\nprintln!("fourth");\n```',
    ]


@pytest.mark.parametrize(
    "tag",
    [
        "should_panic",
        "no_run",
        "ignore",
        "allow_fail",
        "rust",
        "test_harness",
        "compile_fail",
        "edition2018",
        "ignore-foo",
    ],
)
def test_known_rustdoc_tags_are_rust(tag: str) -> None:
    doc = f'Foo:\n```{tag}\nprintln!("There");\n```\nEnd\n'
    (block,) = list(iter_code_blocks(doc))
    assert block.is_rust
    assert doc[block.span.start : block.span.end] == f'```{tag}\nprintln!("There");\n```'


def test_other_languages_are_not_rust() -> None:
    assert not is_rust_code_block("text")
    assert not is_rust_code_block("rust,python")
    assert is_rust_code_block("")


def test_longer_fences_and_tildes_close_properly() -> None:
    doc = "````md\n```\ninner\n```\n````\n~~~\ntilde\n~~~\n"
    blocks = list(iter_code_blocks(doc))
    assert [block.body for block in blocks] == [("```", "inner", "```"), ("tilde",)]
    assert [block.fence for block in blocks] == ["````", "~~~"]


def test_unclosed_block_runs_to_end() -> None:
    (block,) = list(iter_code_blocks("text\n```\ncode\n"))
    assert block.closing is None
    assert block.body == ("code", "")


def test_split_code_blocks_round_trips_text() -> None:
    parts = split_code_blocks(_DOC)
    rebuilt = "".join(
        part if isinstance(part, str) else _DOC[part.span.start : part.span.end]
        for part in parts
    )
    assert rebuilt == _DOC


def test_iter_lines_reports_spans_without_terminators() -> None:
    lines = list(iter_lines("a\r\nbc\n"))
    assert [text for _, text in lines] == ["a", "bc", ""]
    assert [(span.start, span.end) for span, _ in lines] == [(0, 1), (3, 5), (6, 6)]


def test_indented_blocks_are_rust_code() -> None:
    doc = "Example:\n\n    # use foo::Bar;\n\n    let x = 1;\n\nAfter\n"

    (block,) = list(iter_code_blocks(doc))

    assert block.indented
    assert block.is_rust
    assert block.body == ("# use foo::Bar;", "", "let x = 1;")
    assert doc[block.span.start : block.span.end] == "    # use foo::Bar;\n\n    let x = 1;"
    assert block.render() == doc[block.span.start : block.span.end]
    assert block.render_fenced("rust") == "```rust\n# use foo::Bar;\n\nlet x = 1;\n```"


def test_indentation_needs_a_blank_line_and_no_list() -> None:
    doc = "Paragraph\n    continued\n\n- item\n\n    item text\n"
    assert list(iter_code_blocks(doc)) == []


def test_indented_lines_inside_fenced_blocks_stay_fenced() -> None:
    doc = "```text\n\n    not separate\n```\n"
    (block,) = list(iter_code_blocks(doc))
    assert block.fence == "```"
    assert block.body == ("", "    not separate")


@pytest.mark.parametrize(
    ("text", "fence"),
    [("plain", "```"), ("a ``` b", "````"), ("```\n`````", "``````")],
)
def test_backtick_fence_outlasts_runs(text: str, fence: str) -> None:
    assert backtick_fence(text) == fence
