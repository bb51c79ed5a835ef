"""Tests for the table-of-contents fence."""

from __future__ import annotations

import pytest

from docfence.engine import process_includes
from docfence.fences.toc import build_toc, find_headings, format_heading, parse_heading, slugify
from docfence.models import Heading, TocConfig


def test_toc_fence_renders_linked_headings_with_header() -> None:
    document = '```toml toc\nheader = "# Table of contents"\n```\n# T1\n## T2'

    result = process_includes(document)

    assert result == (
        "# Table of contents\n\n"
        "- [T1](#t1)\n"
        "    - [T2](#t2)\n"
        "# T1\n"
        "## T2"
    )


def test_toc_fence_replaces_block_in_surrounding_document() -> None:
    document = (
        "Some markdown\n\n"
        "```toml toc\n"
        'header = "# Table of contents"\n'
        "```\n\n"
        "# My h1\n"
        "text\n\n"
        "## My h1.1\n"
        "## My h1.2\n\n"
        "# My h2"
    )

    result = process_includes(document)

    assert result == (
        "Some markdown\n\n"
        "# Table of contents\n\n"
        "- [My h1](#my-h1)\n"
        "    - [My h1.1](#my-h1.1)\n"
        "    - [My h1.2](#my-h1.2)\n"
        "- [My h2](#my-h2)\n\n"
        "# My h1\n"
        "text\n\n"
        "## My h1.1\n"
        "## My h1.2\n\n"
        "# My h2"
    )


def test_min_depth_drops_shallower_headings() -> None:
    markdown = "# A\n## B\n"
    assert build_toc(markdown, TocConfig(min_depth=1)) == "- [B](#b)"


def test_max_depth_drops_deeper_headings() -> None:
    markdown = "# A\n## B\n### C\n"
    assert build_toc(markdown, TocConfig(max_depth=1)) == "- [A](#a)\n    - [B](#b)"


def test_depth_range_is_inclusive() -> None:
    config = TocConfig(min_depth=1, max_depth=2)
    kept = [
        depth
        for depth in range(5)
        if format_heading(Heading(depth=depth, title="x"), config) is not None
    ]
    assert kept == [1, 2]


def test_plain_entries_use_configured_bullet_and_indent() -> None:
    markdown = "# A\n## B\n"
    config = TocConfig(bullet="*", indent=2, link=False)
    assert build_toc(markdown, config) == "* A\n  * B"


def test_headings_inside_code_fences_are_ignored() -> None:
    markdown = "```\n# not a heading\n```\n# Real\n```rust\n## also not\n```\n"
    assert find_headings(markdown) == [Heading(depth=0, title="Real")]


def test_toc_without_headings_is_only_the_header() -> None:
    assert build_toc("no headings", TocConfig(header="## Contents")) == "## Contents\n\n"


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("# Title", Heading(depth=0, title="Title")),
        ("### Deep   ", Heading(depth=2, title="Deep")),
        ("## Closing ##", Heading(depth=1, title="Closing ##")),
        ("#", Heading(depth=0, title="")),
        ("#include <stdio.h>", None),
        ("plain text", None),
        ("  # indented", None),
    ],
)
def test_parse_heading(line: str, expected: Heading | None) -> None:
    assert parse_heading(line) == expected


def test_slugify_is_stable_and_case_insensitive() -> None:
    assert slugify("Hello World") == "hello-world"
    assert slugify("Hello World") == slugify("HELLO world")
    assert slugify("My h1.1") == "my-h1.1"


def test_slugify_encodes_only_controls_and_non_ascii() -> None:
    assert slugify("Café") == "caf%C3%A9"
    assert slugify("a\tb") == "a%09b"
    assert slugify("already%20encoded") == "already%20encoded"
    assert slugify("Build & Test!") == "build-&-test!"
