from __future__ import annotations

from trailnote.lines import (
    RULE,
    build_outline_lines,
    build_plain_lines,
    is_noise,
    normalize_lines,
    split_physical_lines,
)
from trailnote.models import Heading, ReportEntry


def _entry(**kwargs) -> ReportEntry:
    return ReportEntry.from_dict(kwargs)


def test_normalize_trims_drops_empty_and_collapses_adjacent_only() -> None:
    raw = ["  A ", "A", "", "   ", "B", "A", "A", "B"]
    assert normalize_lines(raw) == ["A", "B", "A", "B"]


def test_normalize_is_idempotent() -> None:
    raw = [" x", "x ", "y", "", "y", "z", "x"]
    once = normalize_lines(raw)
    assert normalize_lines(once) == once


def test_normalize_empty_input() -> None:
    assert normalize_lines([]) == []


def test_split_physical_lines_breaks_embedded_newlines() -> None:
    assert split_physical_lines(["a\nb", "", "c\r\nd"]) == ["a", "b", "", "c", "d"]


def test_plain_lines_full_entry() -> None:
    entry = _entry(
        title="Paper",
        url="https://example.org/p",
        time="10:00",
        summary="first\n  second",
        keywords=["alpha", "beta"],
        headings=[{"level": 1, "text": "Intro"}, "Methods"],
        bullets=["b1", "b2", "b3", "b4", "b5", "b6"],
        author="Ada",
        publishDate="2025-01-01",
        abstract="Short abstract",
    )
    lines = build_plain_lines([entry], "Report", "research", "now")

    assert lines == [
        "Report",
        "Mode: research",
        "Generated: now",
        RULE,
        "1. Paper",
        "URL: https://example.org/p",
        "Visited at: 10:00",
        "Summary: first second",
        "Keywords: alpha, beta",
        "Headings: Intro | Methods",
        "Bullets: b1 | b2 | b3 | b4 | b5",
        "Author: Ada",
        "Date: 2025-01-01",
        "Abstract: Short abstract",
        "",
    ]


def test_plain_lines_missing_fields_are_omitted() -> None:
    lines = build_plain_lines([_entry()], "", None, "now")
    assert lines == ["TrailNote Report", "Mode: N/A", "Generated: now", RULE, "1. No Title", ""]


def test_outline_lines_headings_bullets_and_noise() -> None:
    entry = ReportEntry(
        title="Docs",
        url="https://docs.example",
        headings=(Heading(1, "Guide"), Heading(3, "See more"), Heading(2, "Usage")),
        bullets=("Delete", "install it", "run it"),
        summary="ignored when headings exist",
    )
    lines = build_outline_lines([entry], "browsing", "now")

    assert lines == [
        "Generated: now",
        "Mode: browsing",
        "",
        "1. Docs",
        "URL: https://docs.example",
        "  Headings:",
        "    H1: Guide",
        "    H2: Usage",
        "  Bulleted points:",
        "    - install it",
        "    - run it",
        "",
    ]


def test_outline_summary_fallback_is_truncated() -> None:
    entry = _entry(url="https://x.example", summary="word " * 100)
    lines = build_outline_lines([entry], None, "now", summary_chars=20)

    assert lines[3] == "1. https://x.example"
    assert lines[5] == "  Summary: word word word word ..."


def test_outline_limits_heading_and_bullet_counts() -> None:
    entry = _entry(
        title="Many",
        headings=[{"level": 2, "text": f"h{i}"} for i in range(10)],
        bullets=[f"b{i}" for i in range(10)],
    )
    lines = build_outline_lines([entry], "research", "now", max_headings=6, max_bullets=8)
    assert sum(1 for line in lines if line.startswith("    H2:")) == 6
    assert sum(1 for line in lines if line.startswith("    - ")) == 8


def test_is_noise() -> None:
    assert is_noise("")
    assert is_noise("  Save to Gmail ")
    assert not is_noise("Saved results")
