from __future__ import annotations

from pathlib import Path

import pytest

from trailnote.models import ReportOptions
from trailnote.pdf_writer import build_document
from trailnote.text_extractor import TextExtractor

OPTIONS = ReportOptions(mode="browsing", generated_at="2026-01-04 10:00:00")


def test_extracted_lines_match_rendered_page_lines() -> None:
    lines = ["Title (draft)", "path C:\\temp\\notes", "caf\u00e9 menu", "last line"]
    doc = build_document(lines, OPTIONS)

    pages = TextExtractor().page_texts(doc.data)
    assert pages == [lines]


def test_lines_are_placed_at_left_margin_with_fixed_leading() -> None:
    doc = build_document([f"row {i}" for i in range(5)], OPTIONS)
    items = TextExtractor().extract(doc.data)

    assert [item.text for item in items] == [f"row {i}" for i in range(5)]
    assert all(item.x0 == pytest.approx(40.0) for item in items)
    assert [item.y_baseline for item in items] == pytest.approx([760.0, 746.0, 732.0, 718.0, 704.0])
    assert all(item.font_size == pytest.approx(12.0, abs=0.5) for item in items)


def test_extract_from_written_file_spans_pages(tmp_path: Path) -> None:
    doc = build_document([f"item {i}" for i in range(60)], OPTIONS)
    pdf_path = tmp_path / "report.pdf"
    pdf_path.write_bytes(doc.data)

    items = TextExtractor().extract(pdf_path)
    assert {item.page_index for item in items} == {0, 1}
    assert [item.text for item in items if item.page_index == 1] == [f"item {i}" for i in range(51, 60)]
