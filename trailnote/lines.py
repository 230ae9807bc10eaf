from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from .models import ReportEntry

RULE = "--------------------------------------"

# UI artifacts scraped from list items and headings
_noise_re = re.compile(
    r"^(delete|see more|page navigation|pause|view more|save to google drive|save to gmail)$",
    re.IGNORECASE
)


def is_noise(text: Optional[str]) -> bool:
    if not text:
        return True
    return bool(_noise_re.match(text.strip()))


def _one_line(text: str) -> str:
    return " ".join(part.strip() for part in text.split("\n"))


def build_plain_lines(
    entries: Sequence[ReportEntry],
    title: str,
    mode: str | None,
    generated_at: str,
    max_bullets: int = 5,
) -> List[str]:
    """
    Default entry flattening used when no pre-formatted lines are supplied.

    Header block (title, mode, timestamp, rule), then one block per entry.
    Optional fields that are missing simply omit their line.
    """
    lines: List[str] = [
        title or "TrailNote Report",
        f"Mode: {mode or 'N/A'}",
        f"Generated: {generated_at}",
        RULE,
    ]

    for idx, entry in enumerate(entries, start=1):
        lines.append(f"{idx}. {entry.title or 'No Title'}")
        if entry.url:
            lines.append(f"URL: {entry.url}")
        if entry.time:
            lines.append(f"Visited at: {entry.time}")
        summary = _one_line(entry.summary or "")
        if summary.strip():
            lines.append(f"Summary: {summary}")
        if entry.keywords:
            lines.append("Keywords: " + ", ".join(entry.keywords))
        heading_texts = [h.text for h in entry.headings if h.text]
        if heading_texts:
            lines.append("Headings: " + " | ".join(heading_texts))
        if entry.bullets:
            lines.append("Bullets: " + " | ".join(entry.bullets[:max_bullets]))
        if entry.author:
            lines.append(f"Author: {entry.author}")
        if entry.publish_date:
            lines.append(f"Date: {entry.publish_date}")
        if entry.abstract:
            lines.append(f"Abstract: {entry.abstract}")
        lines.append("")

    return lines


def build_outline_lines(
    entries: Sequence[ReportEntry],
    mode: str | None,
    generated_at: str,
    max_headings: int = 6,
    max_bullets: int = 8,
    summary_chars: int = 240,
) -> List[str]:
    """
    Compact heading/bullet outline per entry, meant to be passed to the
    synthesizer as pre-formatted lines.
    """
    lines: List[str] = [f"Generated: {generated_at}", f"Mode: {mode or 'N/A'}", ""]

    for idx, entry in enumerate(entries, start=1):
        lines.append(f"{idx}. {entry.title or entry.url or 'No title'}")
        if entry.url:
            lines.append(f"URL: {entry.url}")

        if entry.headings:
            lines.append("  Headings:")
            for h in entry.headings[:max_headings]:
                if not is_noise(h.text):
                    lines.append(f"    H{h.level or 2}: {h.text}")

        if entry.bullets:
            lines.append("  Bulleted points:")
            kept = [b for b in entry.bullets if not is_noise(b)]
            for b in kept[:max_bullets]:
                lines.append(f"    - {b}")

        if not entry.headings and not entry.bullets:
            s = re.sub(r"\s+", " ", entry.summary or "").strip()
            if s:
                tail = "..." if len(s) > summary_chars else ""
                lines.append(f"  Summary: {s[:summary_chars]}{tail}")

        lines.append("")

    return lines


def split_physical_lines(raw: Iterable[str]) -> List[str]:
    # A display line never carries an embedded line break
    out: List[str] = []
    for item in raw:
        if item is None:
            continue
        out.extend(str(item).splitlines() or [""])
    return out


def normalize_lines(raw: Iterable[str]) -> List[str]:
    """Trim, drop empties, collapse immediately repeated lines."""
    out: List[str] = []
    for item in raw:
        line = item.strip() if isinstance(item, str) else ""
        if not line:
            continue
        if out and out[-1] == line:
            continue
        out.append(line)
    return out

