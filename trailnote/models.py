from __future__ import annotations
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Iterable, Optional

@dataclass(frozen=True)
class Heading:
    level: int             # 1..3
    text: str

    @classmethod
    def from_raw(cls, raw: Any) -> "Heading":
        # Captured headings are either {"level", "text"} objects or bare strings
        if isinstance(raw, Heading):
            return raw
        if isinstance(raw, dict):
            level = raw.get("level") or 2
            try:
                level = int(level)
            except (TypeError, ValueError):
                level = 2
            return cls(level=level, text=str(raw.get("text") or ""))
        return cls(level=2, text=str(raw or ""))

@dataclass(frozen=True)
class ReportEntry:
    title: str = ""
    url: str = ""
    time: str = ""
    summary: str = ""
    keywords: tuple[str, ...] = ()
    headings: tuple[Heading, ...] = ()
    bullets: tuple[str, ...] = ()
    author: str | None = None
    publish_date: str | None = None
    abstract: str | None = None

    # Raw page text, only used for summarizer enrichment
    page_text: str | None = None
    user_added: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportEntry":
        def _strings(value: Any) -> tuple[str, ...]:
            if not value or not isinstance(value, (list, tuple)):
                return ()
            return tuple(str(v) for v in value if v is not None)

        headings = data.get("headings") or []
        if not isinstance(headings, (list, tuple)):
            headings = []

        return cls(
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            time=str(data.get("time") or ""),
            summary=str(data.get("summary") or ""),
            keywords=_strings(data.get("keywords")),
            headings=tuple(Heading.from_raw(h) for h in headings),
            bullets=_strings(data.get("bullets")),
            author=data.get("author") or None,
            publish_date=data.get("publishDate") or data.get("publish_date") or None,
            abstract=data.get("abstract") or None,
            page_text=data.get("pageText") or data.get("page_text") or None,
            user_added=bool(data.get("userAdded") or data.get("user_added")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "title": self.title,
            "url": self.url,
            "time": self.time,
            "summary": self.summary,
            "keywords": list(self.keywords),
            "headings": [{"level": h.level, "text": h.text} for h in self.headings],
            "bullets": list(self.bullets),
        }
        if self.author:
            out["author"] = self.author
        if self.publish_date:
            out["publishDate"] = self.publish_date
        if self.abstract:
            out["abstract"] = self.abstract
        if self.page_text:
            out["pageText"] = self.page_text
        if self.user_added:
            out["userAdded"] = True
        return out

@dataclass(frozen=True)
class ReportOptions:
    mode: str | None = None
    generated_at: str | None = None
    title: str = "TrailNote Report"

    # Overrides entry-to-line flattening when given
    preformatted_lines: Optional[tuple[str, ...]] = None

@dataclass
class SessionRecord:
    logs: list[ReportEntry]
    mode: str | None
    timestamp: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionRecord":
        return cls(
            logs=entries_from_json(data.get("logs") or []),
            mode=data.get("mode"),
            timestamp=str(data.get("timestamp") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"logs": [e.to_dict() for e in self.logs], "mode": self.mode, "timestamp": self.timestamp}

@dataclass
class ExportManifest:
    pdf: str
    title: str
    mode: str | None
    generated_at: str

    # Document shape
    entries: int
    lines: int
    pages: int
    objects: int
    bytes: int

    verified: bool = False
    previews: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def save(self, path: Path) -> None:
        import json
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")


def entries_from_json(payload: Iterable[Any]) -> list[ReportEntry]:
    if not isinstance(payload, (list, tuple)):
        raise ValueError("Report entries must be a JSON list")
    return [ReportEntry.from_dict(item) for item in payload if isinstance(item, dict)]
