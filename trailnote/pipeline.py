from __future__ import annotations
import dataclasses
import datetime as dt
from pathlib import Path
from typing import List, Optional, Union

from openai import OpenAI

from config import ReportConfig

from .lines import build_outline_lines
from .models import ExportManifest, ReportEntry, ReportOptions, SessionRecord
from .pdf_reader import PdfReader
from .pdf_writer import build_document
from .progress import ConsoleProgress
from .summarizer import NO_SUMMARY, OpenAISummarizer, TextRankSummarizer
from .utils import ensure_dir, report_filename

Summarizer = Union[TextRankSummarizer, OpenAISummarizer]


def make_summarizer(cfg: ReportConfig, client: OpenAI | None = None) -> Optional[Summarizer]:
    name = (cfg.summarizer or "none").lower()
    if name == "none":
        return None
    if name == "textrank":
        return TextRankSummarizer(cfg.summary_sentences, cfg.keyword_limit)
    if name == "openai":
        return OpenAISummarizer(
            client=client or OpenAI(),
            model=cfg.openai_model,
            max_sentences=cfg.summary_sentences,
            keyword_limit=cfg.keyword_limit,
        )
    raise ValueError(f"Unknown summarizer: {cfg.summarizer!r} (expected none, textrank or openai)")


class ReportExporter:
    """
    Orchestrates:
      - optional summary/keyword enrichment from captured page text
      - outline line building
      - document synthesis
      - file write + reopen check (page count) + optional PNG previews
      - manifest writing
    """

    def __init__(self, cfg: ReportConfig | None = None, summarizer: Summarizer | None = None):
        self.cfg = cfg or ReportConfig()
        self.summarizer = summarizer
        self.fallback = TextRankSummarizer(self.cfg.summary_sentences, self.cfg.keyword_limit)

    def enrich(self, entries: List[ReportEntry], progress: ConsoleProgress | None = None) -> List[ReportEntry]:
        if self.summarizer is None:
            return list(entries)

        out: List[ReportEntry] = []
        for entry in entries:
            needs_summary = not entry.summary.strip() or entry.summary.strip() == NO_SUMMARY
            needs_keywords = not entry.keywords
            if not entry.page_text or not (needs_summary or needs_keywords):
                out.append(entry)
                continue

            try:
                result = self.summarizer.summarize(entry.title, entry.page_text)
            except Exception as e:
                if progress:
                    progress.step(f"Summarizer failed for {entry.url or entry.title!r}, using TextRank: {e}")
                result = self.fallback.summarize(entry.title, entry.page_text)

            out.append(dataclasses.replace(
                entry,
                summary=result.summary if needs_summary and result.summary else entry.summary,
                keywords=tuple(result.keywords) if needs_keywords else entry.keywords,
            ))
        return out

    def export(
        self,
        record: SessionRecord,
        out_dir: Path,
        progress: ConsoleProgress | None = None,
        stamp_ms: int | None = None,
    ) -> ExportManifest:
        layout = self.cfg.layout
        generated_at = record.timestamp or dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        def log(msg: str) -> None:
            if progress:
                progress.step(msg)

        ensure_dir(out_dir)
        pdf_path = out_dir / report_filename(record.mode, stamp_ms)

        # 1) Enrich + build lines
        entries = record.logs
        if self.summarizer is not None:
            log(f"Step 1/4: Enrich entries ({type(self.summarizer).__name__}, entries={len(entries)})")
            entries = self.enrich(entries, progress=progress)
        lines = build_outline_lines(
            entries,
            mode=record.mode,
            generated_at=generated_at,
            max_headings=self.cfg.outline_max_headings,
            max_bullets=self.cfg.outline_max_bullets,
            summary_chars=self.cfg.outline_summary_chars,
        )
        log(f"Step 1/4 done: Outline lines={len(lines)}")

        # 2) Synthesize
        options = ReportOptions(
            mode=record.mode,
            generated_at=generated_at,
            title=self.cfg.title,
            preformatted_lines=tuple(lines),
        )
        doc = build_document(entries, options, layout)
        log(
            f"Step 2/4 done: Synthesized pages={doc.page_count}, objects={len(doc.objects)}, "
            f"bytes={len(doc.data)}"
        )

        # 3) Write
        pdf_path.write_bytes(doc.data)
        log(f"Step 3/4 done: Wrote {pdf_path.name}")

        manifest = ExportManifest(
            pdf=str(pdf_path),
            title=self.cfg.title,
            mode=record.mode,
            generated_at=generated_at,
            entries=len(entries),
            lines=doc.line_count,
            pages=doc.page_count,
            objects=len(doc.objects),
            bytes=len(doc.data),
        )

        # 4) Reopen check + previews
        if self.cfg.verify or self.cfg.preview_pages > 0:
            log("Step 4/4: Reopen with PyMuPDF")
            with PdfReader(pdf_path) as reader:
                if len(reader) != doc.page_count:
                    raise RuntimeError(
                        f"Reader reports {len(reader)} pages, synthesized {doc.page_count}: {pdf_path}"
                    )
                if reader.needs_repair:
                    raise RuntimeError(f"Reader had to repair the cross-reference table: {pdf_path}")
                manifest.verified = True

                for pi in range(min(self.cfg.preview_pages, len(reader))):
                    png = out_dir / f"{pdf_path.stem}_page_{pi+1:03d}.png"
                    reader.render_page_to_png(pi, png)
                    manifest.previews.append(str(png))
            log(f"Step 4/4 done: verified={manifest.verified}, previews={len(manifest.previews)}")
        else:
            log("Step 4/4 skipped: verify disabled")

        manifest.save(pdf_path.with_suffix(".manifest.json"))
        return manifest
