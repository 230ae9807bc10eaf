from __future__ import annotations

import argparse
import datetime as dt
import json
import time
from dataclasses import replace
from pathlib import Path

from config import LayoutConfig, ReportConfig
from trailnote.models import entries_from_json
from trailnote.pipeline import ReportExporter, make_summarizer
from trailnote.progress import ConsoleProgress
from trailnote.session import SessionStore
from trailnote.utils import ensure_dir


def main():
    ap = argparse.ArgumentParser(description="Export TrailNote browsing sessions as PDF reports")
    ap.add_argument("--store", required=True, help="Session store JSON (or a bare JSON list of entries)")
    ap.add_argument("--output", default=None, help="Output folder for PDFs")

    ap.add_argument("--session", type=int, action="append", default=None,
                    help="Past session index to export (repeatable); default is the current session")
    ap.add_argument("--all", action="store_true", help="Export every past session")
    ap.add_argument("--record", default=None, help="JSON list of captured entries to add to the current session")
    ap.add_argument("--start", default=None, metavar="MODE", help="Start a new tracking session (browsing|research)")
    ap.add_argument("--stop", action="store_true", help="Stop tracking and archive the current session")
    ap.add_argument("--delete", type=int, action="append", default=None, metavar="N",
                    help="Delete a past session by index (repeatable)")
    ap.add_argument("--add-selection", default=None, metavar="TEXT",
                    help="Quick-add a text selection to the current session")
    ap.add_argument("--selection-title", default=None, help="Page title for --add-selection")
    ap.add_argument("--selection-url", default="", help="Page URL for --add-selection")
    ap.add_argument("--selection-mode", default="browsing", choices=["browsing", "research"],
                    help="Mode for --add-selection")

    ap.add_argument("--title", default=None, help="Report title")
    ap.add_argument("--width", type=int, default=None, help="Wrap column width")
    ap.add_argument("--summarizer", default=None, help="Summarizer: none, textrank or openai")
    ap.add_argument("--model", default=None, help="OpenAI model id for --summarizer openai")
    ap.add_argument("--preview", type=int, default=None, help="Render the first N pages to PNG")
    ap.add_argument("--no-verify", action="store_true", help="Skip reopening the written PDF")

    args = ap.parse_args()

    cfg = ReportConfig(
        title=args.title or ReportConfig.title,
        summarizer=args.summarizer or ReportConfig.summarizer,
        openai_model=args.model or ReportConfig.openai_model,
        preview_pages=args.preview if args.preview is not None else ReportConfig.preview_pages,
        verify=not args.no_verify,
        layout=replace(LayoutConfig(), wrap_width=args.width or LayoutConfig.wrap_width),
    )

    store = SessionStore.load(Path(args.store).expanduser(), cfg.session_capacity, cfg.history_capacity)
    now = dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    # Session bookkeeping first; exporting is optional
    if args.start:
        store.start(args.start)
    if args.record:
        payload = json.loads(Path(args.record).expanduser().read_text(encoding="utf-8"))
        # Oldest capture first, so the log ends up most recent first
        added = sum(store.current.record(e) for e in entries_from_json(payload))
        print(f"Recorded {added} entries into the current session ({len(store.current)} kept)")
    if args.add_selection is not None:
        added = store.quick_add(
            args.add_selection,
            title=args.selection_title,
            url=args.selection_url,
            mode=args.selection_mode,
            time=now,
        )
        print("Added selection to the current session." if added else "Selection not added.")
    if args.stop:
        archived = store.stop(now)
        print("Archived current session." if archived else "Nothing to archive.")
    # Highest index first so earlier deletions do not shift later ones
    for index in sorted(set(args.delete or []), reverse=True):
        removed = store.delete_session(index)
        print(f"Deleted past session {index} ({removed.timestamp or 'no timestamp'}).")
    changed = args.start or args.record or args.add_selection is not None or args.stop or args.delete
    if changed:
        store.save()

    if not args.output:
        return

    if args.all:
        indices = list(range(len(store.history)))
    elif args.session:
        indices = args.session
    else:
        indices = [None]

    records = [store.select(i) for i in indices]
    records = [r for r in records if r.logs]
    if not records:
        raise SystemExit(f"No session entries to export in: {args.store}")

    out_dir = Path(args.output).expanduser().resolve()
    ensure_dir(out_dir)

    exporter = ReportExporter(cfg, summarizer=make_summarizer(cfg))

    prog = ConsoleProgress(total_sessions=len(records))
    prog.run_start()

    manifests = []
    base_ms = int(time.time() * 1000)
    for idx, record in enumerate(records, start=1):
        prog.session_start(idx=idx, label=f"{record.mode or 'session'} {record.timestamp or '(current)'}")
        try:
            manifest = exporter.export(record, out_dir, progress=prog, stamp_ms=base_ms + idx)
            manifests.append(manifest.to_dict())
            prog.session_done()
        except Exception as e:
            prog.session_fail(str(e))
            # Continue with the next session rather than stopping the run

    (out_dir / "run_manifest.json").write_text(json.dumps(manifests, indent=2), encoding="utf-8")
    prog.run_done()
    print(f"\nDone. Outputs in: {out_dir}")


if __name__ == "__main__":
    main()
