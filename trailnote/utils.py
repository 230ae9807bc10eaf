from __future__ import annotations
import re
import time
from pathlib import Path

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def slugify(s: str | None, max_len: int = 40, default: str = "session") -> str:
    s = re.sub(r"\s+", "_", (s or "").strip())
    s = re.sub(r"[^\w\-]+", "", s)
    return s[:max_len] or default

def report_filename(mode: str | None, stamp_ms: int | None = None) -> str:
    # TrailNote_<mode>_<epoch ms>.pdf
    if stamp_ms is None:
        stamp_ms = int(time.time() * 1000)
    return f"TrailNote_{slugify(mode)}_{stamp_ms}.pdf"
