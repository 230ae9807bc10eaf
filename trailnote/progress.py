from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional


def _fmt_seconds(s: float) -> str:
    s = max(0.0, float(s))
    m, sec = divmod(int(s), 60)
    h, m = divmod(m, 60)
    if h > 0:
        return f"{h:d}h {m:02d}m {sec:02d}s"
    if m > 0:
        return f"{m:d}m {sec:02d}s"
    return f"{sec:d}s"


def _ts() -> str:
    # local time stamp for CLI readability
    return time.strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class ExportTiming:
    start: float
    end: Optional[float] = None

    @property
    def elapsed(self) -> float:
        return (self.end or time.time()) - self.start


class ConsoleProgress:
    """
    CLI progress reporter with:
      - per-session step messages
      - overall run progress

    Usage:
      prog = ConsoleProgress(total_sessions=N)
      prog.run_start()
      prog.session_start(i, label)
      prog.step("Synthesizing document...")
      prog.session_done()
      prog.run_done()
    """

    def __init__(self, total_sessions: int):
        self.total_sessions = int(total_sessions)
        self.run_start_time = time.time()
        self.export_times: list[float] = []
        self.failures = 0
        self.current_session: Optional[str] = None
        self.current_timing: Optional[ExportTiming] = None

    # ---------------------
    # Run-level
    # ---------------------

    def run_start(self) -> None:
        print(f"[{_ts()}] Run start | Sessions to export: {self.total_sessions}")

    def run_done(self) -> None:
        elapsed = time.time() - self.run_start_time
        print(
            f"[{_ts()}] Run complete | Exported: {len(self.export_times)} | Failed: {self.failures} | "
            f"Elapsed: {_fmt_seconds(elapsed)}"
        )

    # ---------------------
    # Session-level
    # ---------------------

    def session_start(self, idx: int, label: str) -> None:
        self.current_session = label
        self.current_timing = ExportTiming(start=time.time())
        print(f"\n[{_ts()}] === Session {idx}/{self.total_sessions}: {label} ===")

    def session_done(self) -> float:
        if not self.current_timing:
            return 0.0
        self.current_timing.end = time.time()
        elapsed = self.current_timing.elapsed
        self.export_times.append(elapsed)
        print(f"[{_ts()}] Session done | {self.current_session} | Time: {_fmt_seconds(elapsed)}")
        self.current_session = None
        self.current_timing = None
        return elapsed

    def session_fail(self, err: str) -> None:
        self.failures += 1
        print(f"[{_ts()}] Session failed | {self.current_session} | Error: {err}")
        self.current_session = None
        self.current_timing = None

    # ---------------------
    # Step-level (within session)
    # ---------------------

    def step(self, msg: str) -> None:
        prefix = self.current_session or "Report"
        print(f"[{_ts()}] [{prefix}] {msg}")
