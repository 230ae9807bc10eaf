from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import ReportEntry, SessionRecord, entries_from_json

_interstitial_re = re.compile(
    r"just a moment|checking your browser|please enable javascript|verify you are human",
    re.IGNORECASE
)


def is_interstitial(entry: ReportEntry) -> bool:
    return bool(_interstitial_re.search(entry.title or "") or _interstitial_re.search(entry.summary or ""))


def is_web_page(url: str | None) -> bool:
    # Only standard web pages are captured automatically
    return (url or "").strip().lower().startswith(("http://", "https://"))


class SessionLog:
    """
    Bounded log of captured pages, most recent first.

    Overflow drops the oldest entry. An entry with the same (url, title)
    as the current most recent one is not recorded twice.
    """

    def __init__(self, capacity: int = 5, entries: Optional[List[ReportEntry]] = None):
        self.capacity = max(1, int(capacity))
        self._entries: List[ReportEntry] = list(entries or [])[:self.capacity]

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[ReportEntry]:
        return list(self._entries)

    def record(self, entry: ReportEntry) -> bool:
        if not is_web_page(entry.url) or is_interstitial(entry):
            return False
        return self.push(entry)

    def push(self, entry: ReportEntry) -> bool:
        # No scheme or interstitial filtering; used for user selections
        last = self._entries[0] if self._entries else None
        if last is not None and last.url == entry.url and last.title == entry.title:
            return False
        self._entries.insert(0, entry)
        del self._entries[self.capacity:]
        return True

    def clear(self) -> None:
        self._entries = []


class SessionHistory:
    """Stopped sessions, newest first, capped."""

    def __init__(self, capacity: int = 5, sessions: Optional[List[SessionRecord]] = None):
        self.capacity = max(1, int(capacity))
        self.sessions: List[SessionRecord] = list(sessions or [])[:self.capacity]

    def __len__(self) -> int:
        return len(self.sessions)

    def archive(self, record: SessionRecord) -> None:
        self.sessions.insert(0, record)
        del self.sessions[self.capacity:]

    def get(self, index: int) -> SessionRecord:
        try:
            return self.sessions[index]
        except IndexError:
            raise IndexError(f"No past session at index {index} (have {len(self.sessions)})") from None

    def delete(self, index: int) -> SessionRecord:
        if index < 0:
            raise IndexError(f"No past session at index {index} (have {len(self.sessions)})")
        record = self.get(index)
        del self.sessions[index]
        return record


@dataclass
class SessionStore:
    """
    JSON-file persistence for the tracking state:
      {"tracking": bool, "mode": str|null, "current": [...], "sessions": [...]}
    """
    path: Path
    tracking: bool = False
    mode: Optional[str] = None
    current: SessionLog = field(default_factory=SessionLog)
    history: SessionHistory = field(default_factory=SessionHistory)

    @classmethod
    def load(cls, path: Path, capacity: int = 5, history_capacity: int = 5) -> "SessionStore":
        path = Path(path)
        if not path.exists():
            return cls(path=path, current=SessionLog(capacity), history=SessionHistory(history_capacity))

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Session store is not valid JSON: {path} ({e})") from e

        # A bare list is a captured log without tracking state
        if isinstance(data, list):
            data = {"current": data}
        if not isinstance(data, dict):
            raise ValueError(f"Session store must be a JSON object or list: {path}")

        sessions = data.get("sessions") or []
        if not isinstance(sessions, list):
            raise ValueError("'sessions' must be a list")

        return cls(
            path=path,
            tracking=bool(data.get("tracking")),
            mode=data.get("mode"),
            current=SessionLog(capacity, entries_from_json(data.get("current") or [])),
            history=SessionHistory(
                history_capacity,
                [SessionRecord.from_dict(s) for s in sessions if isinstance(s, dict)],
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tracking": self.tracking,
            "mode": self.mode,
            "current": [e.to_dict() for e in self.current.entries],
            "sessions": [s.to_dict() for s in self.history.sessions],
        }

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    def start(self, mode: str) -> None:
        self.mode = mode
        self.tracking = True
        self.current.clear()

    def stop(self, timestamp: str) -> Optional[SessionRecord]:
        self.tracking = False
        if not len(self.current):
            return None
        record = SessionRecord(logs=self.current.entries, mode=self.mode, timestamp=timestamp)
        self.history.archive(record)
        self.current.clear()
        return record

    def select(self, index: Optional[int]) -> SessionRecord:
        # None means the live session
        if index is None:
            return SessionRecord(logs=self.current.entries, mode=self.mode, timestamp="")
        return self.history.get(index)

    def delete_session(self, index: int) -> SessionRecord:
        return self.history.delete(index)

    def quick_add(
        self,
        selection: str,
        title: Optional[str] = None,
        url: str = "",
        mode: str = "browsing",
        time: str = "",
    ) -> Optional[ReportEntry]:
        """
        Add a user-selected text snippet to the current session.

        Tracking is switched on if it was off; a research quick-add also
        moves the session to research mode. Returns None for an empty
        selection or a repeat of the most recent entry.
        """
        text = (selection or "").strip()
        if not text:
            return None

        entry = ReportEntry(
            title=title or "No Title",
            url=url or "",
            time=time,
            summary=text[:1000],
            user_added=True,
        )
        self.tracking = True
        if mode == "research":
            self.mode = "research"
        elif not self.mode:
            self.mode = mode
        return entry if self.current.push(entry) else None
