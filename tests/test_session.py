from __future__ import annotations

import json
from pathlib import Path

import pytest

from trailnote.models import ReportEntry, SessionRecord
from trailnote.session import SessionHistory, SessionLog, SessionStore, is_interstitial, is_web_page


def _page(i: int) -> ReportEntry:
    return ReportEntry(title=f"Page {i}", url=f"https://example.org/{i}", summary=f"summary {i}")


def test_session_log_keeps_most_recent_first_and_drops_oldest() -> None:
    log = SessionLog(capacity=3)
    for i in range(5):
        assert log.record(_page(i))
    assert [e.title for e in log.entries] == ["Page 4", "Page 3", "Page 2"]


def test_session_log_skips_repeat_of_most_recent_only() -> None:
    log = SessionLog(capacity=5)
    assert log.record(_page(1))
    assert not log.record(_page(1))
    assert log.record(_page(2))
    assert log.record(_page(1))
    assert [e.title for e in log.entries] == ["Page 1", "Page 2", "Page 1"]


def test_session_log_skips_interstitial_pages() -> None:
    log = SessionLog()
    blocked = ReportEntry(title="Just a moment...", url="https://cf.example")
    assert is_interstitial(blocked)
    assert not log.record(blocked)
    assert not log.record(ReportEntry(title="Shop", url="https://shop.example", summary="Please enable JavaScript to continue"))
    assert len(log) == 0


def test_history_is_capped_and_indexed() -> None:
    history = SessionHistory(capacity=2)
    for i in range(3):
        history.archive(SessionRecord(logs=[_page(i)], mode="browsing", timestamp=f"t{i}"))
    assert [s.timestamp for s in history.sessions] == ["t2", "t1"]
    assert history.get(0).timestamp == "t2"
    with pytest.raises(IndexError):
        history.get(5)


def test_store_round_trip_with_start_stop(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    store = SessionStore.load(path)
    store.start("research")
    store.current.record(_page(1))
    store.current.record(_page(2))
    archived = store.stop("2026-01-04 10:00:00")
    assert archived is not None and archived.mode == "research"
    store.save()

    loaded = SessionStore.load(path)
    assert loaded.tracking is False
    assert len(loaded.current) == 0
    past = loaded.select(0)
    assert [e.title for e in past.logs] == ["Page 2", "Page 1"]
    assert past.timestamp == "2026-01-04 10:00:00"


def test_store_stop_without_entries_archives_nothing(tmp_path: Path) -> None:
    store = SessionStore.load(tmp_path / "none.json")
    store.start("browsing")
    assert store.stop("now") is None
    assert len(store.history) == 0


def test_store_accepts_bare_entry_list(tmp_path: Path) -> None:
    path = tmp_path / "logs.json"
    path.write_text(json.dumps([{"title": "A", "url": "http://x"}]), encoding="utf-8")
    current = SessionStore.load(path).select(None)
    assert [e.url for e in current.logs] == ["http://x"]


def test_store_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        SessionStore.load(path)


def test_session_log_records_only_web_pages() -> None:
    log = SessionLog()
    for url in ("chrome://extensions", "about:blank", "file:///tmp/a.html", "", "  "):
        assert not is_web_page(url)
        assert not log.record(ReportEntry(title="Internal", url=url))
    assert is_web_page("HTTPS://Example.org/x")
    assert log.record(ReportEntry(title="Plain", url="http://example.org"))
    assert [e.url for e in log.entries] == ["http://example.org"]


def test_history_delete_removes_by_index(tmp_path: Path) -> None:
    store = SessionStore.load(tmp_path / "store.json")
    for i in range(3):
        store.history.archive(SessionRecord(logs=[_page(i)], mode="browsing", timestamp=f"t{i}"))

    removed = store.delete_session(1)
    assert removed.timestamp == "t1"
    assert [s.timestamp for s in store.history.sessions] == ["t2", "t0"]
    with pytest.raises(IndexError):
        store.delete_session(2)
    with pytest.raises(IndexError):
        store.history.delete(-1)

    store.save()
    assert [s.timestamp for s in SessionStore.load(store.path).history.sessions] == ["t2", "t0"]


def test_quick_add_records_selection_and_starts_tracking(tmp_path: Path) -> None:
    store = SessionStore.load(tmp_path / "store.json")
    entry = store.quick_add("  A quoted passage.  ", title=None, url="", mode="research", time="t")

    assert entry is not None
    assert entry.title == "No Title"
    assert entry.summary == "A quoted passage."
    assert entry.user_added is True
    assert store.tracking is True and store.mode == "research"
    assert store.current.entries == [entry]

    # Repeat of the most recent entry and empty selections are ignored
    assert store.quick_add("A quoted passage.", mode="research", time="t") is None
    assert store.quick_add("   ") is None
    assert len(store.current) == 1


def test_quick_add_truncates_and_keeps_existing_mode(tmp_path: Path) -> None:
    store = SessionStore.load(tmp_path / "store.json")
    store.start("research")
    entry = store.quick_add("x" * 1500, title="Notes", url="https://notes.example", mode="browsing")
    assert entry is not None and len(entry.summary) == 1000
    assert store.mode == "research"

    store.save()
    reloaded = SessionStore.load(store.path).current.entries[0]
    assert reloaded.user_added is True and reloaded.title == "Notes"
