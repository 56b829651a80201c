"""Tests for the in-memory analysis store.

WHY: The store backs every HTTP endpoint. Lost edits, entries that never
expire, or a history that grows without bound would all surface as
confusing API behaviour rather than errors.

HOW: Runs the real pipeline on the sample captions once per test, saves
the result under different video IDs, and drives expiry with monkeypatched
time.time().

RULES:
- Time-dependent tests use monkeypatch to control time.time()
- Each test creates its own AnalysisStore
"""

from __future__ import annotations

import threading
import time

import pytest

from clipstruct.core.ir import SegmentType
from clipstruct.core.pipeline import analyze
from clipstruct.server.store import DEFAULT_TTL_SECONDS, AnalysisStore


@pytest.fixture
def result(sample_events):
    return analyze(sample_events, video_duration=120.0)


class TestSaveAndGet:

    def test_save_then_get(self, result):
        store = AnalysisStore()
        store.save("vid1", result, title="Build speed", url="https://example.com")
        entry = store.get("vid1")
        assert entry is not None
        assert entry.title == "Build speed"
        assert entry.video_duration == 120.0
        assert entry.structure == result.structure

    def test_get_missing_returns_none(self):
        assert AnalysisStore().get("nope") is None

    def test_resave_keeps_created_at(self, result, monkeypatch):
        store = AnalysisStore()
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.save("vid1", result)
        monkeypatch.setattr(time, "time", lambda: 200.0)
        entry = store.save("vid1", result, title="again")
        assert entry.created_at == 100.0
        assert entry.updated_at == 200.0
        assert len(store.list_analyses()) == 1

    def test_report_carries_metadata(self, result):
        store = AnalysisStore()
        entry = store.save("vid1", result, title="T", url="U")
        report = entry.to_report()
        assert (report.title, report.url, report.video_duration) == ("T", "U", 120.0)
        assert report.segments == result.structure


class TestHistory:

    def test_newest_first(self, result, monkeypatch):
        store = AnalysisStore()
        for i, vid in enumerate(["a", "b", "c"]):
            monkeypatch.setattr(time, "time", lambda i=i: 100.0 + i)
            store.save(vid, result)
        assert [e.video_id for e in store.list_analyses()] == ["c", "b", "a"]

    def test_oldest_evicted_beyond_limit(self, result, monkeypatch):
        store = AnalysisStore(max_items=2)
        for i, vid in enumerate(["a", "b", "c"]):
            monkeypatch.setattr(time, "time", lambda i=i: 100.0 + i)
            store.save(vid, result)
        assert store.get("a") is None
        assert {e.video_id for e in store.list_analyses()} == {"b", "c"}

    def test_edit_refreshes_position(self, result, monkeypatch):
        store = AnalysisStore()
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.save("a", result)
        monkeypatch.setattr(time, "time", lambda: 101.0)
        store.save("b", result)
        monkeypatch.setattr(time, "time", lambda: 102.0)
        store.update_segment("a", 0, intent="edited")
        assert [e.video_id for e in store.list_analyses()] == ["a", "b"]


class TestUpdateSegment:

    def test_update_applies_override(self, result):
        store = AnalysisStore()
        store.save("vid1", result)
        entry = store.update_segment("vid1", 1, type="example")
        assert entry.structure[1].type is SegmentType.EXAMPLE
        assert entry.structure[1].user_modified is True
        assert entry.stats.per_type[SegmentType.EXAMPLE].count == 2

    def test_update_missing_video_returns_none(self):
        assert AnalysisStore().update_segment("nope", 0, intent="x") is None

    def test_update_bad_index_raises_and_keeps_entry(self, result):
        store = AnalysisStore()
        store.save("vid1", result)
        with pytest.raises(IndexError):
            store.update_segment("vid1", 99, intent="x")
        assert store.get("vid1").structure == result.structure

    def test_update_bad_bounds_raises(self, result):
        store = AnalysisStore()
        store.save("vid1", result)
        with pytest.raises(ValueError):
            store.update_segment("vid1", 0, start=10.0, end=5.0)
        assert not any(seg.user_modified for seg in store.get("vid1").structure)


class TestDeleteAndExpiry:

    def test_delete(self, result):
        store = AnalysisStore()
        store.save("vid1", result)
        assert store.delete("vid1") is True
        assert store.get("vid1") is None
        assert store.delete("vid1") is False

    def test_default_ttl_is_thirty_days(self):
        assert DEFAULT_TTL_SECONDS == 30 * 24 * 60 * 60

    def test_expired_entry_hidden(self, result, monkeypatch):
        store = AnalysisStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.save("vid1", result)
        monkeypatch.setattr(time, "time", lambda: 161.0)
        assert store.get("vid1") is None
        assert store.list_analyses() == []

    def test_cleanup_removes_only_expired(self, result, monkeypatch):
        store = AnalysisStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.save("old", result)
        monkeypatch.setattr(time, "time", lambda: 150.0)
        store.save("new", result)
        monkeypatch.setattr(time, "time", lambda: 161.0)
        assert store.cleanup_expired() == 1
        assert store.get("new") is not None

    def test_update_on_expired_entry_returns_none(self, result, monkeypatch):
        store = AnalysisStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.save("vid1", result)
        monkeypatch.setattr(time, "time", lambda: 161.0)
        assert store.update_segment("vid1", 0, intent="late edit") is None
        assert store.get("vid1") is None
        assert store.list_analyses() == []

    def test_cleanup_empty_store(self):
        assert AnalysisStore().cleanup_expired() == 0


class TestThreadSafety:

    def test_concurrent_saves(self, result):
        store = AnalysisStore(max_items=1000)

        def worker(n):
            for i in range(20):
                store.save("vid-{}-{}".format(n, i), result)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.list_analyses()) == 100
