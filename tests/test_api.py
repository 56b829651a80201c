"""Tests for the FastAPI structure analysis API.

WHY: Validates that every endpoint behaves correctly: happy paths, error
cases, and edge cases. Uses FastAPI TestClient for synchronous in-process
testing against the real pipeline (it is pure CPU work, nothing to mock).

HOW: Each test exercises one endpoint behavior. Analyses are created via
POST /analyses with the shared sample captions, then read, edited,
exported or deleted through the API.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test is independent; the module-level store is cleared around
  every test
- Tests cover: happy paths, 404 not found, 422 invalid input, 400 bad payload
"""

from __future__ import annotations

import inspect
import json

import pytest
from fastapi.testclient import TestClient

from clipstruct.server.app import analysis_store, app, create_analysis, export_analysis


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_store():
    """Clear all analyses before and after each test to ensure isolation."""
    analysis_store.clear()
    yield
    analysis_store.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def created(client, sample_captions):
    """Submit the sample video and return the response body."""
    resp = client.post("/analyses", json={
        "video_id": "vid1",
        "title": "Build speed",
        "url": "https://example.com/watch?v=vid1",
        "video_duration": 120.0,
        "captions": sample_captions,
    })
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# POST /analyses
# ---------------------------------------------------------------------------


class TestCreateAnalysis:

    def test_returns_classified_segments(self, created):
        assert created["video_id"] == "vid1"
        assert [s["type"] for s in created["segments"]] == [
            "hook", "background", "corePoint", "example", "callToAction",
        ]
        assert created["segments"][0]["label"] == "Hook"
        assert created["stats"]["total"] == 5

    def test_preprocess_stats(self, created):
        pre = created["preprocess_stats"]
        assert pre["total_original_captions"] == 8
        assert pre["total_segments"] == 5
        assert pre["compression_ratio"] == 37.5

    def test_resubmit_replaces(self, client, created, sample_captions):
        resp = client.post("/analyses", json={
            "video_id": "vid1", "captions": sample_captions[:2],
        })
        assert resp.status_code == 201
        assert len(resp.json()["segments"]) == 1
        assert len(client.get("/analyses").json()) == 1

    def test_empty_captions_rejected(self, client):
        resp = client.post("/analyses", json={"video_id": "v", "captions": []})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "No usable captions found"

    def test_filler_only_captions_rejected(self, client):
        resp = client.post("/analyses", json={
            "video_id": "v",
            "captions": [{"text": "um uh", "start": 0, "duration": 1}],
        })
        assert resp.status_code == 422
        assert resp.json()["detail"] == "No usable captions found"

    def test_malformed_timing_tolerated(self, client):
        resp = client.post("/analyses", json={
            "video_id": "v",
            "captions": [{"text": "welcome back", "start": "soon", "duration": 2}],
        })
        assert resp.status_code == 201
        assert resp.json()["segments"][0]["start"] == 0.0

    def test_missing_video_id_rejected(self, client, sample_captions):
        resp = client.post("/analyses", json={"captions": sample_captions})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# GET /analyses, GET /analyses/{id}, DELETE
# ---------------------------------------------------------------------------


class TestReadAndDelete:

    def test_history(self, client, created):
        items = client.get("/analyses").json()
        assert items == [{
            "video_id": "vid1",
            "title": "Build speed",
            "url": "https://example.com/watch?v=vid1",
            "segment_count": 5,
            "updated_at": created["updated_at"],
        }]

    def test_get_analysis(self, client, created):
        resp = client.get("/analyses/vid1")
        assert resp.status_code == 200
        assert resp.json() == created

    def test_get_missing(self, client):
        resp = client.get("/analyses/nope")
        assert resp.status_code == 404
        assert "nope" in resp.json()["detail"]

    def test_delete(self, client, created):
        assert client.delete("/analyses/vid1").status_code == 204
        assert client.get("/analyses/vid1").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/analyses/nope").status_code == 404


# ---------------------------------------------------------------------------
# PATCH /analyses/{id}/segments/{index}
# ---------------------------------------------------------------------------


class TestUpdateSegment:

    def test_change_type(self, client, created):
        resp = client.patch("/analyses/vid1/segments/1", json={"type": "example"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["segments"][1]["type"] == "example"
        assert body["segments"][1]["user_modified"] is True
        assert body["stats"]["per_type"]["example"]["count"] == 2
        assert "background" not in body["stats"]["per_type"]

    def test_time_codes_accepted(self, client, created):
        resp = client.patch("/analyses/vid1/segments/0", json={"start": "0:01", "end": "0:05"})
        assert resp.status_code == 200
        seg = resp.json()["segments"][0]
        assert (seg["start"], seg["end"], seg["duration"]) == (1.0, 5.0, 4.0)

    def test_seconds_accepted(self, client, created):
        resp = client.patch("/analyses/vid1/segments/0", json={"end": 3.5})
        assert resp.status_code == 200
        assert resp.json()["segments"][0]["end"] == 3.5

    def test_invalid_time_code(self, client, created):
        resp = client.patch("/analyses/vid1/segments/0", json={"start": "soon"})
        assert resp.status_code == 422

    def test_start_after_end(self, client, created):
        resp = client.patch("/analyses/vid1/segments/0", json={"start": "1:00", "end": "0:10"})
        assert resp.status_code == 422

    def test_unknown_type(self, client, created):
        resp = client.patch("/analyses/vid1/segments/0", json={"type": "outro"})
        assert resp.status_code == 422

    def test_index_out_of_range(self, client, created):
        resp = client.patch("/analyses/vid1/segments/9", json={"intent": "x"})
        assert resp.status_code == 404

    def test_missing_video(self, client):
        resp = client.patch("/analyses/nope/segments/0", json={"intent": "x"})
        assert resp.status_code == 404

    def test_expired_analysis_not_revived(self, client, created, monkeypatch):
        monkeypatch.setattr(analysis_store, "_ttl_seconds", -1.0)
        resp = client.patch("/analyses/vid1/segments/0", json={"intent": "x"})
        assert resp.status_code == 404
        assert client.get("/analyses/vid1").status_code == 404


# ---------------------------------------------------------------------------
# GET /analyses/{id}/export/{format}
# ---------------------------------------------------------------------------


class TestExport:

    def test_markdown_export(self, client, created):
        resp = client.get("/analyses/vid1/export/markdown")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/markdown")
        assert "ClipStruct_Build speed-structure.md" in resp.headers["content-disposition"]
        assert resp.text.startswith("# Video Structure Analysis")

    def test_json_export(self, client, created):
        resp = client.get("/analyses/vid1/export/json")
        assert resp.status_code == 200
        data = json.loads(resp.text)
        assert data["title"] == "Build speed"
        assert len(data["segments"]) == 5

    def test_export_reflects_edits(self, client, created):
        client.patch("/analyses/vid1/segments/1", json={"intent": "My own note"})
        resp = client.get("/analyses/vid1/export/plain_text")
        assert "My own note" in resp.text

    def test_non_ascii_title(self, client, sample_captions):
        client.post("/analyses", json={
            "video_id": "zh1", "title": "缓存讲解", "captions": sample_captions,
        })
        resp = client.get("/analyses/zh1/export/markdown")
        assert resp.status_code == 200
        assert "filename*=UTF-8''" in resp.headers["content-disposition"]

    def test_unknown_format(self, client, created):
        resp = client.get("/analyses/vid1/export/docx")
        assert resp.status_code == 404
        assert "docx" in resp.json()["detail"]

    def test_missing_analysis(self, client):
        assert client.get("/analyses/nope/export/json").status_code == 404


# ---------------------------------------------------------------------------
# GET /formats, GET /health
# ---------------------------------------------------------------------------


class TestMeta:

    def test_formats(self, client):
        formats = client.get("/formats").json()
        assert {f["key"]: f["suffix"] for f in formats} == {
            "json": "-structure.json",
            "markdown": "-structure.md",
            "plain_text": "-structure.txt",
        }

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "version": "0.1.0"}


class TestHandlers:

    def test_pipeline_handlers_run_in_threadpool(self):
        # FastAPI runs plain def endpoints in its threadpool, off the event loop.
        assert not inspect.iscoroutinefunction(create_analysis)
        assert not inspect.iscoroutinefunction(export_analysis)
