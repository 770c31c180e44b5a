"""Tests for the FastAPI caption editor API.

WHY: The host UI drives every edit through these endpoints. They must
map store results and typed failures to the documented responses, and
never leak a stack trace for a bad request.

HOW: Each test builds a fresh app with create_app() and talks to it with
the synchronous TestClient. Tests go through the HTTP surface only; the
store is inspected with GET /captions.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test gets its own app and store (no shared state)
- Tests cover: happy paths, 200 with applied=false, 400, 422
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from caption_editor.core.store import CaptionStore
from caption_editor.server.app import create_app


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def loaded_client(sample_srt):
    """Client whose store already holds the two SAMPLE_SRT captions."""
    store = CaptionStore()
    store.import_captions("srt", sample_srt)
    return TestClient(create_app(store=store))


def _texts(client):
    return [c["text"] for c in client.get("/captions").json()]


# ---------------------------------------------------------------------------
# Health and formats
# ---------------------------------------------------------------------------


class TestHealthAndFormats:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": "0.1.0"}

    def test_formats_lists_every_codec(self, client):
        body = client.get("/formats").json()
        keys = {f["key"]: f for f in body}
        assert set(keys) == {"srt", "vtt", "ass", "json", "txt", "fcpxml", "edl"}
        assert keys["srt"]["can_import"] is True
        assert keys["edl"]["can_import"] is False
        assert keys["vtt"]["extension"] == ".vtt"

    def test_reset_session(self, loaded_client):
        assert loaded_client.delete("/session").status_code == 204
        assert loaded_client.get("/captions").json() == []


# ---------------------------------------------------------------------------
# Caption editing
# ---------------------------------------------------------------------------


class TestCaptionEditing:

    def test_create_and_list(self, client):
        resp = client.post("/captions", json={"start_ms": 1200})
        assert resp.status_code == 201
        assert resp.json() == {"id": "caption_0"}
        captions = client.get("/captions").json()
        assert captions[0]["start_ms"] == 1200
        assert captions[0]["end_ms"] == 1200
        assert captions[0]["style"]["position"] == "bottom"

    def test_add_timed_rejects_inverted_range(self, client):
        resp = client.post("/captions/timed", json={"start_ms": 500, "end_ms": 100, "text": "x"})
        assert resp.status_code == 422
        assert "must not be before" in resp.json()["detail"]

    def test_update_text(self, loaded_client):
        resp = loaded_client.patch("/captions/caption_0/text", json={"text": "Hi."})
        assert resp.json() == {"applied": True}
        assert _texts(loaded_client)[0] == "Hi."

    def test_update_unknown_id_is_not_an_error(self, loaded_client):
        resp = loaded_client.patch("/captions/nope/text", json={"text": "x"})
        assert resp.status_code == 200
        assert resp.json() == {"applied": False}

    def test_update_timing(self, loaded_client):
        resp = loaded_client.patch("/captions/caption_1/timing", json={"start_ms": 10, "end_ms": 20})
        assert resp.json() == {"applied": True}
        captions = loaded_client.get("/captions").json()
        assert (captions[1]["start_ms"], captions[1]["end_ms"]) == (10, 20)

    def test_update_style_validates_color(self, loaded_client):
        resp = loaded_client.patch("/captions/caption_0/style", json={"color": "red"})
        assert resp.status_code == 422

    def test_update_style(self, loaded_client):
        resp = loaded_client.patch(
            "/captions/caption_0/style", json={"position": "top", "bold": True, "color": "#FF0000"}
        )
        assert resp.json() == {"applied": True}
        style = loaded_client.get("/captions").json()[0]["style"]
        assert style["position"] == "top"
        assert style["bold"] is True
        assert style["font_size"] == 16

    def test_global_style(self, loaded_client):
        resp = loaded_client.put("/style", json={"italic": True})
        assert resp.json() == {"count": 2}
        assert all(c["style"]["italic"] for c in loaded_client.get("/captions").json())

    def test_delete(self, loaded_client):
        resp = loaded_client.post("/captions/delete", json={"ids": ["caption_0", "ghost"]})
        assert resp.json() == {"count": 1}
        assert len(loaded_client.get("/captions").json()) == 1

    def test_split(self, client):
        client.post("/captions/timed", json={"start_ms": 0, "end_ms": 4000, "text": "one two three four"})
        resp = client.post("/captions/caption_0/split", json={"at_ms": 2000})
        assert resp.json() == {"applied": True}
        assert _texts(client) == ["one two", "three four"]

    def test_split_outside_caption(self, client):
        client.post("/captions/timed", json={"start_ms": 0, "end_ms": 4000, "text": "a b"})
        resp = client.post("/captions/caption_0/split", json={"at_ms": 4000})
        assert resp.status_code == 422

    def test_select_and_merge(self, client):
        client.post("/captions/timed", json={"start_ms": 0, "end_ms": 1000, "text": "Hello"})
        client.post("/captions/timed", json={"start_ms": 1000, "end_ms": 2000, "text": "world"})
        assert client.put("/selection", json={"positions": [1, 0]}).json() == [0, 1]
        resp = client.post("/captions/merge")
        assert resp.json() == {"id": "caption_0"}
        assert _texts(client) == ["Hello world"]

    def test_merge_without_selection(self, loaded_client):
        resp = loaded_client.post("/captions/merge")
        assert resp.status_code == 422
        assert "at least 2" in resp.json()["detail"]

    def test_selection_out_of_range(self, loaded_client):
        assert loaded_client.put("/selection", json={"positions": [5]}).status_code == 422

    def test_shift_stretch_sort(self, loaded_client):
        loaded_client.post("/captions/shift", json={"delta_ms": 1000})
        loaded_client.post("/captions/stretch", json={"factor": 0.5})
        captions = loaded_client.get("/captions").json()
        assert [(c["start_ms"], c["end_ms"]) for c in captions] == [(1000, 2250), (2500, 3625)]
        loaded_client.patch("/captions/caption_0/timing", json={"start_ms": 9000, "end_ms": 9500})
        loaded_client.post("/captions/sort")
        assert [c["id"] for c in loaded_client.get("/captions").json()] == ["caption_1", "caption_0"]


# ---------------------------------------------------------------------------
# Transforms, analysis, history
# ---------------------------------------------------------------------------


class TestTransformsAndHistory:

    def test_find_replace(self, loaded_client):
        resp = loaded_client.post(
            "/transforms/find-replace", json={"find": "hello", "replace": "Hi", "case_sensitive": False}
        )
        assert resp.json() == {"count": 1}
        assert _texts(loaded_client)[0] == "Hi there."

    def test_find_replace_empty_find(self, loaded_client):
        assert loaded_client.post("/transforms/find-replace", json={"find": ""}).status_code == 422

    def test_auto_punctuate(self, client):
        client.post("/captions/timed", json={"start_ms": 0, "end_ms": 1000, "text": "hi , you"})
        client.post("/transforms/auto-punctuate")
        assert _texts(client) == ["Hi, you."]

    def test_profanity_filter(self, client):
        client.post("/captions/timed", json={"start_ms": 0, "end_ms": 1000, "text": "damn"})
        client.post("/transforms/profanity-filter", json={"bleep": False})
        assert _texts(client) == ["****"]

    def test_reading_speed_and_conflicts(self, client):
        client.post("/captions/timed", json={"start_ms": 0, "end_ms": 1000, "text": "x" * 30})
        client.post("/captions/timed", json={"start_ms": 500, "end_ms": 1500, "text": ""})
        assert client.get("/analysis/reading-speed").json() == {
            "warnings": ["Caption 1 too fast: 30.0 chars/sec"]
        }
        assert client.get("/analysis/conflicts").json() == {"conflicts": [[0, 1]]}

    def test_undo_redo(self, loaded_client):
        loaded_client.patch("/captions/caption_0/text", json={"text": "changed"})
        resp = loaded_client.post("/history/undo")
        assert resp.json() == {"moved": True, "can_undo": True, "can_redo": True}
        assert _texts(loaded_client)[0] == "Hello there."
        resp = loaded_client.post("/history/redo")
        assert resp.json()["moved"] is True
        assert _texts(loaded_client)[0] == "changed"
        assert loaded_client.post("/history/redo").json()["moved"] is False


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


class TestImportExport:

    def test_import_srt(self, client, sample_srt):
        resp = client.post("/import/srt", json={"content": sample_srt})
        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 2
        assert body["conflicts"] == []
        assert _texts(client)[0] == "Hello there."

    def test_import_parse_error(self, loaded_client):
        resp = loaded_client.post("/import/srt", json={"content": "1\n0x:00:01,000 --> 00:00:02,000\nx\n"})
        assert resp.status_code == 400
        assert "hours" in resp.json()["detail"]
        assert len(loaded_client.get("/captions").json()) == 2

    def test_import_export_only_format(self, client):
        assert client.post("/import/edl", json={"content": ""}).status_code == 400

    def test_unknown_format(self, client):
        assert client.get("/export/docx").status_code == 400

    def test_export_vtt(self, loaded_client):
        resp = loaded_client.get("/export/vtt")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/vtt")
        assert 'filename="captions.vtt"' in resp.headers["content-disposition"]
        assert resp.text.startswith("WEBVTT\n\n00:00:01.000 --> 00:00:03.500\nHello there.\n")

    def test_export_json(self, loaded_client):
        data = json.loads(loaded_client.get("/export/json").text)
        assert [d["id"] for d in data] == ["caption_0", "caption_1"]


# ---------------------------------------------------------------------------
# Waveform and timeline
# ---------------------------------------------------------------------------


class TestWaveformAndTimeline:

    def test_waveform_at_target_rate(self, client):
        samples = [0.5] * 200
        resp = client.post(
            "/waveform", json={"samples": samples, "sample_rate": 8000, "target_rate": 8000}
        )
        assert resp.json() == {"envelope": [0.5, 0.5]}

    def test_waveform_resamples(self, client):
        resp = client.post(
            "/waveform", json={"samples": [0.0] * 1600, "sample_rate": 16000, "target_rate": 8000}
        )
        assert len(resp.json()["envelope"]) == 8

    def test_waveform_rejects_bad_rate(self, client):
        resp = client.post("/waveform", json={"samples": [0.0], "sample_rate": 0})
        assert resp.status_code == 422

    def test_peaks(self, client):
        samples = [0.0] * 100 + [0.9] * 100 + [0.0] * 200
        client.post("/waveform", json={"samples": samples, "sample_rate": 8000, "target_rate": 8000})
        assert client.get("/waveform/peaks", params={"threshold": 0.5}).json() == {"peaks": [1]}
        resp = client.get(
            "/waveform/nearest-peak", params={"time_ms": 0, "duration_ms": 400, "threshold": 0.5}
        )
        assert resp.json() == 100

    def test_timeline_click(self, client):
        resp = client.post("/timeline/click", json={
            "transform": {"scale": 2.0, "offset": 500.0},
            "duration_ms": 10000, "width": 1000, "mouse_x": 500,
        })
        assert resp.json()["time_ms"] == pytest.approx(5000)

    def test_timeline_wheel(self, client):
        resp = client.post("/timeline/wheel", json={
            "transform": {"scale": 1.0, "offset": 0.0},
            "duration_ms": 10000, "width": 1000, "mouse_x": 500, "delta_y": -120,
        })
        body = resp.json()
        assert body["scale"] == pytest.approx(1.2)
        assert body["offset"] == pytest.approx(100.0)

    def test_timeline_pan(self, client):
        resp = client.post("/timeline/pan", json={
            "transform": {"scale": 2.0, "offset": 500.0},
            "width": 1000, "start_mouse_x": 300, "current_mouse_x": 200,
        })
        assert resp.json() == {"scale": 2.0, "offset": 600.0}

    def test_timeline_rejects_zero_width(self, client):
        resp = client.post("/timeline/click", json={
            "transform": {}, "duration_ms": 1, "width": 0, "mouse_x": 0,
        })
        assert resp.status_code == 422

    @pytest.mark.parametrize("path,extra", [
        ("/timeline/click", {"duration_ms": 10000, "width": 1000, "mouse_x": 500}),
        ("/timeline/wheel", {"duration_ms": 10000, "width": 1000, "mouse_x": 500, "delta_y": -120}),
        ("/timeline/pan", {"width": 1000, "start_mouse_x": 300, "current_mouse_x": 200}),
    ])
    def test_timeline_rejects_zero_scale(self, client, path, extra):
        body = dict(extra, transform={"scale": 0.0, "offset": 0.0})
        resp = client.post(path, json=body)
        assert resp.status_code == 422
