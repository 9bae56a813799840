"""
Tests for the HTTP API.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from telemost_recorder.api import create_app
from telemost_recorder.recorder import RecordingResult

from tests.fakes import MEETING_URL


class StubPool:
    """Browser pool stand-in reporting fixed stats."""

    def __init__(self):
        self.close_calls = 0

    async def get_stats(self):
        return {"is_connected": True, "contexts_count": 0, "version": "120.0.6099.28"}

    async def close(self):
        self.close_calls += 1


class StubRecorder:
    """Writes a fixed payload, or fails after leaving a partial file."""

    payload = b"webm-audio"
    fail_with = None
    raise_error = None
    requests = []
    pools = []

    def __init__(self, settings, browser_pool=None):
        StubRecorder.pools.append(browser_pool)

    async def record(self, request):
        StubRecorder.requests.append(request)
        if self.raise_error:
            raise self.raise_error
        path = Path(request.output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.payload)
        if self.fail_with:
            return RecordingResult.failed(self.fail_with, file_path=str(path))
        return RecordingResult.succeeded(str(path), request.duration_seconds or 42, len(self.payload))


@pytest.fixture
def stub_recorder():
    StubRecorder.fail_with = None
    StubRecorder.raise_error = None
    StubRecorder.requests = []
    StubRecorder.pools = []
    with patch("telemost_recorder.api.routes.TelemostRecorder", StubRecorder):
        yield StubRecorder


@pytest.fixture
def pool():
    return StubPool()


@pytest.fixture
def client(settings, pool, stub_recorder):
    app = create_app(settings, pool=pool)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


class TestRecordEndpoint:
    """Test POST /api/record."""

    def test_returns_audio_file(self, client, settings):
        response = client.post("/api/record", json={"meetingUrl": MEETING_URL, "duration": 30})

        assert response.status_code == 200
        assert response.content == b"webm-audio"
        assert response.headers["content-type"] == "audio/webm"
        assert response.headers["x-file-size"] == "10"
        assert response.headers["x-recording-duration"] == "30"

        recording_id = response.headers["x-recording-id"]
        saved = Path(settings.recording.output_dir) / f"recording_{recording_id}.webm"
        assert saved.exists()

    def test_snake_case_body(self, client, stub_recorder):
        response = client.post(
            "/api/record",
            json={"meeting_url": MEETING_URL, "record_until_end": True, "max_duration": 5400, "format": "wav"},
        )

        assert response.status_code == 200
        request = stub_recorder.requests[0]
        assert request.until_end is True
        assert request.duration_seconds is None
        assert request.max_duration_seconds == 5400
        assert request.output_path.endswith(".wav")

    def test_default_duration(self, client, stub_recorder):
        client.post("/api/record", json={"meetingUrl": MEETING_URL})
        assert stub_recorder.requests[0].duration_seconds == 10

    def test_missing_meeting_url(self, client):
        response = client.post("/api/record", json={"duration": 30})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["details"]["errors"]

    def test_invalid_parameters(self, client, stub_recorder):
        """Invalid parameters are rejected before any recording starts."""
        response = client.post("/api/record", json={"meetingUrl": "https://zoom.us/j/1", "duration": 5})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert len(response.json()["details"]["errors"]) == 2
        assert stub_recorder.requests == []

    def test_failed_recording_leaves_no_file(self, client, settings, stub_recorder):
        stub_recorder.fail_with = "Could not join the conference: join button not found"

        response = client.post("/api/record", json={"meetingUrl": MEETING_URL, "duration": 30})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "recording_failed"
        assert "join button not found" in body["message"]
        assert "recording_id" in body["details"]
        assert list(Path(settings.recording.output_dir).iterdir()) == []

    def test_unexpected_error(self, client, stub_recorder):
        stub_recorder.raise_error = RuntimeError("boom")

        response = client.post("/api/record", json={"meetingUrl": MEETING_URL, "duration": 30})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "internal_error", "message": "Internal server error"}

    def test_shared_pool_is_passed(self, client, pool, stub_recorder):
        client.post("/api/record", json={"meetingUrl": MEETING_URL, "duration": 30})

        assert stub_recorder.pools == [pool]


class TestServer:
    """Test health, errors and lifecycle."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "browser": {"is_connected": True, "contexts_count": 0, "version": "120.0.6099.28"},
        }

    def test_unknown_endpoint(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_output_dir_created_on_startup(self, client, settings):
        assert Path(settings.recording.output_dir).is_dir()

    def test_pool_closed_on_shutdown(self, settings, pool, stub_recorder):
        with TestClient(create_app(settings, pool=pool)):
            pass

        assert pool.close_calls == 1

    def test_cors_exposes_recording_headers(self, client):
        response = client.post(
            "/api/record",
            json={"meetingUrl": MEETING_URL, "duration": 30},
            headers={"Origin": "http://localhost:5173"},
        )

        exposed = response.headers["access-control-expose-headers"]
        assert "X-Recording-ID" in exposed
