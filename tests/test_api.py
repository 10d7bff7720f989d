"""
API endpoint tests
"""
import pytest

from transcriber.models import JobStatus
from transcriber.providers import ProviderError

from conftest import SAMPLE_TRANSCRIPT


class TestSubmit:
    def test_submit_completes_job(self, client, provider):
        response = client.post(
            "/api/transcriptions",
            json={"source_url": "https://www.youtube.com/watch?v=abc123", "owner_id": "u1"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "completed"
        assert data["transcript"] == SAMPLE_TRANSCRIPT
        assert provider.calls == [("https://www.youtube.com/watch?v=abc123", data["job_id"])]

        job = client.get(f"/api/transcriptions/{data['job_id']}").json()
        assert job["status"] == "completed"
        assert job["transcript_text"] == SAMPLE_TRANSCRIPT
        assert job["language"] == "pt"
        assert job["owner_id"] == "u1"

    @pytest.mark.parametrize("body", [{}, {"source_url": ""}, {"source_url": None}])
    def test_missing_url_is_rejected_without_job(self, client, provider, body):
        response = client.post("/api/transcriptions", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "YouTube URL is required"}
        assert client.get("/api/transcriptions").json()["jobs"] == []
        assert provider.calls == []

    def test_unrecognized_url_records_failed_job(self, client, provider):
        response = client.post("/api/transcriptions", json={"source_url": "not a url"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Invalid YouTube URL"
        assert provider.calls == []

        job = client.get(f"/api/transcriptions/{data['job_id']}").json()
        assert job["status"] == "failed"
        assert job["transcript_text"] is None

    def test_provider_failure_is_generic(self, client, provider):
        provider.error = ProviderError("Gemini API error: 503 quota exhausted for key xyz")

        response = client.post(
            "/api/transcriptions", json={"source_url": "https://youtu.be/abc123"}
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Transcription failed"
        assert set(data) == {"error", "job_id"}
        assert "quota" not in response.text

        job = client.get(f"/api/transcriptions/{data['job_id']}").json()
        assert job["status"] == "failed"
        assert job["transcript_text"] is None


class TestRead:
    def test_unknown_job_is_404(self, client):
        response = client.get("/api/transcriptions/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "Transcription not found"

    def test_list_filters_by_owner(self, client):
        client.post("/api/transcriptions", json={"source_url": "https://youtu.be/a", "owner_id": "alice"})
        client.post("/api/transcriptions", json={"source_url": "https://youtu.be/b", "owner_id": "bob"})

        jobs = client.get("/api/transcriptions", params={"owner_id": "alice"}).json()["jobs"]
        assert [job["source_url"] for job in jobs] == ["https://youtu.be/a"]
        assert len(client.get("/api/transcriptions").json()["jobs"]) == 2

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "message" in response.json()


class TestView:
    def _submit(self, client):
        response = client.post(
            "/api/transcriptions", json={"source_url": "https://youtu.be/abc123"}
        )
        return response.json()["job_id"]

    def test_view_lists_lines_and_exports(self, client):
        job_id = self._submit(client)

        view = client.get(f"/api/transcriptions/{job_id}/view").json()
        assert view["status"] == "completed"
        assert view["language"] == "pt"
        assert view["total_lines"] == 3
        assert [line["speaker"] for line in view["lines"]] == [
            "Speaker 1",
            "Speaker 2",
            "Speaker 1",
        ]
        assert [line["timestamp"] for line in view["lines"]] == ["00:00", "00:30", "01:00"]
        assert [fmt["name"] for fmt in view["export_formats"]] == ["SRT", "VTT", "TXT", "PDF"]

    def test_view_search_highlights(self, client):
        job_id = self._submit(client)

        view = client.get(f"/api/transcriptions/{job_id}/view", params={"q": "python"}).json()
        assert view["query"] == "python"
        assert view["total_lines"] == 3
        assert [line["index"] for line in view["lines"]] == [1, 2]
        assert view["lines"][1]["highlighted"] == (
            "<mark>Python</mark> é uma linguagem muito popular."
        )

    def test_view_of_failed_job_has_no_lines(self, client):
        job_id = client.post("/api/transcriptions", json={"source_url": "nope"}).json()["job_id"]
        view = client.get(f"/api/transcriptions/{job_id}/view").json()
        assert view["status"] == "failed"
        assert view["lines"] == []

    def test_view_unknown_job(self, client):
        assert client.get("/api/transcriptions/missing/view").status_code == 404


class TestWait:
    def test_wait_returns_terminal_job(self, client):
        job_id = client.post(
            "/api/transcriptions", json={"source_url": "https://youtu.be/abc123"}
        ).json()["job_id"]

        response = client.get(f"/api/transcriptions/{job_id}/wait")
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_wait_times_out_on_processing_job(self, client):
        job_id = client.app.state.store.create("https://youtu.be/stuck")

        response = client.get(f"/api/transcriptions/{job_id}/wait")
        assert response.status_code == 504

    def test_wait_unknown_job(self, client):
        assert client.get("/api/transcriptions/missing/wait").status_code == 404


class TestWebSocket:
    def test_terminal_job_sends_snapshot(self, client):
        job_id = client.post(
            "/api/transcriptions", json={"source_url": "https://youtu.be/abc123"}
        ).json()["job_id"]

        with client.websocket_connect(f"/api/ws/transcriptions/{job_id}") as ws:
            assert ws.receive_json() == {"stage": "completed", "job_id": job_id}

    def test_unknown_job(self, client):
        with client.websocket_connect("/api/ws/transcriptions/missing") as ws:
            assert ws.receive_json() == {"error": "Transcription not found"}


def test_cors_preflight(client):
    response = client.options(
        "/api/transcriptions",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:5173")


def test_status_values_match_enum(client):
    job_id = client.post(
        "/api/transcriptions", json={"source_url": "https://youtu.be/abc123"}
    ).json()["job_id"]
    assert client.get(f"/api/transcriptions/{job_id}").json()["status"] == JobStatus.completed


def test_unexpected_provider_crash_still_records_failed_job(client, provider):
    provider.error = RuntimeError("segfault in decoder")

    response = client.post(
        "/api/transcriptions", json={"source_url": "https://youtu.be/abc123"}
    )

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Transcription failed"
    assert "segfault" not in response.text
    assert client.get(f"/api/transcriptions/{data['job_id']}").json()["status"] == "failed"


def test_blank_transcript_is_reported_as_failure(client, provider):
    provider.text = "   "

    response = client.post(
        "/api/transcriptions", json={"source_url": "https://youtu.be/abc123"}
    )

    assert response.status_code == 500
    job = client.get(f"/api/transcriptions/{response.json()['job_id']}").json()
    assert job["status"] == "failed"
    assert job["transcript_text"] is None
