"""
Tests for the workflow HTTP API.

Runs the FastAPI app in-process with a private registry and fake document
collaborators.
"""

import asyncio
import json
import time

import pytest
from fastapi.testclient import TestClient

from tripdocs.extraction import DocumentCollaborators
from tripdocs.graph.workflow_api import get_collaborators
from tripdocs.main import app
from tripdocs.progress.registry import RunRegistry, get_registry


# ============================================================================
# Test Fixtures
# ============================================================================


HOTEL_RECORD = {
    "propertyName": "Grand Hotel",
    "checkInDate": "2025-01-15",
    "checkOutDate": "2025-01-17",
}


def _make_collaborators(fail_ocr=None):
    async def ocr(filename, data, config=None):
        if filename == fail_ocr:
            raise RuntimeError(f"OCR failed for {filename}")
        return data.decode()

    async def classify(text, config=None):
        return "hotel"

    async def extract(text, kind, config=None):
        return dict(HOTEL_RECORD)

    return DocumentCollaborators(ocr=ocr, classify=classify, extract=extract)


def _make_upload(name="hotel.txt", content=b"Hotel reservation"):
    return ("files", (name, content, "text/plain"))


def _make_client(registry, collaborators=None):
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_collaborators] = lambda: collaborators or _make_collaborators()
    return TestClient(app)


def _wait_for_terminal(client, run_id, attempts=200):
    for _ in range(attempts):
        body = client.get(f"/api/workflows/{run_id}").json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.01)
    raise AssertionError(f"Run {run_id} did not finish")


def _parse_events(text):
    """Split an SSE body into (event, data) pairs."""
    events = []
    for frame in text.strip().split("\n\n"):
        event = "message"
        data = None
        for line in frame.splitlines():
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        events.append((event, data))
    return events


@pytest.fixture(autouse=True)
def _reset_overrides():
    yield
    app.dependency_overrides.clear()


# ============================================================================
# TestStartEndpoint
# ============================================================================


class TestStartEndpoint:
    """Tests for POST /api/workflows."""

    def test_start_and_complete(self):
        registry = RunRegistry()

        with _make_client(registry) as client:
            response = client.post(
                "/api/workflows",
                files=[_make_upload("a.txt"), _make_upload("b.txt")],
            )

            assert response.status_code == 202
            body = response.json()
            assert body["message"] == "Started processing 2 file(s)"

            run = _wait_for_terminal(client, body["run_id"])

        assert run["status"] == "completed"
        assert run["documentCount"] == 2
        assert "Grand Hotel" in run["markdown"]
        assert [step["name"] for step in run["steps"]][0] == "INIT"

    def test_no_files_rejected(self):
        registry = RunRegistry()

        with _make_client(registry) as client:
            response = client.post("/api/workflows")

        assert response.status_code == 400
        assert registry.list_runs() == []

    def test_too_many_files_rejected(self):
        registry = RunRegistry()

        with _make_client(registry) as client:
            response = client.post(
                "/api/workflows",
                files=[_make_upload(f"{i}.txt") for i in range(11)],
            )

        assert response.status_code == 400
        assert "Maximum 10 files" in response.json()["detail"]

    def test_unsupported_file_type_rejected(self):
        registry = RunRegistry()

        with _make_client(registry) as client:
            response = client.post(
                "/api/workflows",
                files=[_make_upload("itinerary.docx")],
            )

        assert response.status_code == 400
        assert "Only 0 out of 1 files" in response.json()["detail"]
        assert registry.list_runs() == []

    def test_unexpected_error_is_500(self):
        class BrokenRegistry(RunRegistry):
            def create_run(self, document_count=0):
                raise RuntimeError("registry unavailable")

        with _make_client(BrokenRegistry()) as client:
            response = client.post("/api/workflows", files=[_make_upload()])

        assert response.status_code == 500
        assert "registry unavailable" in response.json()["detail"]


# ============================================================================
# TestRunEndpoints
# ============================================================================


class TestRunEndpoints:
    """Tests for run snapshots and listing."""

    def test_unknown_run(self):
        with _make_client(RunRegistry()) as client:
            response = client.get("/api/workflows/does-not-exist")

        assert response.status_code == 404

    def test_list_runs(self):
        registry = RunRegistry()
        first = registry.create_run()
        second = registry.create_run()

        with _make_client(registry) as client:
            response = client.get("/api/workflows")

        assert response.status_code == 200
        assert {run["id"] for run in response.json()} == {first, second}

    def test_root_and_health(self):
        with _make_client(RunRegistry()) as client:
            assert client.get("/health").json() == {"status": "healthy"}
            assert client.get("/").json()["name"] == "Tripdocs"


# ============================================================================
# TestStreamEndpoint
# ============================================================================


class TestStreamEndpoint:
    """Tests for GET /api/workflows/{run_id}/stream."""

    def test_unknown_run(self):
        with _make_client(RunRegistry()) as client:
            response = client.get("/api/workflows/does-not-exist/stream")

        assert response.status_code == 404

    def test_second_observer_conflict(self):
        registry = RunRegistry()
        run_id = registry.create_run()
        asyncio.run(registry.subscribe(run_id))

        with _make_client(registry) as client:
            response = client.get(f"/api/workflows/{run_id}/stream")

        assert response.status_code == 409

    def test_completed_run_stream(self):
        registry = RunRegistry()

        with _make_client(registry) as client:
            run_id = client.post("/api/workflows", files=[_make_upload()]).json()["run_id"]
            run = _wait_for_terminal(client, run_id)

            response = client.get(f"/api/workflows/{run_id}/stream")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        events = _parse_events(response.text)
        assert len(events) == 1
        event, data = events[0]
        assert event == "message"
        assert data["type"] == "completion"
        assert data["markdown"] == run["markdown"]
        assert data["warnings"] == run["warnings"]

    def test_failed_run_stream(self):
        registry = RunRegistry()
        collaborators = _make_collaborators(fail_ocr="hotel.txt")

        with _make_client(registry, collaborators) as client:
            run_id = client.post("/api/workflows", files=[_make_upload()]).json()["run_id"]
            run = _wait_for_terminal(client, run_id)

            response = client.get(f"/api/workflows/{run_id}/stream")

        assert run["status"] == "failed"
        assert _parse_events(response.text) == [("error", {"error": "OCR failed for hotel.txt"})]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
