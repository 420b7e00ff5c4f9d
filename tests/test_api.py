"""
HTTP API Tests
==============

FastAPI endpoints with a fake inference backend and a static camera.
"""

import base64

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from ball_inspector import main
from ball_inspector.acquisition import StaticFrameSource
from ball_inspector.inference import ServiceError
from ball_inspector.storage import ImageStore

from conftest import FakeInferenceClient, make_jpeg, to_data_url


@pytest.fixture
def inference():
    return FakeInferenceClient()


@pytest.fixture
def api(monkeypatch, inference):
    monkeypatch.setattr(main, "create_inference_client", lambda: inference)
    monkeypatch.setattr(main, "create_frame_source", lambda: StaticFrameSource(make_jpeg(640, 480)))
    with TestClient(main.app) as client:
        yield client


class TestServiceEndpoints:
    """Tests for the service-level endpoints."""

    def test_root(self, api):
        """Verify the service information endpoint."""
        response = api.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, api):
        """Verify the liveness probe."""
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics(self, api):
        """Verify /metrics reflects a completed analysis."""
        api.post("/api/analyze-ball", json={"image": to_data_url(make_jpeg(100, 80))})

        body = api.get("/metrics").json()

        assert body["analyses_started"] == 1
        assert body["verdicts"]["pass"] == 1
        assert body["definitive_verdicts"] == 1
        assert body["acquisition_mode"] == "live"


class TestAnalyzeBall:
    """Tests for POST /api/analyze-ball."""

    def test_returns_verdict(self, api, inference):
        """Verify a valid image returns {status, message}."""
        response = api.post("/api/analyze-ball", json={"image": to_data_url(make_jpeg(1600, 1200))})

        assert response.status_code == 200
        assert response.json() == {"status": "pass", "message": "Looks fine."}
        assert inference.call_count == 1
        assert inference.frames[0].width == 800

    def test_unparseable_reply_is_quality_error(self, api, inference):
        """Verify an unparseable reply still returns 200 with quality_error."""
        inference.reply = "Sorry, I can't help with that."

        response = api.post("/api/analyze-ball", json={"image": to_data_url(make_jpeg(100, 80))})

        assert response.status_code == 200
        assert response.json()["status"] == "quality_error"

    @pytest.mark.parametrize("body", [{}, {"image": ""}, {"image": None}])
    def test_missing_image(self, api, inference, body):
        """Verify a missing image is rejected before inference."""
        response = api.post("/api/analyze-ball", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "No image provided"}
        assert inference.call_count == 0

    @pytest.mark.parametrize(
        "image",
        [
            "data:image/jpeg;base64,",
            "just-some-text",
            "data:image/jpeg;base64," + base64.b64encode(b"not an image").decode("ascii"),
        ],
    )
    def test_malformed_image(self, api, inference, image):
        """Verify an undecodable image is rejected before inference."""
        response = api.post("/api/analyze-ball", json={"image": image})

        assert response.status_code == 400
        assert "error" in response.json()
        assert inference.call_count == 0

    def test_service_error(self, api, inference):
        """Verify an inference failure maps to 502."""
        inference.error = ServiceError("Inference service returned HTTP 500: overloaded", status_code=500)

        response = api.post("/api/analyze-ball", json={"image": to_data_url(make_jpeg(100, 80))})

        assert response.status_code == 502
        assert "overloaded" in response.json()["error"]

    def test_saves_submission_when_storage_enabled(self, api, monkeypatch, tmp_path):
        """Verify submissions are written when storage is on."""
        monkeypatch.setattr(main, "_image_store", ImageStore(tmp_path))

        response = api.post("/api/analyze-ball", json={"image": to_data_url(make_jpeg(100, 80))})

        assert response.status_code == 200
        saved = list(tmp_path.iterdir())
        assert len(saved) == 1
        assert saved[0].name.startswith("ball_")
        assert saved[0].read_bytes()[:3] == b"\xff\xd8\xff"

    def test_saved_submission_always_uses_jpg_name(self, api, monkeypatch, tmp_path):
        """Verify a PNG data URL is stored under a .jpg name, bytes untouched."""
        monkeypatch.setattr(main, "_image_store", ImageStore(tmp_path))
        ok, png = cv2.imencode(".png", np.full((40, 60, 3), 200, dtype=np.uint8))
        assert ok

        response = api.post("/api/analyze-ball", json={"image": to_data_url(png.tobytes(), "image/png")})

        assert response.status_code == 200
        saved = list(tmp_path.iterdir())
        assert len(saved) == 1
        assert saved[0].name.startswith("ball_")
        assert saved[0].suffix == ".jpg"
        assert saved[0].read_bytes() == png.tobytes()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"json": {"image": 123}},
            {"json": ["x"]},
            {"content": b"not json", "headers": {"Content-Type": "application/json"}},
        ],
    )
    def test_malformed_body_is_400_error(self, api, inference, kwargs):
        """Verify schema failures answer 400 {error}, not 422."""
        response = api.post("/api/analyze-ball", **kwargs)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}
        assert inference.call_count == 0


class TestAcquisitionEndpoints:
    """Tests for the controller surface."""

    def test_initial_state(self, api):
        """Verify the controller starts idle in live mode."""
        body = api.get("/acquisition").json()
        assert body["mode"] == "live"
        assert body["busy"] is False
        assert body["has_image"] is False

    def test_capture_and_analyze(self, api, inference):
        """Verify a live capture is analyzed and remembered."""
        response = api.post("/acquisition/analyze")

        assert response.status_code == 200
        assert response.json()["status"] == "pass"
        assert api.get("/acquisition").json()["last_verdict"]["status"] == "pass"

    def test_upload_then_analyze(self, api, inference):
        """Verify an uploaded portrait image is resized before inference."""
        upload = api.post("/acquisition/upload", json={"image": to_data_url(make_jpeg(1200, 1600))})
        assert upload.status_code == 200
        assert upload.json()["mode"] == "uploaded"
        assert upload.json()["image_height"] == 1600

        response = api.post("/acquisition/analyze")

        assert response.status_code == 200
        assert (inference.frames[0].width, inference.frames[0].height) == (450, 600)

    def test_bad_upload_keeps_mode(self, api):
        """Verify a rejected upload leaves the mode unchanged."""
        response = api.post("/acquisition/upload", json={"image": "data:image/png;base64,AAAA"})

        assert response.status_code == 400
        assert api.get("/acquisition").json()["mode"] == "live"

    def test_switch_back_to_live(self, api):
        """Verify switching to live drops the upload."""
        api.post("/acquisition/upload", json={"image": to_data_url(make_jpeg(100, 80))})

        response = api.post("/acquisition/live")

        assert response.json()["mode"] == "live"
        assert response.json()["has_image"] is False

    def test_service_error_is_quality_error_verdict(self, api, inference):
        """Verify controller analyses fold inference failures into a verdict."""
        inference.error = ServiceError("timed out")

        response = api.post("/acquisition/analyze")

        assert response.status_code == 200
        assert response.json() == {
            "status": "quality_error",
            "message": "An error occurred during analysis.",
        }

    def test_malformed_upload_body_is_400_error(self, api):
        """Verify upload schema failures answer 400 {error}."""
        response = api.post("/acquisition/upload", json={"image": 42})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}
        assert api.get("/acquisition").json()["mode"] == "live"

    def test_analyze_while_busy_is_409(self, api, inference):
        """Verify a request mid-analysis gets 409 and dispatches nothing."""
        main._controller._busy = True

        response = api.post("/acquisition/analyze")

        assert response.status_code == 409
        assert response.json() == {"error": "Analysis already in progress"}
        assert inference.call_count == 0

    def test_wrong_mode_is_409(self, api, monkeypatch, inference):
        """Verify a capture while an upload is held maps to 409."""
        api.post("/acquisition/upload", json={"image": to_data_url(make_jpeg(100, 80))})
        controller = main._controller
        monkeypatch.setattr(controller, "analyze_current", controller.capture_and_analyze)

        response = api.post("/acquisition/analyze")

        assert response.status_code == 409
        assert "live mode" in response.json()["error"]
        assert inference.call_count == 0
        assert controller.mode.value == "uploaded"
