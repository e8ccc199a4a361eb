"""Tests for the /api/v1/detect and /api/v1/redact endpoints.

build_pipeline is patched so no model is ever called.
"""

from unittest.mock import patch

import pytest

from privacyguard.exceptions import DetectionError
from privacyguard.models.entities import BoundingBox, ImageData, PiiDetection

from conftest import make_image_bytes, make_png_header


def _upload(data=None, name="card.png", mime="image/png"):
    return {"file": (name, data if data is not None else make_image_bytes(), mime)}


@pytest.fixture
def patched_pipeline(make_pipeline):
    """Patch build_pipeline; yields a setter for the pipeline to return."""
    state = {"pipeline": make_pipeline()}
    with patch("api.routes.redact.build_pipeline", side_effect=lambda **_: state["pipeline"]) as factory:
        def _use(**kwargs):
            state["pipeline"] = make_pipeline(**kwargs)
            return state["pipeline"]
        _use.factory = factory
        yield _use


class TestUploadValidation:
    def test_non_image_rejected_without_model_call(self, api_client, patched_pipeline):
        resp = api_client.post("/api/v1/redact", files=_upload(b"%PDF-1.4 fake", "doc.pdf", "application/pdf"))
        assert resp.status_code == 400
        assert "PNG, JPG, WEBP" in resp.json()["detail"]
        patched_pipeline.factory.assert_not_called()

    def test_filename_extension_is_not_trusted(self, api_client, patched_pipeline):
        resp = api_client.post("/api/v1/detect", files=_upload(b"plain text", "card.png"))
        assert resp.status_code == 400

    def test_oversized_dimensions_rejected_as_invalid_input(self, api_client, patched_pipeline):
        resp = api_client.post("/api/v1/redact", files=_upload(make_png_header(30000, 30000)))
        assert resp.status_code == 400
        assert "could not be decoded" in resp.json()["detail"]

    def test_invalid_style_rejected(self, api_client, patched_pipeline):
        resp = api_client.post("/api/v1/redact", files=_upload(), data={"style": "blur-everything"})
        assert resp.status_code == 400
        assert "mask, placeholder" in resp.json()["detail"]


class TestDetectEndpoint:
    def test_returns_detections_and_overlays(self, api_client, patched_pipeline):
        patched_pipeline(detections=[
            PiiDetection("Name", "Rahul Sharma", BoundingBox(100, 50, 300, 150)),
            PiiDetection("Email", "rahul@example.com"),
        ])
        resp = api_client.post("/api/v1/detect", files=_upload())
        assert resp.status_code == 200
        body = resp.json()
        assert body["width"] == 1000
        assert body["height"] == 500
        assert [d["category"] for d in body["detections"]] == ["Name", "Email"]

        [overlay] = body["overlays"]
        assert (overlay["left"], overlay["top"], overlay["width"], overlay["height"]) == (10.0, 10.0, 20.0, 20.0)

        summary = {c["category"]: c for c in body["categories"]}
        assert summary["Email"] == {"category": "Email", "count": 1, "localized": 0}

    def test_detection_failure_is_502(self, api_client, patched_pipeline):
        patched_pipeline(detect_error=DetectionError("quota exceeded"))
        resp = api_client.post("/api/v1/detect", files=_upload())
        assert resp.status_code == 502
        body = resp.json()
        assert body["error"] == "detection_failed"
        assert body["message"].startswith("PII detection failed")
        assert "quota exceeded" in body["detail"]


class TestRedactEndpoint:
    def test_no_pii_returns_original_unchanged(self, api_client, patched_pipeline):
        data = make_image_bytes()
        resp = api_client.post("/api/v1/redact", files=_upload(data))
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "No PII detected."
        assert body["overlays"] == []
        assert body["masking_status"] == "unchanged"
        assert ImageData.from_data_uri(body["masked_image"]).content == data

    def test_masked_image_returned(self, api_client, patched_pipeline):
        patched_pipeline(detections=[PiiDetection("Name", "Rahul Sharma", BoundingBox(100, 50, 300, 150))])
        resp = api_client.post("/api/v1/redact", files=_upload(), data={"style": "mask"})
        body = resp.json()
        assert body["status"] == "completed"
        assert body["masking_status"] == "masked"
        assert body["redaction_style"] == "mask"
        assert body["masked_image"].startswith("data:image/png;base64,")
        assert patched_pipeline.factory.call_args.kwargs["redaction_style"] == "mask"

    def test_generation_failure_keeps_detections(self, api_client, patched_pipeline):
        patched_pipeline(
            detections=[PiiDetection("Name", "Rahul Sharma", BoundingBox(100, 50, 300, 150))],
            redact_fail=True,
        )
        resp = api_client.post("/api/v1/redact", files=_upload())
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "masking_failed"
        assert body["masking_status"] == "failed"
        assert body["masking_error"].startswith("Could not generate masked image")
        assert body["masked_image"] is None
        assert len(body["detections"]) == 1
        assert len(body["overlays"]) == 1

    def test_detection_failure_is_502_and_not_masked(self, api_client, patched_pipeline):
        pipeline = patched_pipeline(detect_error=DetectionError("bad schema"))
        resp = api_client.post("/api/v1/redact", files=_upload())
        assert resp.status_code == 502
        assert pipeline.redactor.calls == 0

    def test_request_id_used_for_pipeline(self, api_client, patched_pipeline):
        resp = api_client.post("/api/v1/redact", files=_upload(), headers={"X-Request-ID": "req-42"})
        assert resp.json()["request_id"] == "req-42"
