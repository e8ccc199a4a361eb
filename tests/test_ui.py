"""Tests for the Gradio UI callbacks and helpers."""

from unittest.mock import patch

import gradio as gr
import pytest

from privacyguard.exceptions import DetectionError
from privacyguard.models.entities import BoundingBox, MaskingStatus, PiiDetection
from ui import app as ui_app

from conftest import make_corrupt_png, make_image, make_image_bytes


@pytest.fixture
def upload(tmp_path):
    path = tmp_path / "card.png"
    path.write_bytes(make_image_bytes())
    return str(path)


@pytest.fixture
def corrupt_upload(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(make_corrupt_png())
    return str(path)


class TestProcessImage:
    def test_no_pii(self, make_pipeline, upload):
        with patch.object(ui_app, "_get_pipeline", return_value=make_pipeline()):
            status, original_html, masked, summary, rows, download = ui_app.process_image(upload, "placeholder")
        assert "No PII detected" in status
        assert "pii-box" not in original_html
        assert summary == "*No PII detected.*"
        assert rows == []
        assert masked == download
        with open(masked, "rb") as f:
            assert f.read() == make_image_bytes()

    def test_unlocalized_detection_listed_without_overlay(self, make_pipeline, upload):
        pipeline = make_pipeline(detections=[PiiDetection("Email", "rahul@example.com")])
        with patch.object(ui_app, "_get_pipeline", return_value=pipeline):
            status, original_html, _, summary, rows, _ = ui_app.process_image(upload, "placeholder")
        assert "pii-box" not in original_html
        assert "Email" in summary
        assert "1 not located" in summary
        assert rows == [["Email", "rahul@example.com", "not located", ""]]

    def test_generation_failure_shows_detections(self, make_pipeline, upload):
        pipeline = make_pipeline(
            detections=[PiiDetection("Name", "Rahul Sharma", BoundingBox(100, 50, 300, 150))],
            redact_fail=True,
        )
        with patch.object(ui_app, "_get_pipeline", return_value=pipeline):
            status, original_html, masked, summary, rows, download = ui_app.process_image(upload, "mask")
        assert "Could not generate masked image" in status
        assert "left:10.0000%;top:10.0000%" in original_html
        assert masked is None and download is None
        assert len(rows) == 1

    def test_detection_failure_raises_processing_error(self, make_pipeline, upload):
        pipeline = make_pipeline(detect_error=DetectionError("network down"))
        with patch.object(ui_app, "_get_pipeline", return_value=pipeline):
            with pytest.raises(gr.Error):
                ui_app.process_image(upload, "placeholder")

    def test_invalid_file_type_rejected_before_pipeline(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not an image")
        with patch.object(ui_app, "_get_pipeline") as factory:
            with pytest.raises(gr.Error):
                ui_app.process_image(str(path), "placeholder")
        factory.assert_not_called()

    def test_missing_upload_rejected(self):
        with pytest.raises(gr.Error):
            ui_app.process_image(None, "placeholder")

    def test_undecodable_image_reports_invalid_file(self, make_pipeline, corrupt_upload):
        with patch.object(ui_app, "_get_pipeline", return_value=make_pipeline()):
            with pytest.raises(gr.Error, match="could not be decoded") as exc_info:
                ui_app.process_image(corrupt_upload, "placeholder")
        assert exc_info.value.title == "Invalid File Type"


class TestHelpers:
    def test_preview_renders_without_overlays(self, upload):
        status, original_html, masked, *_ = ui_app.preview_upload(upload)
        assert "<img" in original_html
        assert "pii-box" not in original_html
        assert masked is None

    def test_preview_of_cleared_input_resets(self):
        assert ui_app.preview_upload(None) == ui_app.reset_view()

    def test_preview_of_undecodable_image_reports_invalid_file(self, corrupt_upload):
        with pytest.raises(gr.Error, match="could not be decoded") as exc_info:
            ui_app.preview_upload(corrupt_upload)
        assert exc_info.value.title == "Invalid File Type"

    def test_render_original_scales_boxes(self):
        html = ui_app.render_original(
            make_image(),
            [PiiDetection("Name", "Rahul", BoundingBox(100, 50, 300, 150))],
        )
        assert "width:20.0000%;height:20.0000%;" in html

    def test_findings_rows_show_warnings(self):
        d = PiiDetection("Aadhaar Number", "2345 6789", BoundingBox(1, 2, 3, 4), warnings=["id_truncated"])
        assert ui_app.build_findings_rows([d]) == [["Aadhaar Number", "2345 6789", "(1, 2) - (3, 4)", "id_truncated"]]

    def test_status_for_masked_result(self, make_pipeline, png_image, name_detection):
        result = make_pipeline([name_detection]).process(png_image)
        assert result.masking_status is MaskingStatus.MASKED
        assert ui_app.build_status_message(result).startswith("**Redaction complete**")

    def test_create_ui_builds_blocks(self):
        assert isinstance(ui_app.create_ui(), gr.Blocks)
