"""Unit tests for mapping detection boxes into overlay percentages."""

import pytest

from privacyguard.models.entities import BoundingBox, ImageMetadata, PiiDetection
from privacyguard.overlay import compute_overlays, render_overlay_html

_META = ImageMetadata(width=1000, height=500, mime_type="image/png")


class TestComputeOverlays:
    def test_scales_box_to_percentages(self):
        d = PiiDetection("Name", "Asha Rao", BoundingBox(x1=100, y1=50, x2=300, y2=150))
        [o] = compute_overlays([d], _META)
        assert o.left == pytest.approx(10.0)
        assert o.top == pytest.approx(10.0)
        assert o.width == pytest.approx(20.0)
        assert o.height == pytest.approx(20.0)

    def test_detection_without_box_gets_no_overlay(self):
        detections = [
            PiiDetection("Email", "asha@example.com"),
            PiiDetection("Name", "Asha Rao", BoundingBox(0, 0, 500, 250)),
        ]
        overlays = compute_overlays(detections, _META)
        assert [o.category for o in overlays] == ["Name"]

    def test_empty_detections_give_no_overlays(self):
        assert compute_overlays([], _META) == []

    def test_out_of_bounds_box_is_clamped(self):
        d = PiiDetection("Photo", "face", BoundingBox(-100, -100, 2000, 2000))
        [o] = compute_overlays([d], _META)
        assert (o.left, o.top, o.width, o.height) == (0.0, 0.0, 100.0, 100.0)

    def test_degenerate_box_is_skipped(self):
        d = PiiDetection("Name", "Asha Rao", BoundingBox(300, 50, 100, 150))
        assert compute_overlays([d], _META) == []

    def test_non_finite_box_is_skipped(self):
        d = PiiDetection("Name", "Asha Rao", BoundingBox(float("nan"), 10, 200, 40))
        assert compute_overlays([d], _META) == []

    def test_label_carries_category_and_value(self):
        d = PiiDetection("Name", "Asha Rao", BoundingBox(100, 50, 300, 150))
        [o] = compute_overlays([d], _META)
        assert o.label == "Name: Asha Rao"
        assert o.detection_id == d.detection_id

    def test_unknown_dimensions_rejected(self):
        d = PiiDetection("Name", "Asha Rao", BoundingBox(100, 50, 300, 150))
        with pytest.raises(ValueError, match="not known"):
            compute_overlays([d], ImageMetadata(width=0, height=0, mime_type="image/png"))


class TestRenderOverlayHtml:
    def test_boxes_positioned_in_percent(self):
        d = PiiDetection("Name", "Asha Rao", BoundingBox(100, 50, 300, 150))
        markup = render_overlay_html("data:image/png;base64,AAAA", compute_overlays([d], _META))
        assert "left:10.0000%;top:10.0000%;width:20.0000%;height:20.0000%;" in markup
        assert 'title="Name: Asha Rao"' in markup

    def test_labels_are_escaped(self):
        d = PiiDetection("Name", '<script>"x"</script>', BoundingBox(100, 50, 300, 150))
        markup = render_overlay_html("data:image/png;base64,AAAA", compute_overlays([d], _META))
        assert "<script>" not in markup

    def test_no_overlays_renders_image_only(self):
        markup = render_overlay_html("data:image/png;base64,AAAA", [])
        assert "pii-box" not in markup
        assert 'src="data:image/png;base64,AAAA"' in markup
