"""Map detection boxes from image pixels onto the displayed image."""

import html
from typing import List

from .models.entities import ImageMetadata, OverlayBox, PiiDetection


def compute_overlays(detections: List[PiiDetection], metadata: ImageMetadata) -> List[OverlayBox]:
    """Scale each bounding box into percentage space of the natural image size.

    Must only be called once the natural dimensions are known; detections
    without a box produce no overlay.
    """
    if metadata.width <= 0 or metadata.height <= 0:
        raise ValueError(
            f"Natural image size is not known yet ({metadata.width}x{metadata.height})"
        )

    overlays = []
    for d in detections:
        if d.bounding_box is None:
            continue
        box = d.bounding_box.clamp(metadata.width, metadata.height)
        if box.is_degenerate:
            continue
        overlays.append(
            OverlayBox(
                detection_id=d.detection_id,
                category=d.category,
                label=f"{d.category}: {d.value}",
                left=box.x1 / metadata.width * 100,
                top=box.y1 / metadata.height * 100,
                width=box.width / metadata.width * 100,
                height=box.height / metadata.height * 100,
            )
        )
    return overlays


def render_overlay_html(image_src: str, overlays: List[OverlayBox], alt: str = "Original document") -> str:
    """Render the image with absolutely positioned outline boxes.

    Boxes are positioned in percentages so they follow the image when the
    browser resizes it.
    """
    boxes = []
    for o in overlays:
        label = html.escape(o.label, quote=True)
        boxes.append(
            f'<div class="pii-box" title="{label}" '
            f'style="left:{o.left:.4f}%;top:{o.top:.4f}%;'
            f'width:{o.width:.4f}%;height:{o.height:.4f}%;">'
            f'<span class="pii-label">{html.escape(o.category)}</span></div>'
        )
    return (
        '<div class="pii-overlay">'
        f'<img src="{html.escape(image_src, quote=True)}" alt="{html.escape(alt, quote=True)}"/>'
        + "".join(boxes)
        + "</div>"
    )


OVERLAY_CSS = """
.pii-overlay { position: relative; width: 100%; border-radius: 8px; overflow: hidden; }
.pii-overlay img { display: block; width: 100%; height: auto; }
.pii-box { position: absolute; border: 2px solid #ef4444; background: rgba(239, 68, 68, 0.12); }
.pii-box .pii-label {
    display: none; position: absolute; top: -1.6em; left: 0; white-space: nowrap;
    background: #ef4444; color: #fff; font-size: 0.75em; padding: 1px 6px; border-radius: 3px;
}
.pii-box:hover .pii-label { display: block; }
"""
