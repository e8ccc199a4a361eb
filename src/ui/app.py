"""Gradio UI for the PrivacyGuard document redaction demo."""

import html
import logging
from collections import Counter
from typing import List, Optional

import gradio as gr

from privacyguard.exceptions import DetectionError, InvalidImageError
from privacyguard.imaging import read_metadata
from privacyguard.models.entities import ImageData, MaskingStatus, PiiDetection, ProcessingResult
from privacyguard.overlay import OVERLAY_CSS, compute_overlays, render_overlay_html

logger = logging.getLogger(__name__)

UPLOAD_TYPES = [".png", ".jpg", ".jpeg", ".webp"]

FIDELITY_NOTE = (
    "*The masked image is regenerated by an image model. Only the listed regions "
    "were meant to change, but other areas may differ slightly from the original.*"
)

EMPTY_ORIGINAL = "<p class='placeholder-text'>Upload a document image to get started.</p>"


def _get_pipeline(style: str):
    """Build a pipeline from the current settings."""
    from api.config import get_settings
    from privacyguard.factory import build_pipeline

    return build_pipeline(**get_settings().pipeline_kwargs(style))


def _load_image(file_obj) -> ImageData:
    from api.storage.file_storage import file_storage

    if file_obj is None:
        raise gr.Error("Please upload a document image first.")
    file_path = file_obj if isinstance(file_obj, str) else file_obj.name
    try:
        return file_storage.load_path(file_path)
    except InvalidImageError as e:
        raise _invalid_file(e)


def _invalid_file(e: InvalidImageError) -> gr.Error:
    return gr.Error(f"Invalid File Type: {e}", title="Invalid File Type")


def render_original(image: ImageData, detections: List[PiiDetection]) -> str:
    """Decode the natural size first, then lay the overlays over the image."""
    metadata = read_metadata(image)
    overlays = compute_overlays(detections, metadata)
    return render_overlay_html(image.to_data_uri(), overlays)


def build_status_message(result: ProcessingResult) -> str:
    count = len(result.detections)
    if not result.detections:
        return "**No PII detected.** The original image is returned unchanged."
    if result.masking_status is MaskingStatus.FAILED:
        return (
            f"**Could not generate masked image.** {count} PII element(s) were detected "
            f"and are listed below.  \n<small>{html.escape(result.masking_error or '')}</small>"
        )
    if result.masking_status is MaskingStatus.UNCHANGED:
        return (
            f"**{count} PII element(s) found**, none with a region that could be masked. "
            "The original image is returned unchanged."
        )
    return (
        f"**Redaction complete**: **{count}** PII element(s) masked "
        f"in **{result.processing_time_seconds:.1f}s**"
    )


def build_category_summary(detections: List[PiiDetection]) -> str:
    """Category badges, including detections that have no bounding box."""
    if not detections:
        return "*No PII detected.*"

    counts = Counter(d.category for d in detections)
    unlocalized = Counter(d.category for d in detections if d.bounding_box is None)
    badges = []
    for cat, cnt in counts.most_common():
        label = html.escape(cat)
        note = f" ({unlocalized[cat]} not located)" if unlocalized[cat] else ""
        badges.append(
            f"<span style='background:#e0e7ff;color:#3730a3;padding:2px 8px;"
            f"border-radius:9999px;margin-right:4px'>{label} &times; {cnt}{note}</span>"
        )
    return "### Detected Categories\n\n" + " ".join(badges)


def build_findings_rows(detections: List[PiiDetection]) -> List[list]:
    rows = []
    for d in detections:
        box = d.bounding_box
        rows.append([
            d.category,
            d.value,
            f"({box.x1:.0f}, {box.y1:.0f}) - ({box.x2:.0f}, {box.y2:.0f})" if box else "not located",
            ", ".join(d.warnings),
        ])
    return rows


def preview_upload(file_obj):
    """Show the freshly uploaded image and clear results of the previous one."""
    if file_obj is None:
        return reset_view()
    image = _load_image(file_obj)
    try:
        original_html = render_original(image, [])
    except InvalidImageError as e:
        raise _invalid_file(e)
    return (
        "*Image loaded. Choose a style and press **Detect & Mask PII**.*",
        original_html,
        None,
        "",
        [],
        None,
    )


def process_image(file_obj, style):
    """Run detection and masking on the uploaded image."""
    from api.storage.file_storage import file_storage

    image = _load_image(file_obj)

    try:
        pipeline = _get_pipeline(style)
        result = pipeline.process(image)
    except InvalidImageError as e:
        raise _invalid_file(e)
    except DetectionError as e:
        logger.warning("Detection failed: %s", e)
        raise gr.Error(f"Processing Error: {e}", title="Processing Error")

    masked_path: Optional[str] = None
    if result.masked_image is not None:
        masked_path = str(file_storage.save_output(result.request_id, result.masked_image))

    return (
        build_status_message(result),
        render_original(image, result.detections),
        masked_path,
        build_category_summary(result.detections),
        build_findings_rows(result.detections),
        masked_path,
    )


def reset_view():
    return ("", EMPTY_ORIGINAL, None, "", [], None)


CUSTOM_CSS = """
.gradio-container { max-width: 1200px !important; }
.status-banner { font-size: 1.05em; }
.placeholder-text { color: #6b7280; }
footer { display: none !important; }
""" + OVERLAY_CSS


def create_ui() -> gr.Blocks:
    """Create and return the Gradio Blocks application."""
    with gr.Blocks(
        title="PrivacyGuard",
        theme=gr.themes.Soft(
            primary_hue="blue",
            secondary_hue="green",
            neutral_hue="slate",
        ),
        css=CUSTOM_CSS,
        delete_cache=(3600, 3600),
    ) as demo:

        gr.Markdown(
            """
            # PrivacyGuard
            Upload a document image, detect personally identifiable information,
            and download a masked copy.
            """
        )

        with gr.Row():
            with gr.Column(scale=2):
                file_input = gr.File(
                    label="Upload Your Document",
                    file_types=UPLOAD_TYPES,
                    type="filepath",
                )
            with gr.Column(scale=1):
                style_input = gr.Radio(
                    choices=["placeholder", "mask"],
                    value="placeholder",
                    label="Redaction Style",
                    info="Placeholder: text replaced with XXXX, photos blurred. Mask: solid black boxes.",
                )
                submit_btn = gr.Button("Detect & Mask PII", variant="primary", size="lg")
                reset_btn = gr.Button("Upload Another", variant="secondary")

        status_output = gr.Markdown(elem_classes=["status-banner"])

        with gr.Row(equal_height=False):
            with gr.Column():
                gr.Markdown("### Original Image\nHover a box to see what was detected.")
                original_output = gr.HTML(value=EMPTY_ORIGINAL)
            with gr.Column():
                gr.Markdown("### Masked Image")
                masked_output = gr.Image(label="Masked Image", type="filepath", interactive=False)
                gr.Markdown(FIDELITY_NOTE)

        summary_output = gr.Markdown()

        findings_table = gr.Dataframe(
            headers=["Category", "Value", "Bounding Box", "Warnings"],
            datatype=["str", "str", "str", "str"],
            interactive=False,
            wrap=True,
        )

        download_output = gr.File(label="Download Masked Image", interactive=False)

        outputs = [
            status_output,
            original_output,
            masked_output,
            summary_output,
            findings_table,
            download_output,
        ]

        process_event = submit_btn.click(
            fn=process_image,
            inputs=[file_input, style_input],
            outputs=outputs,
        )

        # A new upload or reset cancels the in-flight run so a stale
        # result never replaces the current view.
        file_input.upload(
            fn=preview_upload,
            inputs=[file_input],
            outputs=outputs,
            cancels=[process_event],
        )
        file_input.clear(fn=reset_view, inputs=[], outputs=outputs, cancels=[process_event])
        reset_btn.click(
            fn=lambda: (None,) + reset_view(),
            inputs=[],
            outputs=[file_input] + outputs,
            cancels=[process_event],
        )

    return demo
