"""Document-image PII detection and redaction pipeline."""

from .pipeline import RedactionPipeline
from .factory import build_pipeline
from .exceptions import (
    DetectionError,
    GenerationError,
    InvalidImageError,
    PrivacyGuardError,
)
from .models.entities import (
    BoundingBox,
    ImageData,
    ImageMetadata,
    MaskingStatus,
    PiiDetection,
    ProcessingResult,
    RedactionStyle,
)
from .overlay import compute_overlays, render_overlay_html

__all__ = [
    "RedactionPipeline",
    "build_pipeline",
    "DetectionError",
    "GenerationError",
    "InvalidImageError",
    "PrivacyGuardError",
    "BoundingBox",
    "ImageData",
    "ImageMetadata",
    "MaskingStatus",
    "PiiDetection",
    "ProcessingResult",
    "RedactionStyle",
    "compute_overlays",
    "render_overlay_html",
]
