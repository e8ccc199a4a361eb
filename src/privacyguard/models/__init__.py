"""Data models for the redaction pipeline."""

from .entities import (
    ALLOWED_IMAGE_TYPES,
    BoundingBox,
    DEFAULT_CATEGORY_DEFINITIONS,
    ImageData,
    ImageMetadata,
    MaskingStatus,
    OverlayBox,
    PiiDetection,
    ProcessingResult,
    RedactionOutcome,
    RedactionStyle,
    normalize_category,
)

__all__ = [
    "ALLOWED_IMAGE_TYPES",
    "BoundingBox",
    "DEFAULT_CATEGORY_DEFINITIONS",
    "ImageData",
    "ImageMetadata",
    "MaskingStatus",
    "OverlayBox",
    "PiiDetection",
    "ProcessingResult",
    "RedactionOutcome",
    "RedactionStyle",
    "normalize_category",
]
