"""Pydantic schemas for the PrivacyGuard API."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from privacyguard.models.entities import OverlayBox, PiiDetection, ProcessingResult
from privacyguard.overlay import compute_overlays


class BoundingBoxResponse(BaseModel):
    x1: float
    y1: float
    x2: float
    y2: float


class DetectionResponse(BaseModel):
    detection_id: str
    category: str
    value: str
    bounding_box: Optional[BoundingBoxResponse] = None
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def from_detection(cls, d: PiiDetection) -> "DetectionResponse":
        return cls(**d.to_dict())


class OverlayResponse(BaseModel):
    """Detection box as percentages of the natural image size."""

    detection_id: str
    category: str
    label: str
    left: float = Field(..., ge=0, le=100)
    top: float = Field(..., ge=0, le=100)
    width: float = Field(..., ge=0, le=100)
    height: float = Field(..., ge=0, le=100)

    @classmethod
    def from_overlay(cls, o: OverlayBox) -> "OverlayResponse":
        return cls(**o.to_dict())


class CategorySummary(BaseModel):
    category: str
    count: int = Field(..., ge=0)
    localized: int = Field(..., ge=0)


class DetectResponse(BaseModel):
    request_id: str
    status: str
    message: str
    width: int
    height: int
    detections: List[DetectionResponse] = Field(default_factory=list)
    overlays: List[OverlayResponse] = Field(default_factory=list)
    categories: List[CategorySummary] = Field(default_factory=list)
    processing_time_seconds: float = 0.0

    @classmethod
    def from_result(cls, result: ProcessingResult, **extra) -> "DetectResponse":
        overlays = compute_overlays(result.detections, result.metadata)
        message = (
            f"Detected {len(result.detections)} PII element(s)."
            if result.detections else "No PII detected."
        )
        fields = dict(
            request_id=result.request_id,
            status="completed",
            message=message,
            width=result.metadata.width,
            height=result.metadata.height,
            detections=[DetectionResponse.from_detection(d) for d in result.detections],
            overlays=[OverlayResponse.from_overlay(o) for o in overlays],
            categories=summarize_categories(result.detections),
            processing_time_seconds=round(result.processing_time_seconds, 2),
        )
        fields.update(extra)
        return cls(**fields)


class RedactResponse(DetectResponse):
    redaction_style: str
    masking_status: str
    masking_error: Optional[str] = None
    masked_image: Optional[str] = Field(
        None, description="Masked image as a data URI: data:<mimetype>;base64,<data>"
    )


class ErrorResponse(BaseModel):
    error: str
    message: str
    detail: Optional[str] = None


class HTTPErrorResponse(BaseModel):
    """Body FastAPI produces for a raised HTTPException."""

    detail: str


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    llm_provider: str = ""
    detection_model: str = ""
    image_model: str = ""


class ReadyzResponse(BaseModel):
    status: str
    checks: Dict[str, str] = Field(default_factory=dict)


def summarize_categories(detections: List[PiiDetection]) -> List[CategorySummary]:
    """Per-category counts, including detections that have no box."""
    counts: Dict[str, List[int]] = {}
    for d in detections:
        entry = counts.setdefault(d.category, [0, 0])
        entry[0] += 1
        if d.bounding_box is not None:
            entry[1] += 1
    return [
        CategorySummary(category=cat, count=total, localized=boxed)
        for cat, (total, boxed) in counts.items()
    ]
