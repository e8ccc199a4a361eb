"""Pydantic models for API request/response schemas."""

from .schemas import (
    BoundingBoxResponse,
    CategorySummary,
    DetectionResponse,
    DetectResponse,
    ErrorResponse,
    HealthResponse,
    HTTPErrorResponse,
    OverlayResponse,
    ReadyzResponse,
    RedactResponse,
    summarize_categories,
)

__all__ = [
    "BoundingBoxResponse",
    "CategorySummary",
    "DetectionResponse",
    "DetectResponse",
    "ErrorResponse",
    "HealthResponse",
    "HTTPErrorResponse",
    "OverlayResponse",
    "ReadyzResponse",
    "RedactResponse",
    "summarize_categories",
]
