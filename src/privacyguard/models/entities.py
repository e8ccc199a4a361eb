"""Data models for the PII detection and redaction pipeline."""

import base64
import binascii
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import uuid

import filetype

from ..exceptions import InvalidImageError

# Raster formats accepted at the upload boundary
ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp"}


class RedactionStyle(Enum):
    """How detected regions are treated in the regenerated image."""

    MASK = "mask"  # solid opaque fill over every region
    PLACEHOLDER = "placeholder"  # X-run text substitution, blurred photos


class MaskingStatus(Enum):
    MASKED = "masked"
    UNCHANGED = "unchanged"
    FAILED = "failed"


# Default PII categories used when the caller omits categories
DEFAULT_CATEGORY_DEFINITIONS = [
    {
        "category": "Name",
        "desc": "Full name of the card holder",
        "example": "Rahul Kumar Sharma",
    },
    {
        "category": "Year of Birth",
        "desc": "Year of birth printed on the card",
        "example": "1987",
    },
    {
        "category": "Date of Birth",
        "desc": "Full date of birth",
        "example": "14/08/1987",
    },
    {
        "category": "Gender",
        "desc": "Gender of the card holder",
        "example": "Male, Female",
    },
    {
        "category": "Aadhaar Number",
        "desc": "12-digit Indian national identity number, printed as XXXX XXXX XXXX",
        "example": "2345 6789 0123",
    },
    {
        "category": "Photo",
        "desc": "The main portrait photo of the person",
        "example": "face",
    },
    {
        "category": "Email",
        "desc": "Email address",
        "example": "rahul.sharma@example.com",
    },
    {
        "category": "Phone",
        "desc": "Mobile or landline phone number",
        "example": "+91 98765 43210",
    },
    {
        "category": "Address",
        "desc": "Residential or postal address",
        "example": "12 MG Road, Bengaluru 560001",
    },
]

PHOTO_CATEGORIES = frozenset({"photo", "face", "portrait"})


def normalize_category(category: str) -> str:
    """Canonical lookup key for an open-set category label."""
    return " ".join(category.replace("_", " ").replace("-", " ").lower().split())


@dataclass(frozen=True)
class ImageData:
    """An image together with its MIME type."""

    mime_type: str
    content: bytes = field(repr=False)

    @classmethod
    def from_bytes(cls, content: bytes, source: str = "") -> "ImageData":
        """Sniff the MIME type from magic bytes and reject unsupported formats."""
        label = source or "upload"
        kind = filetype.guess(content) if content else None
        if kind is None:
            raise InvalidImageError(f"File type could not be determined: {label}")
        if kind.mime not in ALLOWED_IMAGE_TYPES:
            raise InvalidImageError(
                f"Unsupported file type {kind.mime} for {label}. "
                "Please upload an image file (e.g., PNG, JPG, WEBP)."
            )
        return cls(mime_type=kind.mime, content=content)

    @classmethod
    def from_data_uri(cls, data_uri: str) -> "ImageData":
        """Parse ``data:<mimetype>;base64,<encoded_data>``."""
        header, sep, payload = data_uri.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise InvalidImageError("Expected a base64 data URI: data:<mimetype>;base64,<data>")
        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidImageError(f"Data URI payload is not valid base64: {e}") from e
        return cls.from_bytes(content, source="data URI")

    @property
    def extension(self) -> str:
        return {"image/jpeg": "jpg"}.get(self.mime_type, self.mime_type.split("/")[-1])

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass
class BoundingBox:
    """Rectangle in original image pixel coordinates."""

    x1: float  # Left edge
    y1: float  # Top edge
    x2: float  # Right edge
    y2: float  # Bottom edge

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def is_degenerate(self) -> bool:
        if not all(map(math.isfinite, (self.x1, self.y1, self.x2, self.y2))):
            return True
        return self.x1 >= self.x2 or self.y1 >= self.y2

    def clamp(self, width: float, height: float) -> "BoundingBox":
        """Return a copy with every edge clamped into the image bounds."""
        return BoundingBox(
            x1=min(max(self.x1, 0.0), width),
            y1=min(max(self.y1, 0.0), height),
            x2=min(max(self.x2, 0.0), width),
            y2=min(max(self.y2, 0.0), height),
        )

    def to_dict(self) -> dict:
        return {
            "x1": round(self.x1, 2),
            "y1": round(self.y1, 2),
            "x2": round(self.x2, 2),
            "y2": round(self.y2, 2),
        }

    def describe(self) -> str:
        """Coordinate string embedded in model instructions."""
        return (
            f"(x1: {round(self.x1)}, y1: {round(self.y1)}, "
            f"x2: {round(self.x2)}, y2: {round(self.y2)})"
        )


@dataclass
class PiiDetection:
    """A single piece of PII located in a document image."""

    category: str
    value: str
    bounding_box: Optional[BoundingBox] = None
    detection_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    # Policy flags raised while sanitizing the model output
    warnings: List[str] = field(default_factory=list)

    @property
    def category_key(self) -> str:
        return normalize_category(self.category)

    @property
    def is_photo(self) -> bool:
        return self.category_key in PHOTO_CATEGORIES

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "detection_id": self.detection_id,
            "category": self.category,
            "value": self.value,
            "bounding_box": self.bounding_box.to_dict() if self.bounding_box else None,
            "warnings": list(self.warnings),
        }


@dataclass
class ImageMetadata:
    """Natural pixel dimensions of a decoded image."""

    width: int
    height: int
    mime_type: str


@dataclass
class OverlayBox:
    """A detection box in percentage space of the rendered image."""

    detection_id: str
    category: str
    label: str
    left: float
    top: float
    width: float
    height: float

    def to_dict(self) -> dict:
        return {
            "detection_id": self.detection_id,
            "category": self.category,
            "label": self.label,
            "left": round(self.left, 4),
            "top": round(self.top, 4),
            "width": round(self.width, 4),
            "height": round(self.height, 4),
        }


@dataclass
class RedactionOutcome:
    """What a redactor produced for one image."""

    image: ImageData
    status: MaskingStatus
    instruction: str = ""


@dataclass
class ProcessingResult:
    """Result of running one image through the redaction pipeline."""

    request_id: str
    original: ImageData
    metadata: ImageMetadata
    detections: List[PiiDetection]
    masked_image: Optional[ImageData] = None
    masking_status: MaskingStatus = MaskingStatus.UNCHANGED
    masking_error: Optional[str] = None
    instruction: str = ""
    processing_time_seconds: float = 0.0

