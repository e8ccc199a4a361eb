"""Shared pytest fixtures.

Tests run in-process: the FastAPI app is exercised through TestClient and
every external model call is replaced by a fake or a MagicMock client.
"""

import io
import os
import struct
import tempfile
import zlib

os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="privacyguard-test-"))
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("GRADIO_ANALYTICS_ENABLED", "False")

import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from privacyguard.detectors.base import BaseDetector  # noqa: E402
from privacyguard.exceptions import GenerationError  # noqa: E402
from privacyguard.models.entities import (  # noqa: E402
    BoundingBox,
    ImageData,
    MaskingStatus,
    PiiDetection,
    RedactionOutcome,
)
from privacyguard.pipeline import RedactionPipeline  # noqa: E402
from privacyguard.redactors.base import BaseRedactor  # noqa: E402


def make_image_bytes(width: int = 1000, height: int = 500, fmt: str = "PNG", color: str = "white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


def make_image(width: int = 1000, height: int = 500, fmt: str = "PNG", color: str = "white") -> ImageData:
    return ImageData.from_bytes(make_image_bytes(width, height, fmt, color))


_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def make_png_header(width: int, height: int) -> bytes:
    """A tiny PNG whose header declares *width* x *height* but holds no pixels."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return _PNG_SIGNATURE + _png_chunk(b"IHDR", ihdr) + _png_chunk(b"IDAT", b"") + _png_chunk(b"IEND", b"")


def make_corrupt_png() -> bytes:
    """PNG signature followed by garbage: passes type sniffing, fails decoding."""
    return _PNG_SIGNATURE + b"\x00" * 64


class FakeDetector(BaseDetector):
    """Returns preset detections, or raises the preset error."""

    def __init__(self, detections=None, error=None):
        self.detections = detections or []
        self.error = error
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [
            PiiDetection(category=d.category, value=d.value, bounding_box=d.bounding_box)
            for d in self.detections
        ]


class FakeRedactor(BaseRedactor):
    """Returns a black image of the same size, or raises GenerationError."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    def redact(self, image, detections):
        self.calls += 1
        if self.fail:
            raise GenerationError("Image generation returned no image.")
        return RedactionOutcome(
            image=make_image(color="black"),
            status=MaskingStatus.MASKED,
            instruction="cover the boxes",
        )


@pytest.fixture
def png_image() -> ImageData:
    return make_image()


@pytest.fixture
def name_detection() -> PiiDetection:
    return PiiDetection(
        category="Name",
        value="Rahul Sharma",
        bounding_box=BoundingBox(x1=100, y1=50, x2=300, y2=150),
    )


@pytest.fixture
def make_pipeline():
    def _make(detections=None, detect_error=None, redact_fail=False) -> RedactionPipeline:
        return RedactionPipeline(
            detector=FakeDetector(detections, detect_error),
            redactor=FakeRedactor(fail=redact_fail),
        )
    return _make


@pytest.fixture
def api_client():
    from fastapi.testclient import TestClient

    from api.main import app
    from api.rate_limit import limiter

    limiter.enabled = False
    with TestClient(app) as client:
        yield client
    limiter.enabled = True
