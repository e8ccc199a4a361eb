"""Defensive validation of detections returned by the external model.

The model is not trusted to respect image bounds, produce well-formed
rectangles, or follow the national-ID prefix rule, so every detection passes
through :class:`DetectionSanitizer` before it reaches masking or the UI.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from .models.entities import BoundingBox, ImageMetadata, PiiDetection, normalize_category

logger = logging.getLogger(__name__)

DEFAULT_NATIONAL_ID_CATEGORIES = ("aadhaar number", "national id number")

# Warning codes attached to PiiDetection.warnings
DEGENERATE_BOX = "degenerate_box"
BOX_CLAMPED = "box_clamped"
ID_TRUNCATED = "id_truncated"
ID_PREFIX_SHORT = "id_prefix_short"


def truncate_to_digits(value: str, digits: int) -> tuple[str, int]:
    """Cut *value* right after its ``digits``-th digit.

    Grouping characters before the cut are kept so ``"1234 5678 9012"``
    becomes ``"1234 5678"``. Returns the kept text and its length in the
    original string.
    """
    seen = 0
    for idx, ch in enumerate(value):
        if ch.isdigit():
            seen += 1
            if seen == digits:
                return value[: idx + 1], idx + 1
    return value, len(value)


class DetectionSanitizer:
    """Enforce geometry invariants and the national-ID prefix policy."""

    def __init__(
        self,
        id_prefix_digits: int = 8,
        national_id_categories: Iterable[str] = DEFAULT_NATIONAL_ID_CATEGORIES,
    ):
        if id_prefix_digits <= 0:
            raise ValueError("id_prefix_digits must be positive")
        self.id_prefix_digits = id_prefix_digits
        self.national_id_categories = {normalize_category(c) for c in national_id_categories}

    def sanitize(
        self,
        detections: List[PiiDetection],
        metadata: ImageMetadata,
    ) -> List[PiiDetection]:
        """Return corrected copies of *detections*; the input is not mutated."""
        cleaned = []
        for detection in detections:
            d = replace(detection, warnings=list(detection.warnings))
            d.bounding_box = self._clean_box(d, metadata)
            if d.category_key in self.national_id_categories:
                self._apply_id_prefix(d)
            cleaned.append(d)
        return cleaned

    def _clean_box(self, d: PiiDetection, metadata: ImageMetadata) -> Optional[BoundingBox]:
        box = d.bounding_box
        if box is None:
            return None

        if box.is_degenerate:
            logger.warning("Dropping degenerate box for %s: %s", d.category, box)
            d.warnings.append(DEGENERATE_BOX)
            return None

        clamped = box.clamp(metadata.width, metadata.height)
        if clamped != box:
            d.warnings.append(BOX_CLAMPED)
            if clamped.is_degenerate:
                logger.warning("Box for %s lies outside the image: %s", d.category, box)
                d.warnings.append(DEGENERATE_BOX)
                return None
        return clamped

    def _apply_id_prefix(self, d: PiiDetection) -> None:
        digit_count = sum(ch.isdigit() for ch in d.value)
        n = self.id_prefix_digits

        if digit_count == n:
            return

        if digit_count < n:
            logger.warning(
                "%s value has %d digits, expected a %d-digit prefix",
                d.category, digit_count, n,
            )
            d.warnings.append(ID_PREFIX_SHORT)
            return

        original = d.value.strip()
        kept, kept_len = truncate_to_digits(original, n)
        d.value = kept
        d.warnings.append(ID_TRUNCATED)
        logger.info("Truncated %s to its first %d digits", d.category, n)

        # Glyphs are assumed evenly spaced across the box
        if d.bounding_box is not None and original:
            box = d.bounding_box
            share = kept_len / len(original)
            d.bounding_box = BoundingBox(
                x1=box.x1,
                y1=box.y1,
                x2=box.x1 + box.width * share,
                y2=box.y2,
            )
