"""Main PII redaction pipeline orchestrator."""

import logging
import time
import uuid
from typing import List, Optional

from .detectors.base import BaseDetector
from .exceptions import GenerationError
from .imaging import read_metadata
from .models.entities import (
    ImageData,
    ImageMetadata,
    MaskingStatus,
    PiiDetection,
    ProcessingResult,
)
from .redactors.base import BaseRedactor
from .sanitizer import DetectionSanitizer

logger = logging.getLogger(__name__)


class RedactionPipeline:
    """Orchestrates decode -> detect -> sanitize -> redact for one image.

    Detection failures propagate as DetectionError and no masking is
    attempted. Generation failures are recorded on the result so callers
    still see what was detected.
    """

    def __init__(
        self,
        detector: BaseDetector,
        redactor: BaseRedactor,
        sanitizer: Optional[DetectionSanitizer] = None,
    ):
        self.detector = detector
        self.redactor = redactor
        self.sanitizer = sanitizer or DetectionSanitizer()

    def detect(self, image: ImageData, request_id: Optional[str] = None) -> ProcessingResult:
        """Run detection only (synchronous)."""
        start_time = time.time()
        request_id = request_id or _new_request_id()
        metadata = read_metadata(image)

        logger.info("[%s] Detecting PII in %dx%d image...", request_id, metadata.width, metadata.height)
        detections = self._sanitize(self.detector.detect(image), metadata)
        return self._result(request_id, image, metadata, detections, start_time)

    async def detect_async(self, image: ImageData, request_id: Optional[str] = None) -> ProcessingResult:
        """Run detection only (asynchronous)."""
        start_time = time.time()
        request_id = request_id or _new_request_id()
        metadata = read_metadata(image)

        logger.info("[%s] Detecting PII in %dx%d image (async)...", request_id, metadata.width, metadata.height)
        detections = self._sanitize(await self.detector.detect_async(image), metadata)
        return self._result(request_id, image, metadata, detections, start_time)

    def process(self, image: ImageData, request_id: Optional[str] = None) -> ProcessingResult:
        """Run the full detection and redaction pipeline synchronously."""
        result = self.detect(image, request_id)
        start_time = time.time() - result.processing_time_seconds

        if not result.detections:
            logger.info("[%s] No PII detected; returning original image", result.request_id)
            result.masked_image = image
            return result

        logger.info("[%s] Redacting %d detections...", result.request_id, len(result.detections))
        try:
            outcome = self.redactor.redact(image, result.detections)
        except GenerationError as e:
            self._record_failure(result, e)
        else:
            result.masked_image = outcome.image
            result.masking_status = outcome.status
            result.instruction = outcome.instruction

        result.processing_time_seconds = time.time() - start_time
        return result

    async def process_async(self, image: ImageData, request_id: Optional[str] = None) -> ProcessingResult:
        """Run the full detection and redaction pipeline asynchronously."""
        result = await self.detect_async(image, request_id)
        start_time = time.time() - result.processing_time_seconds

        if not result.detections:
            logger.info("[%s] No PII detected; returning original image", result.request_id)
            result.masked_image = image
            return result

        logger.info("[%s] Redacting %d detections (async)...", result.request_id, len(result.detections))
        try:
            outcome = await self.redactor.redact_async(image, result.detections)
        except GenerationError as e:
            self._record_failure(result, e)
        else:
            result.masked_image = outcome.image
            result.masking_status = outcome.status
            result.instruction = outcome.instruction

        result.processing_time_seconds = time.time() - start_time
        return result

    def _sanitize(self, detections: List[PiiDetection], metadata: ImageMetadata) -> List[PiiDetection]:
        cleaned = self.sanitizer.sanitize(detections, metadata)
        flagged = sum(1 for d in cleaned if d.warnings)
        logger.info("Found %d PII items (%d flagged)", len(cleaned), flagged)
        return cleaned

    @staticmethod
    def _record_failure(result: ProcessingResult, error: GenerationError) -> None:
        logger.error("[%s] Masking failed: %s", result.request_id, error)
        result.masked_image = None
        result.masking_status = MaskingStatus.FAILED
        result.masking_error = f"Could not generate masked image: {error}"

    @staticmethod
    def _result(request_id, image, metadata, detections, start_time) -> ProcessingResult:
        return ProcessingResult(
            request_id=request_id,
            original=image,
            metadata=metadata,
            detections=detections,
            processing_time_seconds=time.time() - start_time,
        )


def _new_request_id() -> str:
    return str(uuid.uuid4())[:12]
