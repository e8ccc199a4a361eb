"""Abstract base class for image redactors."""

import asyncio
from abc import ABC, abstractmethod
from typing import List

from ..models.entities import ImageData, PiiDetection, RedactionOutcome


class BaseRedactor(ABC):
    """Interface for image redactors."""

    @abstractmethod
    def redact(self, image: ImageData, detections: List[PiiDetection]) -> RedactionOutcome:
        """
        Produce a redacted version of an image.

        Args:
            image: The original document image.
            detections: Sanitized detections to redact.

        Returns:
            RedactionOutcome holding the new image, or the original
            unchanged when there is nothing to redact.

        Raises:
            GenerationError: If no usable image could be produced.
        """

    async def redact_async(self, image: ImageData, detections: List[PiiDetection]) -> RedactionOutcome:
        """Run ``redact`` in a thread-pool executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.redact, image, detections)
