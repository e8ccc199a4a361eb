"""Abstract base class for PII detectors."""

import asyncio
from abc import ABC, abstractmethod
from typing import List

from ..models.entities import ImageData, PiiDetection


class BaseDetector(ABC):
    """Interface for image PII detectors."""

    @abstractmethod
    def detect(self, image: ImageData) -> List[PiiDetection]:
        """
        Detect PII in a document image (synchronous).

        Args:
            image: The uploaded document image.

        Returns:
            Detected PII; an empty list when nothing is found.

        Raises:
            DetectionError: If the external call fails or its output is invalid.
        """

    async def detect_async(self, image: ImageData) -> List[PiiDetection]:
        """
        Detect PII in a document image (asynchronous).

        Default implementation runs ``detect`` in a thread-pool executor so
        the event loop is never blocked. Subclasses may override this with a
        fully async implementation.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.detect, image)
