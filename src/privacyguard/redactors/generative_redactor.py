"""Redaction by instructing a hosted image-editing model."""

import base64
import binascii
import logging
from typing import List, Optional

import httpx
import openai

from .base import BaseRedactor
from .instruction_builder import RedactionInstructionBuilder
from ..exceptions import GenerationError, InvalidImageError
from ..retry import retry_policy
from ..models.entities import ImageData, MaskingStatus, PiiDetection, RedactionOutcome

logger = logging.getLogger(__name__)

_retry_policy = retry_policy(logger)


class GenerativeRedactor(BaseRedactor):
    """Regenerate the image with PII masked, via the OpenAI images edit API.

    The returned image is best-effort: the model is only *asked* to leave
    everything outside the listed regions untouched.
    """

    def __init__(
        self,
        client,
        model: str,
        instruction_builder: Optional[RedactionInstructionBuilder] = None,
        async_client=None,
    ):
        self.client = client
        self.model = model
        self.instruction_builder = instruction_builder or RedactionInstructionBuilder()
        self.async_client = async_client

    def redact(self, image: ImageData, detections: List[PiiDetection]) -> RedactionOutcome:
        instruction = self.instruction_builder.build(detections)
        if not instruction:
            logger.info("Nothing to redact; returning original image")
            return RedactionOutcome(image=image, status=MaskingStatus.UNCHANGED)

        logger.info("Requesting redacted image for %d detections", len(detections))
        try:
            response = self._call_api(image, instruction)
        except openai.OpenAIError as e:
            logger.warning("Image generation call failed: %s", e)
            raise GenerationError(f"Image generation call failed: {e}") from e

        masked = self._extract_image(response)
        return RedactionOutcome(image=masked, status=MaskingStatus.MASKED, instruction=instruction)

    async def redact_async(self, image: ImageData, detections: List[PiiDetection]) -> RedactionOutcome:
        if self.async_client is None:
            return await super().redact_async(image, detections)

        instruction = self.instruction_builder.build(detections)
        if not instruction:
            logger.info("Nothing to redact; returning original image")
            return RedactionOutcome(image=image, status=MaskingStatus.UNCHANGED)

        logger.info("Requesting redacted image for %d detections (async)", len(detections))
        try:
            response = await self._call_api_async(image, instruction)
        except openai.OpenAIError as e:
            logger.warning("Async image generation call failed: %s", e)
            raise GenerationError(f"Image generation call failed: {e}") from e

        masked = await self._extract_image_async(response)
        return RedactionOutcome(image=masked, status=MaskingStatus.MASKED, instruction=instruction)

    def _request_kwargs(self, image: ImageData, instruction: str) -> dict:
        return dict(
            model=self.model,
            image=(f"document.{image.extension}", image.content, image.mime_type),
            prompt=instruction,
            n=1,
        )

    @_retry_policy
    def _call_api(self, image: ImageData, instruction: str):
        """Call the images edit endpoint with retry on transient errors."""
        return self.client.images.edit(**self._request_kwargs(image, instruction))

    @_retry_policy
    async def _call_api_async(self, image: ImageData, instruction: str):
        return await self.async_client.images.edit(**self._request_kwargs(image, instruction))

    @staticmethod
    def _first_item(response):
        data = getattr(response, "data", None) or []
        if not data:
            raise GenerationError("Image generation returned no image.")
        item = data[0]
        if not getattr(item, "b64_json", None) and not getattr(item, "url", None):
            raise GenerationError("Image generation returned no image.")
        return item

    @staticmethod
    def _decode_b64(b64_json: str) -> bytes:
        try:
            return base64.b64decode(b64_json, validate=True)
        except (binascii.Error, ValueError) as e:
            raise GenerationError(f"Generated image is not valid base64: {e}") from e

    @staticmethod
    def _to_image(content: bytes) -> ImageData:
        try:
            return ImageData.from_bytes(content, source="generated image")
        except InvalidImageError as e:
            raise GenerationError(f"Generated output is not a usable image: {e}") from e

    @classmethod
    def _extract_image(cls, response) -> ImageData:
        """Pull the first generated image out of an images response."""
        item = cls._first_item(response)
        if getattr(item, "b64_json", None):
            content = cls._decode_b64(item.b64_json)
        else:
            content = cls._download(item.url)
        return cls._to_image(content)

    @classmethod
    async def _extract_image_async(cls, response) -> ImageData:
        item = cls._first_item(response)
        if getattr(item, "b64_json", None):
            content = cls._decode_b64(item.b64_json)
        else:
            content = await cls._download_async(item.url)
        return cls._to_image(content)

    @staticmethod
    def _download(url: str) -> bytes:
        """Fetch an image the provider returned by URL instead of inline."""
        try:
            with httpx.Client(follow_redirects=True, timeout=60.0) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise GenerationError(f"Failed to download generated image: {e}") from e
        return response.content

    @staticmethod
    async def _download_async(url: str) -> bytes:
        try:
            async with httpx.AsyncClient(follow_redirects=True, timeout=60.0) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise GenerationError(f"Failed to download generated image: {e}") from e
        return response.content
