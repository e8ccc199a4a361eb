"""LLM-based PII detection using OpenAI (or Azure OpenAI) vision models."""

import json
import logging
from typing import List, Optional

import openai
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from .base import BaseDetector
from .prompt_builder import BasePromptBuilder, DefaultPromptBuilder
from ..exceptions import DetectionError
from ..retry import retry_policy
from ..models.entities import (
    DEFAULT_CATEGORY_DEFINITIONS,
    BoundingBox,
    ImageData,
    PiiDetection,
)

logger = logging.getLogger(__name__)

_retry_policy = retry_policy(logger)


class BoundingBoxPayload(BaseModel):
    x1: float = Field(allow_inf_nan=False)
    y1: float = Field(allow_inf_nan=False)
    x2: float = Field(allow_inf_nan=False)
    y2: float = Field(allow_inf_nan=False)


class PiiElementPayload(BaseModel):
    category: str = Field(validation_alias=AliasChoices("category", "type"))
    value: str
    bounding_box: Optional[BoundingBoxPayload] = Field(
        None, validation_alias=AliasChoices("boundingBox", "bounding_box")
    )


class DetectionPayload(BaseModel):
    """Shape the model must return: ``{"piiElements": [...]}``."""

    pii_elements: List[PiiElementPayload] = Field(
        validation_alias=AliasChoices("piiElements", "pii_elements")
    )


class LLMDetector(BaseDetector):
    """Detect PII in an image using a multimodal chat model."""

    def __init__(
        self,
        client,
        deployment_name: str,
        prompt_builder: Optional[BasePromptBuilder] = None,
        async_client=None,
        temperature: Optional[float] = None,
        categories: Optional[List[dict]] = None,
        ai_prompt: Optional[str] = None,
    ):
        self.client = client
        self.deployment_name = deployment_name
        self.prompt_builder = prompt_builder or DefaultPromptBuilder()
        self.async_client = async_client
        self.temperature = temperature
        self.categories = categories or DEFAULT_CATEGORY_DEFINITIONS
        self.ai_prompt = ai_prompt

    def detect(self, image: ImageData) -> List[PiiDetection]:
        """Detect PII with a single synchronous model call."""
        ctx = self.prompt_builder.build(image, self.categories, self.ai_prompt)
        try:
            response = self._call_api(ctx.messages)
        except openai.OpenAIError as e:
            logger.warning("LLM detection call failed: %s", e)
            raise DetectionError(f"Detection call failed: {e}") from e
        return self._parse_response(response)

    async def detect_async(self, image: ImageData) -> List[PiiDetection]:
        """Detect PII with a single asynchronous model call."""
        if self.async_client is None:
            return await super().detect_async(image)

        ctx = self.prompt_builder.build(image, self.categories, self.ai_prompt)
        try:
            response = await self._call_api_async(ctx.messages)
        except openai.OpenAIError as e:
            logger.warning("Async LLM detection call failed: %s", e)
            raise DetectionError(f"Detection call failed: {e}") from e
        return self._parse_response(response)

    def _request_kwargs(self, messages: List[dict]) -> dict:
        kwargs = dict(
            model=self.deployment_name,
            messages=messages,
            response_format={"type": "json_object"},
        )
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        return kwargs

    @_retry_policy
    def _call_api(self, messages: List[dict]):
        """Call OpenAI synchronously with retry on transient errors."""
        return self.client.chat.completions.create(**self._request_kwargs(messages))

    @_retry_policy
    async def _call_api_async(self, messages: List[dict]):
        """Call OpenAI asynchronously with retry on transient errors."""
        return await self.async_client.chat.completions.create(**self._request_kwargs(messages))

    def _parse_response(self, response) -> List[PiiDetection]:
        """Validate the JSON response and convert it into PiiDetection objects.

        Anything that does not match :class:`DetectionPayload` raises
        DetectionError; partial results are never returned.
        """
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise DetectionError("Detection response contained no message") from e
        if not content:
            raise DetectionError("Detection response was empty")

        try:
            payload = DetectionPayload.model_validate(json.loads(content))
        except json.JSONDecodeError as e:
            raise DetectionError(f"Detection response is not valid JSON: {e}") from e
        except ValidationError as e:
            raise DetectionError(f"Detection response failed schema validation: {e}") from e

        detections = []
        for item in payload.pii_elements:
            box = None
            if item.bounding_box is not None:
                b = item.bounding_box
                box = BoundingBox(x1=b.x1, y1=b.y1, x2=b.x2, y2=b.y2)
            detections.append(
                PiiDetection(
                    category=item.category.strip(),
                    value=item.value.strip(),
                    bounding_box=box,
                )
            )

        logger.info("Model reported %d PII elements", len(detections))
        return detections
