"""Prompt building strategy for LLM-based PII detection in document images."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..models.entities import ImageData


@dataclass
class PromptContext:
    """Everything needed for one LLM API call."""

    messages: List[dict]


class BasePromptBuilder(ABC):
    """Interface for prompt construction strategies."""

    @abstractmethod
    def build(
        self,
        image: ImageData,
        categories: List[dict],
        ai_prompt: Optional[str] = None,
    ) -> PromptContext:
        """Build API messages for a single image."""


class DefaultPromptBuilder(BasePromptBuilder):
    """Builds the ID-document PII detection prompt from category definitions."""

    def __init__(
        self,
        id_prefix_digits: int = 8,
        national_id_categories: Iterable[str] = ("Aadhaar Number",),
    ):
        self.id_prefix_digits = id_prefix_digits
        self.national_id_categories = list(national_id_categories)

    def build(
        self,
        image: ImageData,
        categories: List[dict],
        ai_prompt: Optional[str] = None,
    ) -> PromptContext:
        category_text = "\n".join(
            f"- {cat['category']}: {cat['desc']} (e.g., {cat['example']})"
            for cat in categories
        )
        n = self.id_prefix_digits
        id_rules = "".join(
            f"- {category}: the full number is longer than the sensitive part. Report ONLY THE FIRST {n} DIGITS as PII. "
            f"The \"value\" MUST contain only those {n} digits (keep the printed grouping spaces) and the bounding box "
            "MUST cover only those digits. The remaining digits must stay outside both.\n"
            for category in self.national_id_categories
        )

        system_prompt = f"""You are a highly specialized data protection officer with expertise in Optical Character Recognition (OCR) and Personally Identifiable Information (PII) detection from document images such as identity cards.

Your task is to meticulously analyze the provided document image and identify the following PII types:
{category_text}

For each piece of PII you find:
1. Extract the exact text value.
2. Identify its category. Use the names above; if you find PII that fits none of them, use a short descriptive category name.
3. Determine the precise bounding box (x1, y1, x2, y2) in pixels of the original image, where (x1, y1) is the top-left corner and (x2, y2) the bottom-right corner. Omit the bounding box if you cannot localize the PII.

CRITICAL INSTRUCTIONS for specific fields:
{id_rules}- Photo: identify the main portrait photo. The "value" must be "face" and the bounding box must enclose the entire photo area.

Respond with a JSON object in this exact format:
{{
  "piiElements": [
    {{
      "category": "Name",
      "value": "exact text from the image",
      "boundingBox": {{"x1": 0, "y1": 0, "x2": 0, "y2": 0}}
    }}
  ]
}}

If no PII is found, respond with: {{"piiElements": []}}"""

        if ai_prompt:
            system_prompt += f"\n\nADDITIONAL INSTRUCTIONS:\n{ai_prompt}"

        user_content = [
            {
                "type": "text",
                "text": "Analyze this document image and identify all PII. Return findings as JSON.",
            },
            {"type": "image_url", "image_url": {"url": image.to_data_uri()}},
        ]

        return PromptContext(
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
        )
