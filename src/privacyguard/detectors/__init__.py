"""PII detection modules."""

from .base import BaseDetector
from .llm_detector import DetectionPayload, LLMDetector
from .prompt_builder import BasePromptBuilder, DefaultPromptBuilder, PromptContext

__all__ = [
    "BaseDetector",
    "DetectionPayload",
    "LLMDetector",
    "BasePromptBuilder",
    "DefaultPromptBuilder",
    "PromptContext",
]
