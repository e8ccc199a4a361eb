"""Image redaction modules."""

from .base import BaseRedactor
from .generative_redactor import GenerativeRedactor
from .instruction_builder import RedactionInstructionBuilder, placeholder_text

__all__ = [
    "BaseRedactor",
    "GenerativeRedactor",
    "RedactionInstructionBuilder",
    "placeholder_text",
]
