"""Factory for constructing a fully wired redaction pipeline."""

from typing import Iterable, Optional

from openai import AsyncAzureOpenAI, AsyncOpenAI, AzureOpenAI, OpenAI

from .pipeline import RedactionPipeline
from .detectors.llm_detector import LLMDetector
from .detectors.prompt_builder import DefaultPromptBuilder
from .models.entities import RedactionStyle
from .redactors.generative_redactor import GenerativeRedactor
from .redactors.instruction_builder import RedactionInstructionBuilder
from .sanitizer import DEFAULT_NATIONAL_ID_CATEGORIES, DetectionSanitizer


def build_pipeline(
    # Provider selection
    provider: str = "openai",
    # OpenAI settings
    openai_api_key: str = "",
    openai_model: str = "gpt-4o",
    openai_image_model: str = "gpt-image-1",
    openai_temperature: float = -1.0,
    # Azure OpenAI settings
    azure_endpoint: str = "",
    api_key: str = "",
    deployment_name: str = "",
    image_deployment_name: str = "",
    api_version: str = "2025-04-01-preview",
    # Redaction policy
    redaction_style: str = "placeholder",
    id_prefix_digits: int = 8,
    national_id_categories: Iterable[str] = DEFAULT_NATIONAL_ID_CATEGORIES,
    keep_categories: Iterable[str] = ("Gender",),
    blur_strength_px: int = 12,
    ai_prompt: Optional[str] = None,
) -> RedactionPipeline:
    """Build a RedactionPipeline wired with the configured LLM provider.

    redaction_style: "mask" | "placeholder"; any other value raises ValueError.
    """
    if provider == "azure":
        client = AzureOpenAI(
            azure_endpoint=azure_endpoint,
            api_key=api_key,
            api_version=api_version,
        )
        async_client = AsyncAzureOpenAI(
            azure_endpoint=azure_endpoint,
            api_key=api_key,
            api_version=api_version,
        )
        model_name = deployment_name
        image_model_name = image_deployment_name
    else:
        # Default to OpenAI
        client = OpenAI(api_key=openai_api_key)
        async_client = AsyncOpenAI(api_key=openai_api_key)
        model_name = openai_model
        image_model_name = openai_image_model

    style = RedactionStyle(redaction_style)

    national_id_categories = list(national_id_categories)

    # Resolve temperature: -1 means "omit" (use model default)
    temperature = openai_temperature if openai_temperature >= 0 else None

    return RedactionPipeline(
        detector=LLMDetector(
            client=client,
            deployment_name=model_name,
            async_client=async_client,
            temperature=temperature,
            prompt_builder=DefaultPromptBuilder(
                id_prefix_digits=id_prefix_digits,
                national_id_categories=national_id_categories,
            ),
            ai_prompt=ai_prompt,
        ),
        redactor=GenerativeRedactor(
            client=client,
            model=image_model_name,
            async_client=async_client,
            instruction_builder=RedactionInstructionBuilder(
                style=style,
                keep_categories=keep_categories,
                national_id_categories=national_id_categories,
                blur_strength_px=blur_strength_px,
            ),
        ),
        sanitizer=DetectionSanitizer(
            id_prefix_digits=id_prefix_digits,
            national_id_categories=national_id_categories,
        ),
    )
