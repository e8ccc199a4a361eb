"""Configuration settings for the PrivacyGuard API."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from privacyguard.models.entities import RedactionStyle


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # LLM Provider: "openai" or "azure"
    llm_provider: str = "openai"

    # OpenAI settings (used when llm_provider == "openai")
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_image_model: str = "gpt-image-1"
    openai_temperature: float = -1.0  # -1 means "use model default" (omit param)

    # Azure OpenAI settings (used when llm_provider == "azure")
    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_deployment_name: str = ""
    azure_openai_image_deployment_name: str = ""
    azure_openai_api_version: str = "2025-04-01-preview"

    # Redaction style: "mask" or "placeholder"; anything else fails at startup
    redaction_style: RedactionStyle = RedactionStyle.PLACEHOLDER

    # National-ID prefix policy
    national_id_prefix_digits: int = 8
    national_id_categories: str = "Aadhaar Number,National ID Number"

    # Fields left untouched in placeholder style
    keep_categories: str = "Gender"
    blur_strength_px: int = 12

    # Storage settings (downloads offered by the UI)
    storage_dir: Path = Path("/tmp/privacyguard-storage")
    max_file_size_mb: int = 10
    output_retention_minutes: int = 60

    # CORS settings
    cors_origins: str = "*"

    # Rate limiting
    rate_limit: str = "30/minute"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def max_file_size_bytes(self) -> int:
        """Maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return _split(self.cors_origins)

    @property
    def national_id_categories_list(self) -> list[str]:
        return _split(self.national_id_categories)

    @property
    def keep_categories_list(self) -> list[str]:
        return _split(self.keep_categories)

    def pipeline_kwargs(self, redaction_style: Optional[str] = None) -> dict:
        """Keyword arguments for ``privacyguard.build_pipeline``."""
        return dict(
            provider=self.llm_provider,
            openai_api_key=self.openai_api_key,
            openai_model=self.openai_model,
            openai_image_model=self.openai_image_model,
            openai_temperature=self.openai_temperature,
            azure_endpoint=self.azure_openai_endpoint,
            api_key=self.azure_openai_api_key,
            deployment_name=self.azure_openai_deployment_name,
            image_deployment_name=self.azure_openai_image_deployment_name,
            api_version=self.azure_openai_api_version,
            redaction_style=redaction_style or self.redaction_style.value,
            id_prefix_digits=self.national_id_prefix_digits,
            national_id_categories=self.national_id_categories_list,
            keep_categories=self.keep_categories_list,
            blur_strength_px=self.blur_strength_px,
        )


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# Global settings instance
settings: Optional[Settings] = None


def load_settings() -> Settings:
    """Load settings from environment variables and .env file."""
    global settings
    s = Settings()
    s.storage_dir.mkdir(parents=True, exist_ok=True)
    settings = s
    return s


def get_settings() -> Settings:
    """Get the global settings instance, loading if necessary."""
    global settings
    if settings is None:
        settings = load_settings()
    return settings
