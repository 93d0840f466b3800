"""Shared configuration management for the invoice portal.

Based on Pydantic Settings v2 best practices:
https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with the prefix 'APP_'.
    Example: APP_EXTRACTION_PROVIDER=ollama
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Service configuration
    service_name: str = Field(
        default="huerta-invoice-portal",
        description="Service identifier for metrics and logs",
    )
    service_version: str = Field(
        default="0.1.0",
        description="Service version",
    )

    # Extraction provider configuration
    extraction_provider: Literal["openai", "ollama"] = Field(
        default="openai",
        description="Extraction provider: openai (cloud vision API), ollama (self-hosted vision LLM)",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI vision-capable model used for invoice extraction",
    )

    # Ollama configuration (for extraction_provider="ollama")
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server base URL",
    )
    ollama_model: str = Field(
        default="llama3.2-vision:11b",
        description="Ollama vision model to use for extraction (e.g., llama3.2-vision, llava)",
    )

    extraction_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound for a single extraction call; exceeding it counts as a failure",
    )
    max_document_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Largest invoice document accepted for extraction (10MB)",
    )

    # Invoice lifecycle
    payment_lead_days: int = Field(
        default=15,
        ge=0,
        description="Days between approval and the estimated payment date",
    )
    placeholder_prefix: str = Field(
        default="TMP",
        min_length=1,
        description="Prefix for generated invoice numbers when extraction finds none",
    )


def get_settings() -> Settings:
    """Factory function to get settings instance.

    Returns:
        Configured Settings instance
    """
    return Settings()
