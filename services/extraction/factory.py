"""Extraction provider selection.

Providers register themselves by name; ``APP_EXTRACTION_PROVIDER`` picks one
at portal start-up.
"""

import logging
from collections.abc import Callable

from services.extraction.base import ExtractionProvider
from services.extraction.ollama_provider import OllamaExtractionProvider
from services.extraction.openai_provider import OpenAIExtractionProvider
from services.shared.config import Settings

logger = logging.getLogger(__name__)

ProviderClass = type[ExtractionProvider]


class ProviderRegistry:
    """Name -> provider class lookup shared by the whole process."""

    _providers: dict[str, ProviderClass] = {
        "openai": OpenAIExtractionProvider,
        "ollama": OllamaExtractionProvider,
    }

    @classmethod
    def register(cls, name: str) -> Callable[[ProviderClass], ProviderClass]:
        """Class decorator adding a provider under ``name``.

        Registering an existing name replaces the previous class.
        """

        def decorator(provider_class: ProviderClass) -> ProviderClass:
            if name in cls._providers:
                logger.warning(f"Replacing extraction provider '{name}'")
            cls._providers[name] = provider_class
            logger.info(f"Registered extraction provider: {name}")
            return provider_class

        return decorator

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._providers.pop(name, None)

    @classmethod
    def get_provider_class(cls, name: str) -> ProviderClass:
        """Look up a provider class.

        Raises:
            ValueError: If no provider is registered under ``name``
        """
        try:
            return cls._providers[name]
        except KeyError:
            available = ", ".join(sorted(cls._providers))
            raise ValueError(
                f"Unknown extraction provider: '{name}'. Available providers: {available}"
            ) from None

    @classmethod
    def list_providers(cls) -> list[str]:
        return sorted(cls._providers)


def create_extraction_provider(settings: Settings, name: str | None = None) -> ExtractionProvider:
    """Instantiate the configured extraction provider.

    An unavailable provider (no API key, model server down) is only a warning
    outside production: uploads then fail with an extraction error. In
    production the portal refuses to start instead.

    Args:
        settings: Application settings
        name: Provider to use instead of ``settings.extraction_provider``

    Returns:
        Provider instance

    Raises:
        ValueError: If the provider name is unknown
        RuntimeError: If running in production and the provider is unavailable
    """
    provider_name = name or settings.extraction_provider
    provider = ProviderRegistry.get_provider_class(provider_name)(settings)

    if not provider.is_available():
        message = (
            f"Extraction provider '{provider_name}' is not available; "
            "check API keys or the model server"
        )
        if settings.environment == "production":
            raise RuntimeError(message)
        logger.warning(message)

    logger.info(f"Using extraction provider: {provider_name}")
    return provider
