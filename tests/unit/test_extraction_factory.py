"""Unit tests for extraction provider selection."""

import logging
from unittest.mock import patch

import pytest

from services.extraction.base import ExtractionProvider, ExtractionResult
from services.extraction.factory import ProviderRegistry, create_extraction_provider
from services.extraction.ollama_provider import OllamaExtractionProvider
from services.extraction.openai_provider import OpenAIExtractionProvider
from services.shared.config import Settings


class EchoProvider(ExtractionProvider):
    async def extract_invoice_fields(self, document: bytes) -> ExtractionResult:
        return ExtractionResult.from_payload(self.provider_name, {"amount": len(document)})

    def is_available(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "echo"


@pytest.fixture
def echo_registered():  # type: ignore[no-untyped-def]
    ProviderRegistry.register("echo")(EchoProvider)
    yield
    ProviderRegistry.unregister("echo")


def test_registry_lists_builtin_providers() -> None:
    assert ProviderRegistry.list_providers() == ["ollama", "openai"]


def test_registry_lookup() -> None:
    assert ProviderRegistry.get_provider_class("openai") is OpenAIExtractionProvider
    assert ProviderRegistry.get_provider_class("ollama") is OllamaExtractionProvider


def test_registry_unknown_name_lists_available() -> None:
    with pytest.raises(ValueError, match="Unknown extraction provider") as exc_info:
        ProviderRegistry.get_provider_class("gemini")

    assert "Available providers: ollama, openai" in str(exc_info.value)


def test_register_decorator_returns_class(echo_registered: None) -> None:
    assert ProviderRegistry.get_provider_class("echo") is EchoProvider
    assert "echo" in ProviderRegistry.list_providers()


def test_unregister_is_idempotent() -> None:
    ProviderRegistry.unregister("never-registered")

    assert "never-registered" not in ProviderRegistry.list_providers()


@patch.dict("os.environ", {}, clear=True)
def test_create_uses_configured_provider() -> None:
    provider = create_extraction_provider(Settings(_env_file=None))

    assert isinstance(provider, OpenAIExtractionProvider)


@patch.dict("os.environ", {}, clear=True)
def test_create_with_explicit_name(echo_registered: None) -> None:
    provider = create_extraction_provider(Settings(_env_file=None), name="echo")

    assert isinstance(provider, EchoProvider)


@patch.dict("os.environ", {}, clear=True)
def test_create_ollama_from_settings() -> None:
    settings = Settings(_env_file=None, extraction_provider="ollama")

    with patch.object(OllamaExtractionProvider, "is_available", return_value=True):
        provider = create_extraction_provider(settings)

    assert isinstance(provider, OllamaExtractionProvider)


@patch.dict("os.environ", {}, clear=True)
def test_unavailable_provider_warns_in_development(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        create_extraction_provider(Settings(_env_file=None))

    assert "not available" in caplog.text


@patch.dict("os.environ", {}, clear=True)
def test_unavailable_provider_fails_in_production() -> None:
    settings = Settings(_env_file=None, environment="production")

    with pytest.raises(RuntimeError, match="not available"):
        create_extraction_provider(settings)


@patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}, clear=True)
def test_available_provider_starts_in_production(caplog: pytest.LogCaptureFixture) -> None:
    settings = Settings(_env_file=None, environment="production")

    with caplog.at_level(logging.INFO):
        provider = create_extraction_provider(settings)

    assert provider.is_available() is True
    assert "Using extraction provider: openai" in caplog.text


@patch.dict("os.environ", {}, clear=True)
def test_refused_ollama_provider_holds_no_client() -> None:
    """A provider rejected at start-up leaves no HTTP client open."""
    settings = Settings(_env_file=None, environment="production", extraction_provider="ollama")

    with (
        patch.object(OllamaExtractionProvider, "is_available", return_value=False),
        patch("services.extraction.ollama_provider.httpx.AsyncClient") as client_class,
    ):
        with pytest.raises(RuntimeError, match="not available"):
            create_extraction_provider(settings)

    client_class.assert_not_called()
