"""Unit tests for configuration management."""

import os
from collections.abc import Generator

import pytest
from pydantic import ValidationError

from services.shared.config import Settings, get_settings


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before and after test."""
    original_env = dict(os.environ)
    env_vars = [k for k in os.environ if k.upper().startswith("APP_")]
    for var in env_vars:
        del os.environ[var]
    yield
    os.environ.clear()
    os.environ.update(original_env)


def test_settings_defaults(clean_env: None) -> None:
    """Test that settings have correct default values."""
    settings = Settings(_env_file=None)

    assert settings.environment == "development"
    assert settings.log_level == "INFO"
    assert settings.service_name == "huerta-invoice-portal"
    assert settings.service_version == "0.1.0"
    assert settings.extraction_provider == "openai"
    assert settings.payment_lead_days == 15
    assert settings.placeholder_prefix == "TMP"


def test_settings_from_env_vars(clean_env: None) -> None:
    """Test that settings can be overridden via environment variables."""
    os.environ["APP_ENVIRONMENT"] = "production"
    os.environ["APP_LOG_LEVEL"] = "ERROR"
    os.environ["APP_EXTRACTION_PROVIDER"] = "ollama"
    os.environ["APP_PAYMENT_LEAD_DAYS"] = "30"

    settings = Settings(_env_file=None)

    assert settings.environment == "production"
    assert settings.log_level == "ERROR"
    assert settings.extraction_provider == "ollama"
    assert settings.payment_lead_days == 30


def test_settings_case_insensitive(clean_env: None) -> None:
    """Test that environment variables are case insensitive."""
    os.environ["app_log_level"] = "DEBUG"

    settings = Settings(_env_file=None)

    assert settings.log_level == "DEBUG"


def test_settings_reject_unknown_provider(clean_env: None) -> None:
    """Test that only registered provider names are accepted."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, extraction_provider="gemini")  # type: ignore[arg-type]


def test_settings_reject_non_positive_timeout(clean_env: None) -> None:
    """Extraction timeout must be positive."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, extraction_timeout_seconds=0)


def test_get_settings_factory() -> None:
    """Test that factory function returns Settings instance."""
    settings = get_settings()

    assert isinstance(settings, Settings)
