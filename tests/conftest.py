"""Shared fixtures for portal tests."""

import io

import pytest
from PIL import Image

from services.extraction.base import ExtractionProvider, ExtractionResult
from services.invoices.seed import PortalState, default_state
from services.invoices.store import InvoiceStore
from services.shared.config import Settings


class StubProvider(ExtractionProvider):
    """Provider returning a canned result and counting calls."""

    def __init__(self, settings: Settings, result: ExtractionResult) -> None:
        super().__init__(settings)
        self.result = result
        self.calls = 0

    async def extract_invoice_fields(self, document: bytes) -> ExtractionResult:
        self.calls += 1
        return self.result

    def is_available(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "stub"


@pytest.fixture
def settings() -> Settings:
    """Settings with deterministic lifecycle values."""
    return Settings(payment_lead_days=15, extraction_timeout_seconds=5.0)


@pytest.fixture
def seed_state() -> PortalState:
    return default_state()


@pytest.fixture
def store(seed_state: PortalState) -> InvoiceStore:
    return InvoiceStore(seed_state)


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Create a simple test image as PNG bytes."""
    img = Image.new("RGB", (200, 100), color="white")
    img_bytes = io.BytesIO()
    img.save(img_bytes, format="PNG")
    return img_bytes.getvalue()


@pytest.fixture
def sample_jpeg_bytes() -> bytes:
    img = Image.new("RGB", (64, 64), color="black")
    img_bytes = io.BytesIO()
    img.save(img_bytes, format="JPEG")
    return img_bytes.getvalue()


@pytest.fixture
def make_provider(settings: Settings):  # type: ignore[no-untyped-def]
    """Factory for stub providers returning a fixed result."""

    def _make(result: ExtractionResult) -> StubProvider:
        return StubProvider(settings, result)

    return _make
