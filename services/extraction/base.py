"""Abstract base class for extraction providers.

Enables switching between different extraction providers (OpenAI, Ollama)
while maintaining a consistent interface and type safety.

Based on Strategy Pattern:
https://refactoring.guru/design-patterns/strategy/python

The collaborator is a slow, fallible network call. Providers never raise for
extraction problems; they return an ExtractionResult with success=False and
leave it to the upload slot to surface the failure.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from services.extraction.schema import ExtractedInvoice
from services.shared.config import Settings

EXTRACTION_INSTRUCTIONS = (
    "You are an expert accountant. Extract the information from this invoice: "
    "the invoice number, the total amount (number only, no symbols or thousands "
    "separators) and the currency (ARS or USD). Return only a valid JSON object "
    'with the keys "invoiceNumber", "amount" and "currency". Use null for any '
    "field you cannot read."
)


class ExtractionResult(BaseModel):
    """Result of extraction operation.

    Attributes:
        invoice_data: Extracted invoice fields or None if extraction failed
        success: Whether operation succeeded
        error: Error message if operation failed
        provider: Name of provider that performed extraction (e.g., 'openai', 'ollama')
    """

    invoice_data: ExtractedInvoice | None
    success: bool
    error: str | None = None
    provider: str

    @classmethod
    def failed(cls, provider: str, error: str) -> "ExtractionResult":
        return cls(invoice_data=None, success=False, error=error, provider=provider)

    @classmethod
    def from_payload(cls, provider: str, payload: object) -> "ExtractionResult":
        """Build a result from the collaborator's JSON object.

        Accepts both the camelCase keys the prompt asks for and snake_case.
        A payload that is not an object, or carries none of the fields, is a
        failure.
        """
        if not isinstance(payload, dict):
            return cls.failed(provider, f"Expected a JSON object, got {type(payload).__name__}")

        data = ExtractedInvoice(
            invoice_number=payload.get("invoiceNumber", payload.get("invoice_number")),
            amount=payload.get("amount"),
            currency=payload.get("currency"),
        )
        if data.is_empty:
            return cls.failed(provider, "Response contained no invoice fields")
        return cls(invoice_data=data, success=True, provider=provider)


class ExtractionProvider(ABC):
    """Abstract base class for invoice extraction providers.

    All extraction services must implement this interface to ensure
    consistent behavior. Example implementations:
    - OpenAIExtractionProvider: OpenAI vision API (cloud-based)
    - OllamaExtractionProvider: Ollama vision model (self-hosted)
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize provider with settings.

        Args:
            settings: Application settings
        """
        self.settings = settings

    @abstractmethod
    async def extract_invoice_fields(self, document: bytes) -> ExtractionResult:
        """Extract invoice fields from a document image.

        Args:
            document: Raw document bytes (JPEG, PNG, PDF...)

        Returns:
            ExtractionResult with extracted fields or error
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is available/configured.

        Returns:
            True if provider can be used, False otherwise
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name for logging/metrics.

        Returns:
            Provider identifier (e.g., 'openai', 'ollama')
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        return None
