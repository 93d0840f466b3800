"""OpenAI-based extraction provider for invoice images.

Sends the invoice image (or PDF) straight to a vision-capable OpenAI model and
reads the fields back through function calling. Uses the async client so the
round trip does not block the event loop.

No retries: a failed call is reported once and the upload is left for the
supplier to submit again.
"""

import json
import logging
import os
from typing import Any

from openai import AsyncOpenAI

from services.extraction.base import EXTRACTION_INSTRUCTIONS, ExtractionProvider, ExtractionResult
from services.extraction.document import (
    PDF_MIME_TYPE,
    UnsupportedDocument,
    detect_mime_type,
    to_data_url,
)
from services.shared.config import Settings

logger = logging.getLogger(__name__)


class OpenAIExtractionProvider(ExtractionProvider):
    """OpenAI vision extraction provider.

    Requires OPENAI_API_KEY environment variable.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize OpenAI extraction provider.

        Args:
            settings: Application settings
        """
        super().__init__(settings)
        self._client: AsyncOpenAI | None = None

    @property
    def provider_name(self) -> str:
        return "openai"

    def is_available(self) -> bool:
        """Check if OpenAI API key is configured.

        Returns:
            True if OPENAI_API_KEY environment variable is set
        """
        return os.getenv("OPENAI_API_KEY") is not None

    async def extract_invoice_fields(self, document: bytes) -> ExtractionResult:
        """Extract invoice fields from a document using OpenAI.

        Args:
            document: Raw invoice bytes

        Returns:
            ExtractionResult with extracted fields or error, provider='openai'
        """
        if not self.is_available():
            return ExtractionResult.failed(
                self.provider_name, "OPENAI_API_KEY environment variable not set"
            )

        try:
            mime_type = detect_mime_type(document)
        except UnsupportedDocument as e:
            return ExtractionResult.failed(self.provider_name, str(e))

        try:
            api_key = os.getenv("OPENAI_API_KEY")
            if self._client is None or self._client.api_key != api_key:
                self._client = AsyncOpenAI(api_key=api_key)

            response = await self._client.chat.completions.create(  # type: ignore[call-overload]
                model=self.settings.openai_model,
                messages=[
                    {"role": "system", "content": "You are an invoice data extraction assistant."},
                    {
                        "role": "user",
                        "content": [
                            self._document_part(document, mime_type),
                            {"type": "text", "text": EXTRACTION_INSTRUCTIONS},
                        ],
                    },
                ],
                functions=[self._get_invoice_schema()],
                function_call={"name": "extract_invoice_data"},
                temperature=0,
            )

            message = response.choices[0].message
            if message.function_call is None:
                return ExtractionResult.failed(self.provider_name, "No function call in API response")

            payload = json.loads(message.function_call.arguments or "{}")
            return ExtractionResult.from_payload(self.provider_name, payload)

        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON from OpenAI response: {e}")
            return ExtractionResult.failed(self.provider_name, f"JSON parsing failed: {str(e)}")
        except Exception as e:
            logger.error(f"OpenAI extraction failed: {e}")
            return ExtractionResult.failed(self.provider_name, f"Extraction failed: {str(e)}")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    def _document_part(self, document: bytes, mime_type: str) -> dict[str, Any]:
        """Message content part carrying the document.

        Images go as image_url parts; PDFs as inline file parts.
        """
        data_url = to_data_url(document, mime_type)
        if mime_type == PDF_MIME_TYPE:
            return {"type": "file", "file": {"filename": "invoice.pdf", "file_data": data_url}}
        return {"type": "image_url", "image_url": {"url": data_url}}

    def _get_invoice_schema(self) -> dict[str, Any]:
        """Get OpenAI function calling schema for the invoice fields.

        Returns:
            Function definition dict for OpenAI API
        """
        return {
            "name": "extract_invoice_data",
            "description": "Extract the invoice number, total amount and currency from an invoice",
            "parameters": {
                "type": "object",
                "properties": {
                    "invoiceNumber": {"type": ["string", "null"]},
                    "amount": {"type": ["number", "null"], "minimum": 0},
                    "currency": {"type": ["string", "null"], "enum": ["ARS", "USD", None]},
                },
                "required": ["invoiceNumber", "amount", "currency"],
            },
        }
