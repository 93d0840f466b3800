"""Ollama-based extraction provider for self-hosted vision models.

Uses a local Ollama server for invoice extraction. Supports data sovereignty
requirements by running entirely on-premises.

Requires Ollama server running on localhost:11434 with a vision model
(e.g. llama3.2-vision, llava). See: https://ollama.ai/
"""

import json
import logging
import re
from typing import Any

import httpx

from services.extraction.base import EXTRACTION_INSTRUCTIONS, ExtractionProvider, ExtractionResult
from services.extraction.document import (
    PDF_MIME_TYPE,
    UnsupportedDocument,
    detect_mime_type,
    to_base64,
)
from services.shared.config import Settings

logger = logging.getLogger(__name__)


class OllamaExtractionProvider(ExtractionProvider):
    """Ollama-based extraction provider for self-hosted LLM inference.

    Uses local Ollama server running on localhost:11434.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize Ollama extraction provider.

        Args:
            settings: Application settings
        """
        super().__init__(settings)
        self._base_url = settings.ollama_base_url
        self._model = settings.ollama_model
        self._timeout = settings.extraction_timeout_seconds
        self._client: httpx.AsyncClient | None = None

    @property
    def provider_name(self) -> str:
        return "ollama"

    def is_available(self) -> bool:
        """Check if Ollama server is running and model is available.

        Uses a short synchronous probe; meant for start-up checks.

        Returns:
            True if Ollama server responds and model is loaded
        """
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=5.0)
            if response.status_code != 200:
                return False
            models = response.json().get("models", [])
            model_names = [m.get("name", "").split(":")[0] for m in models]
            return self._model.split(":")[0] in model_names
        except Exception:
            return False

    async def extract_invoice_fields(self, document: bytes) -> ExtractionResult:
        """Extract invoice fields from a document image using Ollama.

        Args:
            document: Raw invoice image bytes

        Returns:
            ExtractionResult with extracted fields or error
        """
        try:
            mime_type = detect_mime_type(document)
        except UnsupportedDocument as e:
            return ExtractionResult.failed(self.provider_name, str(e))

        if mime_type == PDF_MIME_TYPE:
            return ExtractionResult.failed(
                self.provider_name, "Ollama vision models accept images only, not PDF"
            )

        try:
            response_text = await self._generate(to_base64(document))
            payload = self._parse_json_response(response_text)
            return ExtractionResult.from_payload(self.provider_name, payload)

        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON from Ollama response: {e}")
            return ExtractionResult.failed(self.provider_name, f"JSON parsing failed: {str(e)}")
        except httpx.HTTPError as e:
            logger.error(f"Ollama request failed: {e}")
            return ExtractionResult.failed(self.provider_name, f"Transport error: {str(e)}")
        except Exception as e:
            logger.error(f"Ollama extraction failed: {e}")
            return ExtractionResult.failed(self.provider_name, f"Extraction failed: {str(e)}")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """HTTP client, opened on first use so an unused provider holds no connections."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _generate(self, image_b64: str) -> str:
        """Call Ollama generate API once.

        Args:
            image_b64: Base64-encoded invoice image

        Returns:
            Raw response text from Ollama

        Raises:
            httpx.HTTPError: On transport errors or non-2xx status
        """
        response = await self._get_client().post(
            f"{self._base_url}/api/generate",
            json={
                "model": self._model,
                "prompt": EXTRACTION_INSTRUCTIONS,
                "images": [image_b64],
                "format": "json",
                "stream": False,
                "options": {
                    "temperature": 0,  # Deterministic output
                    "num_predict": 256,
                },
            },
        )
        response.raise_for_status()
        result: str = response.json().get("response", "")
        return result

    def _parse_json_response(self, response_text: str) -> Any:
        """Extract and parse JSON from LLM response.

        Handles common LLM quirks like markdown code blocks.

        Raises:
            json.JSONDecodeError: If no valid JSON found
        """
        json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", response_text)
        if json_match:
            return json.loads(json_match.group(1).strip())

        json_match = re.search(r"\{[\s\S]*\}", response_text)
        if json_match:
            return json.loads(json_match.group(0))

        return json.loads(response_text.strip())
