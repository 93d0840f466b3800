"""Supplier upload slot: one in-flight extraction at a time.

The slot is the only place the portal suspends. While the extraction call is
outstanding ``processing`` is True and a second submission is refused. A
failed extraction creates nothing and returns the slot to its idle state.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import date

from services.extraction.base import ExtractionProvider, ExtractionResult
from services.extraction.document import UnsupportedDocument, validate_document
from services.invoices.errors import ExtractionFailure, UploadInProgress
from services.invoices.lifecycle import create_invoice
from services.invoices.models import Invoice
from services.invoices.store import InvoiceStore
from services.shared import metrics
from services.shared.config import Settings

logger = logging.getLogger(__name__)


class UploadSlot:
    """Upload slot bound to one supplier."""

    def __init__(
        self,
        supplier_id: str,
        store: InvoiceStore,
        provider: ExtractionProvider,
        settings: Settings,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.supplier_id = supplier_id
        self._store = store
        self._provider = provider
        self._settings = settings
        self._clock = clock
        self._processing = False

    @property
    def processing(self) -> bool:
        """True while an extraction call is outstanding."""
        return self._processing

    async def submit(self, document: bytes) -> Invoice:
        """Extract fields from ``document`` and publish a PENDING invoice.

        Args:
            document: Raw invoice image or PDF

        Returns:
            The newly created invoice, already visible in the store

        Raises:
            UploadInProgress: If another submission is still processing
            NotFound: If the slot's supplier no longer exists
            ExtractionFailure: If the document is unusable or extraction failed
        """
        if self._processing:
            raise UploadInProgress(f"Upload for supplier {self.supplier_id} already processing")

        self._processing = True
        try:
            self._store.get_supplier(self.supplier_id)
            try:
                validate_document(document, self._settings.max_document_bytes)
            except UnsupportedDocument as e:
                raise ExtractionFailure(str(e)) from e

            result = await self._extract(document)
            if not result.success or result.invoice_data is None:
                logger.warning(
                    f"Extraction failed for supplier {self.supplier_id} "
                    f"via {result.provider}: {result.error}"
                )
                raise ExtractionFailure(result.error or "no result", provider=result.provider)

            invoice = create_invoice(
                self.supplier_id,
                result.invoice_data,
                today=self._clock(),
                placeholder_prefix=self._settings.placeholder_prefix,
            )
            self._store.add_invoice(invoice)
            metrics.invoices_created_total.labels(currency=invoice.currency.value).inc()
            return invoice
        finally:
            self._processing = False

    async def _extract(self, document: bytes) -> ExtractionResult:
        provider_name = self._provider.provider_name
        start = time.time()
        try:
            result = await asyncio.wait_for(
                self._provider.extract_invoice_fields(document),
                timeout=self._settings.extraction_timeout_seconds,
            )
        except TimeoutError:
            result = ExtractionResult.failed(
                provider_name,
                f"Timed out after {self._settings.extraction_timeout_seconds}s",
            )
        except Exception as e:
            logger.error(f"Extraction provider {provider_name} raised: {e}")
            result = ExtractionResult.failed(provider_name, f"Extraction failed: {e}")
        metrics.extraction_processing_duration_seconds.labels(provider=provider_name).observe(
            time.time() - start
        )
        metrics.extraction_requests_total.labels(
            provider=provider_name, status="success" if result.success else "failed"
        ).inc()
        return result
