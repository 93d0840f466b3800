"""In-memory store for suppliers and invoices.

Owned by the portal root and handed to the lifecycle and aggregation code.
Read-modify-write sequences run under a single re-entrant lock; readers get
tuple snapshots so they never see a partially applied change.
"""

import logging
import threading
from collections.abc import Callable

from services.invoices.errors import NotFound
from services.invoices.models import Invoice, Supplier
from services.invoices.seed import PortalState

logger = logging.getLogger(__name__)


class InvoiceStore:
    """Supplier reference data plus the invoice ledger (new uploads at the head)."""

    def __init__(self, state: PortalState) -> None:
        """Initialize store from an initial state.

        Args:
            state: Suppliers and invoices to start from

        Raises:
            ValueError: If the state contains duplicate ids
        """
        self._lock = threading.RLock()
        self._suppliers: dict[str, Supplier] = {}
        for supplier in state.suppliers:
            if supplier.id in self._suppliers:
                raise ValueError(f"Duplicate supplier id: {supplier.id}")
            self._suppliers[supplier.id] = supplier

        self._invoices: list[Invoice] = []
        seen: set[str] = set()
        for invoice in state.invoices:
            if invoice.id in seen:
                raise ValueError(f"Duplicate invoice id: {invoice.id}")
            seen.add(invoice.id)
            self._invoices.append(invoice)
            if invoice.supplier_id not in self._suppliers:
                logger.warning(
                    f"Invoice {invoice.id} references unknown supplier {invoice.supplier_id}"
                )

        self._version = 0

    @property
    def version(self) -> int:
        """Monotonic counter bumped on every invoice mutation."""
        return self._version

    def suppliers(self) -> tuple[Supplier, ...]:
        with self._lock:
            return tuple(self._suppliers.values())

    def invoices(self) -> tuple[Invoice, ...]:
        with self._lock:
            return tuple(self._invoices)

    def has_supplier(self, supplier_id: str | None) -> bool:
        return supplier_id is not None and supplier_id in self._suppliers

    def get_supplier(self, supplier_id: str) -> Supplier:
        """Look up a supplier.

        Raises:
            NotFound: If the id is unknown
        """
        try:
            return self._suppliers[supplier_id]
        except KeyError:
            raise NotFound("Supplier", supplier_id) from None

    def get_invoice(self, invoice_id: str) -> Invoice:
        """Look up an invoice.

        Raises:
            NotFound: If the id is unknown
        """
        with self._lock:
            return self._invoices[self._index_of(invoice_id)]

    def add_invoice(self, invoice: Invoice) -> None:
        """Publish a fully built invoice at the head of the ledger.

        Raises:
            ValueError: If an invoice with the same id already exists
        """
        with self._lock:
            if any(existing.id == invoice.id for existing in self._invoices):
                raise ValueError(f"Duplicate invoice id: {invoice.id}")
            self._invoices.insert(0, invoice)
            self._version += 1

    def update_invoice(self, invoice_id: str, change: Callable[[Invoice], Invoice]) -> Invoice:
        """Atomically replace an invoice with ``change(current)``.

        If ``change`` raises, the ledger is left untouched and the error
        propagates to the caller.

        Args:
            invoice_id: Invoice to replace
            change: Builds the replacement record from the current one

        Returns:
            The replacement invoice

        Raises:
            NotFound: If the id is unknown
        """
        with self._lock:
            index = self._index_of(invoice_id)
            updated = change(self._invoices[index])
            self._invoices[index] = updated
            self._version += 1
            return updated

    def _index_of(self, invoice_id: str) -> int:
        for index, invoice in enumerate(self._invoices):
            if invoice.id == invoice_id:
                return index
        raise NotFound("Invoice", invoice_id)
