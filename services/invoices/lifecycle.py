"""Invoice lifecycle: creation from extraction output and status transitions.

State machine::

    PENDING --approve--> SCHEDULED --settle--> PAID

Only ADMIN actors may move an invoice. PAID and REJECTED are terminal.
REJECTED is part of the status space but no transition leads to it, so a
request for it fails like any other pair missing from the table.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from services.extraction.schema import ExtractedInvoice
from services.invoices.access import Permission, require_permission
from services.invoices.errors import InvalidTransition
from services.invoices.models import Currency, Invoice, InvoiceStatus, UserRole
from services.invoices.store import InvoiceStore
from services.shared import metrics

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.PENDING: frozenset({InvoiceStatus.SCHEDULED}),
    InvoiceStatus.SCHEDULED: frozenset({InvoiceStatus.PAID}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.REJECTED: frozenset(),
}

# Capability needed to request a target status
TRANSITION_PERMISSIONS: dict[InvoiceStatus, Permission] = {
    InvoiceStatus.SCHEDULED: Permission.APPROVE_INVOICE,
    InvoiceStatus.PAID: Permission.SETTLE_INVOICE,
}

DEFAULT_PAYMENT_LEAD_DAYS = 15
DEFAULT_PLACEHOLDER_PREFIX = "TMP"


def new_invoice_id() -> str:
    return f"INV-{uuid.uuid4().hex[:12].upper()}"


def placeholder_invoice_number(prefix: str = DEFAULT_PLACEHOLDER_PREFIX) -> str:
    """Generated invoice number for uploads where none could be read."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def _as_extracted(extraction: ExtractedInvoice | Mapping[str, Any] | None) -> ExtractedInvoice:
    if isinstance(extraction, ExtractedInvoice):
        return extraction
    if not isinstance(extraction, Mapping):
        return ExtractedInvoice()
    try:
        return ExtractedInvoice.model_validate(dict(extraction))
    except ValidationError as e:
        logger.warning(f"Discarding malformed extraction payload: {e}")
        return ExtractedInvoice()


def create_invoice(
    supplier_id: str,
    extraction: ExtractedInvoice | Mapping[str, Any] | None,
    *,
    today: date | None = None,
    placeholder_prefix: str = DEFAULT_PLACEHOLDER_PREFIX,
) -> Invoice:
    """Materialize a PENDING invoice from a best-effort extraction.

    Missing or unusable fields fall back to defaults: a generated placeholder
    invoice number, an amount of 0 and ARS as currency. This never fails on
    malformed extraction input.

    Args:
        supplier_id: Supplier the invoice belongs to
        extraction: Extraction output (model, raw mapping, or None)
        today: Upload date; defaults to the current date
        placeholder_prefix: Prefix for generated invoice numbers

    Returns:
        New invoice with status PENDING
    """
    fields = _as_extracted(extraction)
    invoice = Invoice(
        id=new_invoice_id(),
        supplier_id=supplier_id,
        invoice_number=fields.invoice_number or placeholder_invoice_number(placeholder_prefix),
        amount=fields.amount if fields.amount is not None else Decimal("0"),
        currency=fields.currency or Currency.ARS,
        upload_date=today or date.today(),
        status=InvoiceStatus.PENDING,
    )
    logger.info(
        f"Created invoice {invoice.id} ({invoice.invoice_number}) for supplier {supplier_id}: "
        f"{invoice.amount} {invoice.currency.value}"
    )
    return invoice


def _apply(
    invoice: Invoice,
    actor_role: UserRole,
    target: InvoiceStatus,
    today: date,
    payment_lead_days: int,
) -> Invoice:
    require_permission(actor_role, TRANSITION_PERMISSIONS.get(target, Permission.APPROVE_INVOICE))

    if target not in ALLOWED_TRANSITIONS[invoice.status]:
        raise InvalidTransition(invoice.id, invoice.status.value, target.value)

    update: dict[str, Any] = {"status": target}
    if target == InvoiceStatus.SCHEDULED and invoice.estimated_payment_date is None:
        update["estimated_payment_date"] = today + timedelta(days=payment_lead_days)
    elif target == InvoiceStatus.PAID:
        update["payment_date"] = today
    return invoice.model_copy(update=update)


def transition(
    store: InvoiceStore,
    invoice_id: str,
    actor_role: UserRole,
    target: InvoiceStatus,
    *,
    today: date | None = None,
    payment_lead_days: int = DEFAULT_PAYMENT_LEAD_DAYS,
) -> Invoice:
    """Move an invoice to ``target`` status.

    The check and the swap happen under the store lock, so concurrent
    transitions on the same id cannot interleave.

    Args:
        store: Store holding the invoice
        invoice_id: Invoice to move
        actor_role: Role of the acting user
        target: Requested status
        today: Date used to stamp payment dates; defaults to the current date
        payment_lead_days: Days from approval to the estimated payment date

    Returns:
        The updated invoice

    Raises:
        NotFound: If the invoice id is unknown
        Forbidden: If the actor is not allowed to move invoices
        InvalidTransition: If target is not reachable from the current status
    """
    stamp_date = today or date.today()
    try:
        updated = store.update_invoice(
            invoice_id,
            lambda current: _apply(current, actor_role, target, stamp_date, payment_lead_days),
        )
    except Exception:
        metrics.invoice_transitions_total.labels(target=target.value, outcome="rejected").inc()
        raise

    metrics.invoice_transitions_total.labels(target=target.value, outcome="applied").inc()
    logger.info(f"Invoice {invoice_id} moved to {target.value} by {actor_role.value}")
    return updated


def approve(store: InvoiceStore, invoice_id: str, actor_role: UserRole, **kwargs: Any) -> Invoice:
    """PENDING -> SCHEDULED."""
    return transition(store, invoice_id, actor_role, InvoiceStatus.SCHEDULED, **kwargs)


def settle(store: InvoiceStore, invoice_id: str, actor_role: UserRole, **kwargs: Any) -> Invoice:
    """SCHEDULED -> PAID."""
    return transition(store, invoice_id, actor_role, InvoiceStatus.PAID, **kwargs)
