"""Derived views over the invoice and supplier sets.

All functions are pure and recomputed on every call. Empty inputs yield
zero or empty results, and proportions guard against a zero denominator.
Amounts are summed across currencies as-is; there is no conversion.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal

from pydantic import BaseModel

from services.invoices.models import Invoice, InvoiceStatus, Supplier, User, UserRole

ZERO = Decimal("0")


class StatusBuckets(BaseModel):
    """Invoices partitioned by status. REJECTED invoices land in no bucket."""

    pending: list[Invoice]
    scheduled: list[Invoice]
    paid: list[Invoice]


class StatusShare(BaseModel):
    """One slice of the status distribution chart."""

    status: InvoiceStatus
    count: int
    proportion: float


class SupplierLiability(BaseModel):
    """Outstanding amount owed to one supplier."""

    supplier_id: str
    name: str
    outstanding: Decimal


class BalanceDrift(BaseModel):
    """A supplier whose stored balance disagrees with the invoice ledger."""

    supplier_id: str
    stored_balance: Decimal
    ledger_outstanding: Decimal

    @property
    def difference(self) -> Decimal:
        return self.stored_balance - self.ledger_outstanding


class AdminDashboard(BaseModel):
    """Treasury overview."""

    total_debt: Decimal
    pending_count: int
    scheduled_count: int
    paid_count: int
    liabilities: list[SupplierLiability]
    distribution: list[StatusShare]


class SupplierStatement(BaseModel):
    """A supplier's account statement."""

    supplier_id: str | None
    outstanding: Decimal
    paid: Decimal
    invoices: list[Invoice]


def _sum_amounts(invoices: Iterable[Invoice]) -> Decimal:
    return sum((invoice.amount for invoice in invoices), ZERO)


def _is_outstanding(invoice: Invoice) -> bool:
    return invoice.status in (InvoiceStatus.PENDING, InvoiceStatus.SCHEDULED)


def bucket_by_status(invoices: Iterable[Invoice]) -> StatusBuckets:
    buckets = StatusBuckets(pending=[], scheduled=[], paid=[])
    for invoice in invoices:
        if invoice.status == InvoiceStatus.PENDING:
            buckets.pending.append(invoice)
        elif invoice.status == InvoiceStatus.SCHEDULED:
            buckets.scheduled.append(invoice)
        elif invoice.status == InvoiceStatus.PAID:
            buckets.paid.append(invoice)
    return buckets


def total_outstanding(invoices: Iterable[Invoice]) -> Decimal:
    """Sum of amounts for invoices still PENDING or SCHEDULED."""
    return _sum_amounts(invoice for invoice in invoices if _is_outstanding(invoice))


def outstanding_by_supplier(invoices: Iterable[Invoice], supplier_id: str) -> Decimal:
    return total_outstanding(invoice for invoice in invoices if invoice.supplier_id == supplier_id)


def paid_by_supplier(invoices: Iterable[Invoice], supplier_id: str) -> Decimal:
    return _sum_amounts(
        invoice
        for invoice in invoices
        if invoice.supplier_id == supplier_id and invoice.status == InvoiceStatus.PAID
    )


def visible_invoices_for(user: User, invoices: Sequence[Invoice]) -> list[Invoice]:
    """Invoices a user may see, in ledger order (uploads first).

    Admins see everything. Suppliers see only their own invoices, which is
    an empty list when they have none.
    """
    if user.role == UserRole.ADMIN:
        return list(invoices)
    if user.supplier_id is None:
        return []
    return [invoice for invoice in invoices if invoice.supplier_id == user.supplier_id]


def liability_by_supplier(
    suppliers: Iterable[Supplier], invoices: Sequence[Invoice]
) -> list[SupplierLiability]:
    """Outstanding amount per known supplier.

    Invoices whose supplier is not in ``suppliers`` are left out.
    """
    return [
        SupplierLiability(
            supplier_id=supplier.id,
            name=supplier.name,
            outstanding=outstanding_by_supplier(invoices, supplier.id),
        )
        for supplier in suppliers
    ]


def status_distribution(invoices: Iterable[Invoice]) -> list[StatusShare]:
    buckets = bucket_by_status(invoices)
    counts = [
        (InvoiceStatus.PENDING, len(buckets.pending)),
        (InvoiceStatus.SCHEDULED, len(buckets.scheduled)),
        (InvoiceStatus.PAID, len(buckets.paid)),
    ]
    total = sum(count for _, count in counts)
    return [
        StatusShare(status=status, count=count, proportion=count / total if total else 0.0)
        for status, count in counts
    ]


def admin_dashboard(suppliers: Iterable[Supplier], invoices: Sequence[Invoice]) -> AdminDashboard:
    buckets = bucket_by_status(invoices)
    return AdminDashboard(
        total_debt=total_outstanding(invoices),
        pending_count=len(buckets.pending),
        scheduled_count=len(buckets.scheduled),
        paid_count=len(buckets.paid),
        liabilities=liability_by_supplier(suppliers, invoices),
        distribution=status_distribution(invoices),
    )


def supplier_statement(user: User, invoices: Sequence[Invoice]) -> SupplierStatement:
    own = [invoice for invoice in invoices if invoice.supplier_id == user.supplier_id]
    return SupplierStatement(
        supplier_id=user.supplier_id,
        outstanding=total_outstanding(own),
        paid=_sum_amounts(invoice for invoice in own if invoice.status == InvoiceStatus.PAID),
        invoices=own,
    )


def balance_drift(suppliers: Iterable[Supplier], invoices: Sequence[Invoice]) -> list[BalanceDrift]:
    """Suppliers whose stored balance differs from their ledger outstanding.

    Reported only. Stored balances are never rewritten from the ledger.
    """
    drifts = []
    for supplier in suppliers:
        ledger = outstanding_by_supplier(invoices, supplier.id)
        if ledger != supplier.balance:
            drifts.append(
                BalanceDrift(
                    supplier_id=supplier.id,
                    stored_balance=supplier.balance,
                    ledger_outstanding=ledger,
                )
            )
    return drifts
