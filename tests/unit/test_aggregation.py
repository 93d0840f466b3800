"""Unit tests for the aggregation engine."""

from datetime import date
from decimal import Decimal

import pytest

from services.invoices.aggregation import (
    admin_dashboard,
    balance_drift,
    bucket_by_status,
    liability_by_supplier,
    outstanding_by_supplier,
    paid_by_supplier,
    status_distribution,
    supplier_statement,
    total_outstanding,
    visible_invoices_for,
)
from services.invoices.models import Invoice, InvoiceStatus, Supplier, User, UserRole
from services.invoices.seed import default_state

ADMIN = User(id="A-1", name="Tesorero Huerta", email="admin@huerta.com", role=UserRole.ADMIN)


def supplier_user(supplier_id: str) -> User:
    return User(
        id=f"S-{supplier_id}",
        name="Proveedor",
        email="externo@huerta.com",
        role=UserRole.SUPPLIER,
        supplier_id=supplier_id,
    )


def make_invoice(
    invoice_id: str, supplier_id: str, amount: int, status: InvoiceStatus
) -> Invoice:
    return Invoice(
        id=invoice_id,
        supplier_id=supplier_id,
        invoice_number=f"N-{invoice_id}",
        amount=Decimal(amount),
        upload_date=date(2024, 3, 1),
        status=status,
    )


@pytest.fixture
def invoices() -> list[Invoice]:
    return default_state().invoices


@pytest.fixture
def suppliers() -> list[Supplier]:
    return default_state().suppliers


def test_total_outstanding_seed(invoices: list[Invoice]) -> None:
    """PAID I1 is excluded; SCHEDULED I2 and PENDING I3 count."""
    assert total_outstanding(invoices) == Decimal("134000")


def test_outstanding_by_supplier_seed(invoices: list[Invoice]) -> None:
    assert outstanding_by_supplier(invoices, "S1") == Decimal("45000")
    assert outstanding_by_supplier(invoices, "S2") == Decimal("89000")
    assert outstanding_by_supplier(invoices, "S3") == Decimal("0")


def test_paid_by_supplier(invoices: list[Invoice]) -> None:
    assert paid_by_supplier(invoices, "S1") == Decimal("25000")
    assert paid_by_supplier(invoices, "S2") == Decimal("0")


def test_total_outstanding_excludes_rejected() -> None:
    invoices = [
        make_invoice("A", "S1", 100, InvoiceStatus.PENDING),
        make_invoice("B", "S1", 200, InvoiceStatus.SCHEDULED),
        make_invoice("C", "S1", 400, InvoiceStatus.PAID),
        make_invoice("D", "S1", 800, InvoiceStatus.REJECTED),
    ]

    assert total_outstanding(invoices) == Decimal("300")


def test_empty_set_yields_zero() -> None:
    assert total_outstanding([]) == Decimal("0")
    assert outstanding_by_supplier([], "S1") == Decimal("0")
    buckets = bucket_by_status([])
    assert buckets.pending == buckets.scheduled == buckets.paid == []


def test_bucket_by_status(invoices: list[Invoice]) -> None:
    buckets = bucket_by_status(invoices)

    assert [i.id for i in buckets.pending] == ["I3"]
    assert [i.id for i in buckets.scheduled] == ["I2"]
    assert [i.id for i in buckets.paid] == ["I1"]


def test_bucket_by_status_drops_rejected() -> None:
    buckets = bucket_by_status([make_invoice("R", "S1", 10, InvoiceStatus.REJECTED)])

    assert buckets.pending == buckets.scheduled == buckets.paid == []


def test_admin_sees_everything_in_order(invoices: list[Invoice]) -> None:
    assert [i.id for i in visible_invoices_for(ADMIN, invoices)] == ["I1", "I2", "I3"]


def test_supplier_sees_only_own(invoices: list[Invoice]) -> None:
    visible = visible_invoices_for(supplier_user("S1"), invoices)

    assert [i.id for i in visible] == ["I1", "I2"]
    assert all(i.supplier_id == "S1" for i in visible)


def test_supplier_without_invoices_sees_nothing(invoices: list[Invoice]) -> None:
    assert visible_invoices_for(supplier_user("S3"), invoices) == []
    assert visible_invoices_for(supplier_user("S99"), invoices) == []


def test_liability_by_supplier_excludes_orphans(
    suppliers: list[Supplier], invoices: list[Invoice]
) -> None:
    invoices = invoices + [make_invoice("O1", "S99", 5000, InvoiceStatus.PENDING)]

    liabilities = liability_by_supplier(suppliers, invoices)

    assert [(item.supplier_id, item.outstanding) for item in liabilities] == [
        ("S1", Decimal("45000")),
        ("S2", Decimal("89000")),
        ("S3", Decimal("0")),
    ]
    assert liabilities[0].name == "LimpiaTodo SRL"


def test_status_distribution(invoices: list[Invoice]) -> None:
    shares = status_distribution(invoices)

    assert [(s.status, s.count) for s in shares] == [
        (InvoiceStatus.PENDING, 1),
        (InvoiceStatus.SCHEDULED, 1),
        (InvoiceStatus.PAID, 1),
    ]
    assert sum(s.proportion for s in shares) == pytest.approx(1.0)


def test_status_distribution_empty_is_zero_safe() -> None:
    shares = status_distribution([])

    assert [s.count for s in shares] == [0, 0, 0]
    assert [s.proportion for s in shares] == [0.0, 0.0, 0.0]


def test_admin_dashboard(suppliers: list[Supplier], invoices: list[Invoice]) -> None:
    dashboard = admin_dashboard(suppliers, invoices)

    assert dashboard.total_debt == Decimal("134000")
    assert (dashboard.pending_count, dashboard.scheduled_count, dashboard.paid_count) == (1, 1, 1)
    assert len(dashboard.liabilities) == 3
    assert len(dashboard.distribution) == 3


def test_admin_dashboard_empty() -> None:
    dashboard = admin_dashboard([], [])

    assert dashboard.total_debt == Decimal("0")
    assert dashboard.liabilities == []


def test_supplier_statement(invoices: list[Invoice]) -> None:
    statement = supplier_statement(supplier_user("S1"), invoices)

    assert statement.outstanding == Decimal("45000")
    assert statement.paid == Decimal("25000")
    assert [i.id for i in statement.invoices] == ["I1", "I2"]


def test_balance_drift_reports_mismatch(suppliers: list[Supplier], invoices: list[Invoice]) -> None:
    """S3 has a stored balance but no outstanding invoices in the ledger."""
    drifts = balance_drift(suppliers, invoices)

    assert [d.supplier_id for d in drifts] == ["S3"]
    assert drifts[0].stored_balance == Decimal("12000")
    assert drifts[0].ledger_outstanding == Decimal("0")
    assert drifts[0].difference == Decimal("12000")


def test_balance_drift_does_not_modify_suppliers(
    suppliers: list[Supplier], invoices: list[Invoice]
) -> None:
    balance_drift(suppliers, invoices)

    assert suppliers[2].balance == Decimal("12000")
