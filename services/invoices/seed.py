"""Initial Huerta suppliers and invoices.

The portal has no persistence layer; this fixed state is what a fresh
process starts from unless a different ``PortalState`` is injected.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from services.invoices.models import Currency, Invoice, InvoiceStatus, Supplier


class PortalState(BaseModel):
    """Injectable initial state.

    Invoices keep the order given here; uploads are added at the head of the
    ledger, so the newest upload is always listed first.
    """

    suppliers: list[Supplier] = Field(default_factory=list)
    invoices: list[Invoice] = Field(default_factory=list)


def default_state() -> PortalState:
    """Build the Huerta seed state."""
    suppliers = [
        Supplier(
            id="S1",
            name="LimpiaTodo SRL",
            email="limpieza@huerta.com",
            tax_id="30-12345678-9",
            balance=Decimal("45000"),
            total_paid=Decimal("120000"),
        ),
        Supplier(
            id="S2",
            name="Electricidad Sur",
            email="energia@elsur.com",
            tax_id="30-87654321-0",
            balance=Decimal("89000"),
            total_paid=Decimal("250000"),
        ),
        Supplier(
            id="S3",
            name="Catering Huerta",
            email="chef@catering.com",
            tax_id="20-11223344-5",
            balance=Decimal("12000"),
            total_paid=Decimal("45000"),
        ),
    ]
    invoices = [
        Invoice(
            id="I1",
            supplier_id="S1",
            invoice_number="A-0001-00234",
            amount=Decimal("25000"),
            currency=Currency.ARS,
            upload_date=date(2024, 3, 1),
            status=InvoiceStatus.PAID,
            payment_date=date(2024, 3, 15),
        ),
        Invoice(
            id="I2",
            supplier_id="S1",
            invoice_number="A-0001-00235",
            amount=Decimal("45000"),
            currency=Currency.ARS,
            upload_date=date(2024, 3, 20),
            status=InvoiceStatus.SCHEDULED,
            estimated_payment_date=date(2024, 4, 5),
        ),
        Invoice(
            id="I3",
            supplier_id="S2",
            invoice_number="B-0452-11234",
            amount=Decimal("89000"),
            currency=Currency.ARS,
            upload_date=date(2024, 3, 22),
            status=InvoiceStatus.PENDING,
        ),
    ]
    return PortalState(suppliers=suppliers, invoices=invoices)
