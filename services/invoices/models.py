"""Entity model for the invoice portal.

Suppliers, invoices and users are immutable Pydantic models. A status change
produces a new Invoice via ``model_copy`` so readers never observe a record
that is half updated.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UserRole(str, Enum):
    """Actor roles. Role is self-selected at login."""

    ADMIN = "ADMIN"
    SUPPLIER = "SUPPLIER"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle states."""

    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    PAID = "PAID"
    REJECTED = "REJECTED"


class Currency(str, Enum):
    ARS = "ARS"
    USD = "USD"


class View(str, Enum):
    """Screens the presentation layer can show."""

    LOGIN = "LOGIN"
    SUPPLIER_DASHBOARD = "SUPPLIER_DASHBOARD"
    ADMIN_DASHBOARD = "ADMIN_DASHBOARD"
    INVOICE_UPLOAD = "INVOICE_UPLOAD"
    SUPPLIER_LIST = "SUPPLIER_LIST"


class Supplier(BaseModel):
    """External vendor.

    ``balance`` and ``total_paid`` are stored snapshots. They are not derived
    from the invoice ledger and can drift from it (see ``balance_drift``).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable supplier identifier")
    name: str
    email: str
    tax_id: str = Field(..., description="CUIT / tax identifier")
    balance: Decimal = Field(Decimal("0"), description="Outstanding liability snapshot")
    total_paid: Decimal = Field(Decimal("0"), description="Cumulative amount paid")


class Invoice(BaseModel):
    """Supplier-submitted billing record tracked through approval and settlement."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique internal ID (INV-...)")
    supplier_id: str
    invoice_number: str = Field(..., min_length=1, description="Supplier or extraction assigned")
    amount: Decimal = Field(Decimal("0"), ge=0)
    currency: Currency = Currency.ARS
    upload_date: date
    estimated_payment_date: date | None = None
    payment_date: date | None = None
    status: InvoiceStatus = InvoiceStatus.PENDING
    file_url: str | None = None
    notes: str | None = None


class User(BaseModel):
    """Logged-in actor. ``supplier_id`` is set iff the role is SUPPLIER."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    role: UserRole
    supplier_id: str | None = None

    @model_validator(mode="after")
    def check_supplier_link(self) -> "User":
        if self.role == UserRole.SUPPLIER and not self.supplier_id:
            raise ValueError("supplier users must carry a supplier_id")
        if self.role == UserRole.ADMIN and self.supplier_id is not None:
            raise ValueError("admin users cannot carry a supplier_id")
        return self
