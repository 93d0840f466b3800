"""Invoice fields returned by the extraction collaborator.

Extraction is best-effort: every field is optional, and a value that does not
fit its type is dropped to None instead of failing validation, so the
lifecycle engine can fall back to its defaults.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.invoices.models import Currency


class ExtractedInvoice(BaseModel):
    """Structured guess extracted from an invoice image."""

    model_config = ConfigDict(extra="ignore")

    invoice_number: str | None = Field(None, description="Invoice identifier as printed")
    amount: Decimal | None = Field(None, description="Total amount, number only")
    currency: Currency | None = Field(None, description="ARS or USD")

    @field_validator("invoice_number", mode="before")
    @classmethod
    def coerce_invoice_number(cls, value: Any) -> str | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int | float | Decimal):
            value = str(value)
        if not isinstance(value, str):
            return None
        return value.strip() or None

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Decimal | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip().lstrip("$").replace(" ", "")
        if not isinstance(value, str | int | float | Decimal):
            return None
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
        if not amount.is_finite() or amount < 0:
            return None
        return amount

    @field_validator("currency", mode="before")
    @classmethod
    def coerce_currency(cls, value: Any) -> Currency | None:
        if isinstance(value, Currency):
            return value
        if not isinstance(value, str):
            return None
        try:
            return Currency(value.strip().upper())
        except ValueError:
            return None

    @property
    def is_empty(self) -> bool:
        """True when the collaborator found none of the fields."""
        return self.invoice_number is None and self.amount is None and self.currency is None
