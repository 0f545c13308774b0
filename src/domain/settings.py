"""Settings Domain Entity

Application-wide invoicing settings, including the invoice number seed.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import ConfigDict, Field
from src.domain.base import BaseModel, ValidationResult

MAX_PREFIX_LENGTH = 10


class Currency(str, Enum):
    """Supported currency codes"""
    PHP = "PHP"
    USD = "USD"
    EUR = "EUR"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_code(cls, code: str) -> Optional["Currency"]:
        try:
            return cls(code)
        except ValueError:
            return None


_SYMBOLS = {
    Currency.PHP: "₱",
    Currency.USD: "$",
    Currency.EUR: "€",
}


class Settings(BaseModel):
    """
    Settings - invoicing configuration

    Domain Rules:
    - invoice_prefix is required, at most 10 characters
    - currency is one of the Currency codes
    - number_seed >= 1, incremented by the store for every new invoice
    """

    invoice_prefix: str = Field(default="INV", description="Invoice number prefix")

    # Unsupported codes still load; validate() reports them
    currency: str = Field(default=Currency.PHP.value, description="Currency code (see Currency)")

    number_seed: int = Field(default=1, description="Counter used for the next invoice number")

    @property
    def currency_symbol(self) -> str:
        currency = Currency.from_code(self.currency)
        return currency.symbol if currency else self.currency

    def format_invoice_number(self, now: datetime) -> str:
        """
        Invoice number for the current seed

        Format: {prefix}-{YYYYMM}-{seed:03d} (e.g., INV-202401-007). The month
        comes from `now`, the counter is never reset per month.
        """
        return f"{self.invoice_prefix}-{now:%Y%m}-{self.number_seed:03d}"

    def validate(self) -> ValidationResult:
        errors = []

        if not self.invoice_prefix.strip():
            errors.append("Invoice prefix is required")

        if len(self.invoice_prefix) > MAX_PREFIX_LENGTH:
            errors.append("Invoice prefix must be 10 characters or less")

        if self.number_seed < 1:
            errors.append("Number seed must be at least 1")

        if Currency.from_code(self.currency) is None:
            errors.append("Invalid currency selection")

        return ValidationResult.from_errors(errors)


class SettingsUpdate(BaseModel):
    """Partial update of settings; unknown field names are rejected"""

    model_config = ConfigDict(extra="forbid")

    invoice_prefix: Optional[str] = None
    currency: Optional[str] = None
    number_seed: Optional[int] = None
