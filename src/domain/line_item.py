"""Line Item Domain Entity

A single billable row of an invoice.
"""

from decimal import Decimal
from typing import Any, Optional
from pydantic import ConfigDict, Field, ValidationInfo, field_validator
from src.domain.base import BaseModel, HUNDRED, ValidationResult, generate_uuid, round_money


class LineItemTotals(BaseModel):
    """Derived amounts of a line item, each rounded to 2 decimals"""

    subtotal: Decimal = Field(description="qty * unit_price")
    discount: Decimal = Field(description="subtotal * discount_rate / 100")
    taxable_base: Decimal = Field(description="subtotal - discount")
    tax: Decimal = Field(description="taxable_base * tax_rate / 100")
    total: Decimal = Field(description="taxable_base + tax")


class LineItem(BaseModel):
    """
    Line Item - one billable row

    Domain Rules:
    - Owned exclusively by its parent Invoice
    - Derived amounts are recomputed from inputs, never stored as authoritative
    - Every derived amount is rounded from the exact unrounded value
    - Valid when description is non-empty, qty > 0, unit_price >= 0
      and both rates are within [0, 100]
    """

    id: str = Field(
        default_factory=lambda: generate_uuid("li_"),
        description="Opaque stable identifier",
    )

    description: str = Field(default="", description="What is being billed")

    qty: Decimal = Field(default=Decimal("1"), description="Quantity")

    unit_price: Decimal = Field(default=Decimal("0"), description="Price per unit")

    tax_rate: Decimal = Field(default=Decimal("0"), description="Tax percentage (0-100)")

    discount_rate: Decimal = Field(
        default=Decimal("0"), description="Discount percentage (0-100)"
    )

    @field_validator("qty", "unit_price", "tax_rate", "discount_rate", mode="before")
    @classmethod
    def _blank_number_uses_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value: Any) -> Any:
        return "" if value is None else value

    def calculate_totals(self) -> LineItemTotals:
        subtotal = self.qty * self.unit_price
        discount = subtotal * self.discount_rate / HUNDRED
        taxable_base = subtotal - discount
        tax = taxable_base * self.tax_rate / HUNDRED
        total = taxable_base + tax

        return LineItemTotals(
            subtotal=round_money(subtotal),
            discount=round_money(discount),
            taxable_base=round_money(taxable_base),
            tax=round_money(tax),
            total=round_money(total),
        )

    def validate(self) -> ValidationResult:
        errors = []

        if not self.description.strip():
            errors.append("Description is required")

        if self.qty <= 0:
            errors.append("Quantity must be greater than 0")

        if self.unit_price < 0:
            errors.append("Unit price cannot be negative")

        if self.tax_rate < 0 or self.tax_rate > HUNDRED:
            errors.append("Tax rate must be between 0 and 100")

        if self.discount_rate < 0 or self.discount_rate > HUNDRED:
            errors.append("Discount rate must be between 0 and 100")

        return ValidationResult.from_errors(errors)

    def apply(self, update: "LineItemUpdate") -> "LineItem":
        for field_name, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(self, field_name, value)
        return self


class LineItemUpdate(BaseModel):
    """
    Partial update of a line item

    Only explicitly provided fields are applied. Unknown field names are
    rejected when the update is built.
    """

    model_config = ConfigDict(extra="forbid")

    description: Optional[str] = None
    qty: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None
    discount_rate: Optional[Decimal] = None
