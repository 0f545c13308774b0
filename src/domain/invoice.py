"""Invoice Domain Entity

Aggregates line items, shipping, terms and dates; derives totals and status.
"""

import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import Field, field_validator, model_validator
from src.domain.base import BaseModel, ValidationResult, round_money, utcnow
from src.domain.line_item import LineItem, LineItemUpdate

TERMS_PATTERN = re.compile(r"Net (\d+)")
DEFAULT_TERMS = "Net 30"
DEFAULT_TERM_DAYS = 30
DUE_SOON_DAYS = 5


class InvoiceStatus(str, Enum):
    """Persisted invoice status"""
    UNPAID = "unpaid"
    PAID = "paid"          # Terminal
    OVERDUE = "overdue"    # Written only by advance_overdue()


class DisplayStatus(str, Enum):
    """Read-time status label, derived from status, due date and the clock"""
    UNPAID = "unpaid"
    DUE_SOON = "due-soon"
    OVERDUE = "overdue"
    PAID = "paid"


class RecurringInterval(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class RecurringSchedule(BaseModel):
    """Recurrence settings of an invoice"""

    enabled: bool = False
    interval: RecurringInterval = RecurringInterval.MONTHLY
    next_run: Optional[date] = None


class InvoiceTotals(BaseModel):
    """Cached snapshot of the derived invoice amounts"""

    subtotal: Decimal = Field(default=Decimal("0.00"), description="Sum of rounded item subtotals")
    discount: Decimal = Field(default=Decimal("0.00"), description="Sum of rounded item discounts")
    tax: Decimal = Field(default=Decimal("0.00"), description="Sum of rounded item taxes")
    shipping: Decimal = Field(default=Decimal("0.00"), description="Shipping charge")
    grand: Decimal = Field(default=Decimal("0.00"), description="subtotal - discount + tax + shipping")


def _as_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def due_date_from_terms(issue_date: Union[date, str], terms: Optional[str]) -> date:
    """
    Derive a due date from "Net N" payment terms

    Args:
        issue_date: Issue date (date or ISO "YYYY-MM-DD")
        terms: Terms text; anything without "Net N" falls back to 30 days

    Returns:
        issue_date + N days
    """
    match = TERMS_PATTERN.search(terms or "")
    days = int(match.group(1)) if match else DEFAULT_TERM_DAYS
    return _as_date(issue_date) + timedelta(days=days)


class Invoice(BaseModel):
    """
    Invoice - billable document for one client

    Domain Rules:
    - id is the business invoice number, empty until the first save
    - client_id references a Client, it does not own it
    - due_date must be strictly after issue_date
    - At least one line item is required for a savable invoice
    - shipping >= 0
    - Totals are the sums of already-rounded per-item amounts
    - Status transitions: unpaid -> paid (explicit, one way);
      unpaid -> overdue only through advance_overdue()
    """

    id: str = Field(default="", description="Invoice number (e.g., INV-202401-001)")

    client_id: str = Field(default="", description="Referenced client")

    issue_date: date = Field(default_factory=lambda: utcnow().date())

    due_date: date = Field(
        default_factory=lambda: utcnow().date() + timedelta(days=DEFAULT_TERM_DAYS)
    )

    terms: str = Field(default=DEFAULT_TERMS, description="Payment terms, e.g. 'Net 15'")

    items: List[LineItem] = Field(default_factory=list, description="Line items in entry order")

    shipping: Decimal = Field(default=Decimal("0"), description="Shipping charge (>= 0)")

    notes: str = ""

    status: InvoiceStatus = InvoiceStatus.UNPAID

    recurring: RecurringSchedule = Field(default_factory=RecurringSchedule)

    totals: Optional[InvoiceTotals] = Field(default=None, description="Cached derived totals")

    created_at: datetime = Field(default_factory=utcnow)

    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("recurring", mode="before")
    @classmethod
    def _null_recurring(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("shipping", mode="before")
    @classmethod
    def _blank_shipping(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return Decimal("0")
        return value

    @field_validator("id", "client_id", "notes", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("terms", mode="before")
    @classmethod
    def _blank_terms(cls, value: Any) -> Any:
        return value or DEFAULT_TERMS

    @model_validator(mode="after")
    def _fill_totals(self) -> "Invoice":
        if self.totals is None:
            self.totals = self.calculate_totals()
        return self

    @classmethod
    def draft(cls, terms: str = DEFAULT_TERMS, today: Optional[date] = None, **fields) -> "Invoice":
        """New unsaved invoice with one blank line item and due date derived from terms"""
        issue_date = today or utcnow().date()
        invoice = cls(
            terms=terms,
            issue_date=issue_date,
            due_date=due_date_from_terms(issue_date, terms),
            items=[LineItem()],
            **fields,
        )
        invoice.update_totals()
        return invoice

    def add_item(self, data: Optional[Union[LineItem, Dict[str, Any]]] = None) -> LineItem:
        if isinstance(data, LineItem):
            item = data
        else:
            item = LineItem.model_validate(data or {})
        self.items.append(item)
        self.update_totals()
        return item

    def remove_item(self, item_id: str) -> bool:
        remaining = [item for item in self.items if item.id != item_id]
        removed = len(remaining) < len(self.items)
        if removed:
            self.items = remaining
            self.update_totals()
        return removed

    def get_item(self, item_id: str) -> Optional[LineItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def update_item(
        self, item_id: str, update: Union[LineItemUpdate, Dict[str, Any]]
    ) -> Optional[LineItem]:
        item = self.get_item(item_id)
        if item is None:
            return None

        if not isinstance(update, LineItemUpdate):
            update = LineItemUpdate.model_validate(update)

        item.apply(update)
        self.update_totals()
        return item

    def calculate_due_date_from_terms(self, issue_date: Optional[Union[date, str]] = None) -> date:
        """Pure: callers write the result back into due_date themselves"""
        return due_date_from_terms(issue_date or self.issue_date, self.terms)

    def calculate_totals(self) -> InvoiceTotals:
        item_totals = [item.calculate_totals() for item in self.items]

        subtotal = sum((totals.subtotal for totals in item_totals), Decimal("0"))
        discount = sum((totals.discount for totals in item_totals), Decimal("0"))
        tax = sum((totals.tax for totals in item_totals), Decimal("0"))
        grand = subtotal - discount + tax + self.shipping

        return InvoiceTotals(
            subtotal=round_money(subtotal),
            discount=round_money(discount),
            tax=round_money(tax),
            shipping=round_money(self.shipping),
            grand=round_money(grand),
        )

    def update_totals(self) -> InvoiceTotals:
        self.totals = self.calculate_totals()
        self.updated_at = utcnow()
        return self.totals

    def validate(self) -> ValidationResult:
        errors = []

        if not self.client_id:
            errors.append("Client is required")

        if self.due_date <= self.issue_date:
            errors.append("Due date must be after issue date")

        if not self.items:
            errors.append("At least one line item is required")

        if self.shipping < 0:
            errors.append("Shipping cost cannot be negative")

        for index, item in enumerate(self.items, start=1):
            item_validation = item.validate()
            if not item_validation.is_valid:
                errors.append(f"Item {index}: {', '.join(item_validation.errors)}")

        return ValidationResult.from_errors(errors)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self.status == InvoiceStatus.PAID:
            return False
        if self.status == InvoiceStatus.OVERDUE:
            return True
        today = (now or utcnow()).date()
        # A due date starts at midnight, so the due day itself is overdue
        return self.due_date <= today

    def is_due_soon(self, now: Optional[datetime] = None) -> bool:
        if self.status == InvoiceStatus.PAID or self.is_overdue(now):
            return False
        today = (now or utcnow()).date()
        return today < self.due_date <= today + timedelta(days=DUE_SOON_DAYS)

    def display_status(self, now: Optional[datetime] = None) -> DisplayStatus:
        if self.status == InvoiceStatus.PAID:
            return DisplayStatus.PAID
        if self.is_overdue(now):
            return DisplayStatus.OVERDUE
        if self.is_due_soon(now):
            return DisplayStatus.DUE_SOON
        return DisplayStatus.UNPAID

    def mark_paid(self, now: Optional[datetime] = None) -> "Invoice":
        self.status = InvoiceStatus.PAID
        self.updated_at = now or utcnow()
        return self

    def duplicate(self, today: Optional[date] = None, now: Optional[datetime] = None) -> "Invoice":
        """
        Copy for re-billing

        The copy gets a blank id, status unpaid, issue_date today, a due date
        recomputed from terms and fresh timestamps. Items, client, notes,
        shipping, terms and recurrence are deep-copied.
        """
        now = now or utcnow()
        issue_date = today or now.date()
        return self.model_copy(
            deep=True,
            update={
                "id": "",
                "status": InvoiceStatus.UNPAID,
                "issue_date": issue_date,
                "due_date": due_date_from_terms(issue_date, self.terms),
                "created_at": now,
                "updated_at": now,
            },
        )


def advance_overdue(invoice: Invoice, now: Optional[datetime] = None) -> Invoice:
    """
    Status transition unpaid -> overdue

    Args:
        invoice: Invoice to evaluate (left untouched)
        now: Evaluation time (defaults to current UTC time)

    Returns:
        Copy of the invoice; persisted status is overdue (and updated_at is now)
        when it was unpaid and its due date is today or earlier
    """
    now = now or utcnow()
    if invoice.status == InvoiceStatus.UNPAID and invoice.due_date <= now.date():
        return invoice.model_copy(
            deep=True,
            update={"status": InvoiceStatus.OVERDUE, "updated_at": now},
        )
    return invoice.model_copy(deep=True)
