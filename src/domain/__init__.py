from .base import BaseModel, ValidationResult, generate_uuid, round_money, utcnow
from .line_item import LineItem, LineItemTotals, LineItemUpdate
from .invoice import (
    Invoice,
    InvoiceStatus,
    InvoiceTotals,
    DisplayStatus,
    RecurringInterval,
    RecurringSchedule,
    advance_overdue,
    due_date_from_terms,
)
from .client import Client, ClientUpdate
from .settings import Currency, Settings, SettingsUpdate
from .state_document import StateDocument
from .stored_document import StoredDocument

__all__ = [
    "BaseModel",
    "ValidationResult",
    "generate_uuid",
    "round_money",
    "utcnow",
    "LineItem",
    "LineItemTotals",
    "LineItemUpdate",
    "Invoice",
    "InvoiceStatus",
    "InvoiceTotals",
    "DisplayStatus",
    "RecurringInterval",
    "RecurringSchedule",
    "advance_overdue",
    "due_date_from_terms",
    "Client",
    "ClientUpdate",
    "Currency",
    "Settings",
    "SettingsUpdate",
    "StateDocument",
    "StoredDocument",
]
