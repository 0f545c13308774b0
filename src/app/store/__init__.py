"""Invoice store and its result DTOs"""
from .invoice_store import InvoiceStore, DEFAULT_STORAGE_KEY
from .dtos import (
    InvoiceStatsDTO,
    StatsSummaryDTO,
    AdvanceOverdueResultDTO,
)

__all__ = [
    "InvoiceStore",
    "DEFAULT_STORAGE_KEY",
    "InvoiceStatsDTO",
    "StatsSummaryDTO",
    "AdvanceOverdueResultDTO",
]
