"""Data Transfer Objects for the Invoice Store

Pydantic models for statistics and scheduled-run results.
"""

from datetime import datetime
from decimal import Decimal
from typing import List
from pydantic import BaseModel, Field


class InvoiceStatsDTO(BaseModel):
    """
    Dashboard counters

    Computed read-only: evaluating statistics never changes a stored status.
    """

    total: int = Field(..., description="Number of invoices")

    unpaid: int = Field(..., description="Invoices neither paid nor overdue")

    overdue: int = Field(..., description="Invoices overdue (persisted or past due)")

    collected_this_month: Decimal = Field(
        ...,
        description="Sum of grand totals of invoices paid in the current calendar month"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "total": 12,
                "unpaid": 4,
                "overdue": 2,
                "collected_this_month": "1520.50"
            }
        }


class StatsSummaryDTO(InvoiceStatsDTO):
    """Dashboard counters plus value aggregates"""

    total_value: Decimal = Field(..., description="Sum of grand totals of all invoices")

    unpaid_value: Decimal = Field(..., description="Sum of grand totals of invoices not paid")

    average_invoice_value: Decimal = Field(..., description="total_value / total (0 when empty)")

    collection_rate: Decimal = Field(
        ...,
        description="Percentage of total_value already paid (0 when empty)"
    )


class AdvanceOverdueResultDTO(BaseModel):
    """Result of one overdue-advancement run"""

    invoices_checked: int = Field(..., description="Invoices evaluated")

    invoices_advanced: int = Field(..., description="Invoices moved from unpaid to overdue")

    advanced_invoice_ids: List[str] = Field(
        default_factory=list,
        description="Numbers of the invoices moved to overdue"
    )

    run_time: datetime = Field(..., description="When the run happened")

    execution_time_ms: int = Field(..., description="Duration of the run in milliseconds")
