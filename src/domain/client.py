"""Client Domain Entity

Billed party referenced by invoices.
"""

import re
from datetime import datetime
from typing import Any, Optional
from pydantic import ConfigDict, Field, field_validator
from src.domain.base import BaseModel, ValidationResult, utcnow

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]+$")
MIN_NAME_LENGTH = 2
MIN_PHONE_LENGTH = 10


class Client(BaseModel):
    """
    Client - billed party

    Domain Rules:
    - name is required (at least 2 characters)
    - email and phone are optional but must be well-formed when present
    - A client referenced by any invoice must not be deleted; the calling
      layer enforces this (InvoiceStore.get_invoices_for_client)
    """

    id: str = Field(default="", description="Client identifier (assigned by the store)")
    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    tax_id: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("id", "name", "company", "email", "phone", "address", "tax_id", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def display_name(self) -> str:
        if self.company:
            return f"{self.name} ({self.company})"
        return self.name

    def validate(self) -> ValidationResult:
        errors = []

        if len(self.name.strip()) < MIN_NAME_LENGTH:
            errors.append("Name is required and must be at least 2 characters")

        if self.email and not EMAIL_PATTERN.match(self.email):
            errors.append("Invalid email format")

        if self.phone and (len(self.phone) < MIN_PHONE_LENGTH or not PHONE_PATTERN.match(self.phone)):
            errors.append("Invalid phone format")

        return ValidationResult.from_errors(errors)


class ClientUpdate(BaseModel):
    """Partial update of a client; unknown field names are rejected"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None
