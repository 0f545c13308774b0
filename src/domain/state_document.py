"""Whole-state document

The single persisted unit: every client, every invoice and the settings.
"""

from typing import List, Optional
from pydantic import Field
from src.domain.base import BaseModel
from src.domain.client import Client
from src.domain.invoice import Invoice
from src.domain.settings import Settings


class StateDocument(BaseModel):
    """
    State Document - {clients, invoices, settings}

    Read, modified and rewritten as a whole; never partially written.
    """

    clients: List[Client] = Field(default_factory=list)
    invoices: List[Invoice] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, payload: str) -> "StateDocument":
        return cls.model_validate_json(payload)

    def invoice_index(self, invoice_id: str) -> Optional[int]:
        for index, invoice in enumerate(self.invoices):
            if invoice.id == invoice_id:
                return index
        return None

    def client_index(self, client_id: str) -> Optional[int]:
        for index, client in enumerate(self.clients):
            if client.id == client_id:
                return index
        return None
