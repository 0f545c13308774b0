import pytest
from datetime import date, datetime, timedelta, timezone

from src.adapter.repositories.document_storage import InMemoryDocumentStorage
from src.app.store.invoice_store import InvoiceStore
from src.domain.client import Client
from src.domain.invoice import Invoice
from src.domain.line_item import LineItem


class FixedClock:
    """Deterministic clock for the store; advance() moves time forward"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Clock fixed at 2024-01-15 09:30 UTC"""
    return FixedClock(datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    """Empty in-memory storage backend"""
    return InMemoryDocumentStorage()


@pytest.fixture
def store(storage, clock):
    """InvoiceStore over in-memory storage with a fixed clock"""
    return InvoiceStore(storage, clock=clock)


@pytest.fixture
def client_record(store):
    """Persisted client"""
    return store.add_client(
        Client(
            name="Maria Santos",
            company="Santos Bakery",
            email="maria@santosbakery.ph",
            phone="+63 917 555 0101",
        )
    )


@pytest.fixture
def sample_invoice(client_record):
    """
    Unsaved invoice: 2 x 100.00, 12% tax, 10% discount, shipping 50.00
    (grand total 251.60)
    """
    return Invoice(
        client_id=client_record.id,
        issue_date=date(2024, 1, 15),
        due_date=date(2024, 2, 14),
        terms="Net 30",
        items=[
            LineItem(
                description="Website design",
                qty=2,
                unit_price=100,
                tax_rate=12,
                discount_rate=10,
            )
        ],
        shipping=50,
        notes="Thank you for your business",
    )
