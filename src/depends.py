from datetime import datetime
from typing import Callable, Optional
from config import ApplicationConfig
from src.adapter.repositories.document_storage import (
    FileDocumentStorage,
    InMemoryDocumentStorage,
    SqlDocumentStorage,
)
from src.app.repositories.document_storage import DocumentStorage
from src.app.store.invoice_store import InvoiceStore
from src.domain.settings import Settings


def build_storage(config=ApplicationConfig) -> DocumentStorage:
    backend = str(config.STORAGE_BACKEND).lower()

    if backend == "memory":
        return InMemoryDocumentStorage()
    if backend == "file":
        return FileDocumentStorage(config.STORAGE_DIR)
    if backend == "sql":
        return SqlDocumentStorage(config.DB_URI)

    raise ValueError(f"Unsupported STORAGE_BACKEND: {config.STORAGE_BACKEND}")


def get_invoice_store(
    storage: Optional[DocumentStorage] = None,
    clock: Optional[Callable[[], datetime]] = None,
    config=ApplicationConfig,
) -> InvoiceStore:
    return InvoiceStore(
        storage or build_storage(config),
        storage_key=config.STORAGE_KEY,
        default_settings=Settings(
            invoice_prefix=config.DEFAULT_INVOICE_PREFIX,
            currency=config.DEFAULT_CURRENCY,
        ),
        clock=clock,
    )
