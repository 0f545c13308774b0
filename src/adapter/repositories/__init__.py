from .document_storage import (
    InMemoryDocumentStorage,
    FileDocumentStorage,
    SqlDocumentStorage,
)

__all__ = [
    "InMemoryDocumentStorage",
    "FileDocumentStorage",
    "SqlDocumentStorage",
]
