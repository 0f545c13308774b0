from .document_storage import DocumentStorage

__all__ = [
    "DocumentStorage",
]
