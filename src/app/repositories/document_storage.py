"""Document Storage Interface

Defines the contract for persisting the serialized whole-state document.
"""

from abc import ABC, abstractmethod
from typing import Optional


class DocumentStorage(ABC):
    """
    Storage backend for opaque serialized documents

    A backend holds one text blob per key and only ever reads or replaces a
    blob as a whole. Implementations: in-memory map, file, embedded SQL table.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the document stored under key

        Args:
            key: Storage key

        Returns:
            Serialized document, or None if nothing is stored under key
        """
        pass

    @abstractmethod
    def write(self, key: str, payload: str) -> None:
        """
        Replace the document stored under key

        Args:
            key: Storage key
            payload: Serialized document
        """
        pass
