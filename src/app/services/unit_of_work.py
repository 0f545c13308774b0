"""Unit of Work

Whole-document transactions: every store operation reads the full state,
applies its change and rewrites the full state on commit.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional
from src.app.repositories.document_storage import DocumentStorage
from src.domain.state_document import StateDocument

logger = logging.getLogger(__name__)


class UnitOfWork(ABC):
    state: StateDocument

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.rollback()

    @abstractmethod
    def commit(self):
        pass

    @abstractmethod
    def rollback(self):
        pass


class DocumentUnitOfWork(UnitOfWork):
    """
    Unit of work over one stored document

    Entering acquires the writer lock and loads the document; commit writes
    the whole document back; leaving without commit discards the changes.
    A missing or unreadable document loads as the default document.
    """

    def __init__(
        self,
        storage: DocumentStorage,
        key: str,
        lock: threading.RLock,
        default_factory: Callable[[], StateDocument] = StateDocument,
    ):
        self.storage = storage
        self.key = key
        self.lock = lock
        self.default_factory = default_factory
        self.state: Optional[StateDocument] = None
        self._committed = False

    def __enter__(self):
        self.lock.acquire()
        try:
            self.state = self.load()
        except Exception:
            self.lock.release()
            raise
        self._committed = False
        return self

    def __exit__(self, *args):
        try:
            self.rollback()
        finally:
            self.lock.release()

    def load(self) -> StateDocument:
        try:
            payload = self.storage.read(self.key)
            if payload is None:
                return self.default_factory()

            return StateDocument.from_json(payload)
        except ValueError as e:  # includes UnicodeDecodeError
            logger.error(f"Stored document '{self.key}' is unreadable, using defaults: {e}")
            return self.default_factory()

    def commit(self):
        self.storage.write(self.key, self.state.to_json())
        self._committed = True

    def rollback(self):
        if not self._committed:
            self.state = None
