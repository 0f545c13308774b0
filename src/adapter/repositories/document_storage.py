"""Document Storage Implementations

In-memory, file and SQL (SQLModel) backends for the whole-state document.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine
from src.app.repositories.document_storage import DocumentStorage
from src.domain.base import utcnow
from src.domain.stored_document import StoredDocument

logger = logging.getLogger(__name__)


class InMemoryDocumentStorage(DocumentStorage):
    """
    Documents kept in a dict

    Useful for tests and throwaway sessions; nothing survives the process.
    """

    def __init__(self, documents: Optional[Dict[str, str]] = None):
        self.documents: Dict[str, str] = dict(documents or {})

    def read(self, key: str) -> Optional[str]:
        return self.documents.get(key)

    def write(self, key: str, payload: str) -> None:
        self.documents[key] = payload


def _filename_for(key: str) -> str:
    cleaned = re.sub(r"[^\w.\-]+", "_", key.strip(), flags=re.UNICODE)
    return f"{cleaned or 'document'}.json"


class FileDocumentStorage(DocumentStorage):
    """
    One JSON file per key inside a directory

    Writes go to a temporary file that then replaces the document, so a
    reader never sees a half-written document.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.directory / _filename_for(key)

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, payload: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)
        logger.debug(f"Wrote document '{key}' to {path}")


class SqlDocumentStorage(DocumentStorage):
    """
    Documents kept in the state_documents table

    Uses a synchronous SQLModel session per call; the table is created on
    first use.
    """

    def __init__(self, db_uri: Optional[str] = None, engine: Optional[Engine] = None):
        """
        Initialize the storage

        Args:
            db_uri: Database URI (e.g., sqlite:///./invoices.db)
            engine: Existing engine, used instead of db_uri
        """
        if engine is None and not db_uri:
            raise ValueError("SqlDocumentStorage needs a db_uri or an engine")

        self.engine = engine or create_engine(db_uri, echo=False)
        SQLModel.metadata.create_all(self.engine, tables=[StoredDocument.__table__])

    def read(self, key: str) -> Optional[str]:
        with Session(self.engine) as session:
            document = session.get(StoredDocument, key)
            return document.payload if document else None

    def write(self, key: str, payload: str) -> None:
        with Session(self.engine) as session:
            document = session.get(StoredDocument, key)
            if document is None:
                document = StoredDocument(key=key, payload=payload)
            else:
                document.payload = payload
                document.updated_at = utcnow()

            session.add(document)
            session.commit()

    def last_written_at(self, key: str) -> Optional[datetime]:
        with Session(self.engine) as session:
            document = session.get(StoredDocument, key)
            return document.updated_at if document else None
