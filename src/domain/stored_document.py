"""Stored Document Entity

Row of the embedded key-value table used by the SQL storage backend.
"""

from datetime import datetime
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, Text
from src.domain.base import utcnow


class StoredDocument(SQLModel, table=True):
    """
    Stored Document - one serialized whole-state document per key

    Domain Rules:
    - key is unique (one document per storage key)
    - payload is opaque JSON text, always replaced as a whole
    """

    __tablename__ = "state_documents"

    key: str = Field(
        sa_column=Column(String(255), primary_key=True),
        description="Storage key (e.g., invoiceApp:v1)"
    )

    payload: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Serialized state document"
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        description="Last write timestamp"
    )

