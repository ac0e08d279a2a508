"""
Document Model - Metadata for an indexed text
Chunk text and vectors live in the vector store, keyed by document id
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey, JSON, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.ext.mutable import MutableList
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class DocumentStatus:
    PENDING = "pending"
    INDEXED = "indexed"
    FAILED = "failed"


class DocumentVisibility:
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class Document(Base):
    """
    Document model

    Attributes:
        id: Document UUID (also the document_id payload in the vector store)
        user_id: Owner
        name / description / labels: Descriptive metadata
        visibility: PUBLIC or PRIVATE
        status: pending -> indexed, or failed if indexing raised
        chunk_count: Number of indexed chunks

    A failed document is kept so its owner can see and retry it.
    """

    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    labels = Column(MutableList.as_mutable(JSON), default=list)
    visibility = Column(String(20), nullable=False, default=DocumentVisibility.PRIVATE)

    status = Column(String(20), nullable=False, default=DocumentStatus.PENDING, index=True)
    chunk_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, name={self.name}, status={self.status})>"
