"""
Document Service

Document records live in the database; their chunks live in the vector
store. A document is created as pending, indexed, then marked indexed.
If indexing fails it is marked failed and kept for its owner.
"""

from typing import Any, Dict, Optional
from uuid import UUID, uuid4
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from botdesk.ai.vector_store import VectorStoreService, get_vector_store_service
from botdesk.core.exceptions import NotFoundError
from botdesk.models.document import Document, DocumentStatus, DocumentVisibility
from botdesk.schemas.document import DocumentCreate

logger = logging.getLogger(__name__)


class DocumentService:
    """Create, read and delete documents and their indexed chunks"""

    def __init__(self, db: Session, vector_store: Optional[VectorStoreService] = None):
        self.db = db
        self.vector_store = vector_store or get_vector_store_service()

    async def create_document(self, user_id: UUID, data: DocumentCreate) -> Document:
        """
        Create and index a document

        The pending record is committed first (together with any open
        quota admission), then the chunks are indexed.

        Raises:
            Whatever indexing raised, after marking the document failed
        """
        document = Document(
            user_id=user_id,
            name=data.name,
            description=data.description,
            labels=list(data.labels),
            visibility=data.visibility,
            status=DocumentStatus.PENDING,
            chunk_count=0,
        )
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)

        document_id = str(document.id)
        texts = [chunk.content for chunk in data.chunks]
        metadata = [
            {
                "document_id": document_id,
                "user_id": str(user_id),
                "chunk_id": str(uuid4()),
                "chunk_index": chunk.index if chunk.index is not None else i,
            }
            for i, chunk in enumerate(data.chunks)
        ]

        try:
            result = await self.vector_store.index_documents(texts, metadata)
        except Exception as e:
            logger.error(f"Indexing failed for document {document_id}: {e}")
            self.db.rollback()
            document.status = DocumentStatus.FAILED
            self.db.commit()
            raise

        document.status = DocumentStatus.INDEXED
        document.chunk_count = result["indexed_count"]
        self.db.commit()
        self.db.refresh(document)

        logger.info(f"Document {document_id} indexed with {document.chunk_count} chunks")
        return document

    def get_documents(self, user_id: UUID, page: int = 1, limit: int = 10, search: Optional[str] = None) -> Dict[str, Any]:
        """Paginated list of the user's documents, newest first"""
        query = self.db.query(Document).filter(Document.user_id == user_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Document.name.ilike(pattern), Document.description.ilike(pattern)))

        total = query.count()
        documents = (
            query.order_by(Document.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "data": documents,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": (total + limit - 1) // limit
            }
        }

    async def get_document(self, user_id: UUID, document_id: UUID) -> Dict[str, Any]:
        """
        Get a document with its chunks

        Visible to its owner, or to anyone when PUBLIC. Anything else is
        reported as not found.
        """
        document = self.db.get(Document, document_id)
        if document is None:
            raise NotFoundError("The requested document could not be found.")

        is_owner = document.user_id == user_id
        if not is_owner and document.visibility != DocumentVisibility.PUBLIC:
            raise NotFoundError("The requested document could not be found.")

        try:
            chunks = await self.vector_store.get_chunks_by_document_id(str(document.id))
        except Exception as e:
            # Metadata stays readable while the vector store is unavailable
            logger.error(f"Failed to retrieve chunks for document {document_id}: {e}")
            chunks = None

        return {"document": document, "chunks": chunks, "is_owner": is_owner}

    async def delete_document(self, user_id: UUID, document_id: UUID) -> None:
        """
        Delete a document's vectors, then its record

        A vector-store failure aborts the delete so no orphaned points remain.
        """
        document = (
            self.db.query(Document)
            .filter(Document.id == document_id, Document.user_id == user_id)
            .first()
        )
        if document is None:
            raise NotFoundError("Document not found")

        await self.vector_store.delete_documents(str(document.id))

        self.db.delete(document)
        self.db.commit()
        logger.info(f"Deleted document {document_id}")
