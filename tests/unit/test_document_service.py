"""
Unit tests for DocumentService

Tests:
- Create: pending -> indexed, chunk metadata passed to the vector store
- Chunk ids are assigned by the server, never taken from the request
- Indexing failure marks the document failed and re-raises
- Read visibility (owner, public, masked)
- Delete order: vectors first, record second
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from botdesk.core.exceptions import NotFoundError
from botdesk.models.document import Document, DocumentStatus, DocumentVisibility
from botdesk.schemas.document import DocumentCreate
from botdesk.services.document_service import DocumentService


def document_request(**overrides):
    values = {
        "name": "Handbook",
        "description": "Employee handbook",
        "labels": ["hr"],
        "chunks": [
            {"index": 0, "content": "Welcome to the team."},
            {"content": "Refunds within 30 days."},
        ],
    }
    values.update(overrides)
    return DocumentCreate(**values)


@pytest.mark.unit
@pytest.mark.asyncio
class TestDocumentService:
    """Test suite for DocumentService"""

    async def test_create_document(self, db_session, vector_store, test_user):
        service = DocumentService(db_session, vector_store)

        document = await service.create_document(test_user.id, document_request())

        assert document.status == DocumentStatus.INDEXED
        assert document.chunk_count == 2
        assert document.labels == ["hr"]

        chunks = await vector_store.get_chunks_by_document_id(str(document.id))
        assert [chunk["content"] for chunk in chunks] == ["Welcome to the team.", "Refunds within 30 days."]
        assert all(chunk["chunk_id"] for chunk in chunks)
        assert len({chunk["chunk_id"] for chunk in chunks}) == 2
        assert all(chunk["metadata"]["user_id"] == str(test_user.id) for chunk in chunks)

    async def test_chunk_ids_are_assigned_by_server(
        self, db_session, vector_store, rag_service, test_user, other_user
    ):
        service = DocumentService(db_session, vector_store)
        secret = await service.create_document(test_user.id, document_request(
            chunks=[{"id": "shared-id", "content": "tenant A private secret"}]
        ))
        own = await service.create_document(other_user.id, document_request(
            chunks=[{"id": "shared-id", "content": "tenant B own text"}]
        ))

        secret_ids = [c["chunk_id"] for c in await vector_store.get_chunks_by_document_id(str(secret.id))]
        own_ids = [c["chunk_id"] for c in await vector_store.get_chunks_by_document_id(str(own.id))]
        assert "shared-id" not in secret_ids + own_ids
        assert set(secret_ids).isdisjoint(own_ids)

        await service.delete_document(other_user.id, own.id)

        hydrated = await rag_service.hydrate_messages([{"role": "assistant", "content": "a", "chunk_ids": own_ids}])
        assert hydrated[0]["sources"] == []

    async def test_indexing_failure_marks_failed(self, db_session, test_user):
        vector_store = MagicMock()
        vector_store.index_documents = AsyncMock(side_effect=ConnectionError("qdrant down"))
        service = DocumentService(db_session, vector_store)

        with pytest.raises(ConnectionError):
            await service.create_document(test_user.id, document_request())

        document = db_session.query(Document).one()
        assert document.status == DocumentStatus.FAILED
        assert document.chunk_count == 0

    async def test_get_document_owner(self, db_session, vector_store, test_user):
        service = DocumentService(db_session, vector_store)
        document = await service.create_document(test_user.id, document_request())

        result = await service.get_document(test_user.id, document.id)

        assert result["is_owner"] is True
        assert [chunk["chunk_index"] for chunk in result["chunks"]] == [0, 1]

    async def test_get_private_document_of_other_user(self, db_session, vector_store, test_user, other_user):
        service = DocumentService(db_session, vector_store)
        document = await service.create_document(test_user.id, document_request())

        with pytest.raises(NotFoundError):
            await service.get_document(other_user.id, document.id)

    async def test_get_public_document_of_other_user(self, db_session, vector_store, test_user, other_user):
        service = DocumentService(db_session, vector_store)
        document = await service.create_document(
            test_user.id, document_request(visibility=DocumentVisibility.PUBLIC)
        )

        result = await service.get_document(other_user.id, document.id)

        assert result["is_owner"] is False
        assert len(result["chunks"]) == 2

    async def test_get_document_survives_vector_store_outage(self, db_session, test_user, test_document):
        vector_store = MagicMock()
        vector_store.get_chunks_by_document_id = AsyncMock(side_effect=ConnectionError("qdrant down"))

        result = await DocumentService(db_session, vector_store).get_document(test_user.id, test_document.id)

        assert result["document"].id == test_document.id
        assert result["chunks"] is None

    async def test_delete_document(self, db_session, vector_store, test_user):
        service = DocumentService(db_session, vector_store)
        document = await service.create_document(test_user.id, document_request())
        document_id = document.id

        await service.delete_document(test_user.id, document_id)

        assert db_session.get(Document, document_id) is None
        assert await vector_store.get_chunks_by_document_id(str(document_id)) == []

    async def test_delete_keeps_record_when_vectors_fail(self, db_session, test_user, test_document):
        vector_store = MagicMock()
        vector_store.delete_documents = AsyncMock(side_effect=ConnectionError("qdrant down"))

        with pytest.raises(ConnectionError):
            await DocumentService(db_session, vector_store).delete_document(test_user.id, test_document.id)

        assert db_session.get(Document, test_document.id) is not None

    async def test_delete_other_users_document(self, db_session, vector_store, other_user, test_document):
        with pytest.raises(NotFoundError):
            await DocumentService(db_session, vector_store).delete_document(other_user.id, test_document.id)

    async def test_delete_missing_document(self, db_session, vector_store, test_user):
        with pytest.raises(NotFoundError):
            await DocumentService(db_session, vector_store).delete_document(test_user.id, uuid4())


@pytest.mark.unit
class TestDocumentListing:
    def test_get_documents(self, db_session, vector_store, test_user, other_user):
        for name in ["Handbook", "Pricing", "Roadmap"]:
            db_session.add(Document(user_id=test_user.id, name=name))
        db_session.add(Document(user_id=other_user.id, name="Secret"))
        db_session.commit()

        service = DocumentService(db_session, vector_store)
        page = service.get_documents(test_user.id, page=1, limit=2)

        assert page["pagination"]["total"] == 3
        assert page["pagination"]["total_pages"] == 2
        assert len(page["data"]) == 2

        found = service.get_documents(test_user.id, search="pric")
        assert [document.name for document in found["data"]] == ["Pricing"]
