"""
Document API endpoints
Create (quota-gated), list, read and delete documents
"""

import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from botdesk.api.deps import get_current_user, get_vector_store
from botdesk.database import get_db
from botdesk.middleware.quota import check_quota
from botdesk.models.user import User
from botdesk.schemas.document import (
    DocumentCreate,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentResponse,
)
from botdesk.services.document_service import DocumentService
from botdesk.services.quota_service import QuotaResource

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/documents", tags=["documents"])


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_quota(QuotaResource.DOCUMENT))]
)
async def create_document(
    data: DocumentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    vector_store=Depends(get_vector_store)
):
    """
    Create a document from pre-split chunks and index it

    Gated by the document count and per-document word quotas.
    """
    service = DocumentService(db, vector_store)
    return await service.create_document(current_user.id, data)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    vector_store=Depends(get_vector_store)
):
    """List the caller's documents, newest first"""
    return DocumentService(db, vector_store).get_documents(current_user.id, page, limit, search)


@router.get("/{document_id}", response_model=DocumentDetailResponse)
async def get_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    vector_store=Depends(get_vector_store)
):
    """Get a document with its chunks in chunk_index order"""
    result = await DocumentService(db, vector_store).get_document(current_user.id, document_id)
    response = DocumentResponse.model_validate(result["document"]).model_dump()
    return DocumentDetailResponse(**response, chunks=result["chunks"], is_owner=result["is_owner"])


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    vector_store=Depends(get_vector_store)
):
    """Delete a document and its indexed chunks"""
    await DocumentService(db, vector_store).delete_document(current_user.id, document_id)
