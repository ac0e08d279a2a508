"""
Pydantic Schemas for Document endpoints
Request/Response validation
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from datetime import datetime
from uuid import UUID

from botdesk.schemas.chunk import ChunkInput, ChunkResponse


class DocumentBase(BaseModel):
    """Base schema with common fields"""
    name: str = Field(..., min_length=1, max_length=255, description="Document name")
    description: str = Field("", description="Free-text description")
    labels: List[str] = Field(default_factory=list, description="Labels for filtering")
    visibility: Literal["PUBLIC", "PRIVATE"] = Field("PRIVATE", description="Who can read the document")


class DocumentCreate(DocumentBase):
    """Schema for creating a document from pre-split chunks"""
    chunks: List[ChunkInput] = Field(..., description="Document text, already chunked")


class DocumentResponse(DocumentBase):
    """Schema for document responses"""
    id: UUID
    user_id: UUID
    status: str = Field(..., description="pending, indexed or failed")
    chunk_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocumentDetailResponse(DocumentResponse):
    """Document with its chunks"""
    chunks: Optional[List[ChunkResponse]] = None
    is_owner: bool = False


class DocumentListResponse(BaseModel):
    """Schema for paginated list of documents"""
    data: List[DocumentResponse]
    pagination: Dict = Field(
        description="Pagination info",
        examples=[{"page": 1, "limit": 10, "total": 42, "total_pages": 5}]
    )
