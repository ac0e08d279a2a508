"""
Pydantic Schemas for document chunks
"""

from pydantic import BaseModel, Field
from typing import Optional


class ChunkInput(BaseModel):
    """One chunk of an incoming document; chunk ids are always assigned by the server"""
    index: Optional[int] = Field(None, ge=0, description="Position in the document")
    content: str = Field(..., description="Chunk text")


class ChunkMetadata(BaseModel):
    document_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    character_count: Optional[int] = None
    word_count: Optional[int] = None


class ChunkResponse(BaseModel):
    """Chunk as read back from the vector store"""
    chunk_id: Optional[str] = None
    document_id: Optional[str] = None
    content: str = ""
    chunk_index: int = 0
    score: Optional[float] = Field(None, description="Similarity score (search results only)")
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)
