"""
Pydantic schemas for conversation endpoints
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum
from uuid import UUID

from botdesk.schemas.chunk import ChunkResponse


class MessageRole(str, Enum):
    """Message roles in a conversation"""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationCreate(BaseModel):
    """Start a conversation with a chatbot"""
    chatbot_id: UUID


class ChatRequest(BaseModel):
    """One user turn"""
    message: str = Field(..., min_length=1, max_length=20000, description="User question")


class ConversationTitleUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class ChatResponse(BaseModel):
    """Answer to one turn"""
    response: str
    sources: List[ChunkResponse] = Field(default_factory=list)
    conversation_id: UUID


class MessageResponse(BaseModel):
    id: Optional[str] = None
    role: MessageRole
    content: str
    timestamp: Optional[datetime] = None
    chunk_ids: Optional[List[str]] = None
    sources: Optional[List[ChunkResponse]] = None


class ChatBotSummary(BaseModel):
    id: UUID
    name: str


class ConversationResponse(BaseModel):
    """Conversation without messages"""
    id: UUID
    user_id: UUID
    chatbot_id: UUID
    title: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConversationListItem(BaseModel):
    id: UUID
    title: Optional[str] = None
    chatbot: Optional[ChatBotSummary] = None
    message_count: int = 0
    last_message_at: Optional[datetime] = None


class ConversationListResponse(BaseModel):
    data: List[ConversationListItem]
    pagination: Dict


class ConversationDetailResponse(BaseModel):
    """Conversation with hydrated messages"""
    id: UUID
    title: Optional[str] = None
    chatbot: Optional[ChatBotSummary] = None
    messages: List[MessageResponse] = Field(default_factory=list)
    last_message_at: Optional[datetime] = None


class PublicChatBotResponse(BaseModel):
    """What an anonymous visitor may see of a public chatbot"""
    id: UUID
    name: str
    view_source_documents: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicConversationStartResponse(BaseModel):
    """Started (or resumed) public conversation with its history"""
    conversation_id: UUID
    title: Optional[str] = None
    chatbot: Optional[ChatBotSummary] = None
    messages: List[MessageResponse] = Field(default_factory=list)
