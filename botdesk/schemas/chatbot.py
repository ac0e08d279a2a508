"""
Pydantic Schemas for Chatbot endpoints
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Literal, Optional
from datetime import datetime
from uuid import UUID


class ChatBotCreate(BaseModel):
    """Schema for creating a chatbot"""
    name: str = Field(..., min_length=1, max_length=255)
    document_ids: List[UUID] = Field(default_factory=list, description="Documents the chatbot answers from")
    system_prompt: Optional[str] = Field(None, description="Instructions prepended to every prompt")
    visibility: Literal["PUBLIC", "PRIVATE", "SHARED"] = "PRIVATE"
    llm_config_id: Optional[UUID] = None
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(1000, ge=1, le=32000)
    view_source_documents: bool = True


class ChatBotShareRequest(BaseModel):
    """Schema for sharing a chatbot with other users by email"""
    emails: List[str] = Field(..., min_length=1, description="Recipient email addresses")

    @field_validator("emails")
    @classmethod
    def strip_emails(cls, v: List[str]) -> List[str]:
        emails = [email.strip() for email in v if email and email.strip()]
        if not emails:
            raise ValueError("At least one email is required")
        return emails


class ChatBotResponse(BaseModel):
    """Schema for chatbot responses"""
    id: UUID
    user_id: UUID
    name: str
    document_ids: List[str] = Field(default_factory=list)
    system_prompt: Optional[str] = None
    visibility: str
    llm_config_id: Optional[UUID] = None
    temperature: float
    max_tokens: int
    view_source_documents: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ShareFailure(BaseModel):
    email: str
    reason: str


class ChatBotShareResponse(BaseModel):
    """Per-email outcome of a share request"""
    success: List[str] = Field(default_factory=list)
    failed: List[ShareFailure] = Field(default_factory=list)
    chatbot: ChatBotResponse


class QuotaUsageResponse(BaseModel):
    """Limits vs live counts for the active subscription"""
    chatbots: Dict
    documents: Dict
    chatbot_shares: Dict
    max_word_count_per_document: int
    is_public_chatbot_allowed: bool
    subscription_end_date: datetime
