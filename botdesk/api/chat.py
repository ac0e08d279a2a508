"""
Conversation API endpoints
Start conversations, run chat turns, read history with sources
"""

import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from botdesk.api.deps import get_current_user, get_rag
from botdesk.database import get_db
from botdesk.models.user import User
from botdesk.schemas.chat import (
    ChatRequest,
    ChatResponse,
    ConversationCreate,
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationResponse,
    ConversationTitleUpdate,
)
from botdesk.services.chat_service import ChatService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/conversations", tags=["chat"])


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def start_conversation(
    data: ConversationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rag_service=Depends(get_rag)
):
    """Start an empty conversation with an accessible chatbot"""
    return ChatService(db, rag_service).start_new_conversation(current_user.id, data.chatbot_id)


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rag_service=Depends(get_rag)
):
    """List conversations, most recently active first"""
    return ChatService(db, rag_service).get_all_conversations(current_user.id, page, limit, search)


@router.get("/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rag_service=Depends(get_rag)
):
    """Get a conversation with assistant sources resolved"""
    return await ChatService(db, rag_service).get_conversation(current_user.id, conversation_id)


@router.post("/{conversation_id}/messages", response_model=ChatResponse)
async def chat(
    conversation_id: UUID,
    request: ChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rag_service=Depends(get_rag)
):
    """
    Ask a question in a conversation

    Answers from the chatbot's documents; stores the question and the
    answer (with chunk references) atomically.
    """
    return await ChatService(db, rag_service).chat_with_conversation_id(
        current_user.id, conversation_id, request.message
    )


@router.patch("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation_title(
    conversation_id: UUID,
    data: ConversationTitleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rag_service=Depends(get_rag)
):
    """Rename a conversation"""
    return ChatService(db, rag_service).update_conversation_title(current_user.id, conversation_id, data.title)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    rag_service=Depends(get_rag)
):
    """Delete a conversation and its messages"""
    ChatService(db, rag_service).delete_conversation(current_user.id, conversation_id)
