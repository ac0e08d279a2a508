"""
Public chat API endpoints
Anonymous, session-keyed conversations with PUBLIC chatbots (no X-User-Id)
"""

import logging
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from uuid import UUID

from botdesk.api.deps import get_rag
from botdesk.database import get_db
from botdesk.schemas.chat import (
    ChatRequest,
    ChatResponse,
    PublicChatBotResponse,
    PublicConversationStartResponse,
)
from botdesk.services.public_chat_service import PublicChatService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/public/chat", tags=["public chat"])


@router.get("/{chatbot_id}", response_model=PublicChatBotResponse)
async def get_public_chatbot(
    chatbot_id: UUID,
    db: Session = Depends(get_db),
    rag_service=Depends(get_rag)
):
    """Get a public chatbot's display details"""
    return PublicChatService(db, rag_service).get_chatbot(chatbot_id)


@router.post("/{session_id}/{chatbot_id}/start", response_model=PublicConversationStartResponse)
async def start_public_conversation(
    chatbot_id: UUID,
    session_id: str = Path(..., min_length=1, max_length=255, description="Client-held visitor session id"),
    db: Session = Depends(get_db),
    rag_service=Depends(get_rag)
):
    """Start a conversation, or resume this session's existing one"""
    return await PublicChatService(db, rag_service).start_conversation(session_id, chatbot_id)


@router.post("/{session_id}/{conversation_id}/message", response_model=ChatResponse)
async def send_public_message(
    conversation_id: UUID,
    request: ChatRequest,
    session_id: str = Path(..., min_length=1, max_length=255, description="Client-held visitor session id"),
    db: Session = Depends(get_db),
    rag_service=Depends(get_rag)
):
    """
    Ask a question in a public conversation

    Usage is charged to the chatbot owner. Sources are empty when the
    chatbot hides its source documents.
    """
    return await PublicChatService(db, rag_service).send_message(
        session_id, conversation_id, request.message
    )
