"""
Chatbot API endpoints
Creation and sharing, both quota-gated
"""

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from uuid import UUID

from botdesk.api.deps import get_current_user
from botdesk.database import get_db
from botdesk.middleware.quota import check_quota
from botdesk.models.user import User
from botdesk.schemas.chatbot import (
    ChatBotCreate,
    ChatBotResponse,
    ChatBotShareRequest,
    ChatBotShareResponse,
    QuotaUsageResponse,
)
from botdesk.services.chatbot_service import ChatBotService
from botdesk.services.quota_service import QuotaResource, QuotaService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chatbots", tags=["chatbots"])


@router.get("/quota", response_model=QuotaUsageResponse)
async def get_quota_usage(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Limits of the active subscription vs current usage"""
    return QuotaService(db).get_usage(current_user.id)


@router.post(
    "",
    response_model=ChatBotResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_quota(QuotaResource.CHATBOT))]
)
async def create_chatbot(
    data: ChatBotCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a chatbot over the caller's documents"""
    return ChatBotService(db).create_chatbot(current_user.id, data)


@router.post(
    "/{chatbot_id}/share",
    response_model=ChatBotShareResponse,
    dependencies=[Depends(check_quota(QuotaResource.CHATBOT_SHARE))]
)
async def share_chatbot(
    chatbot_id: UUID,
    data: ChatBotShareRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Share a chatbot with registered users by email

    Gated by the total share seats across all of the caller's chatbots.
    """
    return ChatBotService(db).share_chatbot(current_user.id, chatbot_id, data.emails)
