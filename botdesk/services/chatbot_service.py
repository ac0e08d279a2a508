"""
Chatbot Service

Chatbot creation and sharing. Both run after a quota admission on the
same session and commit it together with their own writes.
"""

from typing import Any, Dict, List
from uuid import UUID
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from botdesk.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from botdesk.models.chatbot import ChatBot, ChatBotShare, ChatBotVisibility
from botdesk.models.document import Document
from botdesk.models.llm_config import LLMConfig
from botdesk.models.user import User
from botdesk.schemas.chatbot import ChatBotCreate
from botdesk.services.quota_service import normalize_emails

logger = logging.getLogger(__name__)


class ChatBotService:
    def __init__(self, db: Session):
        self.db = db

    def create_chatbot(self, user_id: UUID, data: ChatBotCreate) -> ChatBot:
        """
        Create a chatbot over the user's own documents

        Raises:
            BadRequestError: A document or the LLM config is missing or
                belongs to someone else
        """
        try:
            document_ids = list(dict.fromkeys(data.document_ids))
            documents: List[Document] = []
            if document_ids:
                documents = (
                    self.db.query(Document)
                    .filter(Document.id.in_(document_ids), Document.user_id == user_id)
                    .all()
                )
                if len(documents) != len(document_ids):
                    raise BadRequestError(
                        "Some of the selected documents could not be found or do not belong to user"
                    )

            if data.llm_config_id is not None:
                llm_config = (
                    self.db.query(LLMConfig)
                    .filter(LLMConfig.id == data.llm_config_id, LLMConfig.user_id == user_id)
                    .first()
                )
                if llm_config is None:
                    raise BadRequestError("The selected LLM configuration could not be found")

            chatbot = ChatBot(
                user_id=user_id,
                name=data.name,
                system_prompt=data.system_prompt or "",
                visibility=data.visibility,
                llm_config_id=data.llm_config_id,
                temperature=data.temperature,
                max_tokens=data.max_tokens,
                view_source_documents=data.view_source_documents,
            )
            chatbot.documents = documents

            self.db.add(chatbot)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(chatbot)
        logger.info(f"Created chatbot {chatbot.id} for user {user_id}")
        return chatbot

    def share_chatbot(self, user_id: UUID, chatbot_id: UUID, emails: List[str]) -> Dict[str, Any]:
        """
        Share a chatbot with registered users

        Unknown addresses and the owner are reported as failed; existing
        recipients succeed without taking a new seat. A PRIVATE chatbot
        becomes SHARED.

        Returns:
            {"success": [emails], "failed": [{"email", "reason"}], "chatbot": ChatBot}
        """
        try:
            chatbot = self.db.get(ChatBot, chatbot_id)
            if chatbot is None:
                raise NotFoundError("ChatBot not found")
            if chatbot.user_id != user_id:
                raise ForbiddenError("Only the owner can share this chatbot")

            requested = normalize_emails(emails)
            users = self.db.query(User).filter(func.lower(User.email).in_(requested)).all() if requested else []
            users_by_email = {user.email.lower(): user for user in users}
            existing = {share.user_id for share in chatbot.shares}

            results = {"success": [], "failed": []}
            for email in requested:
                recipient = users_by_email.get(email)
                if recipient is None:
                    results["failed"].append({"email": email, "reason": "User not found"})
                    continue
                if recipient.id == chatbot.user_id:
                    results["failed"].append({"email": email, "reason": "Cannot share with owner"})
                    continue

                if recipient.id not in existing:
                    chatbot.shares.append(ChatBotShare(user_id=recipient.id, email=recipient.email))
                    existing.add(recipient.id)
                results["success"].append(email)

            if results["success"] and chatbot.visibility == ChatBotVisibility.PRIVATE:
                chatbot.visibility = ChatBotVisibility.SHARED

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(chatbot)
        logger.info(
            f"Shared chatbot {chatbot_id}: {len(results['success'])} ok, {len(results['failed'])} failed"
        )
        results["chatbot"] = chatbot
        return results
