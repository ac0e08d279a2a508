"""
Public Chat Service - Anonymous conversations with PUBLIC chatbots

Visitors are identified by a session id chosen by the client; no account
is needed. Every turn runs through the same RAG pipeline as an
authenticated chat, and its usage is charged to the chatbot owner.
Sources are only returned when the chatbot allows viewing them.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from botdesk.ai.rag_service import RAGService, get_rag_service
from botdesk.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from botdesk.models.chatbot import ChatBot, ChatBotVisibility
from botdesk.models.public_conversation import PublicConversation, PublicConversationMessage
from botdesk.services.chat_service import append_turn, chatbot_summary

logger = logging.getLogger(__name__)


class PublicChatService:
    """Session-keyed conversations on public chatbots"""

    def __init__(self, db: Session, rag_service: Optional[RAGService] = None):
        self.db = db
        self.rag_service = rag_service or get_rag_service()

    def get_chatbot(self, chatbot_id: UUID) -> ChatBot:
        """Public chatbot by id; private and shared chatbots are not found"""
        chatbot = (
            self.db.query(ChatBot)
            .filter(ChatBot.id == chatbot_id, ChatBot.visibility == ChatBotVisibility.PUBLIC)
            .first()
        )
        if chatbot is None:
            raise NotFoundError("Public chatbot not found")
        return chatbot

    def _get_public_chatbot(self, chatbot_id: UUID) -> ChatBot:
        chatbot = self.db.get(ChatBot, chatbot_id)
        if chatbot is None:
            raise NotFoundError("Chatbot not found")
        if chatbot.visibility != ChatBotVisibility.PUBLIC:
            raise ForbiddenError("This chatbot is not publicly accessible")
        return chatbot

    async def start_conversation(self, session_id: str, chatbot_id: UUID) -> Dict[str, Any]:
        """
        Start a conversation, or resume the session's existing one

        Returns:
            {"conversation_id", "title", "chatbot", "messages"}

        Raises:
            NotFoundError: Chatbot does not exist
            ForbiddenError: Chatbot is not PUBLIC
        """
        chatbot = self._get_public_chatbot(chatbot_id)

        conversation = (
            self.db.query(PublicConversation)
            .filter(
                PublicConversation.session_id == session_id,
                PublicConversation.chatbot_id == chatbot.id
            )
            .first()
        )
        if conversation is None:
            conversation = PublicConversation(
                session_id=session_id,
                chatbot_id=chatbot.id,
                chatbot_owner_id=chatbot.user_id,
                title=chatbot.name,
            )
            self.db.add(conversation)
            self.db.commit()
            self.db.refresh(conversation)
            logger.info(f"Started public conversation {conversation.id} with chatbot {chatbot_id}")

        messages = [message.to_dict() for message in conversation.messages]
        return {
            "conversation_id": conversation.id,
            "title": conversation.title,
            "chatbot": chatbot_summary(chatbot),
            "messages": await self._visible_history(chatbot, messages),
        }

    async def _visible_history(self, chatbot: ChatBot, messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not chatbot.view_source_documents:
            return [{k: v for k, v in message.items() if k != "chunk_ids"} for message in messages]
        return await self.rag_service.hydrate_messages(messages, chatbot.document_ids)

    async def send_message(self, session_id: str, conversation_id: UUID, message: str) -> Dict[str, Any]:
        """
        Run one anonymous chat turn

        Same transaction and fail-fast rules as an authenticated turn.
        Usage is charged to the chatbot owner.

        Returns:
            {"response", "sources", "conversation_id"}; sources is empty
            when the chatbot hides its source documents
        """
        try:
            conversation = (
                self.db.query(PublicConversation)
                .filter(PublicConversation.id == conversation_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if conversation is None:
                raise NotFoundError("Conversation not found")
            if conversation.session_id != session_id:
                raise ForbiddenError("Access denied")

            chatbot = conversation.chatbot
            if chatbot is None:
                raise NotFoundError("Chatbot not found")
            if chatbot.visibility != ChatBotVisibility.PUBLIC:
                raise ForbiddenError("This chatbot is not publicly accessible")

            llm_config = chatbot.llm_config
            if llm_config is None:
                raise BadRequestError("Chatbot does not have a valid LLM configuration")

            document_ids = chatbot.document_ids
            if not document_ids:
                raise BadRequestError("Chatbot must have at least one document")

            history = [{"role": m.role, "content": m.content} for m in conversation.messages]

            result = await self.rag_service.chat(
                question=message,
                history=history,
                document_filter=document_ids,
                system_prompt=chatbot.system_prompt,
                user_id=chatbot.user_id,
                llm_config=llm_config,
                temperature=chatbot.temperature,
                max_tokens=chatbot.max_tokens,
                session=self.db,
            )

            append_turn(conversation, PublicConversationMessage, message, result)
            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Public chat turn stored in conversation {conversation_id}")
        return {
            "response": result["response"],
            "sources": result["sources"] if chatbot.view_source_documents else [],
            "conversation_id": conversation_id,
        }
