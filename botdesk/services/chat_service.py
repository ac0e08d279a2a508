"""
Chat Service - Conversation orchestration

Owns conversation state: authorization, chat turns, message persistence
and source hydration. A chat turn runs in one transaction: the two new
messages and the turn's usage events commit together or not at all.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from botdesk.ai.rag_service import RAGService, get_rag_service
from botdesk.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from botdesk.models.chatbot import ChatBot
from botdesk.models.conversation import Conversation
from botdesk.models.conversation_message import ConversationMessage
from botdesk.utils.dates import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class ChatService:
    """Conversation orchestration on top of the RAG service"""

    def __init__(self, db: Session, rag_service: Optional[RAGService] = None):
        self.db = db
        self.rag_service = rag_service or get_rag_service()

    def start_new_conversation(self, user_id: UUID, chatbot_id: UUID) -> Conversation:
        """
        Create an empty conversation titled after the chatbot

        Raises:
            NotFoundError: Chatbot does not exist
            ForbiddenError: Caller is not owner, recipient, and chatbot is not public
        """
        chatbot = self.db.get(ChatBot, chatbot_id)
        if chatbot is None:
            raise NotFoundError("Chatbot not found")
        if not chatbot.is_accessible_by(user_id):
            raise ForbiddenError("Access denied to this chatbot")

        conversation = Conversation(user_id=user_id, chatbot_id=chatbot.id, title=chatbot.name)
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)

        logger.info(f"Started conversation {conversation.id} with chatbot {chatbot_id}")
        return conversation

    def conversation_query(self, conversation_id: UUID, for_update: bool = False):
        query = self.db.query(Conversation).filter(Conversation.id == conversation_id)
        if for_update:
            # Row lock: concurrent turns on one conversation append in sequence
            query = query.with_for_update().populate_existing()
        return query

    def _get_owned_conversation(
        self,
        user_id: UUID,
        conversation_id: UUID,
        for_update: bool = False
    ) -> Conversation:
        # Someone else's conversation is reported exactly like a missing one
        conversation = self.conversation_query(conversation_id, for_update).first()
        if conversation is None or conversation.user_id != user_id:
            raise NotFoundError("Conversation not found")
        return conversation

    async def chat_with_conversation_id(
        self,
        user_id: UUID,
        conversation_id: UUID,
        message: str
    ) -> Dict[str, Any]:
        """
        Run one chat turn

        The chatbot's model config and documents are checked before any
        retrieval or generation, so a rejected turn records no usage.

        Returns:
            {"response", "sources", "conversation_id"}
        """
        try:
            conversation = self._get_owned_conversation(user_id, conversation_id, for_update=True)

            chatbot = conversation.chatbot
            if chatbot is None:
                raise NotFoundError("Chatbot not found")
            if not chatbot.is_accessible_by(user_id):
                raise ForbiddenError("Access denied to this chatbot")

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
                user_id=user_id,
                llm_config=llm_config,
                temperature=chatbot.temperature,
                max_tokens=chatbot.max_tokens,
                session=self.db,
            )

            append_turn(conversation, ConversationMessage, message, result)
            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Chat turn stored in conversation {conversation_id} ({len(result['sources'])} sources)")
        return {
            "response": result["response"],
            "sources": result["sources"],
            "conversation_id": conversation_id,
        }

    def get_all_conversations(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        """Paginated conversations, most recently updated first"""
        query = self.db.query(Conversation).filter(Conversation.user_id == user_id)
        if search:
            query = query.filter(Conversation.title.ilike(f"%{search}%"))

        total = query.count()
        conversations = (
            query.order_by(Conversation.updated_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        items = [
            {
                "id": conversation.id,
                "title": conversation.title,
                "chatbot": chatbot_summary(conversation.chatbot),
                "message_count": len(conversation.messages),
                "last_message_at": conversation.last_message_at,
            }
            for conversation in conversations
        ]

        return {
            "data": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": (total + limit - 1) // limit
            }
        }

    async def get_conversation(self, user_id: UUID, conversation_id: UUID) -> Dict[str, Any]:
        """Conversation with assistant sources resolved from the vector store"""
        conversation = self._get_owned_conversation(user_id, conversation_id)

        # Sources only resolve inside the documents the chatbot answers from
        chatbot = conversation.chatbot
        document_scope = chatbot.document_ids if chatbot is not None else []

        messages = [message.to_dict() for message in conversation.messages]
        hydrated = await self.rag_service.hydrate_messages(messages, document_scope)

        return {
            "id": conversation.id,
            "title": conversation.title,
            "chatbot": chatbot_summary(conversation.chatbot),
            "messages": hydrated,
            "last_message_at": conversation.last_message_at,
        }

    def update_conversation_title(self, user_id: UUID, conversation_id: UUID, title: str) -> Conversation:
        conversation = self._get_owned_conversation(user_id, conversation_id)
        conversation.title = title
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def delete_conversation(self, user_id: UUID, conversation_id: UUID) -> None:
        conversation = self._get_owned_conversation(user_id, conversation_id)
        self.db.delete(conversation)
        self.db.commit()
        logger.info(f"Deleted conversation {conversation_id}")


def append_turn(conversation, message_cls, question: str, result: Dict[str, Any]) -> None:
    """
    Append the user question and the assistant answer, in that order

    Works for both conversation kinds; message_cls is the conversation's
    message model.
    """
    messages = conversation.messages
    position = len(messages)

    # Timestamps never go backwards, even if the clock does
    user_ts = utcnow()
    if messages:
        user_ts = max(user_ts, ensure_utc(messages[-1].created_at))
    assistant_ts = max(utcnow(), user_ts)

    messages.append(message_cls(
        position=position,
        role="user",
        content=question,
        created_at=user_ts,
    ))
    messages.append(message_cls(
        position=position + 1,
        role="assistant",
        content=result["response"],
        chunk_ids=[source["chunk_id"] for source in result["sources"]],
        created_at=assistant_ts,
    ))
    conversation.updated_at = assistant_ts


def chatbot_summary(chatbot: Optional[ChatBot]) -> Optional[Dict[str, Any]]:
    if chatbot is None:
        return None
    return {"id": chatbot.id, "name": chatbot.name}
