"""
PublicConversation Model - Anonymous chat history on a public chatbot

Visitors are identified only by a client-held session id. Turns are
billed to the chatbot owner, who is recorded on the conversation.
"""

from sqlalchemy import (
    Column, String, Text, Integer, ForeignKey, JSON, DateTime, Uuid, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow, ensure_utc


class PublicConversation(Base):
    """
    Public conversation model

    Attributes:
        session_id: Anonymous visitor session
        chatbot_id: Public chatbot answering in this conversation
        chatbot_owner_id: Account charged for the conversation's usage
        title: Defaults to the chatbot name

    Relationships:
        messages: Ordered by position (insertion order)
    """

    __tablename__ = "public_conversations"
    __table_args__ = (Index("ix_public_conversation_session_chatbot", "session_id", "chatbot_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(String(255), nullable=False, index=True)
    chatbot_id = Column(Uuid, ForeignKey("chatbots.id", ondelete="CASCADE"), nullable=False)
    chatbot_owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(255))

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    chatbot = relationship("ChatBot")
    messages = relationship(
        "PublicConversationMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="PublicConversationMessage.position"
    )

    @property
    def last_message_at(self):
        if self.messages:
            return ensure_utc(self.messages[-1].created_at)
        return ensure_utc(self.updated_at)

    def __repr__(self):
        return f"<PublicConversation(id={self.id}, session_id={self.session_id}, chatbot_id={self.chatbot_id})>"


class PublicConversationMessage(Base):
    """One entry in a public conversation; same shape as ConversationMessage"""

    __tablename__ = "public_conversation_messages"
    __table_args__ = (UniqueConstraint("conversation_id", "position", name="uq_public_message_position"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        Uuid, ForeignKey("public_conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)

    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    chunk_ids = Column(JSON)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    conversation = relationship("PublicConversation", back_populates="messages")

    def to_dict(self) -> dict:
        data = {
            "id": str(self.id),
            "role": self.role,
            "content": self.content,
            "timestamp": self.created_at,
        }
        if self.chunk_ids:
            data["chunk_ids"] = list(self.chunk_ids)
        return data

    def __repr__(self):
        return f"<PublicConversationMessage(id={self.id}, role={self.role}, position={self.position})>"
