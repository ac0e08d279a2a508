"""
Conversation Model - Chat history between a user and a chatbot
"""

from sqlalchemy import Column, String, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow, ensure_utc


class Conversation(Base):
    """
    Conversation model - append-only message log

    Attributes:
        id: Conversation UUID
        user_id: Conversation owner
        chatbot_id: Chatbot answering in this conversation
        title: Defaults to the chatbot name
        created_at / updated_at: Row timestamps

    Relationships:
        messages: Ordered by position (insertion order)

    Cascade Delete:
        - Deleting conversation deletes all messages
    """

    __tablename__ = "conversations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    chatbot_id = Column(Uuid, ForeignKey("chatbots.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255))

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, index=True)

    # Relationships
    chatbot = relationship("ChatBot")
    messages = relationship(
        "ConversationMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationMessage.position"
    )

    @property
    def last_message_at(self):
        if self.messages:
            return ensure_utc(self.messages[-1].created_at)
        return ensure_utc(self.updated_at)

    def __repr__(self):
        return f"<Conversation(id={self.id}, user_id={self.user_id}, title={self.title})>"
