"""
ConversationMessage Model - One entry in a conversation log
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey, JSON, DateTime, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class ConversationMessage(Base):
    """
    Conversation message

    Attributes:
        role: 'user', 'assistant' or 'system'
        content: Message text
        chunk_ids: Chunk references used for the answer (assistant only);
            source text is resolved at read time, never stored here
        position: Insertion order within the conversation
        created_at: Message timestamp, never earlier than its predecessor
    """

    __tablename__ = "conversation_messages"
    __table_args__ = (UniqueConstraint("conversation_id", "position", name="uq_message_position"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        Uuid, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)

    role = Column(String(20), nullable=False)  # user, assistant, system
    content = Column(Text, nullable=False)
    chunk_ids = Column(JSON)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")

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
        return f"<ConversationMessage(id={self.id}, role={self.role}, position={self.position})>"
