"""
ChatBot Model - A configured assistant over a set of documents
"""

from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, ForeignKey, DateTime, Table, Uuid,
    UniqueConstraint
)
from sqlalchemy.orm import relationship
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class ChatBotVisibility:
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    SHARED = "SHARED"


chatbot_documents = Table(
    "chatbot_documents",
    Base.metadata,
    Column("chatbot_id", Uuid, ForeignKey("chatbots.id", ondelete="CASCADE"), primary_key=True),
    Column("document_id", Uuid, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
)


class ChatBot(Base):
    """
    Chatbot model

    Attributes:
        user_id: Owner
        name: Display name, also the default conversation title
        system_prompt: Optional instructions prepended to every prompt
        visibility: PUBLIC, PRIVATE or SHARED
        llm_config_id: Generation model configuration
        temperature / max_tokens: Generation parameters
        view_source_documents: Whether chat clients may show sources

    Relationships:
        documents: Retrieval scope (many-to-many)
        shares: Explicit recipients (one-to-many)
        llm_config: Generation model configuration (many-to-one)
    """

    __tablename__ = "chatbots"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    system_prompt = Column(Text)
    visibility = Column(String(20), nullable=False, default=ChatBotVisibility.PRIVATE)
    llm_config_id = Column(Uuid, ForeignKey("llm_configs.id", ondelete="SET NULL"))
    temperature = Column(Float, nullable=False, default=0.7)
    max_tokens = Column(Integer, nullable=False, default=1000)
    view_source_documents = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="chatbots")
    llm_config = relationship("LLMConfig")
    documents = relationship("Document", secondary=chatbot_documents)
    shares = relationship("ChatBotShare", back_populates="chatbot", cascade="all, delete-orphan")

    @property
    def document_ids(self):
        return [str(document.id) for document in self.documents]

    def is_accessible_by(self, user_id) -> bool:
        """Owner, explicit recipient, or anyone for a public chatbot"""
        if self.user_id == user_id or self.visibility == ChatBotVisibility.PUBLIC:
            return True
        return any(share.user_id == user_id for share in self.shares)

    def __repr__(self):
        return f"<ChatBot(id={self.id}, name={self.name}, visibility={self.visibility})>"


class ChatBotShare(Base):
    """One share seat: a recipient of a chatbot"""

    __tablename__ = "chatbot_shares"
    __table_args__ = (UniqueConstraint("chatbot_id", "user_id", name="uq_chatbot_share_recipient"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    chatbot_id = Column(Uuid, ForeignKey("chatbots.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    chatbot = relationship("ChatBot", back_populates="shares")

    def __repr__(self):
        return f"<ChatBotShare(chatbot_id={self.chatbot_id}, email={self.email})>"
