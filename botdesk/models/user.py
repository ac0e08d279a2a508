"""
User Model - Tenant identity
Authentication happens upstream; this row anchors ownership
"""

from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class User(Base):
    """
    User model for resource ownership

    Attributes:
        id: Unique user identifier (UUID)
        email: User email (unique, used to resolve share recipients)
        name: Display name
        created_at: Account creation timestamp

    Relationships:
        subscriptions: User's subscriptions (one-to-many)
        chatbots: Owned chatbots (one-to-many)
        documents: Owned documents (one-to-many)
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255))
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    subscriptions = relationship("Subscription", back_populates="user", cascade="all, delete-orphan")
    chatbots = relationship("ChatBot", back_populates="user", cascade="all, delete-orphan")
    documents = relationship("Document", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
