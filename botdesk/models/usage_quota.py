"""
UsageQuota Model - Per-subscription snapshot of plan limits
"""

from sqlalchemy import Column, Integer, Boolean, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class UsageQuota(Base):
    """
    Quota snapshot owned by exactly one subscription

    Attributes:
        subscription_id: Owning subscription (unique)
        max_chatbot_count: Owned chatbot limit
        max_chatbot_shares: Total share seats across all owned chatbots
        max_document_count: Owned document limit
        max_word_count_per_document: Nominal word cap per document
        is_public_chatbot_allowed: Whether chatbots may be PUBLIC
    """

    __tablename__ = "usage_quotas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subscription_id = Column(
        Uuid, ForeignKey("subscriptions.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    max_chatbot_count = Column(Integer, nullable=False)
    max_chatbot_shares = Column(Integer, nullable=False)
    max_document_count = Column(Integer, nullable=False)
    max_word_count_per_document = Column(Integer, nullable=False)
    is_public_chatbot_allowed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    subscription = relationship("Subscription", back_populates="quota")

    @classmethod
    def from_plan(cls, plan) -> "UsageQuota":
        """Copy the plan's current limits into a new snapshot"""
        return cls(
            max_chatbot_count=plan.max_chatbot_count,
            max_chatbot_shares=plan.max_chatbot_shares,
            max_document_count=plan.max_document_count,
            max_word_count_per_document=plan.max_word_count_per_document,
            is_public_chatbot_allowed=plan.is_public_chatbot_allowed,
        )

    def __repr__(self):
        return f"<UsageQuota(id={self.id}, subscription_id={self.subscription_id})>"
