"""
Plan Model - Catalogue of subscription tiers
"""

from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime, Uuid
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class Plan(Base):
    """
    Subscription plan with resource limits

    Limits are copied into a UsageQuota when a subscription is created,
    so editing a plan never changes existing subscribers.
    """

    __tablename__ = "plans"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    price = Column(Numeric(10, 2), default=0)

    max_chatbot_count = Column(Integer, nullable=False, default=1)
    max_chatbot_shares = Column(Integer, nullable=False, default=0)
    max_document_count = Column(Integer, nullable=False, default=1)
    max_word_count_per_document = Column(Integer, nullable=False, default=1000)
    is_public_chatbot_allowed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    def __repr__(self):
        return f"<Plan(id={self.id}, name={self.name})>"
