"""
Subscription Model - A user's time-bounded plan membership
"""

from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class SubscriptionStatus:
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Subscription(Base):
    """
    Subscription model

    Attributes:
        user_id: Subscriber
        plan_id: Plan the quota snapshot was copied from
        status: active, expired or cancelled
        start_date / end_date: Validity window
        admission_version: Bumped by every quota admission check; the
            write takes the row lock that serializes admissions per user

    Relationships:
        quota: Limit snapshot (one-to-one)
    """

    __tablename__ = "subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Uuid, ForeignKey("plans.id", ondelete="SET NULL"))

    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    end_date = Column(DateTime(timezone=True), nullable=False)
    admission_version = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    user = relationship("User", back_populates="subscriptions")
    plan = relationship("Plan")
    quota = relationship(
        "UsageQuota",
        back_populates="subscription",
        uselist=False,
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Subscription(id={self.id}, user_id={self.user_id}, status={self.status})>"
