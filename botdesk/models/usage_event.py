"""
UsageEvent Model - Append-only token consumption ledger
"""

from sqlalchemy import Column, String, Integer, DateTime, Uuid, event
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class UsageEventType:
    LLM_INPUT = "LLM_INPUT"
    LLM_OUTPUT = "LLM_OUTPUT"
    CREATE_DOCUMENT_INDEX = "CREATE_DOCUMENT_INDEX"
    QUERY_DOCUMENT = "QUERY_DOCUMENT"


class UsageEvent(Base):
    """
    Usage event - one immutable ledger entry

    Attributes:
        user_id: Account charged
        model_name / provider: Model that consumed the tokens
        token_count: Tokens consumed
        event_type: LLM_INPUT, LLM_OUTPUT, CREATE_DOCUMENT_INDEX or QUERY_DOCUMENT
    """

    __tablename__ = "usage_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Not a foreign key: the ledger outlives the accounts it bills
    user_id = Column(Uuid, nullable=False, index=True)
    model_name = Column(String(255), nullable=False)
    provider = Column(String(100), nullable=False)
    token_count = Column(Integer, nullable=False)
    event_type = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    def __repr__(self):
        return f"<UsageEvent(user_id={self.user_id}, type={self.event_type}, tokens={self.token_count})>"


@event.listens_for(UsageEvent, "before_update")
def _reject_usage_event_update(mapper, connection, target):
    raise ValueError("Usage events are append-only")
