"""
LLMConfig Model - A user's generation model credentials
"""

from sqlalchemy import Column, String, ForeignKey, DateTime, Uuid
import uuid

from botdesk.database import Base
from botdesk.utils.dates import utcnow


class LLMProvider:
    OPENAI = "OPENAI"
    OLLAMA = "OLLAMA"


class LLMConfig(Base):
    """
    Generation model configuration

    Attributes:
        provider: OPENAI or OLLAMA
        model_name: Provider model identifier (e.g. gpt-4o-mini, llama3)
        api_key: Required for OPENAI
        base_url: Required for OLLAMA
    """

    __tablename__ = "llm_configs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255))
    provider = Column(String(20), nullable=False)
    model_name = Column(String(255), nullable=False)
    api_key = Column(String(512))
    base_url = Column(String(512))

    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<LLMConfig(id={self.id}, provider={self.provider}, model={self.model_name})>"
