"""
Local Embedding Service
Text Embeddings Inference (TEI) container reached through its
OpenAI-compatible /v1 endpoint
"""

from typing import List
from openai import AsyncOpenAI
import logging

from botdesk.ai.base import BaseEmbeddingService
from botdesk.ai.tokens import count_tokens
from botdesk.config import settings
from botdesk.utils.retry import retry_on_api_error

logger = logging.getLogger(__name__)


class LocalEmbeddingService(BaseEmbeddingService):
    """Embeddings from a self-hosted TEI server (BAAI/bge-base-en-v1.5 by default)"""

    provider = "docker-tei"

    def __init__(self, client: AsyncOpenAI = None):
        self.model = settings.EMBEDDING_LOCAL_MODEL
        self.dimensions = settings.EMBEDDING_LOCAL_DIMENSIONS
        self.service_url = settings.EMBEDDING_SERVICE_URL.rstrip("/")
        # TEI ignores the key but the client requires one
        self.client = client or AsyncOpenAI(base_url=f"{self.service_url}/v1", api_key="tei")
        logger.info(f"Initialized TEI embedding service at {self.service_url} for model {self.model}")

    @retry_on_api_error()
    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        response = await self.client.embeddings.create(model=self.model, input=texts)
        return [item.embedding for item in response.data]

    def count_tokens(self, text: str) -> int:
        # Approximation: TEI models use their own tokenizer
        return count_tokens(text, "gpt-3.5-turbo")

    def get_model_name(self) -> str:
        return self.model

    def get_provider_name(self) -> str:
        return self.provider

    def get_dimensions(self) -> int:
        return self.dimensions
