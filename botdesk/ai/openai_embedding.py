"""
OpenAI Embedding Service
Generate embeddings using OpenAI text-embedding-3-small
"""

from typing import List
from openai import AsyncOpenAI
import logging

from botdesk.ai.base import BaseEmbeddingService
from botdesk.ai.tokens import count_tokens
from botdesk.config import settings
from botdesk.core.exceptions import ConfigurationError
from botdesk.utils.retry import retry_on_api_error

logger = logging.getLogger(__name__)

BATCH_SIZE = 100


class OpenAIEmbeddingService(BaseEmbeddingService):
    """Generate embeddings using OpenAI API"""

    provider = "openai"

    def __init__(self, client: AsyncOpenAI = None):
        self.model = settings.EMBEDDING_MODEL
        self.dimensions = settings.EMBEDDING_DIMENSIONS
        self._client = client

    def get_client(self) -> AsyncOpenAI:
        """Lazily create the client so a missing key fails at use, not import"""
        if self._client is None:
            if not settings.OPENAI_API_KEY.strip():
                raise ConfigurationError(
                    "OPENAI_API_KEY is not configured. Please set it to use OpenAI embeddings."
                )
            self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        return self._client

    @retry_on_api_error()
    async def _embed_batch(self, batch: List[str]) -> List[List[float]]:
        response = await self.get_client().embeddings.create(
            model=self.model,
            input=batch,
            dimensions=self.dimensions
        )
        return [item.embedding for item in response.data]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for batch of texts

        Args:
            texts: List of text strings

        Returns:
            List of embedding vectors
        """
        all_embeddings = []

        for i in range(0, len(texts), BATCH_SIZE):
            batch = texts[i:i + BATCH_SIZE]
            all_embeddings.extend(await self._embed_batch(batch))

        logger.debug(f"Embedded {len(texts)} texts with {self.model}")
        return all_embeddings

    def count_tokens(self, text: str) -> int:
        return count_tokens(text, "gpt-3.5-turbo")

    def get_model_name(self) -> str:
        return self.model

    def get_provider_name(self) -> str:
        return self.provider

    def get_dimensions(self) -> int:
        return self.dimensions
