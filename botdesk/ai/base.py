"""
Abstract base classes for AI backends
Embedding and generation providers are swappable behind these interfaces
"""

from abc import ABC, abstractmethod
from typing import List

from langchain_core.language_models.chat_models import BaseChatModel


class BaseEmbeddingService(ABC):
    """Text -> vector backend with its own tokenizer for usage accounting"""

    @abstractmethod
    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Embed a batch of texts

        Args:
            texts: Texts to embed

        Returns:
            One vector per text, in input order
        """
        pass

    async def embed_query(self, text: str) -> List[float]:
        """Embed a single query text"""
        embeddings = await self.embed_documents([text])
        return embeddings[0]

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        pass

    @abstractmethod
    def get_dimensions(self) -> int:
        pass


class BaseModelService(ABC):
    """Prompt -> text backend keyed by a user's LLM configuration"""

    provider_name: str = ""

    @abstractmethod
    def get_model(self, llm_config, temperature: float, max_tokens: int) -> BaseChatModel:
        """
        Build a chat model for one request

        Args:
            llm_config: LLMConfig row (provider, model_name, api_key, base_url)
            temperature: Sampling temperature
            max_tokens: Completion token cap

        Returns:
            LangChain chat model

        Raises:
            BadRequestError: If the configuration is incomplete
        """
        pass

    @abstractmethod
    def count_tokens(self, text: str, model_name: str) -> int:
        pass

    def get_provider_name(self) -> str:
        return self.provider_name
