"""
AI backend factories
Embedding backend chosen by configuration, generation backend by provider
"""

from functools import lru_cache
import logging

from botdesk.ai.base import BaseEmbeddingService, BaseModelService
from botdesk.ai.ollama_model import OllamaModelService
from botdesk.ai.openai_model import OpenAIModelService
from botdesk.config import settings
from botdesk.core.exceptions import BadRequestError
from botdesk.models.llm_config import LLMProvider

logger = logging.getLogger(__name__)

_MODEL_SERVICES = {
    LLMProvider.OPENAI: OpenAIModelService(),
    LLMProvider.OLLAMA: OllamaModelService(),
}


@lru_cache(maxsize=1)
def get_embedding_service() -> BaseEmbeddingService:
    """
    Get singleton embedding service

    USE_LOCAL_EMBEDDING selects the TEI container, otherwise OpenAI.
    """
    if settings.USE_LOCAL_EMBEDDING:
        from botdesk.ai.local_embedding import LocalEmbeddingService
        logger.info("Using local TEI embeddings")
        return LocalEmbeddingService()

    from botdesk.ai.openai_embedding import OpenAIEmbeddingService
    logger.info(f"Using OpenAI embeddings: {settings.EMBEDDING_MODEL}")
    return OpenAIEmbeddingService()


def get_model_service(provider: str) -> BaseModelService:
    """
    Resolve the generation backend for an LLM provider

    Raises:
        BadRequestError: If the provider is not supported
    """
    service = _MODEL_SERVICES.get((provider or "").upper())
    if service is None:
        raise BadRequestError(f"Unsupported LLM provider: {provider}")
    return service
