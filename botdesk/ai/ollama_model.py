"""
Ollama generation model service
ChatLiteLLM pointed at a user-supplied Ollama server
"""

from langchain_litellm import ChatLiteLLM
import logging

from botdesk.ai.base import BaseModelService
from botdesk.ai.tokens import count_tokens
from botdesk.config import settings
from botdesk.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)


def resolve_base_url(base_url: str) -> str:
    """
    Containers cannot reach the host's loopback; inside Docker a localhost
    URL is rewritten to host.docker.internal
    """
    base_url = base_url.rstrip("/")
    if settings.IS_DOCKER:
        base_url = base_url.replace("localhost", "host.docker.internal").replace("127.0.0.1", "host.docker.internal")
    return base_url


class OllamaModelService(BaseModelService):
    provider_name = "ollama"

    def get_model(self, llm_config, temperature: float, max_tokens: int) -> ChatLiteLLM:
        if not llm_config.base_url:
            raise BadRequestError("Ollama base URL is required (e.g., http://localhost:11434)")

        api_base = resolve_base_url(llm_config.base_url)

        litellm_kwargs = {
            "model": f"ollama/{llm_config.model_name}",
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": settings.LLM_TIMEOUT,
            "api_base": api_base,
        }

        logger.info(f"Creating Ollama model: {llm_config.model_name} at {api_base}")
        return ChatLiteLLM(**litellm_kwargs)

    def count_tokens(self, text: str, model_name: str) -> int:
        # Approximation with the gpt-4 encoding
        return count_tokens(text, "gpt-4")
