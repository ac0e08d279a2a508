"""
OpenAI generation model service
ChatLiteLLM bound to the caller's own OpenAI key
"""

from langchain_litellm import ChatLiteLLM
import logging

from botdesk.ai.base import BaseModelService
from botdesk.ai.tokens import count_tokens
from botdesk.config import settings
from botdesk.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)


class OpenAIModelService(BaseModelService):
    provider_name = "openai"

    def get_model(self, llm_config, temperature: float, max_tokens: int) -> ChatLiteLLM:
        if not llm_config.api_key:
            raise BadRequestError("OpenAI API key is required")

        litellm_kwargs = {
            "model": f"openai/{llm_config.model_name}",
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": settings.LLM_TIMEOUT,
            "api_key": llm_config.api_key,
        }

        logger.info(f"Creating OpenAI model: {llm_config.model_name}, temp={temperature}, max_tokens={max_tokens}")
        return ChatLiteLLM(**litellm_kwargs)

    def count_tokens(self, text: str, model_name: str) -> int:
        return count_tokens(text, model_name)
