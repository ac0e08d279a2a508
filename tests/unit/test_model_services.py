"""
Unit tests for generation model services

Tests:
- Provider resolution (case-insensitive, unsupported providers)
- OpenAI adapter requires an API key
- Ollama adapter requires a base URL, rewrites localhost only in Docker
- Token counting fallback for unknown model names
"""

import pytest
from types import SimpleNamespace
from unittest.mock import patch

from botdesk.ai.factory import get_model_service
from botdesk.ai.ollama_model import OllamaModelService, resolve_base_url
from botdesk.ai.openai_model import OpenAIModelService
from botdesk.ai.tokens import count_tokens, get_encoding
from botdesk.core.exceptions import BadRequestError


def llm_config(**overrides):
    values = {"provider": "OPENAI", "model_name": "gpt-4o-mini", "api_key": "sk-test", "base_url": None}
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.unit
class TestModelFactory:
    def test_openai(self):
        assert isinstance(get_model_service("OPENAI"), OpenAIModelService)

    def test_provider_is_case_insensitive(self):
        assert isinstance(get_model_service("ollama"), OllamaModelService)

    def test_unsupported_provider(self):
        with pytest.raises(BadRequestError, match="Unsupported LLM provider: ANTHROPIC"):
            get_model_service("ANTHROPIC")

    def test_missing_provider(self):
        with pytest.raises(BadRequestError):
            get_model_service(None)


@pytest.mark.unit
class TestOpenAIModelService:
    """Test suite for the OpenAI adapter"""

    @patch('botdesk.ai.openai_model.ChatLiteLLM')
    def test_get_model(self, mock_chat):
        service = OpenAIModelService()
        service.get_model(llm_config(), temperature=0.3, max_tokens=500)

        kwargs = mock_chat.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 500
        assert kwargs["api_key"] == "sk-test"

    @patch('botdesk.ai.openai_model.ChatLiteLLM')
    def test_missing_api_key(self, mock_chat):
        with pytest.raises(BadRequestError, match="OpenAI API key is required"):
            OpenAIModelService().get_model(llm_config(api_key=None), 0.7, 100)
        mock_chat.assert_not_called()

    def test_provider_name(self):
        assert OpenAIModelService().get_provider_name() == "openai"


@pytest.mark.unit
class TestOllamaModelService:
    """Test suite for the Ollama adapter"""

    @patch('botdesk.ai.ollama_model.settings')
    @patch('botdesk.ai.ollama_model.ChatLiteLLM')
    def test_get_model(self, mock_chat, mock_settings):
        mock_settings.IS_DOCKER = False
        mock_settings.LLM_TIMEOUT = 60

        OllamaModelService().get_model(
            llm_config(provider="OLLAMA", model_name="llama3", api_key=None, base_url="http://localhost:11434/"),
            temperature=0.1,
            max_tokens=200,
        )

        kwargs = mock_chat.call_args.kwargs
        assert kwargs["model"] == "ollama/llama3"
        assert kwargs["api_base"] == "http://localhost:11434"

    @patch('botdesk.ai.ollama_model.ChatLiteLLM')
    def test_missing_base_url(self, mock_chat):
        with pytest.raises(BadRequestError):
            OllamaModelService().get_model(llm_config(provider="OLLAMA", base_url=None), 0.7, 100)
        mock_chat.assert_not_called()

    @patch('botdesk.ai.ollama_model.settings')
    def test_localhost_rewritten_in_docker(self, mock_settings):
        mock_settings.IS_DOCKER = True
        assert resolve_base_url("http://localhost:11434") == "http://host.docker.internal:11434"
        assert resolve_base_url("http://127.0.0.1:11434") == "http://host.docker.internal:11434"

    @patch('botdesk.ai.ollama_model.settings')
    def test_localhost_kept_outside_docker(self, mock_settings):
        mock_settings.IS_DOCKER = False
        assert resolve_base_url("http://localhost:11434") == "http://localhost:11434"


@pytest.mark.unit
class TestTokenCounting:
    def test_empty_text(self):
        assert count_tokens("") == 0

    @patch('botdesk.ai.tokens.tiktoken')
    def test_unknown_model_falls_back(self, mock_tiktoken):
        mock_tiktoken.encoding_for_model.side_effect = KeyError("unknown")
        mock_tiktoken.get_encoding.return_value.encode.return_value = [1, 2, 3]
        get_encoding.cache_clear()
        try:
            assert count_tokens("hello world", "llama3-unknown") == 3
            mock_tiktoken.get_encoding.assert_called_once_with("cl100k_base")
        finally:
            get_encoding.cache_clear()
