"""Tests for the generation providers, factory and manager."""

import asyncio
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import openai
import pytest
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

from cmdgen.llm import config
from cmdgen.llm.manager import LLMManager
from cmdgen.llm.provider_factory import LLMType, MissingCredentialError, ProviderFactory
from cmdgen.llm.providers import AnthropicProvider, GeminiProvider, GroqProvider
from cmdgen.llm.types import (
    FailureKind,
    GenerationFailure,
    GenerationSuccess,
    ModelParameters,
    Prompt,
)

PROMPT = Prompt(system="system text", user="Request: list files")


def anthropic_message(*blocks):
    return SimpleNamespace(content=[SimpleNamespace(**b) for b in blocks])


class TestAnthropicProvider:

    def _provider(self, create):
        provider = AnthropicProvider(api_key="k", model="claude-test")
        provider.client = MagicMock()
        provider.client.messages.create = create
        return provider

    def test_success_trims_first_text_block(self):
        create = AsyncMock(return_value=anthropic_message(
            {"type": "text", "text": "  ls -la\n"}, {"type": "text", "text": "ignored"}
        ))
        result = asyncio.run(self._provider(create).generate(PROMPT, ModelParameters(max_tokens=256)))

        assert result == GenerationSuccess("ls -la")
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 256
        assert kwargs["system"] == "system text"
        assert kwargs["messages"] == [{"role": "user", "content": "Request: list files"}]
        assert "temperature" not in kwargs

    def test_blank_text_is_empty_response(self):
        create = AsyncMock(return_value=anthropic_message({"type": "text", "text": "  \n"}))
        result = asyncio.run(self._provider(create).generate(PROMPT))
        assert isinstance(result, GenerationFailure)
        assert result.kind is FailureKind.EMPTY_RESPONSE

    def test_non_text_first_block_is_empty_response(self):
        create = AsyncMock(return_value=anthropic_message({"type": "tool_use", "text": None}))
        result = asyncio.run(self._provider(create).generate(PROMPT))
        assert result.kind is FailureKind.EMPTY_RESPONSE

    def test_api_error_is_transport_failure(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        create = AsyncMock(side_effect=anthropic.APIConnectionError(request=request))
        result = asyncio.run(self._provider(create).generate(PROMPT))
        assert result.kind is FailureKind.TRANSPORT

    def test_requires_initialize(self):
        with pytest.raises(RuntimeError):
            asyncio.run(AnthropicProvider(api_key="k").generate(PROMPT))


class TestGroqProvider:

    def _provider(self, create):
        provider = GroqProvider(api_key="k", model="llama-test")
        provider.client = MagicMock()
        provider.client.chat.completions.create = create
        return provider

    def test_success(self):
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="du -sh * | sort -h"))])
        create = AsyncMock(return_value=response)
        result = asyncio.run(self._provider(create).generate(PROMPT, ModelParameters(temperature=0.2)))

        assert result == GenerationSuccess("du -sh * | sort -h")
        kwargs = create.call_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "system text"}
        assert kwargs["temperature"] == 0.2

    def test_none_content_is_empty_response(self):
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None))])
        result = asyncio.run(self._provider(AsyncMock(return_value=response)).generate(PROMPT))
        assert result.kind is FailureKind.EMPTY_RESPONSE

    def test_api_error_is_transport_failure(self):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        create = AsyncMock(side_effect=openai.APITimeoutError(request=request))
        result = asyncio.run(self._provider(create).generate(PROMPT))
        assert result.kind is FailureKind.TRANSPORT


class TestGeminiProvider:

    def _provider(self, generate_content_async):
        provider = GeminiProvider(api_key="k", model="gemini-test")
        model = MagicMock()
        model.generate_content_async = generate_content_async
        provider.client = MagicMock()
        provider.client.GenerativeModel.return_value = model
        return provider

    def test_success_uses_system_instruction(self):
        part = SimpleNamespace(text="lsof -ti:3000 | xargs kill -9\n")
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
        generate = AsyncMock(return_value=response)
        provider = self._provider(generate)

        result = asyncio.run(provider.generate(PROMPT, ModelParameters(max_tokens=128)))

        assert result == GenerationSuccess("lsof -ti:3000 | xargs kill -9")
        provider.client.GenerativeModel.assert_called_once_with(
            model_name="gemini-test", system_instruction="system text"
        )
        assert generate.call_args.args[0] == "Request: list files"
        assert generate.call_args.kwargs["generation_config"] == {"max_output_tokens": 128}

    def test_blocked_response_is_empty_response(self):
        response = SimpleNamespace(candidates=[], prompt_feedback="blocked")
        result = asyncio.run(self._provider(AsyncMock(return_value=response)).generate(PROMPT))
        assert result.kind is FailureKind.EMPTY_RESPONSE

    def test_api_error_is_transport_failure(self):
        generate = AsyncMock(side_effect=google_exceptions.ResourceExhausted("quota exceeded"))
        result = asyncio.run(self._provider(generate).generate(PROMPT))
        assert result.kind is FailureKind.TRANSPORT
        assert "quota exceeded" in result.message

    def test_missing_credentials_is_transport_failure(self):
        generate = AsyncMock(side_effect=auth_exceptions.DefaultCredentialsError("no credentials found"))
        result = asyncio.run(self._provider(generate).generate(PROMPT))
        assert result.kind is FailureKind.TRANSPORT
        assert "no credentials found" in result.message

    def test_client_side_rejection_is_transport_failure(self):
        generate = AsyncMock(side_effect=ValueError("invalid generation_config"))
        result = asyncio.run(self._provider(generate).generate(PROMPT))
        assert result.kind is FailureKind.TRANSPORT


class TestProviderFactory:

    def test_creates_each_type(self):
        assert isinstance(ProviderFactory.create_provider(LLMType.CLAUDE_HAIKU, "k", "m"), AnthropicProvider)
        assert isinstance(ProviderFactory.create_provider(LLMType.GEMINI_FLASH_LITE, "k", "m"), GeminiProvider)
        assert isinstance(ProviderFactory.create_provider("groq", "k", "m"), GroqProvider)

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            ProviderFactory.create_provider("openai", "k", "m")

    def test_configured_type_defaults_to_claude(self):
        assert ProviderFactory.configured_type() is LLMType.CLAUDE_HAIKU

    def test_missing_credential(self):
        with patch.object(config, "GOOGLE_API_KEY", None):
            with pytest.raises(MissingCredentialError) as exc:
                ProviderFactory.create_configured_provider(LLMType.GEMINI_FLASH_LITE)
        assert exc.value.env_var == "GOOGLE_API_KEY"

    def test_configured_provider_uses_env_model(self):
        with patch.object(config, "ANTHROPIC_API_KEY", "secret"), \
                patch.object(config, "ANTHROPIC_MODEL", "claude-custom"):
            provider = ProviderFactory.create_configured_provider(LLMType.CLAUDE_HAIKU)
        assert provider.api_key == "secret"
        assert provider.model == "claude-custom"


class TestLLMManager:

    def test_missing_credential_never_builds_client(self):
        with patch.object(config, "ANTHROPIC_API_KEY", None), \
                patch("cmdgen.llm.providers.anthropic_provider.AsyncAnthropic") as client_cls:
            result = asyncio.run(LLMManager(LLMType.CLAUDE_HAIKU).generate(PROMPT))

        assert result.kind is FailureKind.MISSING_CREDENTIAL
        client_cls.assert_not_called()

    def test_generates_and_cleans_up(self):
        provider = MagicMock()
        provider.initialize = AsyncMock(return_value=True)
        provider.generate = AsyncMock(return_value=GenerationSuccess("ls"))
        provider.cleanup = AsyncMock()
        factory = MagicMock()
        factory.create_configured_provider.return_value = provider

        manager = LLMManager(LLMType.GROQ, params=ModelParameters(max_tokens=64), factory=factory)
        result = asyncio.run(manager.generate(PROMPT))

        assert result == GenerationSuccess("ls")
        factory.create_configured_provider.assert_called_once_with(LLMType.GROQ)
        provider.generate.assert_awaited_once_with(PROMPT, ModelParameters(max_tokens=64))
        provider.cleanup.assert_awaited_once()

    def test_cleanup_runs_on_cancellation(self):
        provider = MagicMock()
        provider.initialize = AsyncMock(return_value=True)
        provider.generate = AsyncMock(side_effect=asyncio.CancelledError)
        provider.cleanup = AsyncMock()
        factory = MagicMock()
        factory.create_configured_provider.return_value = provider

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(LLMManager(LLMType.GROQ, factory=factory).generate(PROMPT))
        provider.cleanup.assert_awaited_once()

    def test_failed_initialize_is_transport_failure(self):
        provider = MagicMock()
        provider.initialize = AsyncMock(return_value=False)
        factory = MagicMock()
        factory.create_configured_provider.return_value = provider

        result = asyncio.run(LLMManager(LLMType.GROQ, factory=factory).generate(PROMPT))
        assert result.kind is FailureKind.TRANSPORT

    def test_default_parameters_from_config(self):
        assert LLMManager(LLMType.GROQ).params == ModelParameters(max_tokens=256)


class TestEnvConfig:
    """Credentials and timeout come from the environment and .env files."""

    def test_first_env_file_wins(self, tmp_path, monkeypatch):
        first = tmp_path / "first.env"
        first.write_text("CMDGEN_TEST_KEY=from-first\n")
        second = tmp_path / "second.env"
        second.write_text("CMDGEN_TEST_KEY=from-second\n")
        monkeypatch.delenv("CMDGEN_TEST_KEY", raising=False)
        missing = tmp_path / "missing.env"

        with patch.object(config, "ENV_SEARCH_PATHS", [missing, first, second]):
            assert config._load_env() == first

        assert os.environ["CMDGEN_TEST_KEY"] == "from-first"
        monkeypatch.delenv("CMDGEN_TEST_KEY")

    def test_no_env_file(self, tmp_path):
        with patch.object(config, "ENV_SEARCH_PATHS", [tmp_path / "missing.env"]):
            assert config._load_env() is None

    def test_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("CMDGEN_TIMEOUT", "5")
        assert config._timeout() == 5

    def test_bad_timeout_falls_back(self, monkeypatch, capsys):
        monkeypatch.setenv("CMDGEN_TIMEOUT", "soon")
        assert config._timeout() == config.DEFAULT_TIMEOUT
        monkeypatch.setenv("CMDGEN_TIMEOUT", "0")
        assert config._timeout() == config.DEFAULT_TIMEOUT
        assert "CMDGEN_TIMEOUT must be a positive integer" in capsys.readouterr().err
