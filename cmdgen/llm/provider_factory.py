"""
Provider Factory for cmdgen.

Creates LLM provider instances based on configuration.
"""

import logging
from enum import Enum
from typing import Optional, Dict, Any, Tuple, Type

from .providers.base_provider import BaseProvider
from .providers.anthropic_provider import AnthropicProvider
from .providers.gemini_provider import GeminiProvider
from .providers.groq_provider import GroqProvider
from . import config
from .. import config_file

logger = logging.getLogger(__name__)


class LLMType(str, Enum):
    """Available LLM provider types (the names used in config.toml)."""
    CLAUDE_HAIKU = "claude-haiku"
    GEMINI_FLASH_LITE = "gemini-flash-lite"
    GROQ = "groq"


class MissingCredentialError(ValueError):
    """The selected provider has no API key configured."""

    def __init__(self, llm_type: LLMType, env_var: str):
        super().__init__(f"{env_var} not set. Configure it in .env or the environment.")
        self.llm_type = llm_type
        self.env_var = env_var


_PROVIDER_CLASSES: Dict[LLMType, Type[BaseProvider]] = {
    LLMType.CLAUDE_HAIKU: AnthropicProvider,
    LLMType.GEMINI_FLASH_LITE: GeminiProvider,
    LLMType.GROQ: GroqProvider,
}

_CREDENTIAL_VARS = {
    LLMType.CLAUDE_HAIKU: "ANTHROPIC_API_KEY",
    LLMType.GEMINI_FLASH_LITE: "GOOGLE_API_KEY",
    LLMType.GROQ: "GROQ_API_KEY",
}

_MODEL_VARS = {
    LLMType.CLAUDE_HAIKU: "ANTHROPIC_MODEL",
    LLMType.GEMINI_FLASH_LITE: "GEMINI_MODEL",
    LLMType.GROQ: "GROQ_MODEL",
}


def credentials_for(llm_type: LLMType) -> Tuple[Optional[str], str]:
    """Return (api_key, model) for a provider; api_key may be None."""
    api_key = getattr(config, _CREDENTIAL_VARS[llm_type])
    model = config_file.get("model") or getattr(config, _MODEL_VARS[llm_type])
    return api_key, model


class ProviderFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create_provider(
        llm_type: LLMType,
        api_key: str,
        model: str,
        provider_config: Optional[Dict[str, Any]] = None,
    ) -> BaseProvider:
        """
        Create an LLM provider instance.

        Args:
            llm_type: Which provider to create
            api_key: API key for the provider
            model: Model name to use
            provider_config: Additional provider configuration

        Returns:
            Configured provider instance
        """
        provider_config = provider_config or {}

        try:
            provider_class = _PROVIDER_CLASSES[LLMType(llm_type)]
        except (KeyError, ValueError):
            raise ValueError(f"Unknown LLM type: {llm_type}")

        return provider_class(
            api_key=api_key,
            model=model,
            timeout=provider_config.get("timeout", config.HTTP_TIMEOUT),
            **{k: v for k, v in provider_config.items() if k != "timeout"},
        )

    @staticmethod
    def configured_type() -> LLMType:
        """The provider selected in config.toml."""
        return LLMType(config_file.get("provider"))

    @staticmethod
    def create_configured_provider(llm_type: Optional[LLMType] = None) -> BaseProvider:
        """
        Create the selected provider using config settings.

        Raises:
            MissingCredentialError: If the provider's API key is not configured
        """
        llm_type = llm_type or ProviderFactory.configured_type()
        api_key, model = credentials_for(llm_type)
        if not api_key:
            raise MissingCredentialError(llm_type, _CREDENTIAL_VARS[llm_type])

        return ProviderFactory.create_provider(llm_type, api_key, model)
