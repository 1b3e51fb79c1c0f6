"""LLM Provider modules for cmdgen."""

from .base_provider import BaseProvider
from .anthropic_provider import AnthropicProvider
from .gemini_provider import GeminiProvider
from .groq_provider import GroqProvider

__all__ = ["BaseProvider", "AnthropicProvider", "GeminiProvider", "GroqProvider"]
