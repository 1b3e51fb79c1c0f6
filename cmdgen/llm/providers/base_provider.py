"""
Base Provider Abstract Class for LLM APIs.

Simplified for cmdgen: one system+user prompt in, one plain-text command out.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
import logging

from ..types import (
    FailureKind,
    GenerationFailure,
    GenerationResult,
    ModelParameters,
    Prompt,
)

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """
    Abstract base class for all LLM providers.

    Each provider owns its client and translates provider-specific
    responses and exceptions into a GenerationResult.
    """

    name = "base"

    def __init__(self, api_key: str, model: str, timeout: float = 30.0, **kwargs):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.config = kwargs
        self.client = None

    @abstractmethod
    async def initialize(self) -> bool:
        """Initialize the provider client. Returns True on success."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: Prompt,
        params: Optional[ModelParameters] = None,
    ) -> GenerationResult:
        """
        Generate a command for the prompt.

        Returns:
            GenerationSuccess with the trimmed command, or GenerationFailure.
        """
        pass

    @abstractmethod
    def format_messages(self, prompt: Prompt) -> Any:
        """Convert the prompt to provider-specific format."""
        pass

    def _add_system_to_messages(
        self,
        messages: List[Dict[str, Any]],
        system_prompt: str,
    ) -> List[Dict[str, Any]]:
        """Prepend a system message if not already present."""
        if not system_prompt:
            return messages
        has_system = any(msg.get("role") == "system" for msg in messages)
        if has_system:
            return messages
        return [{"role": "system", "content": system_prompt}] + messages

    def _transport_failure(self, error: Exception) -> GenerationFailure:
        logger.error(f"{self.name} generate error: {error}")
        return GenerationFailure(FailureKind.TRANSPORT, str(error) or error.__class__.__name__)

    def _require_client(self):
        if not self.client:
            raise RuntimeError(f"{self.name} client not initialized. Call initialize() first.")

    async def cleanup(self):
        """Clean up resources."""
        if hasattr(self.client, "close") and self.client:
            await self.client.close()
        self.client = None

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(model='{self.model}')"
