"""
Anthropic Provider Implementation.

Default provider for cmdgen: Claude Haiku answers fast and follows the
"raw command only" instruction closely.
"""

import logging
from typing import Dict, List, Optional, Any

import anthropic
from anthropic import AsyncAnthropic

from .base_provider import BaseProvider
from ..types import GenerationResult, ModelParameters, Prompt, result_from_text
from ..utils import first_text_block

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    """
    Anthropic provider using the Messages API.

    The system prompt travels in the dedicated `system` field rather than
    as a message.
    """

    name = "anthropic"

    def __init__(self, api_key: str, model: str = "claude-haiku-4-5-20251001",
                 timeout: float = 30.0, **kwargs):
        super().__init__(api_key, model, timeout, **kwargs)

    async def initialize(self) -> bool:
        """Initialize the Anthropic client."""
        try:
            self.client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
            logger.debug(f"Initialized Anthropic client with model: {self.model}")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize Anthropic client: {e}")
            return False

    def format_messages(self, prompt: Prompt) -> List[Dict[str, Any]]:
        return [{"role": "user", "content": prompt.user}]

    async def generate(
        self,
        prompt: Prompt,
        params: Optional[ModelParameters] = None,
    ) -> GenerationResult:
        """Generate a command using the Anthropic Messages API."""
        self._require_client()
        params = params or ModelParameters()

        request = {
            "model": params.model or self.model,
            "max_tokens": params.max_tokens,
            "system": prompt.system,
            "messages": self.format_messages(prompt),
        }
        if params.temperature is not None:
            request["temperature"] = params.temperature

        logger.debug(f"Anthropic request: model={request['model']}")

        try:
            message = await self.client.messages.create(**request)
        except anthropic.APIError as e:
            return self._transport_failure(e)

        return result_from_text(first_text_block(message.content))
