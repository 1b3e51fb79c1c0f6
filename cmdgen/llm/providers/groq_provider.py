"""
Groq Provider Implementation.

OpenAI-compatible provider, useful as a fast free-tier alternative to the
Anthropic and Google backends.
"""

import logging
import os
from typing import Dict, List, Optional, Any

import openai
from openai import AsyncOpenAI

from .base_provider import BaseProvider
from ..types import GenerationResult, ModelParameters, Prompt, result_from_text
from ..utils import extract_text_from_content

logger = logging.getLogger(__name__)


class GroqProvider(BaseProvider):
    """
    Groq provider using their OpenAI-compatible API.

    Primary model: llama-3.3-70b-versatile
    """

    name = "groq"

    def __init__(self, api_key: str, model: str = "llama-3.3-70b-versatile",
                 timeout: float = 30.0, **kwargs):
        super().__init__(api_key, model, timeout, **kwargs)
        self.base_url = kwargs.get("base_url", "https://api.groq.com/openai/v1")

    async def initialize(self) -> bool:
        """Initialize the Groq client."""
        try:
            # httpx doesn't support SOCKS without socksio, and local HTTP
            # proxies may be down. This is a short-lived process.
            for k in ["ALL_PROXY", "all_proxy"]:
                os.environ.pop(k, None)

            self.client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
            )
            logger.debug(f"Initialized Groq client with model: {self.model}")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize Groq client: {e}")
            return False

    def format_messages(self, prompt: Prompt) -> List[Dict[str, Any]]:
        """Convert the prompt to Groq/OpenAI ChatCompletion format."""
        messages = [{"role": "user", "content": prompt.user}]
        return self._add_system_to_messages(messages, prompt.system)

    async def generate(
        self,
        prompt: Prompt,
        params: Optional[ModelParameters] = None,
    ) -> GenerationResult:
        """Generate a command using the Groq API."""
        self._require_client()
        params = params or ModelParameters()

        chat_params = {
            "model": params.model or self.model,
            "messages": self.format_messages(prompt),
            "max_tokens": params.max_tokens,
        }
        if params.temperature is not None:
            chat_params["temperature"] = params.temperature

        logger.debug(f"Groq request: model={chat_params['model']}")

        try:
            response = await self.client.chat.completions.create(**chat_params)
        except openai.APIError as e:
            return self._transport_failure(e)

        if response.choices and response.choices[0].message:
            return result_from_text(extract_text_from_content(response.choices[0].message.content))
        return result_from_text(None)
