"""
Google Gemini Provider Implementation.

Uses the google-generativeai SDK; Flash Lite is the cheap, low-latency
option for one-line completions.
"""

import logging
from typing import Optional, Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

from .base_provider import BaseProvider
from ..types import GenerationResult, ModelParameters, Prompt, result_from_text
from ..utils import first_candidate_text

logger = logging.getLogger(__name__)


class GeminiProvider(BaseProvider):
    """
    Gemini provider.

    The SDK binds the system instruction to the model object, so a
    GenerativeModel is built per request from the prompt.
    """

    name = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash-lite",
                 timeout: float = 30.0, **kwargs):
        super().__init__(api_key, model, timeout, **kwargs)

    async def initialize(self) -> bool:
        """Configure the SDK with this provider's key."""
        try:
            genai.configure(api_key=self.api_key)
            self.client = genai
            logger.debug(f"Initialized Gemini client with model: {self.model}")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {e}")
            return False

    def format_messages(self, prompt: Prompt) -> Any:
        return prompt.user

    async def generate(
        self,
        prompt: Prompt,
        params: Optional[ModelParameters] = None,
    ) -> GenerationResult:
        """Generate a command using the Gemini API."""
        self._require_client()
        params = params or ModelParameters()

        model_name = params.model or self.model
        generation_config = {"max_output_tokens": params.max_tokens}
        if params.temperature is not None:
            generation_config["temperature"] = params.temperature

        model = self.client.GenerativeModel(
            model_name=model_name,
            system_instruction=prompt.system,
        )
        logger.debug(f"Gemini request: model={model_name}")

        try:
            response = await model.generate_content_async(
                self.format_messages(prompt),
                generation_config=generation_config,
                request_options={"timeout": self.timeout},
            )
        # ValueError covers bad keys and blocked prompts rejected client-side.
        except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError, ValueError) as e:
            return self._transport_failure(e)

        return result_from_text(first_candidate_text(response))

    async def cleanup(self):
        # The SDK keeps no per-provider connection to close.
        self.client = None
