"""
LLM Manager for cmdgen.

The generation backend handed to the interaction controller: one active
provider, chosen from configuration, behind a uniform generate() call.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .provider_factory import LLMType, MissingCredentialError, ProviderFactory
from .types import (
    FailureKind,
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    ModelParameters,
    Prompt,
)
from .. import config_file

logger = logging.getLogger(__name__)

# Debug log directory
_DEBUG_LOG_DIR = Path.home() / ".local" / "share" / "cmdgen"
_DEBUG_LOG_FILE = _DEBUG_LOG_DIR / "debug.log"


def _debug_enabled() -> bool:
    return bool(config_file.get("debug"))


def _debug_log(label: str, data: Any) -> None:
    """Append a timestamped entry to the debug log file."""
    if not _debug_enabled():
        return
    try:
        _DEBUG_LOG_DIR.mkdir(parents=True, exist_ok=True)
        with open(_DEBUG_LOG_FILE, "a") as f:
            ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
            f.write(f"\n{'='*72}\n")
            f.write(f"[{ts}] {label}\n")
            f.write(f"{'='*72}\n")
            if isinstance(data, (dict, list)):
                f.write(json.dumps(data, indent=2, default=str))
            else:
                f.write(str(data))
            f.write("\n")
    except OSError as e:
        logger.debug(f"Could not write debug log: {e}")


def default_parameters() -> ModelParameters:
    return ModelParameters(max_tokens=config_file.get("max_tokens"))


class LLMManager:
    """
    Selects the configured provider and runs one generation per call.

    The provider is created, initialized and cleaned up around each request,
    so a cancelled request leaves no open client behind.
    """

    def __init__(
        self,
        llm_type: Optional[LLMType] = None,
        params: Optional[ModelParameters] = None,
        factory: type = ProviderFactory,
    ):
        self.factory = factory
        self.llm_type = llm_type or factory.configured_type()
        self.params = params or default_parameters()

    async def generate(
        self,
        prompt: Prompt,
        params: Optional[ModelParameters] = None,
    ) -> GenerationResult:
        """
        Send the prompt to the active provider.

        Returns:
            GenerationSuccess or GenerationFailure; provider exceptions are
            already translated by the provider.
        """
        params = params or self.params
        request = GenerationRequest(self.llm_type.value, prompt, params)
        _debug_log("REQUEST", request.as_log_entry())

        try:
            provider = self.factory.create_configured_provider(self.llm_type)
        except MissingCredentialError as e:
            logger.warning(str(e))
            _debug_log("ERROR", str(e))
            return GenerationFailure(FailureKind.MISSING_CREDENTIAL, str(e))

        if not await provider.initialize():
            message = f"Failed to initialize {self.llm_type.value} provider"
            _debug_log("ERROR", message)
            return GenerationFailure(FailureKind.TRANSPORT, message)

        try:
            result = await provider.generate(prompt, params)
        finally:
            try:
                await provider.cleanup()
            except Exception as e:
                logger.error(f"Cleanup error: {e}")

        _debug_log("RESPONSE", result)
        return result
