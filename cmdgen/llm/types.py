"""
Request/response types shared by every generation provider.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class Prompt:
    """A rendered prompt: constant system instruction plus user message."""

    system: str
    user: str


@dataclass(frozen=True)
class ModelParameters:
    model: Optional[str] = None  # None means use the provider's configured model
    max_tokens: int = 256
    temperature: Optional[float] = None


class FailureKind(str, Enum):
    """Uniform failure taxonomy for generation."""
    MISSING_CREDENTIAL = "missing_credential"
    TRANSPORT = "transport"
    EMPTY_RESPONSE = "empty_response"


@dataclass(frozen=True)
class GenerationSuccess:
    command: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class GenerationFailure:
    kind: FailureKind
    message: str

    @property
    def ok(self) -> bool:
        return False


GenerationResult = Union[GenerationSuccess, GenerationFailure]


@dataclass(frozen=True)
class GenerationRequest:
    provider: str
    prompt: Prompt
    params: ModelParameters

    def as_log_entry(self) -> dict:
        return {
            "provider": self.provider,
            "model": self.params.model,
            "max_tokens": self.params.max_tokens,
            "temperature": self.params.temperature,
            "system_prompt": self.prompt.system,
            "user": self.prompt.user,
        }


def result_from_text(text: Optional[str]) -> GenerationResult:
    """Trim provider text; blank output is an EMPTY_RESPONSE failure."""
    command = (text or "").strip()
    if not command:
        return GenerationFailure(FailureKind.EMPTY_RESPONSE, "No command generated")
    return GenerationSuccess(command)
