"""
Completion Client Interface

DESIGN DECISION: Every remote text-generation call goes through one small
interface, and every failure leaves it as one of FOUR typed errors:

- NetworkError        the endpoint could not be reached (incl. timeouts)
- ProviderError       the provider answered with a structured error
- EmptyResponseError  the call "succeeded" but produced no usable text
- ConfigurationError  no credential configured; nothing was sent

Callers never see SDK or transport exceptions. This is what lets the
advisory flow and the proxy render a uniform result.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field


class CompletionRequest(BaseModel):
    """What we send to a text-generation provider."""

    prompt: str = Field(..., min_length=1)
    system_instruction: Optional[str] = None
    max_output_tokens: int = Field(default=1000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class CompletionClient(ABC):
    """Anything that can turn a CompletionRequest into text."""

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> str:
        """
        Run one completion.

        Returns:
            The generated text, stripped and non-empty

        Raises:
            NetworkError, ProviderError, EmptyResponseError, ConfigurationError
        """
        pass


class AdvisoryError(Exception):
    """Base class for remote completion failures."""

    kind = "unknown"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NetworkError(AdvisoryError):
    """Transport failure reaching the endpoint (or a timeout)."""

    kind = "network"


class ProviderError(AdvisoryError):
    """The provider returned a structured error; message is passed through."""

    kind = "provider"


class EmptyResponseError(AdvisoryError):
    """The provider replied without any extractable text."""

    kind = "empty"

    def __init__(self, message: str = "Empty response from Gemini.", raw: Any = None):
        self.raw = raw
        super().__init__(message)


class ConfigurationError(AdvisoryError):
    """Missing credential or endpoint; no request was attempted."""

    kind = "configuration"


def scrub_secret(message: str, secret: Optional[str]) -> str:
    """Remove a credential from text that might be logged or returned."""
    if secret and secret.strip():
        return message.replace(secret, "***")
    return message
