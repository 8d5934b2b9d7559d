"""
Gemini Completion Client

Talks to Google's Gemini models through the google-generativeai SDK.

The SDK raises google.api_core exceptions; this module is the one place
that maps them onto our error taxonomy:
- unavailable / deadline / retry exhaustion / socket errors -> NetworkError
- any other API error -> ProviderError (provider's message)
- blocked prompt -> ProviderError
- no candidate text -> EmptyResponseError
- anything else the SDK throws -> ProviderError

The API key is handed to the SDK and never logged or echoed.
"""

import asyncio
from typing import Any, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from src.config import get_settings
from src.services.llm.interface import (
    CompletionClient,
    CompletionRequest,
    ConfigurationError,
    EmptyResponseError,
    NetworkError,
    ProviderError,
    scrub_secret,
)


_NETWORK_API_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.RetryError,
)


def extract_text(response: Any) -> str:
    """
    Pull the answer text out of a generate_content response.

    Deliberately avoids `response.text`, which raises when the
    candidate has no parts.

    Raises:
        ProviderError: the prompt was blocked
        EmptyResponseError: no candidate carried any text
    """
    candidates = list(getattr(response, "candidates", None) or [])

    if not candidates:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None)
        if block_reason:
            reason = getattr(block_reason, "name", str(block_reason))
            raise ProviderError(f"Prompt blocked by Gemini: {reason}")

    for candidate in candidates:
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) or []
        text = "".join(getattr(part, "text", "") or "" for part in parts)
        if text.strip():
            return text.strip()

    raise EmptyResponseError(raw=repr(response))


class GeminiCompletionClient(CompletionClient):
    """CompletionClient backed by google-generativeai."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings().gemini
        self._api_key = api_key if api_key is not None else settings.api_key
        self._model_name = model_name or settings.model_name
        self._timeout = timeout_seconds or settings.request_timeout_seconds

    def _build_model(self, request: CompletionRequest) -> genai.GenerativeModel:
        """Configure Google Generative AI for this request."""
        genai.configure(api_key=self._api_key)
        return genai.GenerativeModel(
            model_name=self._model_name,
            system_instruction=request.system_instruction,
            generation_config={
                "temperature": request.temperature,
                "max_output_tokens": request.max_output_tokens,
            },
        )

    async def complete(self, request: CompletionRequest) -> str:
        if not (self._api_key and self._api_key.strip()):
            raise ConfigurationError("Gemini API key is not set.")

        try:
            model = self._build_model(request)
            response = await asyncio.wait_for(
                model.generate_content_async(request.prompt),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            raise NetworkError(f"Gemini did not respond within {self._timeout:g}s")
        except _NETWORK_API_ERRORS as e:
            raise NetworkError(scrub_secret(str(e), self._api_key))
        except google_exceptions.GoogleAPIError as e:
            message = getattr(e, "message", None) or str(e)
            raise ProviderError(scrub_secret(message, self._api_key))
        except OSError as e:
            raise NetworkError(scrub_secret(str(e), self._api_key))
        except Exception as e:
            raise ProviderError(scrub_secret(str(e) or type(e).__name__, self._api_key))

        return extract_text(response)
