"""
Proxy Completion Client

Calls the server-side relay (app/proxy_server.py) instead of the provider,
so the dashboard process never holds the API key.

The relay only accepts a single `prompt`, so the system instruction is
folded into it ahead of the user's question.
"""

from typing import Optional

import httpx

from src.config import get_settings
from src.services.llm.interface import (
    CompletionClient,
    CompletionRequest,
    ConfigurationError,
    EmptyResponseError,
    NetworkError,
    ProviderError,
)


def fold_prompt(request: CompletionRequest) -> str:
    if not request.system_instruction:
        return request.prompt
    return f"{request.system_instruction}\n\nQuestion: {request.prompt}"


class ProxyCompletionClient(CompletionClient):
    """CompletionClient that POSTs `{prompt}` to the relay and reads `{answer}`."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._url = url or settings.proxy.url
        self._timeout = timeout_seconds or settings.gemini.request_timeout_seconds
        self._transport = transport

    async def complete(self, request: CompletionRequest) -> str:
        if not self._url:
            raise ConfigurationError("Proxy URL is not set.")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self._url,
                    json={"prompt": fold_prompt(request)},
                )
        except httpx.TimeoutException:
            raise NetworkError(f"Proxy did not respond within {self._timeout:g}s")
        except httpx.HTTPError as e:
            raise NetworkError(f"Could not reach proxy: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            if isinstance(body, dict) and body.get("error"):
                raise ProviderError(str(body["error"]))
            raise NetworkError(f"Proxy returned HTTP {response.status_code}")

        answer = body.get("answer") if isinstance(body, dict) else None
        if not isinstance(answer, str) or not answer.strip():
            raise EmptyResponseError(raw=response.text)

        return answer.strip()
