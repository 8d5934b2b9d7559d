"""
Proxy Handler

Server-side relay that forwards a prompt to Gemini with a key the caller
never sees.

CONTRACT:
- OPTIONS -> 200, empty body (CORS preflight)
- anything other than POST -> 405, empty body
- POST {prompt} -> 200 {answer} or 500 {error}, whatever the client raises
- every response carries permissive CORS headers

DESIGN DECISION: The handler is framework-free and stateless.
app/proxy_server.py mounts it on FastAPI, and the tests drive it directly.
The credential is read from configuration on EVERY request and never
appears in a response body or a log line.
"""

from typing import Any, Callable, Optional

from src.audit import AuditLogger
from src.config import GeminiSettings, ProxySettings
from src.models.advisory import ProxyResponse
from src.services.llm.gemini import GeminiCompletionClient
from src.services.llm.interface import (
    AdvisoryError,
    CompletionClient,
    CompletionRequest,
    ConfigurationError,
    EmptyResponseError,
    NetworkError,
    scrub_secret,
)


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

MISSING_KEY_MESSAGE = "Server configuration error: Gemini API key is not set."
MISSING_PROMPT_MESSAGE = "Request body must include a non-empty 'prompt'."
NETWORK_FAILURE_MESSAGE = "Gemini API failed: network error"
UNEXPECTED_FAILURE_MESSAGE = "Gemini API failed: unexpected error"


def _default_api_key() -> str:
    return GeminiSettings().api_key


def _default_client_factory(api_key: str) -> CompletionClient:
    return GeminiCompletionClient(api_key=api_key)


class ProxyHandler:
    """
    Relays `{prompt}` to a CompletionClient built around the server's key.

    Args:
        client_factory: builds a client for a given API key
        api_key_provider: returns the current key (read per request)
        max_output_tokens / temperature: fixed generation parameters
        include_raw_on_empty: attach the raw payload to empty-response errors
    """

    def __init__(
        self,
        client_factory: Callable[[str], CompletionClient] = _default_client_factory,
        api_key_provider: Callable[[], str] = _default_api_key,
        max_output_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        include_raw_on_empty: Optional[bool] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        gemini = GeminiSettings()
        self._client_factory = client_factory
        self._api_key_provider = api_key_provider
        self._max_output_tokens = max_output_tokens or gemini.proxy_max_tokens
        self._temperature = temperature if temperature is not None else gemini.temperature
        if include_raw_on_empty is None:
            include_raw_on_empty = ProxySettings().include_raw_on_empty
        self._include_raw_on_empty = include_raw_on_empty
        self._audit_logger = audit_logger or AuditLogger()

    def _respond(self, status_code: int, body: Optional[dict] = None) -> ProxyResponse:
        self._audit_logger.log_proxy_handled(status_code)
        return ProxyResponse(status_code=status_code, body=body, headers=dict(CORS_HEADERS))

    def _fail(self, kind: str, message: str, extra: Optional[dict] = None) -> ProxyResponse:
        self._audit_logger.log_proxy_failed(kind, message)
        body = {"error": message}
        if extra:
            body.update(extra)
        return self._respond(500, body)

    async def handle(self, method: str, payload: Any = None) -> ProxyResponse:
        method = (method or "").upper()
        if method == "OPTIONS":
            return self._respond(200)
        if method != "POST":
            return self._respond(405)

        api_key = self._api_key_provider() or ""
        if not api_key.strip():
            return self._fail(ConfigurationError.kind, MISSING_KEY_MESSAGE)

        prompt = payload.get("prompt") if isinstance(payload, dict) else None
        if not isinstance(prompt, str) or not prompt.strip():
            return self._fail("bad_request", MISSING_PROMPT_MESSAGE)

        request = CompletionRequest(
            prompt=prompt,
            max_output_tokens=self._max_output_tokens,
            temperature=self._temperature,
        )

        try:
            client = self._client_factory(api_key)
            answer = await client.complete(request)
        except NetworkError as e:
            self._audit_logger.log_proxy_failed(e.kind, scrub_secret(e.message, api_key))
            return self._respond(500, {"error": NETWORK_FAILURE_MESSAGE})
        except EmptyResponseError as e:
            extra = None
            if self._include_raw_on_empty and e.raw is not None:
                extra = {"raw": scrub_secret(str(e.raw), api_key)}
            return self._fail(e.kind, scrub_secret(e.message, api_key), extra)
        except AdvisoryError as e:
            return self._fail(e.kind, scrub_secret(e.message, api_key))
        except Exception as e:
            self._audit_logger.log_proxy_failed(
                "unknown", scrub_secret(f"{type(e).__name__}: {e}", api_key)
            )
            return self._respond(500, {"error": UNEXPECTED_FAILURE_MESSAGE})

        return self._respond(200, {"answer": answer})
