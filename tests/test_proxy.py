"""
Tests for the Gemini relay.

The handler is driven directly, then once more through FastAPI's
TestClient to check the HTTP surface.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from app.proxy_server import app, get_proxy_handler
from src.audit import AuditLogger
from src.services.llm import (
    CompletionClient,
    CompletionRequest,
    EmptyResponseError,
    NetworkError,
    ProviderError,
    ProxyHandler,
)
from src.services.llm.proxy import (
    CORS_HEADERS,
    MISSING_KEY_MESSAGE,
    NETWORK_FAILURE_MESSAGE,
    UNEXPECTED_FAILURE_MESSAGE,
)


SERVER_KEY = "server-side-secret-123"


class ScriptedClient(CompletionClient):
    """Returns an answer or raises, and records every request."""

    def __init__(self, answer: str = "Keep it up.", error: Exception = None):
        self.answer = answer
        self.error = error
        self.requests: list[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.answer


class CountingFactory:
    """Client factory that counts how many clients were built."""

    def __init__(self, client: CompletionClient):
        self.client = client
        self.keys: list[str] = []

    def __call__(self, api_key: str) -> CompletionClient:
        self.keys.append(api_key)
        return self.client


def make_handler(client=None, api_key=SERVER_KEY, include_raw_on_empty=False, audit_logger=None):
    factory = CountingFactory(client or ScriptedClient())
    handler = ProxyHandler(
        client_factory=factory,
        api_key_provider=lambda: api_key,
        max_output_tokens=500,
        temperature=0.7,
        include_raw_on_empty=include_raw_on_empty,
        audit_logger=audit_logger or AuditLogger(),
    )
    return handler, factory


def handle(handler, method, payload=None):
    return asyncio.run(handler.handle(method, payload))


class TestProxyHandler:
    """Tests for the framework-free handler."""

    def test_options_preflight(self):
        """Test that OPTIONS succeeds with an empty body."""
        handler, factory = make_handler()
        response = handle(handler, "OPTIONS")
        assert response.status_code == 200
        assert response.body is None
        assert response.headers == CORS_HEADERS
        assert factory.keys == []

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    def test_other_methods_not_allowed(self, method):
        """Test that non-POST methods get 405 with CORS headers."""
        handler, _ = make_handler()
        response = handle(handler, method)
        assert response.status_code == 405
        assert response.body is None
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_post_success(self):
        """Test the happy path and the fixed generation parameters."""
        client = ScriptedClient(answer="Spend less.")
        handler, factory = make_handler(client)
        response = handle(handler, "POST", {"prompt": "Help me"})
        assert response.status_code == 200
        assert response.body == {"answer": "Spend less."}
        assert factory.keys == [SERVER_KEY]
        assert client.requests[0].prompt == "Help me"
        assert client.requests[0].max_output_tokens == 500

    @pytest.mark.parametrize("api_key", ["", "   "])
    def test_missing_key_makes_no_upstream_call(self, api_key):
        """Test the configuration error when no key is set."""
        handler, factory = make_handler(api_key=api_key)
        response = handle(handler, "POST", {"prompt": "Help me"})
        assert response.status_code == 500
        assert response.body == {"error": MISSING_KEY_MESSAGE}
        assert factory.keys == []

    @pytest.mark.parametrize("payload", [None, {}, {"prompt": ""}, {"prompt": 42}, ["prompt"]])
    def test_bad_payload(self, payload):
        """Test that a missing prompt is rejected before any upstream call."""
        handler, factory = make_handler()
        response = handle(handler, "POST", payload)
        assert response.status_code == 500
        assert "error" in response.body
        assert factory.keys == []

    def test_network_failure(self):
        """Test the fixed network failure message."""
        handler, _ = make_handler(ScriptedClient(error=NetworkError("socket closed")))
        response = handle(handler, "POST", {"prompt": "q"})
        assert response.status_code == 500
        assert response.body == {"error": NETWORK_FAILURE_MESSAGE}

    def test_provider_error_passes_message_without_key(self):
        """Test that upstream messages are relayed with the key scrubbed."""
        error = ProviderError(f"API key {SERVER_KEY} not valid")
        handler, _ = make_handler(ScriptedClient(error=error))
        response = handle(handler, "POST", {"prompt": "q"})
        assert response.status_code == 500
        assert "not valid" in response.body["error"]
        assert SERVER_KEY not in response.body["error"]

    def test_empty_response(self):
        """Test the empty-response error, without the raw payload by default."""
        error = EmptyResponseError(raw="candidates=[]")
        handler, _ = make_handler(ScriptedClient(error=error))
        response = handle(handler, "POST", {"prompt": "q"})
        assert response.status_code == 500
        assert response.body == {"error": "Empty response from Gemini."}

    def test_empty_response_with_raw(self):
        """Test that the raw payload is attached when enabled."""
        error = EmptyResponseError(raw="candidates=[]")
        handler, _ = make_handler(ScriptedClient(error=error), include_raw_on_empty=True)
        response = handle(handler, "POST", {"prompt": "q"})
        assert response.body == {"error": "Empty response from Gemini.", "raw": "candidates=[]"}

    def test_key_never_logged(self):
        """Test that audit events never contain the credential."""
        audit_logger = AuditLogger()
        error = ProviderError(f"bad key {SERVER_KEY}")
        handler, _ = make_handler(ScriptedClient(error=error), audit_logger=audit_logger)
        handle(handler, "POST", {"prompt": "q"})
        handle(handler, "POST", {"prompt": "q"})
        for event in audit_logger.events:
            assert SERVER_KEY not in str(event.to_log_dict())

    @pytest.mark.parametrize("error", [
        RuntimeError(f"SDK blew up with key {SERVER_KEY}"),
        KeyError("candidates"),
        ValueError(),
    ])
    def test_unexpected_client_error_is_uniform_500(self, error):
        """Test that non-advisory exceptions still get the JSON error shape and CORS."""
        audit_logger = AuditLogger()
        handler, _ = make_handler(ScriptedClient(error=error), audit_logger=audit_logger)

        response = handle(handler, "POST", {"prompt": "q"})

        assert response.status_code == 500
        assert response.body == {"error": UNEXPECTED_FAILURE_MESSAGE}
        assert response.headers == CORS_HEADERS
        for event in audit_logger.events:
            assert SERVER_KEY not in str(event.to_log_dict())

    def test_client_factory_error_is_uniform_500(self):
        """Test that a failure building the client is handled the same way."""

        def broken_factory(api_key):
            raise TypeError(f"bad config for {api_key}")

        handler = ProxyHandler(
            client_factory=broken_factory,
            api_key_provider=lambda: SERVER_KEY,
            include_raw_on_empty=False,
            audit_logger=AuditLogger(),
        )
        response = handle(handler, "POST", {"prompt": "q"})

        assert response.status_code == 500
        assert response.body == {"error": UNEXPECTED_FAILURE_MESSAGE}
        assert SERVER_KEY not in str(response.body)


@pytest.fixture
def http_client():
    handler, factory = make_handler(ScriptedClient(answer="Looks fine."))
    app.dependency_overrides[get_proxy_handler] = lambda: handler
    yield TestClient(app), factory
    app.dependency_overrides.clear()


class TestProxyServer:
    """Tests for the HTTP surface at /api/gemini."""

    def test_post(self, http_client):
        """Test a successful POST round trip."""
        client, _ = http_client
        response = client.post("/api/gemini", json={"prompt": "Am I overspending?"})
        assert response.status_code == 200
        assert response.json() == {"answer": "Looks fine."}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_options(self, http_client):
        """Test the CORS preflight."""
        client, factory = http_client
        response = client.options("/api/gemini")
        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert factory.keys == []

    def test_get_not_allowed(self, http_client):
        """Test that GET gets 405 with CORS headers."""
        client, _ = http_client
        response = client.get("/api/gemini")
        assert response.status_code == 405
        assert response.headers["access-control-allow-origin"] == "*"

    def test_malformed_json(self, http_client):
        """Test that a non-JSON body is treated as a missing prompt."""
        client, factory = http_client
        response = client.post(
            "/api/gemini",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 500
        assert "error" in response.json()
        assert factory.keys == []

    def test_unexpected_error_is_json_500(self):
        """Test that an unexpected client exception never escapes as a bare 500."""
        handler, _ = make_handler(ScriptedClient(error=RuntimeError(f"leak {SERVER_KEY}")))
        app.dependency_overrides[get_proxy_handler] = lambda: handler
        try:
            response = TestClient(app).post("/api/gemini", json={"prompt": "q"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": UNEXPECTED_FAILURE_MESSAGE}
        assert response.headers["access-control-allow-origin"] == "*"
        assert SERVER_KEY not in response.text
