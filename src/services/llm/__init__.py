"""
LLM Services Package

The completion-client interface and error taxonomy, the Gemini and proxy
clients, and the server-side ProxyHandler.
"""

from src.services.llm.interface import (
    AdvisoryError,
    CompletionClient,
    CompletionRequest,
    ConfigurationError,
    EmptyResponseError,
    NetworkError,
    ProviderError,
    scrub_secret,
)
from src.services.llm.gemini import GeminiCompletionClient, extract_text
from src.services.llm.proxy_client import ProxyCompletionClient, fold_prompt
from src.services.llm.proxy import CORS_HEADERS, ProxyHandler

__all__ = [
    # Interface
    "CompletionClient",
    "CompletionRequest",
    # Errors
    "AdvisoryError",
    "ConfigurationError",
    "EmptyResponseError",
    "NetworkError",
    "ProviderError",
    "scrub_secret",
    # Clients
    "GeminiCompletionClient",
    "ProxyCompletionClient",
    "extract_text",
    "fold_prompt",
    # Relay
    "CORS_HEADERS",
    "ProxyHandler",
]
