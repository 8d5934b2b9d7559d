"""Services package."""

from src.services.llm import (
    AdvisoryError,
    CompletionClient,
    CompletionRequest,
    ConfigurationError,
    EmptyResponseError,
    GeminiCompletionClient,
    NetworkError,
    ProviderError,
    ProxyCompletionClient,
    ProxyHandler,
)
from src.services.storage import (
    InMemoryKeyValueStore,
    KeyValueStore,
    PersistenceAdapter,
    PersistenceError,
    StorageError,
)

__all__ = [
    # LLM services
    "AdvisoryError",
    "CompletionClient",
    "CompletionRequest",
    "ConfigurationError",
    "EmptyResponseError",
    "GeminiCompletionClient",
    "NetworkError",
    "ProviderError",
    "ProxyCompletionClient",
    "ProxyHandler",
    # Storage services
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PersistenceAdapter",
    "PersistenceError",
    "StorageError",
]
