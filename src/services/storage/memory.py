"""In-process key-value store, for tests and for sessions without a backend."""

from typing import Optional

from src.services.storage.interface import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed KeyValueStore."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self.write_count = 0

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.write_count += 1

    def dump(self) -> dict[str, str]:
        return dict(self._data)
