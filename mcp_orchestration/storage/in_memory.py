"""In-memory implementation of the key/value store."""
import json
from typing import Any

from .base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Keeps values serialised as JSON so callers never share a stored object."""

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix
        self._items: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        """Retrieves the value stored under a key."""
        raw = self._items.get(self._prefix + key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        """Stores a value, replacing any previous one."""
        self._items[self._prefix + key] = json.dumps(value)

    async def remove(self, key: str) -> None:
        """Removes a key if present."""
        self._items.pop(self._prefix + key, None)

    async def clear(self) -> None:
        """Removes every key carrying this store's prefix."""
        for key in [k for k in self._items if k.startswith(self._prefix)]:
            del self._items[key]

    async def list_keys(self) -> list[str]:
        """Lists the keys carrying this store's prefix, prefix stripped."""
        return [k[len(self._prefix):] for k in self._items if k.startswith(self._prefix)]
