"""Storage abstraction the orchestration layer persists through."""
from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Generic async key/value store. No transactions, the last write wins."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieves the value stored under a key.

        Args:
            key: The key to look up.

        Returns:
            The JSON-compatible value, or None if the key is absent.
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Stores a value, replacing any previous one.

        Args:
            key: The key to write.
            value: A JSON-compatible value.
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Removes a key. Removing an absent key is not an error.

        Args:
            key: The key to remove.
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Removes every key owned by this store."""
        pass

    @abstractmethod
    async def list_keys(self) -> list[str]:
        """Lists every key owned by this store.

        Returns:
            The keys, without any storage prefix.
        """
        pass
