"""Key/value storage backends."""
from .base import KeyValueStore
from .dynamo_db import DynamoDbKeyValueStore
from .in_memory import InMemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "DynamoDbKeyValueStore",
    "InMemoryKeyValueStore"
]
