"""DynamoDB implementation of the key/value store."""
import asyncio
import json
import logging
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr

from .base import KeyValueStore

logger = logging.getLogger(__name__)

KEY_COLUMN = "id"
VALUE_COLUMN = "value"


class DynamoDbKeyValueStore(KeyValueStore):
    """DynamoDB-backed key/value store.

    Every key is one item: ``id`` holds the prefixed key and ``value`` the JSON
    serialised value. boto3 is blocking, so calls run in a worker thread.
    """

    def __init__(self, table_name: str = "mcp-orchestration", prefix: str = "",
                 region_name: str = "eu-central-1", table: Any = None) -> None:
        """Initializes the DynamoDB key/value store.

        Args:
            table_name: The name of the DynamoDB table, keyed by ``id``.
            prefix: Prefix applied to every key, scopes clear and list_keys.
            region_name: AWS region of the table.
            table: Optional pre-built table resource, used instead of creating one.
        """
        if table is None:
            dynamo = boto3.resource("dynamodb", region_name=region_name)
            table = dynamo.Table(table_name)
        self.table = table
        self._prefix = prefix

    async def get(self, key: str) -> Any | None:
        """Retrieves the value stored under a key."""
        response = await asyncio.to_thread(self.table.get_item, Key={KEY_COLUMN: self._prefix + key})
        item = response.get("Item")
        if item:
            return json.loads(item[VALUE_COLUMN])
        return None

    async def set(self, key: str, value: Any) -> None:
        """Stores a value, replacing any previous one."""
        await asyncio.to_thread(self.table.put_item,
                                Item={KEY_COLUMN: self._prefix + key, VALUE_COLUMN: json.dumps(value)})

    async def remove(self, key: str) -> None:
        """Removes a key. DynamoDB delete_item is a no-op on an absent key."""
        await asyncio.to_thread(self.table.delete_item, Key={KEY_COLUMN: self._prefix + key})

    async def clear(self) -> None:
        """Removes every key carrying this store's prefix."""
        keys = await asyncio.to_thread(self._scan_keys)
        for key in keys:
            await asyncio.to_thread(self.table.delete_item, Key={KEY_COLUMN: key})
        logger.info(f"Cleared {len(keys)} items with prefix '{self._prefix}'")

    async def list_keys(self) -> list[str]:
        """Lists the keys carrying this store's prefix, prefix stripped."""
        keys = await asyncio.to_thread(self._scan_keys)
        return [key[len(self._prefix):] for key in keys]

    def _scan_keys(self) -> list[str]:
        scan_kwargs: dict[str, Any] = {"ProjectionExpression": KEY_COLUMN}
        if self._prefix:
            scan_kwargs["FilterExpression"] = Attr(KEY_COLUMN).begins_with(self._prefix)

        keys: list[str] = []
        while True:
            response = self.table.scan(**scan_kwargs)
            keys.extend(item[KEY_COLUMN] for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return keys
            scan_kwargs["ExclusiveStartKey"] = last_key
