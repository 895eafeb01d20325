"""Composition root: builds the services from configuration and serves them."""
import logging

import uvicorn
from fastapi import FastAPI

from .api import load_api
from .config import settings
from .discovery import ToolDiscovery
from .model_cards import ModelCardService
from .orchestrator import ToolOrchestrator
from .registry import ServerRegistry
from .storage import DynamoDbKeyValueStore, InMemoryKeyValueStore, KeyValueStore
from .transport import ConfiguredToolsTransport, McpSessionTransport, McpTransport

logger = logging.getLogger(__name__)


def create_store() -> KeyValueStore:
    if settings.storage_backend == "dynamodb":
        logger.info(f"Using DynamoDB table {settings.dynamodb_table} in {settings.aws_region}")
        return DynamoDbKeyValueStore(table_name=settings.dynamodb_table, prefix=settings.storage_prefix,
                                     region_name=settings.aws_region)
    if settings.storage_backend != "memory":
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    return InMemoryKeyValueStore(prefix=settings.storage_prefix)


def create_transport() -> McpTransport:
    if settings.mcp_transport == "configured":
        return ConfiguredToolsTransport()
    if settings.mcp_transport != "session":
        raise ValueError(f"Unknown MCP transport: {settings.mcp_transport}")
    return McpSessionTransport()


def create_app(store: KeyValueStore | None = None, transport: McpTransport | None = None) -> FastAPI:
    """Wires store, registry, discovery, orchestrator and model cards into the API.

    Args:
        store: Storage to use instead of the configured backend.
        transport: Transport to use instead of the configured one.
    """
    store = store if store is not None else create_store()
    registry = ServerRegistry(store)
    model_cards = ModelCardService(store)
    discovery = ToolDiscovery(registry, transport if transport is not None else create_transport())
    orchestrator = ToolOrchestrator(registry, discovery, model_cards)
    return load_api(registry, orchestrator, model_cards, root_path=settings.api_root_path or "")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(create_app(), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
