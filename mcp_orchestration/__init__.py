from .api import load_api
from .client import OrchestrationClient
from .discovery import ToolDiscovery
from .errors import OrchestrationError, ValidationError, NotFoundError, ServerConnectionError, DiscoveryError, \
    NotConnectedError, InvalidToolError, ExecutionError
from .model import McpServer, ServerPatch, Tool, ToolType, ToolDescriptor, ToolResponse, ModelCard
from .model_cards import ModelCardService
from .orchestrator import ToolOrchestrator
from .registry import ServerRegistry
from .server import create_app
from .storage import KeyValueStore, InMemoryKeyValueStore, DynamoDbKeyValueStore
from .transport import McpTransport, McpSessionTransport, ConfiguredToolsTransport

__all__ = [
    "load_api",
    "create_app",
    "OrchestrationClient",
    "ServerRegistry",
    "ToolDiscovery",
    "ToolOrchestrator",
    "ModelCardService",
    "McpServer",
    "ServerPatch",
    "Tool",
    "ToolType",
    "ToolDescriptor",
    "ToolResponse",
    "ModelCard",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "DynamoDbKeyValueStore",
    "McpTransport",
    "McpSessionTransport",
    "ConfiguredToolsTransport",
    "OrchestrationError",
    "ValidationError",
    "NotFoundError",
    "ServerConnectionError",
    "DiscoveryError",
    "NotConnectedError",
    "InvalidToolError",
    "ExecutionError"
]
