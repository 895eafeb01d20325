"""Transports to remote MCP servers."""
from .base import McpTransport
from .configured import ConfiguredToolsTransport
from .session import McpSessionTransport

__all__ = [
    "McpTransport",
    "ConfiguredToolsTransport",
    "McpSessionTransport"
]
