"""Remote MCP server capability consumed by discovery and invocation."""
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class McpTransport(ABC):
    """Talks to one MCP server described by its settings mapping."""

    @abstractmethod
    async def test_connection(self, server_settings: Mapping[str, Any]) -> bool:
        """Performs a lightweight reachability probe.

        Args:
            server_settings: The server's transport configuration.

        Returns:
            True if the server answered. Implementations may raise on failure.
        """
        pass

    @abstractmethod
    async def list_tools(self, server_settings: Mapping[str, Any]) -> list[Any]:
        """Retrieves the server's tool catalogue.

        Args:
            server_settings: The server's transport configuration.

        Returns:
            Raw tool descriptors (mappings with name, description and inputSchema).
        """
        pass

    @abstractmethod
    async def invoke(self, server_settings: Mapping[str, Any], tool_name: str, args: Mapping[str, Any]) -> Any:
        """Calls a tool on the server.

        Args:
            server_settings: The server's transport configuration.
            tool_name: The name the server advertises for the tool.
            args: The final, merged arguments.

        Returns:
            The server's raw result.
        """
        pass

    @abstractmethod
    async def read_resource(self, server_settings: Mapping[str, Any], uri: str) -> Any:
        """Reads a resource exposed by the server.

        Args:
            server_settings: The server's transport configuration.
            uri: The resource URI.

        Returns:
            The resource contents as returned by the server.
        """
        pass
