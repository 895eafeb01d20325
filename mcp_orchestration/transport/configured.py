"""Transport deriving the tool catalogue from server configuration."""
from collections.abc import Callable, Mapping
from typing import Any

from .base import McpTransport


class ConfiguredToolsTransport(McpTransport):
    """Used when no live transport is available.

    A server counts as reachable when its settings declare a ``tools`` list, and that
    list is returned as the catalogue. Calls go to locally registered handlers keyed
    by tool name. Resources are read from a ``resources`` mapping of URI to contents.
    """

    def __init__(self, handlers: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self._handlers = dict(handlers or {})

    async def test_connection(self, server_settings: Mapping[str, Any]) -> bool:
        return isinstance(server_settings.get("tools"), list)

    async def list_tools(self, server_settings: Mapping[str, Any]) -> list[Any]:
        return server_settings.get("tools") or []

    async def invoke(self, server_settings: Mapping[str, Any], tool_name: str, args: Mapping[str, Any]) -> Any:
        handler = self._handlers.get(tool_name)
        if handler is None:
            raise LookupError(f"No handler configured for tool {tool_name}")
        return handler(**args)

    async def read_resource(self, server_settings: Mapping[str, Any], uri: str) -> Any:
        resources = server_settings.get("resources") or {}
        if uri not in resources:
            raise LookupError(f"No resource configured for {uri}")
        return resources[uri]
