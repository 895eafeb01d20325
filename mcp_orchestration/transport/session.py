"""Live transport opening an MCP client session per call."""
import logging
from collections.abc import Mapping
from typing import Any

from langchain_mcp_adapters.client import MultiServerMCPClient
from pydantic import AnyUrl

from ..config import settings
from .base import McpTransport

logger = logging.getLogger(__name__)

SERVER_KEY = "server"

TRANSPORT_ALIASES = {
    "http": "streamable_http",
    "https": "streamable_http",
    "streamable-http": "streamable_http",
}

CONNECTION_KEYS = {
    "stdio": ("command", "args", "env", "cwd"),
    "sse": ("url", "headers"),
    "streamable_http": ("url", "headers"),
    "websocket": ("url",),
}


class McpSessionTransport(McpTransport):
    """Transport backed by ``MultiServerMCPClient`` sessions.

    Server settings follow the adapter's connection format, e.g.
    ``{"url": "https://host/mcp", "transport": "streamable_http"}`` or
    ``{"command": "uvx", "args": ["some-server"], "transport": "stdio"}``.
    ``protocol`` is accepted as an alias of ``transport``.
    """

    async def test_connection(self, server_settings: Mapping[str, Any]) -> bool:
        async with self._client(server_settings).session(SERVER_KEY) as session:
            await session.send_ping()
        return True

    async def list_tools(self, server_settings: Mapping[str, Any]) -> list[Any]:
        async with self._client(server_settings).session(SERVER_KEY) as session:
            result = await session.list_tools()
            tools = list(result.tools)
            while result.nextCursor:
                result = await session.list_tools(cursor=result.nextCursor)
                tools.extend(result.tools)
        return [tool.model_dump() for tool in tools]

    async def invoke(self, server_settings: Mapping[str, Any], tool_name: str, args: Mapping[str, Any]) -> Any:
        async with self._client(server_settings).session(SERVER_KEY) as session:
            result = await session.call_tool(tool_name, arguments=dict(args))
        if result.isError:
            raise RuntimeError(f"Tool {tool_name} reported an error: {_text_content(result.content)}")
        return result.model_dump(mode="json")

    async def read_resource(self, server_settings: Mapping[str, Any], uri: str) -> Any:
        async with self._client(server_settings).session(SERVER_KEY) as session:
            result = await session.read_resource(AnyUrl(uri))
        return result.model_dump(mode="json")

    def _client(self, server_settings: Mapping[str, Any]) -> MultiServerMCPClient:
        return MultiServerMCPClient({SERVER_KEY: build_connection(server_settings)})  # type: ignore[dict-item]


def build_connection(server_settings: Mapping[str, Any]) -> dict[str, Any]:
    """Turns server settings into a connection mapping for ``MultiServerMCPClient``."""
    transport = server_settings.get("transport") or server_settings.get("protocol")
    if not transport:
        transport = "stdio" if "command" in server_settings else "streamable_http"
    transport = TRANSPORT_ALIASES.get(transport, transport)
    if transport not in CONNECTION_KEYS:
        raise ValueError(f"Unsupported MCP transport: {transport}")

    connection: dict[str, Any] = {"transport": transport}
    for key in CONNECTION_KEYS[transport]:
        if key in server_settings:
            connection[key] = server_settings[key]
    if "headers" in CONNECTION_KEYS[transport]:
        headers = {**settings.mcp_auth_headers, **(server_settings.get("headers") or {})}
        if headers:
            connection["headers"] = headers
    return connection


def _text_content(content: list[Any]) -> str:
    texts = [getattr(block, "text", None) for block in content]
    return " ".join(t for t in texts if t) or "<no content>"
