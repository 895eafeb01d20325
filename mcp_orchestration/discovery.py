"""Tool discovery and connection testing against registered MCP servers."""
import asyncio
import logging
from typing import Any

import pydantic

from .config import settings
from .errors import DiscoveryError, ServerConnectionError
from .model import Tool, ToolDescriptor
from .registry import ServerRegistry
from .transport import McpTransport

logger = logging.getLogger(__name__)


class ToolDiscovery:
    """Probes servers and reads their tool catalogues.

    Every remote call is bounded by ``probe_timeout`` so a single unreachable server
    cannot stall an aggregate.
    """

    def __init__(self, registry: ServerRegistry, transport: McpTransport, probe_timeout: float | None = None) -> None:
        """Initializes the discovery component.

        Args:
            registry: Registry used to resolve server ids.
            transport: Capability used to reach the servers.
            probe_timeout: Seconds allowed per probe or listing, defaults to MCP_PROBE_TIMEOUT_SEC.
        """
        self.registry = registry
        self.transport = transport
        self.probe_timeout = probe_timeout if probe_timeout is not None else settings.probe_timeout_sec

    async def test_connection(self, server_id: str) -> bool:
        """Checks whether a server answers. Never raises.

        Args:
            server_id: The id of the server to probe.

        Returns:
            True if the probe succeeded within the timeout, False on any failure.
        """
        try:
            server = await self.registry.get(server_id)
            if server is None:
                logger.warning(f"Connection test for unknown MCP server {server_id}")
                return False
            reachable = await asyncio.wait_for(self.transport.test_connection(server.settings),
                                               timeout=self.probe_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Connection test for MCP server {server_id} timed out after {self.probe_timeout}s")
            return False
        except Exception as e:
            logger.warning(f"Connection test for MCP server {server_id} failed: {e}")
            return False
        return bool(reachable)

    async def discover_tools(self, server_id: str) -> list[Tool]:
        """Lists a server's tools, tagged as MCP tools owned by that server.

        Args:
            server_id: The id of the server to query.

        Returns:
            The server's tools, or an empty list if the server is unknown, disabled,
            removed while listing, or advertises nothing.

        Raises:
            ServerConnectionError: If the server cannot be reached in time.
            DiscoveryError: If the server answers with a malformed catalogue.
        """
        server = await self.registry.get(server_id)
        if server is None or not server.enabled:
            return []

        try:
            raw = await asyncio.wait_for(self.transport.list_tools(server.settings), timeout=self.probe_timeout)
        except asyncio.TimeoutError as e:
            raise ServerConnectionError(
                f"Listing tools of MCP server {server_id} timed out after {self.probe_timeout}s") from e
        except Exception as e:
            raise ServerConnectionError(f"Listing tools of MCP server {server_id} failed: {e}") from e

        tools = parse_catalogue(server_id, raw)

        # the server may have been removed or disabled while the listing was in flight
        current = await self.registry.get(server_id)
        if current is None or not current.enabled:
            logger.info(f"Dropping {len(tools)} tools of MCP server {server_id}, it is gone or disabled")
            return []
        return tools


def parse_catalogue(server_id: str, raw: Any) -> list[Tool]:
    """Validates raw tool descriptors and turns them into tools of one server.

    Raises:
        DiscoveryError: If the payload is not a list or any descriptor is invalid.
    """
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise DiscoveryError(f"MCP server {server_id} returned a {type(raw).__name__} instead of a tool list")

    tools: list[Tool] = []
    seen: set[str] = set()
    for item in raw:
        if isinstance(item, pydantic.BaseModel):
            item = item.model_dump()
        try:
            descriptor = ToolDescriptor.model_validate(item)
        except pydantic.ValidationError as e:
            raise DiscoveryError(f"MCP server {server_id} returned a malformed tool: {e}") from e
        if descriptor.name in seen:
            raise DiscoveryError(f"MCP server {server_id} advertised tool {descriptor.name} twice")
        seen.add(descriptor.name)
        tools.append(Tool.from_descriptor(server_id, descriptor))
    return tools
