"""Aggregation and routing of MCP tools for model cards."""
import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from langchain_core.tools import StructuredTool

from .config import settings
from .discovery import ToolDiscovery
from .errors import ExecutionError, InvalidToolError, NotConnectedError, NotFoundError, ServerConnectionError
from .model import McpServer, ModelCard, Tool, ToolResponse, ToolType
from .model_cards import ModelCardService
from .registry import ServerRegistry

logger = logging.getLogger(__name__)


class ToolOrchestrator:
    """Aggregates tools across a model card's connected servers and routes tool calls.

    A connection id whose server was removed is treated as not connected, and so is a
    connected server that is disabled.

    Usage::

        orchestrator = ToolOrchestrator(registry, discovery, model_cards)
        await orchestrator.connect(card, server.id)
        tools = await orchestrator.tools_for(card)
        result = await orchestrator.invoke_tool(card, tools[0], {"query": "mcp"})
    """

    def __init__(self, registry: ServerRegistry, discovery: ToolDiscovery,
                 model_cards: ModelCardService | None = None,
                 tool_call_timeout: float | None = None,
                 on_discovery_error: Callable[[str, Exception], None] | None = None) -> None:
        """Initializes the orchestrator.

        Args:
            registry: Registry used to resolve server ids.
            discovery: Discovery component, its transport also dispatches tool calls.
            model_cards: Optional service persisting connection changes of model cards.
            tool_call_timeout: Seconds allowed per tool call, defaults to MCP_TOOL_CALL_TIMEOUT_SEC.
            on_discovery_error: Called with the server id and error for every server whose
                discovery failed during aggregation.
        """
        self.registry = registry
        self.discovery = discovery
        self.transport = discovery.transport
        self.model_cards = model_cards
        self.tool_call_timeout = tool_call_timeout if tool_call_timeout is not None else settings.tool_call_timeout_sec
        self.on_discovery_error = on_discovery_error

    async def available_tools(self, connected_server_ids: Iterable[str]) -> list[Tool]:
        """Collects the tools of every connected, existing and enabled server.

        Servers are queried concurrently, results keep the connection order. A server
        whose discovery fails contributes no tools instead of failing the aggregate.
        """
        server_ids = list(dict.fromkeys(connected_server_ids))
        servers = {s.id: s for s in await self.registry.list()}
        targets = [sid for sid in server_ids if sid in servers and servers[sid].enabled]

        results = await asyncio.gather(*(self._discover_isolated(sid) for sid in targets))
        return [tool for tools in results for tool in tools]

    async def tools_for(self, consumer: ModelCard) -> list[Tool]:
        return await self.available_tools(consumer.mcp_servers)

    async def _discover_isolated(self, server_id: str) -> list[Tool]:
        try:
            return await self.discovery.discover_tools(server_id)
        except Exception as e:
            logger.warning(f"Discovery of MCP server {server_id} failed, skipping its tools: {e}")
            if self.on_discovery_error is not None:
                try:
                    self.on_discovery_error(server_id, e)
                except Exception:
                    logger.exception(f"Discovery error reporter failed for MCP server {server_id}")
            return []

    async def connect(self, consumer: ModelCard, server_id: str) -> list[str]:
        """Connects a model card to a server after a successful probe.

        Args:
            consumer: The model card to connect.
            server_id: The id of the server.

        Returns:
            The updated connection set.

        Raises:
            NotFoundError: If the server is not registered.
            ServerConnectionError: If the probe fails, the connection set is left unchanged.
        """
        server = await self.registry.get(server_id)
        if server is None:
            raise NotFoundError(f"MCP server with id {server_id} not found")
        if server_id in consumer.mcp_servers:
            return list(consumer.mcp_servers)

        if not await self.discovery.test_connection(server_id):
            raise ServerConnectionError(f"Failed to connect to MCP server {server.name}")

        if server_id not in consumer.mcp_servers:
            previous = list(consumer.mcp_servers)
            consumer.mcp_servers = [*previous, server_id]
            await self._persist(consumer, previous)
            logger.info(f"Model card {consumer.id} connected to MCP server {server_id}")
        return list(consumer.mcp_servers)

    async def disconnect(self, consumer: ModelCard, server_id: str) -> list[str]:
        """Disconnects a model card from a server. Unknown ids are ignored."""
        if server_id in consumer.mcp_servers:
            previous = list(consumer.mcp_servers)
            consumer.mcp_servers = [sid for sid in previous if sid != server_id]
            await self._persist(consumer, previous)
            logger.info(f"Model card {consumer.id} disconnected from MCP server {server_id}")
        return list(consumer.mcp_servers)

    async def _persist(self, consumer: ModelCard, previous: list[str]) -> None:
        if self.model_cards is None:
            return
        try:
            await self.model_cards.update(consumer.id, mcp_servers=list(consumer.mcp_servers))
        except Exception:
            consumer.mcp_servers = previous
            raise

    async def invoke_tool(self, consumer: ModelCard, tool: Tool, args: Mapping[str, Any] | None = None) -> Any:
        """Calls a tool on its owning server on behalf of a model card.

        The tool's configuration provides defaults, caller arguments win on collision.

        Returns:
            The server's raw result.

        Raises:
            InvalidToolError: If the tool is not an MCP tool with an owning server.
            NotConnectedError: If the server is not connected, gone or disabled.
            ExecutionError: If the call fails or times out. It is not retried.
        """
        server = await self._resolve_server(consumer, tool)
        final_args = {**tool.configuration, **(args or {})}
        try:
            return await asyncio.wait_for(self.transport.invoke(server.settings, tool.name, final_args),
                                          timeout=self.tool_call_timeout)
        except asyncio.TimeoutError as e:
            raise ExecutionError(f"Tool {tool.name} on MCP server {server.id} timed out after "
                                 f"{self.tool_call_timeout}s", cause=e) from e
        except Exception as e:
            raise ExecutionError(f"Tool {tool.name} on MCP server {server.id} failed: {e}", cause=e) from e

    async def execute_tool(self, consumer: ModelCard, tool: Tool, args: Mapping[str, Any] | None = None) -> ToolResponse:
        """Like ``invoke_tool`` but reports execution failures as an error response.

        Precondition errors are still raised.
        """
        try:
            result = await self.invoke_tool(consumer, tool, args)
        except ExecutionError as e:
            logger.error(f"Error executing MCP tool {tool.name}: {e}")
            return ToolResponse(tool_id=tool.id, tool_name=tool.name, mcp_server_id=tool.mcp_server_id,
                                status="error", error=str(e))
        return ToolResponse(tool_id=tool.id, tool_name=tool.name, mcp_server_id=tool.mcp_server_id,
                            response=result, status="success")

    async def _resolve_server(self, consumer: ModelCard, tool: Tool) -> McpServer:
        if tool.type != ToolType.MCP or not tool.mcp_server_id:
            raise InvalidToolError(f"Tool {tool.name} is not an MCP tool")
        return await self._connected_server(consumer, tool.mcp_server_id)

    async def _connected_server(self, consumer: ModelCard, server_id: str) -> McpServer:
        if server_id not in consumer.mcp_servers:
            raise NotConnectedError(f"MCP server {server_id} is not connected to model card {consumer.id}")
        server = await self.registry.get(server_id)
        if server is None:
            raise NotConnectedError(f"MCP server {server_id} no longer exists")
        if not server.enabled:
            raise NotConnectedError(f"MCP server {server_id} is disabled")
        return server

    async def access_resource(self, consumer: ModelCard, server_id: str, uri: str) -> Any:
        """Reads a resource from a server connected to the model card.

        Args:
            consumer: The model card on whose behalf the resource is read.
            server_id: The id of the server exposing the resource.
            uri: The resource URI.

        Returns:
            The server's raw resource contents.

        Raises:
            NotConnectedError: If the server is not connected, gone or disabled.
            ExecutionError: If the read fails or times out.
        """
        server = await self._connected_server(consumer, server_id)
        try:
            return await asyncio.wait_for(self.transport.read_resource(server.settings, uri),
                                          timeout=self.tool_call_timeout)
        except asyncio.TimeoutError as e:
            raise ExecutionError(f"Reading resource {uri} from MCP server {server_id} timed out after "
                                 f"{self.tool_call_timeout}s", cause=e) from e
        except Exception as e:
            raise ExecutionError(f"Reading resource {uri} from MCP server {server_id} failed: {e}",
                                 cause=e) from e

    async def validate_tool(self, tool: Tool) -> bool:
        """Checks that a tool is an MCP tool whose server exists and is enabled."""
        if tool.type != ToolType.MCP or not tool.mcp_server_id:
            return False
        server = await self.registry.get(tool.mcp_server_id)
        return server is not None and server.enabled

    async def connected_servers(self, consumer: ModelCard) -> list[McpServer]:
        """Resolves the connection set to registered servers, dropping dangling ids."""
        servers = {s.id: s for s in await self.registry.list()}
        return [servers[sid] for sid in consumer.mcp_servers if sid in servers]

    async def as_tools(self, consumer: ModelCard) -> list[StructuredTool]:
        """Wraps the model card's available tools as LangChain tools.

        Returns:
            One StructuredTool per available tool, each routed through ``invoke_tool``.
        """
        return [self._as_structured_tool(consumer, tool) for tool in await self.tools_for(consumer)]

    def _as_structured_tool(self, consumer: ModelCard, tool: Tool) -> StructuredTool:
        async def call(**kwargs: Any) -> Any:
            return await self.invoke_tool(consumer, tool, kwargs)

        return StructuredTool.from_function(
            coroutine=call,
            name=tool.name,
            description=tool.description or tool.name,
            args_schema=tool.input_schema or {"type": "object", "properties": {}},
        )
