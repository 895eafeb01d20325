"""Client for the orchestration HTTP surface."""
import logging
from typing import Any, cast

import httpx

from .config import settings
from .model import McpServer, ModelCard, Tool, ToolResponse

logger = logging.getLogger(__name__)

if settings.httpx_logging:
    logging.getLogger("httpx").setLevel(logging.DEBUG)


class OrchestrationClient:
    """Client for managing MCP servers and model card connections remotely."""

    def __init__(self, base_url: str, req_opts: dict[str, str] | None = None, client: httpx.Client | None = None):
        """Initializes the OrchestrationClient.

        Args:
            base_url: The base URL of the orchestration service.
            req_opts: Optional dictionary of HTTP headers for requests.
            client: Optional preconfigured httpx client, used instead of creating one.
        """
        if req_opts is None:
            req_opts = {}
        self.base_url = base_url.rstrip("/")
        self.client = client if client is not None else httpx.Client(headers=req_opts, timeout=30)

    def get_servers(self) -> list[McpServer]:
        """Retrieves all registered MCP servers."""
        response = self._send("GET", "/mcp/servers")
        return [McpServer.model_validate(item) for item in response.json()]

    def get_server(self, server_id: str) -> McpServer | None:
        """Retrieves a specific MCP server, or None if it is not registered."""
        response = self.client.get(url=f"{self.base_url}/mcp/server/{server_id}")
        if response.status_code == 404:
            return None
        _raise_for_status(response, "get_server")
        return McpServer.model_validate(response.json())

    def add_server(self, name: str, settings: dict[str, Any] | None = None, enabled: bool = True) -> McpServer:
        """Registers an MCP server."""
        response = self._send("POST", "/mcp/server", json={"name": name, "settings": settings or {},
                                                           "enabled": enabled})
        return McpServer.model_validate(response.json())

    def update_server(self, server_id: str, **fields: Any) -> McpServer:
        """Updates fields of an MCP server."""
        response = self._send("PATCH", f"/mcp/server/{server_id}", json=fields)
        return McpServer.model_validate(response.json())

    def toggle_server(self, server_id: str) -> McpServer:
        """Enables a disabled MCP server or disables an enabled one."""
        response = self._send("POST", f"/mcp/server/{server_id}/toggle")
        return McpServer.model_validate(response.json())

    def remove_server(self, server_id: str) -> None:
        """Removes an MCP server."""
        self._send("DELETE", f"/mcp/server/{server_id}")

    def test_server(self, server_id: str) -> bool:
        """Probes the reachability of an MCP server."""
        response = self._send("GET", f"/mcp/server/{server_id}/test")
        return cast(bool, response.json()["reachable"])

    def connect(self, card_id: str, server_id: str) -> list[str]:
        """Connects a model card to an MCP server.

        Returns:
            The model card's updated connection set.
        """
        response = self._send("PUT", f"/model-card/{card_id}/mcp/{server_id}")
        return cast(list[str], response.json())

    def disconnect(self, card_id: str, server_id: str) -> list[str]:
        """Disconnects a model card from an MCP server."""
        response = self._send("DELETE", f"/model-card/{card_id}/mcp/{server_id}")
        return cast(list[str], response.json())

    def get_model_card(self, card_id: str) -> ModelCard | None:
        """Retrieves a model card, or None if it does not exist."""
        response = self.client.get(url=f"{self.base_url}/model-card/{card_id}")
        if response.status_code == 404:
            return None
        _raise_for_status(response, "get_model_card")
        return ModelCard.model_validate(response.json())

    def get_tools(self, card_id: str) -> list[Tool]:
        """Retrieves the tools available to a model card."""
        response = self._send("GET", f"/model-card/{card_id}/tools")
        return [Tool.model_validate(item) for item in response.json()]

    def invoke_tool(self, card_id: str, tool: Tool, args: dict[str, Any] | None = None) -> ToolResponse:
        """Invokes a tool on behalf of a model card."""
        response = self._send("POST", f"/model-card/{card_id}/tools/invoke",
                              json={"tool": tool.model_dump(mode="json"), "args": args or {}})
        return ToolResponse.model_validate(response.json())

    def read_resource(self, card_id: str, server_id: str, uri: str) -> Any:
        """Reads a resource from an MCP server connected to a model card."""
        response = self._send("GET", f"/model-card/{card_id}/mcp/{server_id}/resource", params={"uri": uri})
        return response.json()

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = self.client.request(method, url=f"{self.base_url}{path}", **kwargs)
        _raise_for_status(response, f"{method} {path}")
        return response


def _raise_for_status(response: httpx.Response, operation: str) -> None:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"HTTP error during {operation}: {e} with response: {response.text if response.text else '<empty>'}")
        raise
