"""HTTP surface of the orchestration layer."""
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .errors import (DiscoveryError, ExecutionError, InvalidToolError, NotConnectedError, NotFoundError,
                     OrchestrationError, ServerConnectionError, ValidationError)
from .model import McpServer, ModelCard, ModelCardCreate, ServerCreate, ServerPatch, Tool, ToolInvocation, \
    ToolResponse
from .model_cards import ModelCardService
from .orchestrator import ToolOrchestrator
from .registry import ServerRegistry

STATUS_CODES: dict[type[OrchestrationError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    InvalidToolError: 400,
    NotConnectedError: 409,
    ServerConnectionError: 502,
    DiscoveryError: 502,
    ExecutionError: 502,
}


def load_api(registry: ServerRegistry, orchestrator: ToolOrchestrator, model_cards: ModelCardService,
             root_path: str = "") -> FastAPI:
    """Bootstraps the orchestration FastAPI application.

    Args:
        registry: The MCP server registry.
        orchestrator: The tool orchestrator, built over the same registry.
        model_cards: The model card service holding connection sets.
        root_path: Optional root path when served behind a proxy.

    Returns:
        A configured FastAPI application instance.
    """
    app = FastAPI(root_path=root_path)

    # MCP Server Endpoints
    mcp_router = APIRouter()

    @mcp_router.get("/mcp/servers")
    async def get_mcp_servers() -> list[McpServer]:
        """Endpoint to retrieve all MCP servers."""
        return await registry.list()

    @mcp_router.get("/mcp/server/{server_id}")
    async def get_mcp_server(server_id: str) -> McpServer:
        """Endpoint to retrieve a specific MCP server."""
        server = await registry.get(server_id)
        if server:
            return server
        raise HTTPException(status_code=404, detail="MCP Server not found")

    @mcp_router.post("/mcp/server", status_code=201)
    async def add_mcp_server(server: ServerCreate) -> McpServer:
        """Endpoint to register an MCP server."""
        return await registry.add(name=server.name, settings=server.settings, enabled=server.enabled)

    @mcp_router.patch("/mcp/server/{server_id}")
    async def update_mcp_server(server_id: str, patch: ServerPatch) -> McpServer:
        """Endpoint to update fields of an MCP server."""
        return await registry.update(server_id, patch)

    @mcp_router.post("/mcp/server/{server_id}/toggle")
    async def toggle_mcp_server(server_id: str) -> McpServer:
        """Endpoint to enable or disable an MCP server."""
        return await registry.toggle_enabled(server_id)

    @mcp_router.delete("/mcp/server/{server_id}")
    async def remove_mcp_server(server_id: str) -> None:
        """Endpoint to remove an MCP server."""
        await registry.remove(server_id)

    @mcp_router.get("/mcp/server/{server_id}/test")
    async def test_mcp_server(server_id: str) -> dict[str, bool]:
        """Endpoint to probe the reachability of an MCP server."""
        return {"reachable": await orchestrator.discovery.test_connection(server_id)}

    @mcp_router.get("/mcp/server/{server_id}/tools")
    async def get_mcp_server_tools(server_id: str) -> list[Tool]:
        """Endpoint to discover the tools of an MCP server."""
        return await orchestrator.discovery.discover_tools(server_id)

    # Model Card Endpoints
    card_router = APIRouter()

    async def _get_card(card_id: str) -> ModelCard:
        card = await model_cards.get(card_id)
        if card is None:
            raise NotFoundError(f"Model card with id {card_id} not found")
        return card

    @card_router.get("/model-cards")
    async def get_model_cards() -> list[ModelCard]:
        """Endpoint to retrieve all model cards."""
        return await model_cards.list()

    @card_router.post("/model-card", status_code=201)
    async def create_model_card(card: ModelCardCreate) -> ModelCard:
        """Endpoint to create a model card."""
        return await model_cards.create(**card.model_dump())

    @card_router.get("/model-card/{card_id}")
    async def get_model_card(card_id: str) -> ModelCard:
        """Endpoint to retrieve a specific model card."""
        return await _get_card(card_id)

    @card_router.delete("/model-card/{card_id}")
    async def delete_model_card(card_id: str) -> None:
        """Endpoint to delete a model card."""
        await model_cards.delete(card_id)

    @card_router.put("/model-card/{card_id}/mcp/{server_id}")
    async def connect_mcp_server(card_id: str, server_id: str) -> list[str]:
        """Endpoint to connect a model card to an MCP server."""
        return await orchestrator.connect(await _get_card(card_id), server_id)

    @card_router.delete("/model-card/{card_id}/mcp/{server_id}")
    async def disconnect_mcp_server(card_id: str, server_id: str) -> list[str]:
        """Endpoint to disconnect a model card from an MCP server."""
        return await orchestrator.disconnect(await _get_card(card_id), server_id)

    @card_router.get("/model-card/{card_id}/mcp/{server_id}/resource")
    async def read_mcp_resource(card_id: str, server_id: str, uri: str) -> Any:
        """Endpoint to read a resource from an MCP server connected to a model card."""
        return await orchestrator.access_resource(await _get_card(card_id), server_id, uri)

    @card_router.get("/model-card/{card_id}/servers")
    async def get_connected_servers(card_id: str) -> list[McpServer]:
        """Endpoint to retrieve the existing servers a model card is connected to."""
        return await orchestrator.connected_servers(await _get_card(card_id))

    @card_router.get("/model-card/{card_id}/tools")
    async def get_model_card_tools(card_id: str) -> list[Tool]:
        """Endpoint to retrieve the tools available to a model card."""
        return await orchestrator.tools_for(await _get_card(card_id))

    @card_router.post("/model-card/{card_id}/tools/invoke")
    async def invoke_model_card_tool(card_id: str, invocation: ToolInvocation) -> ToolResponse:
        """Endpoint to invoke a tool on behalf of a model card."""
        return await orchestrator.execute_tool(await _get_card(card_id), invocation.tool, invocation.args)

    app.include_router(mcp_router)
    app.include_router(card_router)

    @app.exception_handler(OrchestrationError)
    async def orchestration_error_handler(request: Request, exc: OrchestrationError) -> JSONResponse:
        return JSONResponse(status_code=status_code_for(exc), content={"detail": str(exc)})

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "OK"}

    return app


def status_code_for(exc: OrchestrationError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500
