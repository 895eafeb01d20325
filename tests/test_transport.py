import pytest

from mcp_orchestration.discovery import ToolDiscovery
from mcp_orchestration.model import ModelCard
from mcp_orchestration.orchestrator import ToolOrchestrator
from mcp_orchestration.registry import ServerRegistry
from mcp_orchestration.storage import InMemoryKeyValueStore
from mcp_orchestration.transport import ConfiguredToolsTransport
from mcp_orchestration.transport.session import build_connection
from tests.fake_transport import tool_descriptor


def test_build_connection_defaults_to_streamable_http(monkeypatch):
    monkeypatch.delenv("MCP_AUTH_HEADER", raising=False)

    connection = build_connection({"url": "http://search.local/mcp", "name": "ignored"})

    assert connection == {"transport": "streamable_http", "url": "http://search.local/mcp"}


def test_build_connection_accepts_protocol_alias_and_merges_auth_headers(monkeypatch):
    monkeypatch.setenv("MCP_AUTH_HEADER", '{"x-api-key": "global", "x-team": "core"}')

    connection = build_connection({"url": "https://search.local/mcp", "protocol": "http",
                                   "headers": {"x-api-key": "server"}})

    assert connection["transport"] == "streamable_http"
    assert connection["headers"] == {"x-api-key": "server", "x-team": "core"}


def test_build_connection_for_stdio_drops_http_settings(monkeypatch):
    monkeypatch.setenv("MCP_AUTH_HEADER", '{"x-api-key": "global"}')

    connection = build_connection({"command": "uvx", "args": ["mcp-server-time"], "headers": {"a": "b"}})

    assert connection == {"transport": "stdio", "command": "uvx", "args": ["mcp-server-time"]}


def test_build_connection_rejects_unknown_transport():
    with pytest.raises(ValueError):
        build_connection({"url": "ftp://files.local", "transport": "ftp"})


def test_malformed_auth_header_env_is_ignored(monkeypatch):
    monkeypatch.setenv("MCP_AUTH_HEADER", "not json")

    connection = build_connection({"url": "http://search.local/mcp"})

    assert "headers" not in connection


@pytest.mark.asyncio
async def test_configured_tools_transport_end_to_end():
    # Given
    registry = ServerRegistry(InMemoryKeyValueStore())
    transport = ConfiguredToolsTransport(handlers={"add": lambda a, b: a + b})
    orchestrator = ToolOrchestrator(registry, ToolDiscovery(registry, transport))
    math = await registry.add(name="math", settings={"tools": [tool_descriptor("add", a=0, b=0)]})
    bare = await registry.add(name="bare", settings={"url": "http://bare.local"})
    consumer = ModelCard(id="card-1", name="calculator")

    # When
    await orchestrator.connect(consumer, math.id)
    tools = await orchestrator.tools_for(consumer)
    result = await orchestrator.invoke_tool(consumer, tools[0], {"a": 2, "b": 3})

    # Then
    assert [t.name for t in tools] == ["add"]
    assert result == 5
    assert await orchestrator.discovery.test_connection(bare.id) is False


@pytest.mark.asyncio
async def test_configured_tools_transport_reads_configured_resources():
    transport = ConfiguredToolsTransport()
    server_settings = {"tools": [], "resources": {"memo://notes": "remember the milk"}}

    assert await transport.read_resource(server_settings, "memo://notes") == "remember the milk"
    with pytest.raises(LookupError):
        await transport.read_resource(server_settings, "memo://other")
