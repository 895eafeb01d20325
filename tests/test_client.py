import httpx
import pytest
from fastapi.testclient import TestClient

from mcp_orchestration.client import OrchestrationClient
from mcp_orchestration.server import create_app
from mcp_orchestration.storage import InMemoryKeyValueStore
from tests.fake_transport import FakeTransport, tool_descriptor

SEARCH_URL = "http://search.local/mcp"
DOWN_URL = "http://down.local/mcp"


@pytest.fixture
def client() -> OrchestrationClient:
    transport = FakeTransport(catalogues={SEARCH_URL: [tool_descriptor("web-search", query="")]},
                              unreachable={DOWN_URL})
    app = create_app(store=InMemoryKeyValueStore(), transport=transport)
    return OrchestrationClient(base_url="", client=TestClient(app))


def test_server_lifecycle(client):
    # When
    server = client.add_server("search", settings={"url": SEARCH_URL})
    renamed = client.update_server(server.id, name="web search")
    disabled = client.toggle_server(server.id)

    # Then
    assert client.get_server(server.id) == disabled
    assert renamed.name == "web search"
    assert disabled.enabled is False
    assert [s.id for s in client.get_servers()] == [server.id]

    client.remove_server(server.id)
    assert client.get_server(server.id) is None


def test_connect_tools_and_invoke(client):
    # Given
    server = client.add_server("search", settings={"url": SEARCH_URL})
    card = client.client.post("/model-card", json={"name": "assistant"}).json()

    # When
    connected = client.connect(card["id"], server.id)
    tools = client.get_tools(card["id"])
    response = client.invoke_tool(card["id"], tools[0], {"query": "mcp"})

    # Then
    assert connected == [server.id]
    assert client.test_server(server.id) is True
    assert client.get_model_card(card["id"]).mcp_servers == [server.id]
    assert response.status == "success"
    assert response.response == {"tool": "web-search", "args": {"query": "mcp"}}
    assert client.disconnect(card["id"], server.id) == []


def test_failed_connect_raises_http_error(client):
    server = client.add_server("down", settings={"url": DOWN_URL})
    card = client.client.post("/model-card", json={"name": "assistant"}).json()

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        client.connect(card["id"], server.id)

    assert exc_info.value.response.status_code == 502
    assert client.get_model_card("missing") is None


def test_read_resource(client):
    server = client.add_server("search", settings={"url": SEARCH_URL})
    card = client.client.post("/model-card", json={"name": "assistant"}).json()
    client.connect(card["id"], server.id)

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        client.read_resource(card["id"], server.id, "search://missing")

    assert exc_info.value.response.status_code == 502
