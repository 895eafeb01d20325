import pydantic
import pytest

from mcp_orchestration.model import Tool, ToolDescriptor, ToolType


def test_custom_tool_cannot_belong_to_an_mcp_server():
    with pytest.raises(pydantic.ValidationError):
        Tool(id="t1", name="local", type=ToolType.CUSTOM, mcp_server_id="server-1")


def test_tool_from_descriptor_is_owned_by_its_server():
    descriptor = ToolDescriptor.model_validate({
        "name": "web-search",
        "inputSchema": {"type": "object", "properties": {"query": {"default": ""}, "maxResults": {"default": 5}}},
    })

    tool = Tool.from_descriptor("server-1", descriptor)

    assert tool.id == "server-1-web-search"
    assert tool.type == ToolType.MCP
    assert tool.mcp_server_id == "server-1"
    assert tool.configuration == {"query": "", "maxResults": 5}
