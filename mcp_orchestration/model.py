"""Data models for MCP servers, tools and model cards."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class McpServer(BaseModel):
    """A configured MCP server."""
    id: str = Field(description="Stable unique identifier, never reused")
    name: str = Field(description="Display name of the server")
    settings: dict[str, Any] = Field(default_factory=dict,
                                     description="Transport configuration e.g. url, transport, headers")
    enabled: bool = Field(default=True, description="Disabled servers are hidden from discovery and invocation")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ServerCreate(BaseModel):
    name: str
    settings: dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True


class ServerPatch(BaseModel):
    """Partial update of an MCP server. Identity and timestamps cannot be patched."""
    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    settings: dict[str, Any] | None = None
    enabled: bool | None = None


class ToolType(str, Enum):
    MCP = "mcp"
    CUSTOM = "custom"


class ToolDescriptor(BaseModel):
    """A tool as advertised by an MCP server."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    description: str | None = None
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @field_validator("input_schema")
    @classmethod
    def _properties_must_be_mapping(cls, value: dict[str, Any]) -> dict[str, Any]:
        properties = value.get("properties")
        if properties is not None and not isinstance(properties, dict):
            raise ValueError("inputSchema.properties must be an object")
        return value

    def default_arguments(self) -> dict[str, Any]:
        """Collects the schema defaults in declaration order."""
        properties: dict[str, Any] = self.input_schema.get("properties") or {}
        return {key: prop["default"] for key, prop in properties.items()
                if isinstance(prop, dict) and "default" in prop}


class Tool(BaseModel):
    id: str
    name: str
    description: str = ""
    type: ToolType = ToolType.MCP
    mcp_server_id: str | None = Field(default=None, description="Owning MCP server, set iff type is mcp")
    configuration: dict[str, Any] = Field(default_factory=dict,
                                          description="Default arguments, overridden by caller arguments")
    input_schema: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _owned_only_by_mcp(self) -> "Tool":
        if self.type != ToolType.MCP and self.mcp_server_id is not None:
            raise ValueError(f"{self.type.value} tools cannot have an MCP server")
        return self

    @classmethod
    def from_descriptor(cls, server_id: str, descriptor: ToolDescriptor) -> "Tool":
        return cls(
            id=f"{server_id}-{descriptor.name}",
            name=descriptor.name,
            description=descriptor.description or "",
            type=ToolType.MCP,
            mcp_server_id=server_id,
            configuration=descriptor.default_arguments(),
            input_schema=descriptor.input_schema,
        )


class ToolResponse(BaseModel):
    tool_id: str
    tool_name: str
    mcp_server_id: str | None = None
    response: Any = None
    timestamp: datetime = Field(default_factory=utc_now)
    status: Literal["success", "error"]
    error: str | None = None


class ToolInvocation(BaseModel):
    tool: Tool
    args: dict[str, Any] = Field(default_factory=dict)


class ModelCard(BaseModel):
    """A consumer of MCP tools. ``mcp_servers`` is its ordered connection set."""
    id: str
    name: str
    description: str = ""
    system_prompt: str = ""
    mcp_servers: list[str] = Field(default_factory=list, description="Ids of connected MCP servers")
    settings: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ModelCardCreate(BaseModel):
    name: str
    description: str = ""
    system_prompt: str = ""
    mcp_servers: list[str] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)
