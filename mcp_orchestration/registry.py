"""Durable registry of configured MCP servers."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

import pydantic

from .errors import NotFoundError, ValidationError
from .model import McpServer, ServerPatch, utc_now
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcp-servers"


class ServerRegistry:
    """CRUD over the MCP server list.

    All servers live under one aggregate key. Every mutation rewrites the whole list,
    and all validation happens before the write.
    """

    def __init__(self, store: KeyValueStore, storage_key: str = SERVERS_KEY) -> None:
        """Initializes the registry.

        Args:
            store: The key/value store holding the server list.
            storage_key: Key under which the full list is persisted.
        """
        self._store = store
        self._storage_key = storage_key

    async def list(self) -> list[McpServer]:
        """Retrieves all configured servers in insertion order."""
        raw = await self._store.get(self._storage_key)
        return [McpServer.model_validate(item) for item in raw or []]

    async def get(self, server_id: str) -> McpServer | None:
        """Retrieves a server by id, or None if it is not registered."""
        return next((s for s in await self.list() if s.id == server_id), None)

    async def add(self, name: str, settings: Mapping[str, Any] | None = None, enabled: bool = True) -> McpServer:
        """Registers a new server under a freshly allocated id.

        Args:
            name: Display name, must not be blank.
            settings: Transport configuration of the server.
            enabled: Whether the server is usable right away.

        Returns:
            The stored server.

        Raises:
            ValidationError: If the name is blank or the settings are not a mapping.
        """
        _check_name(name)
        if settings is not None and not isinstance(settings, Mapping):
            raise ValidationError("MCP server settings must be a mapping")

        servers = await self.list()
        taken = {s.id for s in servers}
        server_id = str(uuid.uuid4())
        while server_id in taken:
            server_id = str(uuid.uuid4())

        now = utc_now()
        server = McpServer(id=server_id, name=name, settings=dict(settings or {}), enabled=enabled,
                           created_at=now, updated_at=now)
        await self._save([*servers, server])
        logger.info(f"Registered MCP server '{server.name}' with id {server.id}")
        return server

    async def update(self, server_id: str, patch: ServerPatch | Mapping[str, Any]) -> McpServer:
        """Merges the given fields over an existing server.

        Args:
            server_id: The id of the server to update.
            patch: The fields to change. ``id`` and the timestamps are immutable.

        Returns:
            The updated server.

        Raises:
            NotFoundError: If no server has this id.
            ValidationError: If the patch is invalid.
        """
        if not isinstance(patch, ServerPatch):
            try:
                patch = ServerPatch.model_validate(dict(patch))
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid MCP server update: {e}") from e
        changes = patch.model_dump(exclude_none=True)
        if "name" in changes:
            _check_name(changes["name"])

        servers = await self.list()
        existing = _find(servers, server_id)
        updated = existing.model_copy(update={**changes, "updated_at": utc_now()})
        await self._save([updated if s.id == server_id else s for s in servers])
        logger.info(f"Updated MCP server {server_id} fields {sorted(changes)}")
        return updated

    async def toggle_enabled(self, server_id: str) -> McpServer:
        """Flips the enabled flag of a server.

        Raises:
            NotFoundError: If no server has this id.
        """
        servers = await self.list()
        existing = _find(servers, server_id)
        updated = existing.model_copy(update={"enabled": not existing.enabled, "updated_at": utc_now()})
        await self._save([updated if s.id == server_id else s for s in servers])
        logger.info(f"MCP server {server_id} is now {'enabled' if updated.enabled else 'disabled'}")
        return updated

    async def remove(self, server_id: str) -> None:
        """Removes a server. Removing an unknown id is not an error."""
        servers = await self.list()
        await self._save([s for s in servers if s.id != server_id])
        logger.info(f"Removed MCP server {server_id}")

    async def _save(self, servers: list[McpServer]) -> None:
        await self._store.set(self._storage_key, [s.model_dump(mode="json") for s in servers])


def _check_name(name: Any) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("MCP server name must not be empty")


def _find(servers: list[McpServer], server_id: str) -> McpServer:
    for server in servers:
        if server.id == server_id:
            return server
    raise NotFoundError(f"MCP server with id {server_id} not found")
