"""Model cards, the consumers that connect to MCP servers."""
from __future__ import annotations

import logging
import uuid
from typing import Any

import pydantic

from .errors import NotFoundError, ValidationError
from .model import ModelCard, utc_now
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

MODEL_CARDS_KEY = "model-cards"
MUTABLE_FIELDS = frozenset({"name", "description", "system_prompt", "mcp_servers", "settings"})


class ModelCardService:
    """CRUD over the model card list, persisted as one aggregate value."""

    def __init__(self, store: KeyValueStore, storage_key: str = MODEL_CARDS_KEY) -> None:
        self._store = store
        self._storage_key = storage_key

    async def list(self) -> list[ModelCard]:
        raw = await self._store.get(self._storage_key)
        return [ModelCard.model_validate(item) for item in raw or []]

    async def get(self, card_id: str) -> ModelCard | None:
        return next((c for c in await self.list() if c.id == card_id), None)

    async def create(self, name: str, description: str = "", system_prompt: str = "",
                     mcp_servers: list[str] | None = None, settings: dict[str, Any] | None = None) -> ModelCard:
        """Creates a model card with a fresh id.

        Raises:
            ValidationError: If the name is blank.
        """
        if not name or not name.strip():
            raise ValidationError("Model card name must not be empty")
        cards = await self.list()
        now = utc_now()
        card = ModelCard(id=str(uuid.uuid4()), name=name, description=description, system_prompt=system_prompt,
                         mcp_servers=list(dict.fromkeys(mcp_servers or [])), settings=dict(settings or {}),
                         created_at=now, updated_at=now)
        await self._save([*cards, card])
        logger.info(f"Created model card '{card.name}' with id {card.id}")
        return card

    async def update(self, card_id: str, **fields: Any) -> ModelCard:
        """Merges the given fields over an existing model card.

        Raises:
            NotFoundError: If no model card has this id.
            ValidationError: If a field is immutable, unknown or of the wrong type.
        """
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"Model card fields cannot be updated: {sorted(unknown)}")
        if "name" in fields and (not fields["name"] or not str(fields["name"]).strip()):
            raise ValidationError("Model card name must not be empty")

        cards = await self.list()
        existing = next((c for c in cards if c.id == card_id), None)
        if existing is None:
            raise NotFoundError(f"Model card with id {card_id} not found")
        try:
            updated = ModelCard.model_validate({**existing.model_dump(), **fields, "updated_at": utc_now()})
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid model card update: {e}") from e
        updated.mcp_servers = list(dict.fromkeys(updated.mcp_servers))

        await self._save([updated if c.id == card_id else c for c in cards])
        return updated

    async def delete(self, card_id: str) -> None:
        cards = await self.list()
        await self._save([c for c in cards if c.id != card_id])
        logger.info(f"Deleted model card {card_id}")

    async def _save(self, cards: list[ModelCard]) -> None:
        await self._store.set(self._storage_key, [c.model_dump(mode="json") for c in cards])
