import pytest

from mcp_orchestration.errors import NotFoundError, ValidationError
from mcp_orchestration.model_cards import MODEL_CARDS_KEY, ModelCardService
from mcp_orchestration.storage import InMemoryKeyValueStore


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def model_cards(store) -> ModelCardService:
    return ModelCardService(store)


@pytest.mark.asyncio
async def test_create_then_get(model_cards):
    created = await model_cards.create(name="assistant", system_prompt="Be brief.", mcp_servers=["a", "b", "a"])

    fetched = await model_cards.get(created.id)

    assert fetched == created
    assert fetched.mcp_servers == ["a", "b"]


@pytest.mark.asyncio
async def test_create_rejects_blank_name(model_cards, store):
    with pytest.raises(ValidationError):
        await model_cards.create(name=" ")

    assert await store.get(MODEL_CARDS_KEY) is None


@pytest.mark.asyncio
async def test_update_merges_fields(model_cards):
    # Given
    created = await model_cards.create(name="assistant")

    # When
    updated = await model_cards.update(created.id, mcp_servers=["server-1"], description="Answers questions")

    # Then
    assert updated.mcp_servers == ["server-1"]
    assert updated.description == "Answers questions"
    assert updated.created_at == created.created_at
    assert await model_cards.get(created.id) == updated


@pytest.mark.asyncio
async def test_update_unknown_card_raises_not_found(model_cards):
    with pytest.raises(NotFoundError):
        await model_cards.update("missing", name="x")


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", [{"id": "other"}, {"created_at": None}, {"name": ""}, {"mcp_servers": "a"}])
async def test_update_rejects_invalid_fields(model_cards, fields):
    created = await model_cards.create(name="assistant")

    with pytest.raises(ValidationError):
        await model_cards.update(created.id, **fields)

    assert await model_cards.get(created.id) == created


@pytest.mark.asyncio
async def test_delete_is_idempotent(model_cards):
    kept = await model_cards.create(name="kept")
    deleted = await model_cards.create(name="deleted")

    await model_cards.delete(deleted.id)
    await model_cards.delete(deleted.id)

    assert await model_cards.get(deleted.id) is None
    assert [c.id for c in await model_cards.list()] == [kept.id]


@pytest.mark.asyncio
async def test_update_keeps_connection_set_free_of_duplicates(model_cards):
    created = await model_cards.create(name="assistant")

    updated = await model_cards.update(created.id, mcp_servers=["a", "b", "a"])

    assert updated.mcp_servers == ["a", "b"]
    assert (await model_cards.get(created.id)).mcp_servers == ["a", "b"]
