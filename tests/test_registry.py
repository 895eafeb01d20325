import pytest

from mcp_orchestration.errors import NotFoundError, ValidationError
from mcp_orchestration.model import ServerPatch
from mcp_orchestration.registry import SERVERS_KEY, ServerRegistry
from mcp_orchestration.storage import InMemoryKeyValueStore


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def registry(store) -> ServerRegistry:
    return ServerRegistry(store)


@pytest.mark.asyncio
@pytest.mark.parametrize("name,settings", [
    ("search", {"url": "http://search.local/mcp", "transport": "streamable_http"}),
    ("files", {"command": "uvx", "args": ["mcp-server-files"], "transport": "stdio"}),
    ("empty settings", {}),
])
async def test_add_then_get_returns_matching_record(registry, name, settings):
    # When
    added = await registry.add(name=name, settings=settings)
    fetched = await registry.get(added.id)

    # Then
    assert fetched is not None
    assert fetched.id == added.id
    assert fetched.name == name
    assert fetched.settings == settings
    assert fetched.enabled is True
    assert fetched.created_at == fetched.updated_at


@pytest.mark.asyncio
async def test_add_respects_explicit_enabled_flag(registry):
    server = await registry.add(name="dormant", settings={}, enabled=False)

    assert (await registry.get(server.id)).enabled is False


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   "])
async def test_add_rejects_blank_name_without_persisting(registry, store, name):
    with pytest.raises(ValidationError):
        await registry.add(name=name, settings={})

    assert await store.get(SERVERS_KEY) is None


@pytest.mark.asyncio
async def test_ids_are_unique_and_order_is_stable(registry):
    servers = [await registry.add(name=f"server-{i}") for i in range(20)]

    listed = await registry.list()

    assert len({s.id for s in listed}) == 20
    assert [s.id for s in listed] == [s.id for s in servers]
    assert [s.id for s in await registry.list()] == [s.id for s in listed]


@pytest.mark.asyncio
async def test_every_mutation_rewrites_the_full_list(registry, store):
    # Given
    first = await registry.add(name="first")
    second = await registry.add(name="second")

    # When
    await registry.toggle_enabled(first.id)

    # Then
    persisted = await store.get(SERVERS_KEY)
    assert [item["id"] for item in persisted] == [first.id, second.id]
    assert persisted[0]["enabled"] is False
    assert [s.id for s in await ServerRegistry(store).list()] == [first.id, second.id]


@pytest.mark.asyncio
async def test_update_merges_fields_and_keeps_identity(registry):
    # Given
    server = await registry.add(name="search", settings={"url": "http://old"})

    # When
    updated = await registry.update(server.id, {"settings": {"url": "http://new"}})

    # Then
    assert updated.id == server.id
    assert updated.name == "search"
    assert updated.settings == {"url": "http://new"}
    assert updated.created_at == server.created_at
    assert updated.updated_at >= server.updated_at
    assert await registry.get(server.id) == updated


@pytest.mark.asyncio
async def test_update_accepts_server_patch(registry):
    server = await registry.add(name="search")

    updated = await registry.update(server.id, ServerPatch(name="web search", enabled=False))

    assert updated.name == "web search"
    assert updated.enabled is False


@pytest.mark.asyncio
async def test_update_unknown_server_raises_not_found(registry):
    with pytest.raises(NotFoundError):
        await registry.update("missing", {"name": "x"})


@pytest.mark.asyncio
@pytest.mark.parametrize("patch", [{"id": "other"}, {"created_at": "2020-01-01T00:00:00Z"}, {"name": ""},
                                   {"color": "blue"}])
async def test_update_rejects_invalid_patches(registry, patch):
    server = await registry.add(name="search")

    with pytest.raises(ValidationError):
        await registry.update(server.id, patch)

    assert await registry.get(server.id) == server


@pytest.mark.asyncio
async def test_toggle_enabled_is_its_own_inverse(registry):
    server = await registry.add(name="search")

    once = await registry.toggle_enabled(server.id)
    twice = await registry.toggle_enabled(server.id)

    assert once.enabled is False
    assert twice.enabled is True


@pytest.mark.asyncio
async def test_toggle_unknown_server_raises_not_found(registry):
    with pytest.raises(NotFoundError):
        await registry.toggle_enabled("missing")


@pytest.mark.asyncio
async def test_remove_is_idempotent(registry):
    # Given
    server = await registry.add(name="search")
    other = await registry.add(name="files")

    # When
    await registry.remove(server.id)
    await registry.remove(server.id)

    # Then
    assert await registry.get(server.id) is None
    assert [s.id for s in await registry.list()] == [other.id]
