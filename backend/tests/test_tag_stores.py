import pytest

from portal.core.repositories.implementations.file.tag_store import FileTagStateStore
from portal.core.repositories.implementations.memory.tag_store import InMemoryTagStateStore
from portal.core.services.tag_registry_service import TagRegistryService


@pytest.mark.asyncio
async def test_file_store_round_trip(tmp_path) -> None:
    store = FileTagStateStore(tmp_path / "tags")
    assert await store.load("cafe-tags:user") is None

    state = {"urgent": {"id": "urgent", "namespace": "default", "value": "urgent", "count": 2}}
    await store.save("cafe-tags:user", state)

    assert await store.load("cafe-tags:user") == state
    assert await store.ping() is True
    assert [p.suffix for p in (tmp_path / "tags").iterdir()] == [".json"]


@pytest.mark.asyncio
async def test_file_store_rejects_corrupt_snapshot(tmp_path) -> None:
    store = FileTagStateStore(tmp_path)
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        await store.load("broken")


@pytest.mark.asyncio
async def test_memory_store_returns_copies() -> None:
    store = InMemoryTagStateStore()
    state = {"a": {"count": 1}}
    await store.save("k", state)
    state["a"]["count"] = 99
    loaded = await store.load("k")
    assert loaded == {"a": {"count": 1}}


@pytest.mark.asyncio
async def test_registry_survives_service_restart(tag_store) -> None:
    service = TagRegistryService(tag_store, namespace_key="test-tags")
    await service.register_tags("u1", ["#priority/high", "#priority/high", "#urgent"])

    restarted = TagRegistryService(tag_store, namespace_key="test-tags")
    registry = await restarted.get_registry("u1")
    assert registry.get_tag("priority/high").count == 2
    assert registry.get_tag("urgent").count == 1


@pytest.mark.asyncio
async def test_registries_are_scoped_per_session(registry_service) -> None:
    await registry_service.register_tags("u1", ["#mine"])
    other = await registry_service.get_registry("u2")
    assert other.get_tag("mine") is None
    assert registry_service.storage_key("u2") == "test-tags:u2"


@pytest.mark.asyncio
async def test_rejected_tags_do_not_touch_the_store(registry_service, tag_store) -> None:
    assert await registry_service.register_tags("u1", ["#", ""]) == []
    assert await tag_store.load("test-tags:u1") is None


@pytest.mark.asyncio
async def test_corrupt_snapshot_is_never_overwritten(tmp_path) -> None:
    path = tmp_path / "test-tags_u1.json"
    path.write_text("[1, 2]", encoding="utf-8")
    service = TagRegistryService(FileTagStateStore(tmp_path), namespace_key="test-tags")

    registry = await service.get_registry("u1")
    assert len(registry) == 0
    assert service.is_synced("u1") is False

    await service.register_tags("u1", ["#fresh"])
    assert (await service.get_registry("u1")).get_tag("fresh").count == 1
    assert path.read_text(encoding="utf-8") == "[1, 2]"


@pytest.mark.asyncio
async def test_close_session_persists_and_unloads(registry_service, tag_store) -> None:
    registry = await registry_service.get_registry("u1")
    registry.register_tag("#manual")
    await registry_service.close_session("u1")

    snapshot = await tag_store.load("test-tags:u1")
    assert snapshot["manual"]["count"] == 1
    assert await registry_service.get_registry("u1") is not registry


class FlakyStore(InMemoryTagStateStore):
    """Memory store whose first `failures` loads raise."""

    def __init__(self, initial, failures: int = 1) -> None:
        super().__init__(initial)
        self.failures = failures

    async def load(self, key):
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("store unreachable")
        return await super().load(key)


SEEDED = {
    "test-tags:u1": {
        "urgent": {"id": "urgent", "namespace": "default", "value": "urgent", "count": 42, "lastUsed": "2024-01-01T00:00:00Z"},
    }
}


@pytest.mark.asyncio
async def test_failed_load_keeps_stored_snapshot_and_recovers() -> None:
    store = FlakyStore(SEEDED)
    service = TagRegistryService(store, namespace_key="test-tags")

    await service.register_tags("u1", ["#new"])
    stored = await store.load("test-tags:u1")
    assert set(stored) == {"urgent"}
    assert stored["urgent"]["count"] == 42

    registry = await service.get_registry("u1")
    assert service.is_synced("u1") is True
    assert registry.get_tag("urgent").count == 42
    assert registry.get_tag("new").count == 1

    stored = await store.load("test-tags:u1")
    assert set(stored) == {"urgent", "new"}


@pytest.mark.asyncio
async def test_unsynced_session_is_not_flushed() -> None:
    store = FlakyStore(SEEDED, failures=3)
    service = TagRegistryService(store, namespace_key="test-tags")

    await service.register_tags("u1", ["#new"])
    assert await service.save("u1") is False
    await service.flush_all()
    await service.close_session("u1")

    store.failures = 0
    assert set(await store.load("test-tags:u1")) == {"urgent"}
