"""Unit tests for RecordStore and the rename migration."""

import pytest

from blobcms.domain.exceptions import StorageFailureError
from blobcms.infrastructure.persistence import KeyedDocumentStore, MigrationState, RecordStore


class TestCollectionKeys:

    def test_default_layout(self, record_store):
        assert record_store.collection_key("posts") == "data/posts.json"

    def test_custom_layout(self, document_store):
        store = RecordStore(document_store, key_prefix="cms/collections/", key_suffix="")
        assert store.collection_key("posts") == "cms/collections/posts"


class TestCrud:

    @pytest.mark.asyncio
    async def test_list_missing_collection_is_empty(self, record_store):
        assert await record_store.list("posts") == []

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_timestamps(self, record_store, adapter):
        entry = await record_store.add("posts", {"title": "Hello"})

        assert entry.id
        assert entry.values == {"title": "Hello"}
        assert entry.created_at is not None
        assert entry.created_at == entry.updated_at
        assert await adapter.read("data/posts.json") == [entry.to_dict()]

    @pytest.mark.asyncio
    async def test_add_ignores_envelope_keys_in_fields(self, record_store):
        entry = await record_store.add(
            "posts", {"id": "mine", "createdAt": "1999", "title": "Hello"}
        )

        assert entry.id != "mine"
        assert entry.created_at != "1999"
        assert entry.values == {"title": "Hello"}

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, record_store):
        ids = {(await record_store.add("posts", {"n": i})).id for i in range(50)}
        assert len(ids) == 50

    @pytest.mark.asyncio
    async def test_list_preserves_insertion_order(self, record_store):
        first = await record_store.add("posts", {"title": "one"})
        second = await record_store.add("posts", {"title": "two"})

        assert [e.id for e in await record_store.list("posts")] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_get(self, record_store):
        entry = await record_store.add("posts", {"title": "Hello"})

        assert (await record_store.get("posts", entry.id)).values == {"title": "Hello"}
        assert await record_store.get("posts", "missing") is None

    @pytest.mark.asyncio
    async def test_update_merges_and_preserves_identity(self, record_store):
        entry = await record_store.add("posts", {"title": "Hello", "views": 1})

        updated = await record_store.update(
            "posts",
            entry.id,
            {"id": "hijack", "createdAt": "1970-01-01T00:00:00.000Z", "views": 2},
        )

        assert updated.id == entry.id
        assert updated.created_at == entry.created_at
        assert updated.values == {"title": "Hello", "views": 2}
        assert updated.updated_at >= entry.updated_at
        assert await record_store.get("posts", "hijack") is None

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, record_store, adapter):
        await record_store.add("posts", {"title": "Hello"})
        adapter.calls.clear()

        assert await record_store.update("posts", "missing", {"title": "x"}) is None
        assert ("write", "data/posts.json") not in adapter.calls

    @pytest.mark.asyncio
    async def test_delete_twice(self, record_store):
        entry = await record_store.add("posts", {"title": "Hello"})

        assert await record_store.delete("posts", entry.id) is True
        assert await record_store.delete("posts", entry.id) is False
        assert await record_store.list("posts") == []

    @pytest.mark.asyncio
    async def test_corrupt_collection_shape_raises(self, record_store, adapter):
        await adapter.write("data/posts.json", {"not": "a list"})

        with pytest.raises(StorageFailureError, match="not a list"):
            await record_store.list("posts")

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, record_store, adapter):
        await record_store.init_collection("posts")
        adapter.fail_on.add(("write", "data/posts.json"))

        with pytest.raises(StorageFailureError):
            await record_store.add("posts", {"title": "Hello"})

        assert await record_store.list("posts") == []


class TestCollectionLifecycle:

    @pytest.mark.asyncio
    async def test_init_collection_overwrites_with_empty(self, record_store, adapter):
        await adapter.write("data/posts.json", [{"id": "orphan"}])

        await record_store.init_collection("posts")

        assert await adapter.read("data/posts.json") == []

    @pytest.mark.asyncio
    async def test_drop_collection(self, record_store, document_store, adapter):
        await record_store.add("posts", {"title": "Hello"})

        await record_store.drop_collection("posts")

        assert await adapter.read("data/posts.json") is None
        assert not document_store.is_cached("data/posts.json")


class TestRenameMigration:

    @pytest.mark.asyncio
    async def test_copies_records_under_new_name(self, record_store):
        entries = [await record_store.add("posts", {"title": f"p{i}"}) for i in range(3)]

        migration = await record_store.migrate_collection("posts", "articles")

        assert migration.state is MigrationState.RETIRED
        assert migration.is_complete
        assert migration.record_count == 3
        assert migration.old_key == "data/posts.json"
        assert migration.new_key == "data/articles.json"
        assert [e.to_dict() for e in await record_store.list("articles")] == [
            e.to_dict() for e in entries
        ]

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self, record_store, document_store, adapter):
        await record_store.add("posts", {"title": "a"})
        document_store.evict("data/posts.json")
        adapter.calls.clear()

        await record_store.migrate_collection("posts", "articles")

        assert adapter.calls == [("read", "data/posts.json"), ("write", "data/articles.json")]
        assert not document_store.is_cached("data/posts.json")
        assert document_store.is_cached("data/articles.json")

    @pytest.mark.asyncio
    async def test_old_object_is_left_behind(self, record_store, adapter):
        await record_store.add("posts", {"title": "a"})

        await record_store.migrate_collection("posts", "articles")

        assert len(await adapter.read("data/posts.json")) == 1

    @pytest.mark.asyncio
    async def test_failed_copy_keeps_old_cache_entry(self, record_store, document_store, adapter):
        await record_store.add("posts", {"title": "a"})
        adapter.fail_on.add(("write", "data/articles.json"))

        with pytest.raises(StorageFailureError):
            await record_store.migrate_collection("posts", "articles")

        assert document_store.is_cached("data/posts.json")
        assert await adapter.read("data/articles.json") is None


def test_record_store_uses_given_documents(adapter):
    documents = KeyedDocumentStore(adapter)
    assert RecordStore(documents).documents is documents
