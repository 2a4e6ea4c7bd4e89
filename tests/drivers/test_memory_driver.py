# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest

from docmodels.drivers import Deletable, Driver, MemoryDriver, Queryable


@pytest.fixture
def mem():
    return MemoryDriver(
        {
            "a": {"id": "a", "name": "Ann", "meta": {"role": "admin"}},
            "b": {"id": "b", "name": "Bob", "meta": {"role": "user"}},
        }
    )


class TestProtocol:
    def test_implements_driver(self, mem):
        assert isinstance(mem, Driver)
        assert isinstance(mem, Queryable)
        assert isinstance(mem, Deletable)

    def test_empty_by_default(self):
        assert MemoryDriver().db == {}


class TestReads:
    @pytest.mark.asyncio
    async def test_get(self, mem):
        assert (await mem.get("a"))["name"] == "Ann"
        assert await mem.get("zzz") is None

    @pytest.mark.asyncio
    async def test_get_returns_a_copy(self, mem):
        record = await mem.get("a")
        record["meta"]["role"] = "nobody"
        assert mem.db["a"]["meta"]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_get_all_skips_non_records(self, mem):
        mem.db["multi"] = [{"id": 1}, {"id": 2}]
        records = await mem.get_all()
        assert sorted(r["id"] for r in records) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_filter_partial_nested_match(self, mem):
        records = await mem.filter({"meta": {"role": "admin"}})
        assert [r["id"] for r in records] == ["a"]

    @pytest.mark.asyncio
    async def test_filter_missing_key_does_not_match(self, mem):
        assert await mem.filter({"age": None}) == []

    @pytest.mark.asyncio
    async def test_filter_none_matches_everything(self, mem):
        assert len(await mem.filter(None)) == 2

    @pytest.mark.asyncio
    async def test_filter_rejects_other_predicates(self, mem):
        with pytest.raises(TypeError):
            await mem.filter(42)

    @pytest.mark.asyncio
    async def test_query_sees_a_copy(self, mem):
        def mutate(db):
            db.clear()
            return "done"

        assert await mem.query(mutate) == "done"
        assert len(mem.db) == 2


class TestWrites:
    @pytest.mark.asyncio
    async def test_set_with_key(self, mem):
        assert await mem.set("c", {"name": "Cy"}) == "c"
        assert mem.db["c"] == {"name": "Cy"}

    @pytest.mark.asyncio
    async def test_set_generates_a_key(self, mem):
        key = await mem.set(None, {"name": "Cy"}, key_field="id")
        assert key not in ("a", "b")
        assert mem.db[key] == {"name": "Cy", "id": key}

    @pytest.mark.asyncio
    async def test_timestamp_keys_are_unique(self):
        mem = MemoryDriver(key_strategy="timestamp")
        keys = {await mem.set(None, {}) for _ in range(5)}
        assert len(keys) == 5
        assert all(k.isdigit() for k in keys)

    @pytest.mark.asyncio
    async def test_set_copies_the_record(self, mem):
        record = {"tags": ["x"]}
        await mem.set("c", record)
        record["tags"].append("y")
        assert mem.db["c"]["tags"] == ["x"]

    @pytest.mark.asyncio
    async def test_remove(self, mem):
        await mem.remove({"name": "Bob"})
        assert list(mem.db) == ["a"]

    @pytest.mark.asyncio
    async def test_remove_with_callable(self, mem):
        await mem.remove(lambda r: r["name"].startswith("A"))
        assert list(mem.db) == ["b"]

    @pytest.mark.asyncio
    async def test_remove_all(self, mem):
        db = mem.db
        await mem.remove_all()
        assert mem.db == {}
        assert mem.db is db

    @pytest.mark.asyncio
    async def test_delete_by_key(self):
        mem = MemoryDriver({"a@b.com": {"name": "A"}})
        await mem.delete("a@b.com")
        await mem.delete("missing")
        assert mem.db == {}

    @pytest.mark.asyncio
    async def test_async_query(self, mem):
        async def count(db):
            return len(db)

        assert await mem.query(count) == 2
