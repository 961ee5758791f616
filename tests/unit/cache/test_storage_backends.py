"""Tests for cache generation stores."""

import asyncio
from unittest.mock import patch

import pytest

from daily_tasks.cache.models import CacheRequest, ResponseSnapshot
from daily_tasks.cache.storage.filesystem import FileSystemCacheStorage
from daily_tasks.cache.storage.memory import MemoryCacheStorage

URL = "https://tasks.example.com"


def entry(path: str, body: bytes = b"data") -> tuple[CacheRequest, ResponseSnapshot]:
    return (
        CacheRequest(url=URL + path),
        ResponseSnapshot(url=URL + path, status=200, content=body),
    )


@pytest.fixture(params=["memory", "filesystem"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryCacheStorage()
    return FileSystemCacheStorage(cache_dir=tmp_path / "cache")


class DescribeCacheStorage:
    """Behaviour shared by every backend."""

    @pytest.mark.asyncio
    async def it_stores_and_matches_entries(self, store):
        request, response = entry("/app.js", b"console.log(1)")
        await store.put("runtime", request, response)

        found = await store.match(request)
        assert found is not None
        assert found.content == b"console.log(1)"
        assert await store.match(request, cache_name="runtime") is not None
        assert await store.match(request, cache_name="other") is None

    @pytest.mark.asyncio
    async def it_misses_unknown_requests(self, store):
        assert await store.match(CacheRequest(url=URL + "/missing")) is None

    @pytest.mark.asyncio
    async def it_overwrites_on_repeated_put(self, store):
        request, first = entry("/app.js", b"one")
        _, second = entry("/app.js", b"two")
        await store.put("runtime", request, first)
        await store.put("runtime", request, second)

        assert (await store.match(request)).content == b"two"
        assert await store.entries("runtime") == [request.cache_key()]

    @pytest.mark.asyncio
    async def it_lists_generations_in_creation_order(self, store):
        for name in ["daily-tasks-v1", "daily-tasks-runtime-v1", "daily-tasks-v2"]:
            request, response = entry(f"/{name}")
            await store.put(name, request, response)

        assert await store.keys() == ["daily-tasks-v1", "daily-tasks-runtime-v1", "daily-tasks-v2"]

    @pytest.mark.asyncio
    async def it_searches_generations_in_creation_order(self, store):
        request, old = entry("/index.html", b"old")
        _, new = entry("/index.html", b"new")
        await store.put("first", request, old)
        await store.put("second", request, new)

        assert (await store.match(request)).content == b"old"

    @pytest.mark.asyncio
    async def it_deletes_generations(self, store):
        request, response = entry("/app.js")
        await store.put("runtime", request, response)

        assert await store.delete("runtime")
        assert not await store.delete("runtime")
        assert not await store.has("runtime")
        assert await store.match(request) is None

    @pytest.mark.asyncio
    async def it_commits_batches(self, store):
        batch = [entry("/"), entry("/index.html"), entry("/app.js")]
        await store.put_all("daily-tasks-v1", batch)

        assert await store.has("daily-tasks-v1")
        assert len(await store.entries("daily-tasks-v1")) == 3

    @pytest.mark.asyncio
    async def it_clears_everything(self, store):
        await store.put("a", *entry("/a"))
        await store.put("b", *entry("/b"))
        await store.clear()
        assert await store.keys() == []


class DescribeFileSystemCacheStorage:
    """Tests specific to the filesystem backend."""

    @pytest.mark.asyncio
    async def it_survives_a_restart(self, tmp_path):
        request, response = entry("/index.html", b"<html>")
        await FileSystemCacheStorage(tmp_path).put("daily-tasks-v1", request, response)

        reopened = FileSystemCacheStorage(tmp_path)
        assert await reopened.keys() == ["daily-tasks-v1"]
        assert (await reopened.match(request)).content == b"<html>"

    @pytest.mark.asyncio
    async def it_leaves_no_partial_batch_when_a_write_fails(self, tmp_path):
        store = FileSystemCacheStorage(tmp_path)
        batch = [entry("/"), entry("/index.html"), entry("/app.js")]
        original = store._write_entry
        calls = []

        def flaky_write(generation, request, response):
            calls.append(request)
            if len(calls) == 2:
                raise OSError("disk full")
            original(generation, request, response)

        with patch.object(store, "_write_entry", side_effect=flaky_write):
            with pytest.raises(OSError):
                await store.put_all("daily-tasks-v1", batch)

        assert await store.keys() == []
        assert await store.match(batch[0][0]) is None
        assert not list(tmp_path.glob(".staging-*"))

    @pytest.mark.asyncio
    async def it_registers_every_generation_under_concurrent_writes(self, tmp_path):
        store = FileSystemCacheStorage(tmp_path)

        for round_no in range(10):
            names = [f"gen-{round_no}-{i}" for i in range(8)]
            writes = [
                store.put(name, *entry(f"/{name}"))
                if i % 2
                else store.put_all(name, [entry(f"/{name}/a"), entry(f"/{name}/b")])
                for i, name in enumerate(names)
            ]
            await asyncio.gather(*writes)

            assert set(names) <= set(await store.keys())

        assert not list(tmp_path.glob("*.tmp"))

    @pytest.mark.asyncio
    async def it_keeps_a_generation_visible_while_a_batch_replaces_it(self, tmp_path):
        store = FileSystemCacheStorage(tmp_path)
        shell = entry("/index.html", b"<html>")
        await store.put_all("daily-tasks-v1", [shell])

        batches = [store.put_all("daily-tasks-v1", [shell, entry(f"/{i}")]) for i in range(10)]
        lookups = [store.match(shell[0]) for _ in range(20)]
        results = await asyncio.gather(*batches, *lookups)

        assert all(found is not None for found in results[len(batches):])
        assert await store.keys() == ["daily-tasks-v1"]

    @pytest.mark.asyncio
    async def it_drops_corrupt_entries(self, tmp_path):
        store = FileSystemCacheStorage(tmp_path)
        request, response = entry("/app.js")
        await store.put("runtime", request, response)

        entry_file = next((tmp_path / "runtime").glob("*.json"))
        entry_file.write_text("{not json")

        assert await store.match(request) is None
        assert not entry_file.exists()
