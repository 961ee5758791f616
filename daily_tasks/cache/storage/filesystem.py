"""File system based cache store surviving process restarts."""

import asyncio
import hashlib
import json
import shutil
import threading
import uuid
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import quote

from daily_tasks.cache.models import CacheRequest, ResponseSnapshot
from daily_tasks.cache.storage.base import CacheStorage


class FileSystemCacheStorage(CacheStorage):
    """One directory per generation, one JSON file per entry.

    Blocking I/O runs in worker threads. Every operation that reads or
    changes the generation index or a generation directory holds
    ``_lock``, so concurrent handlers never see a half-registered or
    half-swapped generation.
    """

    INDEX_FILE = "generations.json"

    def __init__(self, cache_dir: Path | None = None):
        """Initialize filesystem storage.

        Args:
            cache_dir: Directory for cache storage. Defaults to .cache/daily-tasks
        """
        self.cache_dir = cache_dir or Path.cwd() / ".cache" / "daily-tasks"
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._index_path = self.cache_dir / self.INDEX_FILE
        self._lock = threading.Lock()

    def _generation_path(self, cache_name: str) -> Path:
        return self.cache_dir / quote(cache_name, safe="")

    def _entry_path(self, generation: Path, key: str) -> Path:
        key_hash = hashlib.sha256(key.encode()).hexdigest()
        return generation / f"{key_hash}.json"

    # The helpers below expect the caller to hold _lock.

    def _read_index(self) -> list[str]:
        if not self._index_path.exists():
            return []
        try:
            names = json.loads(self._index_path.read_text())
        except json.JSONDecodeError:
            return []
        return [name for name in names if self._generation_path(name).is_dir()]

    def _write_index(self, names: list[str]) -> None:
        tmp = self._index_path.with_suffix(f".{uuid.uuid4().hex}.tmp")
        tmp.write_text(json.dumps(names, indent=2))
        tmp.replace(self._index_path)

    def _register(self, cache_name: str) -> None:
        names = self._read_index()
        if cache_name not in names:
            names.append(cache_name)
            self._write_index(names)

    def _write_entry(
        self, generation: Path, request: CacheRequest, response: ResponseSnapshot
    ) -> None:
        key = request.cache_key()
        entry_path = self._entry_path(generation, key)
        payload = {"key": key, "response": response.model_dump(mode="json")}
        # write-then-rename so readers never see a half-written entry
        tmp = entry_path.with_suffix(f".{uuid.uuid4().hex}.tmp")
        tmp.write_text(json.dumps(payload))
        tmp.replace(entry_path)

    def _load_entry(self, entry_path: Path) -> ResponseSnapshot | None:
        if not entry_path.exists():
            return None
        try:
            data = json.loads(entry_path.read_text())
            return ResponseSnapshot.model_validate(data["response"])
        except (json.JSONDecodeError, ValueError, KeyError):
            # Invalid entry file, remove it
            entry_path.unlink(missing_ok=True)
            return None

    async def keys(self) -> list[str]:
        def _keys() -> list[str]:
            with self._lock:
                return self._read_index()

        return await asyncio.to_thread(_keys)

    async def has(self, cache_name: str) -> bool:
        return cache_name in await self.keys()

    async def delete(self, cache_name: str) -> bool:
        def _delete() -> bool:
            with self._lock:
                names = self._read_index()
                path = self._generation_path(cache_name)
                existed = cache_name in names
                if existed:
                    names.remove(cache_name)
                    self._write_index(names)
                if path.exists():
                    shutil.rmtree(path)
                return existed

        return await asyncio.to_thread(_delete)

    async def match(
        self, request: CacheRequest, cache_name: str | None = None
    ) -> ResponseSnapshot | None:
        key = request.cache_key()

        def _match() -> ResponseSnapshot | None:
            with self._lock:
                names = [cache_name] if cache_name is not None else self._read_index()
                for name in names:
                    found = self._load_entry(self._entry_path(self._generation_path(name), key))
                    if found is not None:
                        return found
                return None

        return await asyncio.to_thread(_match)

    async def put(
        self, cache_name: str, request: CacheRequest, response: ResponseSnapshot
    ) -> None:
        def _put() -> None:
            with self._lock:
                generation = self._generation_path(cache_name)
                generation.mkdir(parents=True, exist_ok=True)
                self._write_entry(generation, request, response)
                self._register(cache_name)

        await asyncio.to_thread(_put)

    async def put_all(
        self,
        cache_name: str,
        entries: Sequence[tuple[CacheRequest, ResponseSnapshot]],
    ) -> None:
        def _put_all() -> None:
            with self._lock:
                generation = self._generation_path(cache_name)
                staging = self.cache_dir / f".staging-{uuid.uuid4().hex}"
                try:
                    if generation.exists():
                        shutil.copytree(generation, staging)
                    else:
                        staging.mkdir(parents=True)
                    for request, response in entries:
                        self._write_entry(staging, request, response)
                except BaseException:
                    shutil.rmtree(staging, ignore_errors=True)
                    raise

                retired = None
                if generation.exists():
                    retired = self.cache_dir / f".retired-{uuid.uuid4().hex}"
                    generation.rename(retired)
                staging.rename(generation)
                self._register(cache_name)
                if retired is not None:
                    shutil.rmtree(retired, ignore_errors=True)

        await asyncio.to_thread(_put_all)

    async def entries(self, cache_name: str) -> list[str]:
        def _entries() -> list[str]:
            with self._lock:
                generation = self._generation_path(cache_name)
                if not generation.is_dir():
                    return []
                keys = []
                for entry_path in sorted(generation.glob("*.json")):
                    try:
                        keys.append(json.loads(entry_path.read_text())["key"])
                    except (json.JSONDecodeError, KeyError):
                        continue
                return keys

        return await asyncio.to_thread(_entries)

    async def clear(self) -> None:
        def _clear() -> None:
            with self._lock:
                if self.cache_dir.exists():
                    shutil.rmtree(self.cache_dir)
                self.cache_dir.mkdir(parents=True, exist_ok=True)

        await asyncio.to_thread(_clear)
