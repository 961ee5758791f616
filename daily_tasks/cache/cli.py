"""CLI commands for the offline cache store."""

import asyncio
import json
import sys
from datetime import UTC, datetime
from typing import Any

from daily_tasks.cache.manifest import PrecacheManifest
from daily_tasks.cache.network import NetworkFetcher
from daily_tasks.cache.runtime import WorkerContainer
from daily_tasks.cache.storage import FileSystemCacheStorage
from daily_tasks.cache.worker import CacheWorker
from daily_tasks.config import Settings, get_settings
from daily_tasks.errors import PrecacheError


async def install(settings: Settings | None = None) -> dict[str, Any]:
    """Install and activate the configured version into the filesystem store.

    Returns:
        Dictionary with install results
    """
    settings = settings or get_settings()
    storage = FileSystemCacheStorage(settings.cache.cache_dir)
    network = NetworkFetcher(settings.cache.origin, timeout=settings.cache.fetch_timeout)
    manifest = PrecacheManifest(version=settings.cache.version)
    container = WorkerContainer(network)

    try:
        await container.register(CacheWorker(manifest, storage, network, settings))
    except PrecacheError as e:
        return {"success": False, "version": manifest.version, "url": e.url, "error": e.reason}
    finally:
        await network.close()

    return {
        "success": True,
        "version": manifest.version,
        "precached": len(await storage.entries(manifest.precache_name)),
        "generations": await storage.keys(),
    }


async def cache_status(settings: Settings | None = None) -> dict[str, Any]:
    """Get current generations and their entry counts.

    Returns:
        Dictionary with cache status information
    """
    settings = settings or get_settings()
    storage = FileSystemCacheStorage(settings.cache.cache_dir)
    manifest = PrecacheManifest(version=settings.cache.version)

    generations = {}
    for name in await storage.keys():
        generations[name] = {
            "entries": len(await storage.entries(name)),
            "live": name in manifest.cache_names,
        }

    return {
        "cache_dir": str(settings.cache.cache_dir),
        "version": manifest.version,
        "generations": generations,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def clear_cache(confirm: bool = False, settings: Settings | None = None) -> bool:
    """Delete every cache generation.

    Args:
        confirm: Must be True to actually clear the cache

    Returns:
        True if cache was cleared
    """
    if not confirm:
        print("Cache clear cancelled. Pass --confirm to clear.")
        return False

    settings = settings or get_settings()
    await FileSystemCacheStorage(settings.cache.cache_dir).clear()
    print("Cache cleared successfully")
    return True


def main() -> None:
    """CLI entry point for cache management."""
    if len(sys.argv) < 2:
        print("Usage: python -m daily_tasks.cache.cli [install|status|clear]")
        sys.exit(1)

    command = sys.argv[1]

    if command == "install":
        result = asyncio.run(install())
        print(json.dumps(result, indent=2))
        if not result["success"]:
            sys.exit(1)

    elif command == "status":
        result = asyncio.run(cache_status())
        print(json.dumps(result, indent=2))

    elif command == "clear":
        confirm = "--confirm" in sys.argv
        asyncio.run(clear_cache(confirm))

    else:
        print(f"Unknown command: {command}")
        print("Available commands: install, status, clear")
        sys.exit(1)


if __name__ == "__main__":
    main()
