"""
Storage Manager - One interface over the configured storage backend.

The manager:
1. Picks a provider by name (TRAIL_STORAGE_PROVIDER) or takes one directly
2. Initializes it lazily on first use
3. Wraps backend failures in StorageError

It is constructed and passed around; there is no process-wide instance.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar
import logging

from ..config import TRAIL_DATA_DIR, TRAIL_STORAGE_PROVIDER
from .adapter import StorageProvider
from .file_adapter import FileStorageAdapter
from .memory_adapter import MemoryStorageAdapter
from .schemas import PlayerMetaProgression, PlayerRecord, PlayerScore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageError(Exception):
    """A storage backend failed."""
    pass


@dataclass
class StorageStatus:
    initialized: bool
    provider: str
    health: str  # not_initialized, healthy, error


def create_provider(name: str, data_dir: Path | None = None) -> StorageProvider:
    """Build a provider by name."""
    providers: dict[str, Callable[[], StorageProvider]] = {
        "file": lambda: FileStorageAdapter(data_dir or TRAIL_DATA_DIR),
        "memory": MemoryStorageAdapter,
    }
    factory = providers.get(name)
    if factory is None:
        raise StorageError(f"Unknown storage provider: {name}")
    return factory()


class StorageManager(StorageProvider):
    """
    Storage facade used by GameState and the API.

    Usage:
        storage = StorageManager()                       # configured provider
        storage = StorageManager(MemoryStorageAdapter())  # explicit provider
        await storage.init()                              # optional, raises StorageError
    """

    def __init__(self, provider: StorageProvider | None = None, provider_name: str | None = None):
        if provider is None:
            provider = create_provider(provider_name or TRAIL_STORAGE_PROVIDER)
        self.provider = provider
        self.initialized = False

    @property
    def provider_name(self) -> str:
        return self.provider.name

    async def init(self) -> None:
        if self.initialized:
            return
        try:
            await self.provider.init()
        except Exception as e:
            logger.error("Failed to initialize %s storage: %s", self.provider_name, e)
            raise StorageError(f"Failed to initialize {self.provider_name} storage: {e}") from e
        self.initialized = True
        logger.info("Storage %s initialized", self.provider_name)

    async def save_player_data(self, player_id: str, data: PlayerRecord) -> None:
        await self._call("save player data", self.provider.save_player_data, player_id, data)

    async def load_player_data(self, player_id: str) -> PlayerRecord | None:
        return await self._call("load player data", self.provider.load_player_data, player_id)

    async def delete_player_data(self, player_id: str) -> None:
        await self._call("delete player data", self.provider.delete_player_data, player_id)

    async def save_global_score(self, score: PlayerScore) -> None:
        await self._call("save global score", self.provider.save_global_score, score)

    async def get_global_scores(self, category: str, limit: int = 10) -> list[PlayerScore]:
        return await self._call("load global scores", self.provider.get_global_scores, category, limit)

    async def save_meta_progression(self, player_id: str, progression: PlayerMetaProgression) -> None:
        await self._call(
            "save meta progression", self.provider.save_meta_progression, player_id, progression
        )

    async def load_meta_progression(self, player_id: str) -> PlayerMetaProgression | None:
        return await self._call("load meta progression", self.provider.load_meta_progression, player_id)

    async def get_player_leaderboard(self) -> list[PlayerScore]:
        return await self._call("load leaderboard", self.provider.get_player_leaderboard)

    async def cleanup(self) -> None:
        if not self.initialized:
            return
        await self._call("clean up", self.provider.cleanup)
        self.initialized = False

    async def get_storage_status(self) -> StorageStatus:
        if not self.initialized:
            return StorageStatus(False, self.provider_name, "not_initialized")
        try:
            await self.provider.get_global_scores("health_check", 1)
        except Exception:
            logger.warning("Storage health check failed", exc_info=True)
            return StorageStatus(True, self.provider_name, "error")
        return StorageStatus(True, self.provider_name, "healthy")

    async def _call(self, what: str, method: Callable[..., Awaitable[T]], *args: Any) -> T:
        await self.init()
        try:
            return await method(*args)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to {what}: {e}") from e
