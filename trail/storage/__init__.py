"""
Storage Module - Persistence for runs, scores, and meta progression.

Provides:
- StorageProvider: async contract for backends
- FileStorageAdapter: JSON files in a data directory
- MemoryStorageAdapter: dicts, for tests and offline play
- StorageManager: lazily initialized facade over the configured backend

Only saved runs and meta progression are persisted. Combat state is not.
"""

from .schemas import PlayerRecord, PlayerScore, PlayerMetaProgression, ScoreGameData
from .adapter import StorageProvider
from .file_adapter import FileStorageAdapter
from .memory_adapter import MemoryStorageAdapter
from .manager import StorageManager, StorageError, StorageStatus, create_provider

__all__ = [
    "PlayerRecord",
    "PlayerScore",
    "PlayerMetaProgression",
    "ScoreGameData",
    "StorageProvider",
    "FileStorageAdapter",
    "MemoryStorageAdapter",
    "StorageManager",
    "StorageError",
    "StorageStatus",
    "create_provider",
]
