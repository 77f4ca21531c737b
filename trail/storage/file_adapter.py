"""
File Storage Adapter - JSON documents in a data directory.

Layout:
    <data_dir>/player_data.json       {player_id: PlayerRecord}
    <data_dir>/global_scores.json     {"scores": [PlayerScore, ...]}
    <data_dir>/meta_progression.json  {player_id: PlayerMetaProgression}

Reads of a missing or unreadable document fall back to an empty one so a
corrupt file never blocks play. Writes go through a temp file and replace().
"""

from __future__ import annotations
from pathlib import Path
from typing import Any
import asyncio
import json
import logging

from ..config import MAX_TOP_SCORES, TRAIL_DATA_DIR
from .adapter import StorageProvider, insert_score, leaderboard_from_progressions
from .schemas import PlayerMetaProgression, PlayerRecord, PlayerScore

logger = logging.getLogger(__name__)

PLAYER_DATA_FILE = "player_data.json"
GLOBAL_SCORES_FILE = "global_scores.json"
META_PROGRESSION_FILE = "meta_progression.json"


class FileStorageAdapter(StorageProvider):
    """
    Storage backed by JSON files.

    Usage:
        storage = FileStorageAdapter(Path("./data"))
        await storage.init()
        await storage.save_player_data("p1", record)
    """

    name = "file"

    def __init__(self, data_dir: Path | str | None = None, max_scores: int = MAX_TOP_SCORES):
        self.data_dir = Path(data_dir) if data_dir is not None else TRAIL_DATA_DIR
        self.max_scores = max_scores
        self._lock = asyncio.Lock()

    @property
    def player_data_path(self) -> Path:
        return self.data_dir / PLAYER_DATA_FILE

    @property
    def global_scores_path(self) -> Path:
        return self.data_dir / GLOBAL_SCORES_FILE

    @property
    def meta_progression_path(self) -> Path:
        return self.data_dir / META_PROGRESSION_FILE

    async def init(self) -> None:
        defaults: list[tuple[Path, dict[str, Any]]] = [
            (self.player_data_path, {}),
            (self.global_scores_path, {"scores": []}),
            (self.meta_progression_path, {}),
        ]
        await asyncio.to_thread(self.data_dir.mkdir, parents=True, exist_ok=True)
        for path, default in defaults:
            if not path.exists():
                await asyncio.to_thread(_write_json, path, default)
        logger.debug("File storage ready at %s", self.data_dir)

    # =========================================================================
    # Player data
    # =========================================================================

    async def save_player_data(self, player_id: str, data: PlayerRecord) -> None:
        async with self._lock:
            documents = await self._load(self.player_data_path)
            documents[player_id] = data.model_dump(mode="json")
            await self._save(self.player_data_path, documents)

    async def load_player_data(self, player_id: str) -> PlayerRecord | None:
        documents = await self._load(self.player_data_path)
        raw = documents.get(player_id)
        if raw is None:
            return None
        return PlayerRecord.model_validate(raw)

    async def delete_player_data(self, player_id: str) -> None:
        async with self._lock:
            documents = await self._load(self.player_data_path)
            if documents.pop(player_id, None) is not None:
                await self._save(self.player_data_path, documents)

    # =========================================================================
    # Scores
    # =========================================================================

    async def save_global_score(self, score: PlayerScore) -> None:
        async with self._lock:
            document = await self._load(self.global_scores_path)
            scores = [PlayerScore.model_validate(s) for s in document.get("scores", [])]
            scores = insert_score(scores, score, self.max_scores)
            document["scores"] = [s.model_dump(mode="json") for s in scores]
            await self._save(self.global_scores_path, document)

    async def get_global_scores(self, category: str, limit: int = 10) -> list[PlayerScore]:
        document = await self._load(self.global_scores_path)
        scores = [PlayerScore.model_validate(s) for s in document.get("scores", [])]
        return [s for s in scores if s.category == category][:limit]

    # =========================================================================
    # Meta progression
    # =========================================================================

    async def save_meta_progression(self, player_id: str, progression: PlayerMetaProgression) -> None:
        async with self._lock:
            documents = await self._load(self.meta_progression_path)
            existing = documents.get(player_id)
            if existing is not None:
                progression = PlayerMetaProgression.model_validate(existing).merged_with(progression)
            documents[player_id] = progression.model_dump(mode="json")
            await self._save(self.meta_progression_path, documents)

    async def load_meta_progression(self, player_id: str) -> PlayerMetaProgression | None:
        documents = await self._load(self.meta_progression_path)
        raw = documents.get(player_id)
        if raw is None:
            return None
        return PlayerMetaProgression.model_validate(raw)

    async def get_player_leaderboard(self) -> list[PlayerScore]:
        documents = await self._load(self.meta_progression_path)
        progressions = {
            player_id: PlayerMetaProgression.model_validate(raw)
            for player_id, raw in documents.items()
        }
        return leaderboard_from_progressions(progressions)

    async def cleanup(self) -> None:
        # Nothing is held open between calls.
        return None

    # =========================================================================
    # File helpers
    # =========================================================================

    async def _load(self, path: Path) -> dict[str, Any]:
        return await asyncio.to_thread(_read_json, path)

    async def _save(self, path: Path, document: dict[str, Any]) -> None:
        await asyncio.to_thread(_write_json, path, document)


def _read_json(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s, treating it as empty: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _write_json(path: Path, document: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
    tmp_path.replace(path)
