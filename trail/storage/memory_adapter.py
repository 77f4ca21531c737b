"""
Memory Storage Adapter - Dict-backed storage for tests and offline play.

Same semantics as the file adapter; nothing outlives the process.
"""

from __future__ import annotations

from ..config import MAX_TOP_SCORES
from .adapter import StorageProvider, insert_score, leaderboard_from_progressions
from .schemas import PlayerMetaProgression, PlayerRecord, PlayerScore


class MemoryStorageAdapter(StorageProvider):
    """In-memory storage. Records are copied in and out."""

    name = "memory"

    def __init__(self, max_scores: int = MAX_TOP_SCORES):
        self.max_scores = max_scores
        self._players: dict[str, PlayerRecord] = {}
        self._scores: list[PlayerScore] = []
        self._progressions: dict[str, PlayerMetaProgression] = {}
        self.initialized = False

    async def init(self) -> None:
        self.initialized = True

    async def save_player_data(self, player_id: str, data: PlayerRecord) -> None:
        self._players[player_id] = data.model_copy(deep=True)

    async def load_player_data(self, player_id: str) -> PlayerRecord | None:
        record = self._players.get(player_id)
        return record.model_copy(deep=True) if record else None

    async def delete_player_data(self, player_id: str) -> None:
        self._players.pop(player_id, None)

    async def save_global_score(self, score: PlayerScore) -> None:
        self._scores = insert_score(self._scores, score.model_copy(deep=True), self.max_scores)

    async def get_global_scores(self, category: str, limit: int = 10) -> list[PlayerScore]:
        matching = [s for s in self._scores if s.category == category]
        return [s.model_copy(deep=True) for s in matching[:limit]]

    async def save_meta_progression(self, player_id: str, progression: PlayerMetaProgression) -> None:
        existing = self._progressions.get(player_id)
        if existing is not None:
            progression = existing.merged_with(progression)
        self._progressions[player_id] = progression.model_copy(deep=True)

    async def load_meta_progression(self, player_id: str) -> PlayerMetaProgression | None:
        progression = self._progressions.get(player_id)
        return progression.model_copy(deep=True) if progression else None

    async def get_player_leaderboard(self) -> list[PlayerScore]:
        return leaderboard_from_progressions(self._progressions)

    async def cleanup(self) -> None:
        self._players.clear()
        self._scores.clear()
        self._progressions.clear()
        self.initialized = False
