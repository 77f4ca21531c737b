"""
Storage Adapter - The async contract every storage backend implements.

A provider persists three kinds of records:
- Player data (one saved run per player id)
- Global scores (leaderboards by category)
- Meta progression (cross-run bookkeeping)
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from .schemas import PlayerMetaProgression, PlayerRecord, PlayerScore


class StorageProvider(ABC):
    """
    Abstract base class for storage backends.

    Writes may raise on failure; reads of missing records return None or
    an empty list.
    """

    name: str = "abstract"

    @abstractmethod
    async def init(self) -> None:
        """Prepare the backend (create files, open connections)."""
        pass

    @abstractmethod
    async def save_player_data(self, player_id: str, data: PlayerRecord) -> None:
        pass

    @abstractmethod
    async def load_player_data(self, player_id: str) -> PlayerRecord | None:
        pass

    @abstractmethod
    async def delete_player_data(self, player_id: str) -> None:
        pass

    @abstractmethod
    async def save_global_score(self, score: PlayerScore) -> None:
        pass

    @abstractmethod
    async def get_global_scores(self, category: str, limit: int = 10) -> list[PlayerScore]:
        """Top scores in a category, highest first."""
        pass

    @abstractmethod
    async def save_meta_progression(self, player_id: str, progression: PlayerMetaProgression) -> None:
        """Merge progression into whatever is already stored for the player."""
        pass

    @abstractmethod
    async def load_meta_progression(self, player_id: str) -> PlayerMetaProgression | None:
        pass

    @abstractmethod
    async def get_player_leaderboard(self) -> list[PlayerScore]:
        """One overall entry per player, ranked by total score."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Release resources."""
        pass


def leaderboard_from_progressions(progressions: dict[str, PlayerMetaProgression]) -> list[PlayerScore]:
    """Build the overall leaderboard shared by the bundled adapters."""
    scores = [
        PlayerScore(
            player_id=player_id,
            player_name=player_id,
            score=progression.total_score,
            category="overall_total",
            date=progression.last_played,
        )
        for player_id, progression in progressions.items()
    ]
    return sorted(scores, key=lambda s: s.score, reverse=True)


def insert_score(scores: list[PlayerScore], score: PlayerScore, cap: int) -> list[PlayerScore]:
    """Add a score, keep the list sorted descending and truncated to cap."""
    updated = sorted([*scores, score], key=lambda s: s.score, reverse=True)
    return updated[:cap]
