"""
Storage Schemas - Pydantic models for everything that is persisted.

Records:
- PlayerRecord: a saved run (player stats plus session progress)
- PlayerScore: one entry on a global leaderboard
- PlayerMetaProgression: cross-run bookkeeping that survives permadeath
"""

from datetime import datetime, timezone
from typing import Optional
import uuid

from pydantic import BaseModel, Field


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_score_id() -> str:
    return f"score_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Player records
# =============================================================================

class PlayerRecord(BaseModel):
    """A saved run."""
    player_id: str
    player_name: str
    health: int = Field(..., ge=0)
    max_health: int = Field(..., ge=0)
    time_energy: int = Field(..., ge=0)
    max_time_energy: int = Field(..., ge=0)
    paradox_risk: int = Field(0, ge=0, le=100)
    deck_size: int = Field(0, ge=0)
    current_location: str
    day: int = Field(1, ge=1)
    experience: int = Field(0, ge=0)
    level: int = Field(1, ge=1)
    character_traits: list[str] = Field(default_factory=list)

    # Session progress
    current_scene: str = "HubScene"
    game_flags: dict[str, bool] = Field(default_factory=dict)
    visited_locations: list[str] = Field(default_factory=list)
    completed_events: list[str] = Field(default_factory=list)

    saved_at: str = Field(default_factory=utc_now)


# =============================================================================
# Scores
# =============================================================================

class ScoreGameData(BaseModel):
    """Optional details attached to a score."""
    day_reached: Optional[int] = None
    cards_collected: Optional[int] = None
    damage_taken: Optional[int] = None
    completion_time: Optional[float] = None


class PlayerScore(BaseModel):
    """A leaderboard entry."""
    score_id: str = Field(default_factory=new_score_id)
    player_id: str
    player_name: str
    score: int
    category: str = Field(..., description="Leaderboard category, e.g. highest_day_reached")
    date: str = Field(default_factory=utc_now)
    game_data: Optional[ScoreGameData] = None


# =============================================================================
# Meta progression
# =============================================================================

class PlayerMetaProgression(BaseModel):
    """Cross-run progression for one player."""
    player_id: str
    total_runs: int = Field(0, ge=0)
    successful_runs: int = Field(0, ge=0)
    highest_day_reached: int = Field(0, ge=0)
    highest_level_reached: int = Field(1, ge=1)
    cards_unlocked: list[str] = Field(default_factory=list)
    relics_unlocked: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    total_score: int = 0
    last_played: str = Field(default_factory=utc_now)

    def merged_with(self, incoming: "PlayerMetaProgression") -> "PlayerMetaProgression":
        """
        Fold an incoming update into this stored record.

        Counters and scores are summed, maxima kept, unlock lists unioned
        (stored order first).
        """
        return PlayerMetaProgression(
            player_id=self.player_id,
            total_runs=self.total_runs + incoming.total_runs,
            successful_runs=self.successful_runs + incoming.successful_runs,
            highest_day_reached=max(self.highest_day_reached, incoming.highest_day_reached),
            highest_level_reached=max(self.highest_level_reached, incoming.highest_level_reached),
            cards_unlocked=_union(self.cards_unlocked, incoming.cards_unlocked),
            relics_unlocked=_union(self.relics_unlocked, incoming.relics_unlocked),
            achievements=_union(self.achievements, incoming.achievements),
            total_score=self.total_score + incoming.total_score,
            last_played=incoming.last_played,
        )


def _union(first: list[str], second: list[str]) -> list[str]:
    return list(dict.fromkeys([*first, *second]))
