"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the engine.

Error Codes:
- RUN_NOT_FOUND: Run does not exist or has ended
- NO_ACTIVE_COMBAT: The run has no encounter running
- COMBAT_OVER: The encounter already ended in victory or defeat
- VALIDATION_ERROR: The request body is invalid
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class RunStatus(str, Enum):
    """Run status values."""
    ACTIVE = "active"
    IN_COMBAT = "in_combat"
    ENDED = "ended"
    ABANDONED = "abandoned"


class CombatPhase(str, Enum):
    """Combat phase values."""
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    VICTORY = "victory"
    DEFEAT = "defeat"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Machine-readable error codes."""
    RUN_NOT_FOUND = "RUN_NOT_FOUND"
    NO_ACTIVE_COMBAT = "NO_ACTIVE_COMBAT"
    COMBAT_OVER = "COMBAT_OVER"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Nested Models
# =============================================================================

class CardEffectInfo(BaseModel):
    """One effect on a card."""
    type: str = Field(description="damage, defense, heal, draw, dodge, rewind")
    value: int = 0
    target: Optional[str] = Field(None, description="self, enemy, both")


class CardInfo(BaseModel):
    """A card as shown in hand."""
    card_id: str
    name: str
    description: str
    cost: int = Field(..., ge=0)
    category: str
    card_type: str
    rarity: str
    effects: list[CardEffectInfo] = Field(default_factory=list)
    effect_text: str = ""
    playable: bool = Field(False, description="Affordable with the current energy")

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """Player stats for the run."""
    player_id: str
    name: str
    health: int
    max_health: int
    time_energy: int
    max_time_energy: int
    paradox_risk: int = 0
    level: int = 1
    experience: int = 0
    day: int = 1
    location: str


class DeckInfo(BaseModel):
    """Pile sizes."""
    draw_pile: int
    discard_pile: int
    hand_size: int
    total_cards: int
    max_hand_size: int


class IntentInfo(BaseModel):
    """The enemy's telegraphed action."""
    intent_type: str = Field(description="attack, defend, special")
    value: int
    description: str


class RewardInfo(BaseModel):
    """What a victory paid out."""
    experience: int = 0
    story_clues: list[str] = Field(default_factory=list)
    cards: list[str] = Field(default_factory=list)


class EnemyInfo(BaseModel):
    """Enemy catalog entry."""
    enemy_id: str
    name: str
    health: int
    ai_type: str
    base_damage: int
    description: str


# =============================================================================
# Request Models
# =============================================================================

class CreateRunRequest(BaseModel):
    """Request to start a new run."""
    player_name: Optional[str] = Field(None, description="Display name for the player")
    player_id: Optional[str] = Field(None, description="Storage id; generated when omitted")
    seed: Optional[int] = Field(None, description="Seed for reproducible runs")


class StartCombatRequest(BaseModel):
    """Request to start an encounter."""
    enemy_id: str = Field("test_enemy", description="Enemy catalog id; unknown ids use the default")


class PlayCardRequest(BaseModel):
    """Request to play a card from hand."""
    card_id: str = Field(..., min_length=1, description="Id of a card in hand")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class CombatStateResponse(BaseModel):
    """Full state of an encounter."""
    run_id: str
    enemy_id: str
    enemy_name: str
    enemy_health: int
    enemy_max_health: int
    phase: CombatPhase
    turn_count: int
    is_player_turn: bool
    player_defense: int
    intent: Optional[IntentInfo] = None
    intent_text: str = ""
    player: PlayerInfo
    hand: list[CardInfo] = Field(default_factory=list)
    deck: DeckInfo
    recent_log: list[str] = Field(default_factory=list)
    reward: Optional[RewardInfo] = None
    api_version: str = Field("v1", description="API version")


class RunResponse(BaseModel):
    """Run status."""
    run_id: str
    status: RunStatus
    player: PlayerInfo
    deck: DeckInfo
    in_combat: bool = False
    enemy_id: Optional[str] = None
    encounters_won: int = 0
    created_at: float
    api_version: str = Field("v1", description="API version")


class RunListResponse(BaseModel):
    """List of active runs."""
    runs: list[str]
    count: int


class EndRunResponse(BaseModel):
    """Result of ending a run."""
    success: bool
    run_id: str


class CombatActionResponse(BaseModel):
    """Result of a combat command."""
    run_id: str
    success: bool
    declined: bool = False
    ignored: bool = False
    reason: Optional[str] = None
    events: list[str] = Field(default_factory=list)
    energy_spent: int = 0
    combat: Optional[CombatStateResponse] = Field(
        None, description="State after the command; null once the encounter is abandoned"
    )


class EnemyListResponse(BaseModel):
    enemies: list[EnemyInfo]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    storage: Optional[str] = None
