"""
API Module - HTTP interface to runs and combat.

Clients:
1. Create a run
2. Start an encounter
3. Play cards and end turns
4. Read combat state and logs

Runs live in memory; saved progress goes through the configured storage.
"""

from .schemas import (
    # Requests
    CreateRunRequest,
    StartCombatRequest,
    PlayCardRequest,
    # Responses
    RunResponse,
    RunListResponse,
    EndRunResponse,
    CombatStateResponse,
    CombatActionResponse,
    EnemyListResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    PlayerInfo,
    DeckInfo,
    CardInfo,
    IntentInfo,
    # Enums
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateRunRequest",
    "StartCombatRequest",
    "PlayCardRequest",
    # Responses
    "RunResponse",
    "RunListResponse",
    "EndRunResponse",
    "CombatStateResponse",
    "CombatActionResponse",
    "EnemyListResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "PlayerInfo",
    "DeckInfo",
    "CardInfo",
    "IntentInfo",
    # Enums
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
