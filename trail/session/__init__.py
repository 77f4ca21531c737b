"""
Session Module - Runs, their state, and the combat turn driver.

A run represents one play-through:
- Created when the player starts a new game
- Holds the GameState (player data, progress, deck)
- Hosts at most one combat encounter at a time
- Reset on defeat (permadeath); only meta progression survives
"""

from .game_state import GameState, PlayerData, GameProgress, experience_for_next_level
from .manager import SessionManager, RunSession, RunStatus
from .game_loop import CombatLoop, LoopState

__all__ = [
    "GameState",
    "PlayerData",
    "GameProgress",
    "experience_for_next_level",
    "SessionManager",
    "RunSession",
    "RunStatus",
    "CombatLoop",
    "LoopState",
]
