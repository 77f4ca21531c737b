"""
Bots module - Automated card play.

Provides:
- PlayerPolicy: Interface for choosing combat actions
- GreedyPolicy: Scores playable cards for the current turn
- RandomPolicy: Baseline for tests
"""

from .policy import PlayerPolicy, PlayerDecision, GreedyPolicy, RandomPolicy

__all__ = [
    "PlayerPolicy",
    "PlayerDecision",
    "GreedyPolicy",
    "RandomPolicy",
]
