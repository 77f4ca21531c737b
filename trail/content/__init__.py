"""
Content - Sample game data.

This module contains:
- Enemy catalog (with a default fallback enemy)
- Starter card catalog used to build a new run's deck

Stats are sample data, not balanced content.
"""

from .enemies import ENEMY_DATA, DEFAULT_ENEMY_ID, EnemyData, get_enemy, list_enemies
from .starter_deck import STARTER_CARDS, create_starter_cards, get_card_by_id

__all__ = [
    "ENEMY_DATA",
    "DEFAULT_ENEMY_ID",
    "EnemyData",
    "get_enemy",
    "list_enemies",
    "STARTER_CARDS",
    "create_starter_cards",
    "get_card_by_id",
]
