"""
Enemy Intent - Telegraphed enemy actions.

get_enemy_intent() is a pure function of the enemy's archetype and the turn
count, so the intent shown to the player is exactly the one that resolves.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..content.enemies import EnemyData


class IntentType(Enum):
    ATTACK = "attack"
    DEFEND = "defend"
    SPECIAL = "special"


class AIType(Enum):
    """Enemy behaviour archetypes."""
    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    SPECIAL = "special"


@dataclass(frozen=True)
class EnemyIntent:
    intent_type: IntentType
    value: int
    description: str

    @property
    def is_attack(self) -> bool:
        return self.intent_type == IntentType.ATTACK


def scaled_damage(base_damage: int, turn_count: int) -> int:
    """Damage grows by one every three turns."""
    return base_damage + turn_count // 3


def get_enemy_intent(enemy: EnemyData, turn_count: int) -> EnemyIntent:
    """
    Decide what the enemy will do on this turn.

    - aggressive: full attack on even turns, a 0.7x quick strike on odd turns
    - defensive: defends (0.8x) every third turn, attacks otherwise
    - balanced: attacks on even turns, defends (0.6x) on odd turns
    - special: a 1.5x special every fourth turn, attacks otherwise
    - anything else: plain attack
    """
    damage = scaled_damage(enemy.base_damage, turn_count)
    attack = EnemyIntent(IntentType.ATTACK, damage, f"{enemy.name} prepares to attack!")

    try:
        ai_type = AIType(enemy.ai_type)
    except ValueError:
        return attack

    if ai_type == AIType.AGGRESSIVE:
        if turn_count % 2 == 0:
            return attack
        return EnemyIntent(
            IntentType.ATTACK,
            damage * 7 // 10,
            f"{enemy.name} prepares a quick strike!",
        )

    if ai_type == AIType.DEFENSIVE:
        if turn_count % 3 == 0:
            return EnemyIntent(
                IntentType.DEFEND,
                damage * 8 // 10,
                f"{enemy.name} prepares to defend!",
            )
        return attack

    if ai_type == AIType.BALANCED:
        if turn_count % 2 == 0:
            return attack
        return EnemyIntent(
            IntentType.DEFEND,
            damage * 6 // 10,
            f"{enemy.name} prepares to defend!",
        )

    if ai_type == AIType.SPECIAL:
        if turn_count % 4 == 0:
            return EnemyIntent(
                IntentType.SPECIAL,
                damage * 3 // 2,
                f"{enemy.name} prepares a special attack!",
            )
        return attack

    return attack
