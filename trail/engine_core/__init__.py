"""
Engine Core - Deck, card effects, and the combat state machine.

The engine is the runtime that:
1. Owns a player's deck (draw pile, hand, discard pile)
2. Validates card plays against available energy
3. Resolves card effects into resource deltas
4. Telegraphs and resolves enemy intent
5. Drives an encounter to victory or defeat
"""

from .card import (
    Card,
    CardEffect,
    CardCategory,
    CardType,
    CardRarity,
    EffectType,
    EffectTarget,
)
from .deck import DeckSystem, DeckSnapshot, CardPlayResult, fisher_yates_shuffle
from .effect_resolver import (
    CardEffectEngine,
    EffectContext,
    EffectExecutionResult,
    EffectBatchResult,
    resolve_target,
)
from .intent import EnemyIntent, IntentType, AIType, get_enemy_intent
from .action import CombatAction, CombatActionType, CombatResult
from .combat import CombatController, CombatState, CombatPhase, CombatReward

__all__ = [
    "Card",
    "CardEffect",
    "CardCategory",
    "CardType",
    "CardRarity",
    "EffectType",
    "EffectTarget",
    "DeckSystem",
    "DeckSnapshot",
    "CardPlayResult",
    "fisher_yates_shuffle",
    "CardEffectEngine",
    "EffectContext",
    "EffectExecutionResult",
    "EffectBatchResult",
    "resolve_target",
    "EnemyIntent",
    "IntentType",
    "AIType",
    "get_enemy_intent",
    "CombatAction",
    "CombatActionType",
    "CombatResult",
    "CombatController",
    "CombatState",
    "CombatPhase",
    "CombatReward",
]
