"""
Effect Resolver - Interprets card effects into resource deltas.

The engine is target-agnostic: a damage effect simply produces a negative
health delta. Which side that delta lands on is decided by resolve_target()
when a whole card is executed, and the combat controller applies the enemy
side to its own state.

Design principles:
- One handler per EffectType, looked up from a table
- Results, not exceptions: failures come back as EffectExecutionResult
- All-or-nothing: a card whose effects fail applies no deltas
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, TYPE_CHECKING
import logging

from .card import CardEffect, EffectTarget, EffectType, describe_effect, pluralize

if TYPE_CHECKING:
    from .deck import DeckSystem
    from ..session.game_state import GameState

logger = logging.getLogger(__name__)

# Effects that move cards between piles as they execute
DECK_EFFECTS = frozenset({EffectType.DRAW, EffectType.REWIND})


@dataclass
class EffectContext:
    """Everything an effect may read or touch while it resolves."""
    game_state: GameState
    deck_system: DeckSystem
    current_energy: int = 0
    is_player_turn: bool = True


@dataclass
class EffectExecutionResult:
    """Outcome of a single effect."""
    success: bool
    message: str | None = None
    energy_change: int = 0
    health_change: int = 0
    defense_change: int = 0

    @classmethod
    def ok(cls, message: str, **deltas: int) -> EffectExecutionResult:
        return cls(success=True, message=message, **deltas)

    @classmethod
    def failure(cls, message: str) -> EffectExecutionResult:
        return cls(success=False, message=message)


@dataclass
class ResourceDeltas:
    """Summed deltas for one side of the fight."""
    energy_change: int = 0
    health_change: int = 0
    defense_change: int = 0

    def add(self, result: EffectExecutionResult) -> None:
        self.energy_change += result.energy_change
        self.health_change += result.health_change
        self.defense_change += result.defense_change

    @property
    def is_zero(self) -> bool:
        return not (self.energy_change or self.health_change or self.defense_change)


@dataclass
class EffectBatchResult:
    """
    Outcome of executing all effects of a card.

    `player` deltas have already been applied to the GameState health when
    success is True; `enemy` deltas and player defense are for the caller.
    """
    success: bool
    message: str | None = None
    results: list[tuple[CardEffect, EffectExecutionResult]] = field(default_factory=list)
    player: ResourceDeltas = field(default_factory=ResourceDeltas)
    enemy: ResourceDeltas = field(default_factory=ResourceDeltas)

    @classmethod
    def failure(cls, message: str | None) -> EffectBatchResult:
        return cls(success=False, message=message)

    @property
    def messages(self) -> list[str]:
        return [r.message for _, r in self.results if r.message]


def resolve_target(effect: CardEffect) -> EffectTarget:
    """Explicit target wins; damage defaults to the enemy, all else to self."""
    if effect.target is not None:
        return effect.target
    if effect.effect_type == EffectType.DAMAGE:
        return EffectTarget.ENEMY
    return EffectTarget.SELF


Handler = Callable[[CardEffect, EffectContext], EffectExecutionResult]


class CardEffectEngine:
    """
    Executes card effects.

    Usage:
        engine = CardEffectEngine()
        context = EffectContext(game_state=state, deck_system=deck)
        batch = engine.execute_effects(play_result.effects_applied, context)
    """

    def __init__(self):
        self._handlers: dict[EffectType, Handler] = {
            EffectType.DAMAGE: self._execute_damage,
            EffectType.DEFENSE: self._execute_defense,
            EffectType.HEAL: self._execute_heal,
            EffectType.DRAW: self._execute_draw,
            EffectType.DODGE: self._execute_dodge,
            EffectType.REWIND: self._execute_rewind,
        }
        missing = set(EffectType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for effect types: {sorted(m.value for m in missing)}")

    def execute_effect(self, effect: CardEffect, context: EffectContext) -> EffectExecutionResult:
        """Execute one effect. Never raises."""
        handler = self._handlers.get(effect.effect_type) if effect.is_known else None
        if handler is None:
            return EffectExecutionResult.failure(f"Unknown effect type: {effect.type_name}")

        try:
            return handler(effect, context)
        except Exception:
            logger.exception("Effect %s failed", effect.type_name)
            return EffectExecutionResult.failure("Effect execution failed")

    def execute_effects(self, effects: list[CardEffect], context: EffectContext) -> EffectBatchResult:
        """
        Execute effects in order, all-or-nothing.

        The first failure aborts the whole batch and nothing is applied:
        cards already drawn or reshuffled by earlier effects are put back.
        On success the player's health delta is applied once, clamped.
        """
        for effect in effects:
            if not effect.is_known:
                return EffectBatchResult.failure(f"Unknown effect type: {effect.type_name}")

        snapshot = None
        if any(effect.effect_type in DECK_EFFECTS for effect in effects):
            snapshot = context.deck_system.get_deck_state()

        batch = EffectBatchResult(success=True)
        for effect in effects:
            result = self.execute_effect(effect, context)
            if not result.success:
                if snapshot is not None:
                    context.deck_system.restore(snapshot)
                return EffectBatchResult.failure(result.message)

            batch.results.append((effect, result))
            target = resolve_target(effect)
            if target in (EffectTarget.SELF, EffectTarget.BOTH):
                batch.player.add(result)
            if target in (EffectTarget.ENEMY, EffectTarget.BOTH):
                batch.enemy.add(result)

        self._apply_player_changes(batch.player, context)
        return batch

    def _apply_player_changes(self, deltas: ResourceDeltas, context: EffectContext) -> None:
        # Energy is paid through card cost and defense lives in combat state.
        if deltas.health_change:
            context.game_state.modify_health(deltas.health_change)

    def can_execute_effect(self, effect: CardEffect, context: EffectContext) -> bool:
        """Whether the effect would do something useful right now."""
        kind = effect.effect_type
        if kind in (EffectType.DAMAGE, EffectType.DEFENSE, EffectType.DODGE):
            return effect.value > 0
        if kind == EffectType.HEAL:
            player = context.game_state.get_player_data()
            return player.health < player.max_health and effect.value > 0
        if kind == EffectType.DRAW:
            return effect.value > 0 and context.deck_system.get_drawable_cards_count() > 0
        if kind == EffectType.REWIND:
            return context.deck_system.get_discard_pile_count() > 0
        return False

    def describe_effect(self, effect: CardEffect) -> str:
        if not effect.is_known:
            return "Unknown effect"
        return describe_effect(effect)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _execute_damage(self, effect: CardEffect, context: EffectContext) -> EffectExecutionResult:
        return EffectExecutionResult.ok(f"Dealt {effect.value} damage", health_change=-effect.value)

    def _execute_defense(self, effect: CardEffect, context: EffectContext) -> EffectExecutionResult:
        return EffectExecutionResult.ok(f"Gained {effect.value} defense", defense_change=effect.value)

    def _execute_heal(self, effect: CardEffect, context: EffectContext) -> EffectExecutionResult:
        player = context.game_state.get_player_data()
        amount = min(effect.value, player.max_health - player.health)
        if amount <= 0:
            return EffectExecutionResult.ok("Already at full health")
        return EffectExecutionResult.ok(f"Healed {amount} health", health_change=amount)

    def _execute_draw(self, effect: CardEffect, context: EffectContext) -> EffectExecutionResult:
        drawn = context.deck_system.draw_cards(max(0, effect.value))
        return EffectExecutionResult.ok(f"Drew {len(drawn)} {pluralize('card', len(drawn))}")

    def _execute_dodge(self, effect: CardEffect, context: EffectContext) -> EffectExecutionResult:
        # Informational until incoming attacks can be negated.
        return EffectExecutionResult.ok(
            f"Will avoid the next {effect.value} {pluralize('attack', effect.value)}"
        )

    def _execute_rewind(self, effect: CardEffect, context: EffectContext) -> EffectExecutionResult:
        moved = context.deck_system.reshuffle_discard_pile()
        if moved == 0:
            return EffectExecutionResult.ok("No cards to rewind")
        return EffectExecutionResult.ok(
            f"Rewound {moved} {pluralize('card', moved)} into draw pile"
        )
