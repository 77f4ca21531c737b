"""
Combat Controller - Turn-based combat state machine.

States:
    PLAYER_TURN -> (end turn) -> ENEMY_TURN -> (resolve, next round) -> PLAYER_TURN
    Any damaging card play may end in VICTORY.
    Any enemy action may end in DEFEAT.
    VICTORY and DEFEAT are terminal; flee()/teardown() make the encounter inert.

The controller owns the ephemeral CombatState. Player health and energy
live in the GameState and are only ever changed through it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable
import logging
import random

from ..config import (
    CARDS_PER_TURN,
    COMBAT_LOG_WINDOW,
    OPENING_HAND_SIZE,
    VICTORY_EXPERIENCE,
)
from ..content.enemies import EnemyData, get_enemy
from .action import CombatAction, CombatActionType, CombatResult
from .card import Card, EffectTarget, EffectType, pluralize
from .effect_resolver import CardEffectEngine, EffectBatchResult, EffectContext, resolve_target
from .intent import EnemyIntent, IntentType, get_enemy_intent

if TYPE_CHECKING:
    from ..session.game_state import GameState

logger = logging.getLogger(__name__)


class CombatPhase(Enum):
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    VICTORY = "victory"
    DEFEAT = "defeat"
    ABANDONED = "abandoned"


TERMINAL_PHASES = {CombatPhase.VICTORY, CombatPhase.DEFEAT, CombatPhase.ABANDONED}


@dataclass
class CombatState:
    """Ephemeral state of one encounter."""
    enemy_health: int
    enemy_max_health: int
    is_player_turn: bool = True
    enemy_intent: EnemyIntent | None = None
    player_defense: int = 0
    turn_count: int = 1
    combat_log: list[str] = field(default_factory=lambda: ["Combat begins!"])
    phase: CombatPhase = CombatPhase.PLAYER_TURN

    @property
    def is_over(self) -> bool:
        return self.phase in TERMINAL_PHASES


@dataclass
class CombatReward:
    experience: int = 0
    story_clues: list[str] = field(default_factory=list)
    cards: list[Card] = field(default_factory=list)


class CombatController:
    """
    Drives one combat encounter.

    Usage:
        combat = CombatController(game_state, enemy_id="weak_enemy")
        combat.start()
        combat.play_card("strike")
        combat.end_turn()          # enemy acts, next round begins
        if combat.phase == CombatPhase.VICTORY:
            ...

    For paced play (delays between turn phases) use session.CombatLoop,
    which calls end_player_turn(), resolve_enemy_turn() and
    begin_next_round() separately.
    """

    def __init__(
        self,
        game_state: GameState,
        enemy_id: str = "test_enemy",
        effect_engine: CardEffectEngine | None = None,
        rng: random.Random | None = None,
        opening_hand_size: int = OPENING_HAND_SIZE,
    ):
        self.game_state = game_state
        self.deck = game_state.get_deck_system()
        self.enemy: EnemyData = get_enemy(enemy_id)
        self.effect_engine = effect_engine or CardEffectEngine()
        self.opening_hand_size = opening_hand_size
        self._rng = rng or random.Random()

        self.state: CombatState | None = CombatState(
            enemy_health=self.enemy.health,
            enemy_max_health=self.enemy.max_health,
        )
        self.reward: CombatReward | None = None
        self._started = False
        self._enemy_acted = False
        self._log_listeners: list[Callable[[str], None]] = []

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def phase(self) -> CombatPhase:
        if self.state is None:
            return CombatPhase.ABANDONED
        return self.state.phase

    @property
    def is_active(self) -> bool:
        return self.state is not None and not self.state.is_over

    @property
    def is_player_turn(self) -> bool:
        return self.is_active and self.state.is_player_turn

    def get_intent_text(self) -> str:
        if self.state is None or self.state.enemy_intent is None:
            return "Enemy intent unknown"
        return f"Intent: {self.state.enemy_intent.description}"

    def get_recent_log(self, count: int = COMBAT_LOG_WINDOW) -> list[str]:
        if self.state is None:
            return []
        return self.state.combat_log[-count:]

    def add_log_listener(self, listener: Callable[[str], None]) -> None:
        self._log_listeners.append(listener)

    def legal_actions(self) -> list[CombatAction]:
        """
        Commands that would take effect right now.

        One play per distinct affordable card id in hand, then end turn and
        flee. Empty outside the player's turn.
        """
        if not self._started or not self.is_player_turn:
            return []

        energy = self.game_state.get_player_data().time_energy
        actions: list[CombatAction] = []
        seen: set[str] = set()
        for card in self.deck.get_hand():
            if card.id in seen or not card.can_play(energy):
                continue
            if not all(effect.is_known for effect in card.effects):
                continue
            seen.add(card.id)
            actions.append(CombatAction.play_card(card.id))
        actions.append(CombatAction.end_turn())
        actions.append(CombatAction.flee())
        return actions

    # =========================================================================
    # Entry points
    # =========================================================================

    def apply(self, action: CombatAction) -> CombatResult:
        """Apply a combat command."""
        handlers = {
            CombatActionType.PLAY_CARD: lambda: self.play_card(action.card_id or ""),
            CombatActionType.END_TURN: self.end_turn,
            CombatActionType.FLEE: self.flee,
        }
        return handlers[action.action_type]()

    def start(self) -> CombatResult:
        """Set up the encounter: flavor text, first intent, opening hand."""
        if self._started or self.state is None:
            return CombatResult.ignore(self.phase)
        self._started = True

        events: list[str] = []
        if self.enemy.flavor_text:
            events.append(self._log(self._rng.choice(self.enemy.flavor_text)))

        self.game_state.refill_energy()
        self._update_intent()
        drawn = self.deck.draw_cards(self.opening_hand_size)
        events.append(self._log(f"You draw {len(drawn)} {pluralize('card', len(drawn))}."))

        logger.info("Combat started against %s (%s)", self.enemy.name, self.enemy.id)
        return CombatResult.ok(events, phase=self.phase)

    def play_card(self, card_id: str) -> CombatResult:
        """Play a card from hand during the player's turn."""
        if not self._started or not self.is_player_turn:
            return CombatResult.ignore(self.phase)

        # Refuse cards this engine cannot resolve before anything moves.
        for card in self.deck.get_hand():
            if card.id == card_id:
                unknown = [e.type_name for e in card.effects if not e.is_known]
                if unknown:
                    return self._decline(f"Unknown effect type: {unknown[0]}")
                break

        play = self.game_state.play_card(card_id)
        if not play.success:
            return self._decline(play.message or "Card cannot be played")

        events = [self._log(f"You play {play.card.name}." if play.card else "You play a card.")]
        context = EffectContext(
            game_state=self.game_state,
            deck_system=self.deck,
            current_energy=self.game_state.get_player_data().time_energy,
            is_player_turn=True,
        )
        batch = self.effect_engine.execute_effects(play.effects_applied, context)
        if not batch.success:
            events.append(self._log(f"The card fizzles: {batch.message}"))
            return CombatResult.ok(events, energy_spent=play.energy_spent, phase=self.phase)

        events.extend(self._apply_batch(batch))

        if self.state.enemy_health <= 0:
            events.extend(self._handle_victory())
        elif self.game_state.get_player_data().health <= 0:
            events.extend(self._handle_defeat())

        return CombatResult.ok(events, energy_spent=play.energy_spent, phase=self.phase)

    def end_player_turn(self) -> CombatResult:
        """Hand the turn to the enemy."""
        if not self._started or not self.is_player_turn:
            return CombatResult.ignore(self.phase)

        self.state.is_player_turn = False
        self.state.phase = CombatPhase.ENEMY_TURN
        self._enemy_acted = False
        return CombatResult.ok([self._log("You end your turn.")], phase=self.phase)

    def resolve_enemy_turn(self) -> CombatResult:
        """Carry out the telegraphed intent, then let player defense decay."""
        if self.state is None or self.state.phase != CombatPhase.ENEMY_TURN or self._enemy_acted:
            return CombatResult.ignore(self.phase)
        self._enemy_acted = True

        events = [self._log(f"{self.enemy.name}'s turn.")]
        events.extend(self._execute_intent(self.state.enemy_intent))

        if self.state.player_defense > 0:
            events.append(self._log("Your defense fades."))
        self.state.player_defense = 0

        if self.game_state.get_player_data().health <= 0:
            events.extend(self._handle_defeat())

        return CombatResult.ok(events, phase=self.phase)

    def begin_next_round(self) -> CombatResult:
        """Advance the turn counter and start the next player turn."""
        if self.state is None or self.state.phase != CombatPhase.ENEMY_TURN or not self._enemy_acted:
            return CombatResult.ignore(self.phase)

        self.state.turn_count += 1
        self.state.is_player_turn = True
        self.state.phase = CombatPhase.PLAYER_TURN
        self._enemy_acted = False

        events = [self._log(f"Turn {self.state.turn_count} begins.")]
        self.game_state.refill_energy()
        self._update_intent()

        drawn = self.deck.draw_cards(CARDS_PER_TURN)
        if drawn:
            names = ", ".join(card.name for card in drawn)
            events.append(self._log(f"You draw {names}."))

        return CombatResult.ok(events, phase=self.phase)

    def end_turn(self) -> CombatResult:
        """End the player turn and resolve the whole enemy turn without pacing."""
        result = self.end_player_turn()
        if not result.success:
            return result

        events = list(result.events)
        enemy = self.resolve_enemy_turn()
        events.extend(enemy.events)
        if self.phase == CombatPhase.ENEMY_TURN:
            events.extend(self.begin_next_round().events)
        return CombatResult.ok(events, phase=self.phase)

    def flee(self) -> CombatResult:
        """Leave the encounter early."""
        if not self.is_active:
            return CombatResult.ignore(self.phase)
        events = [self._log("You flee from the encounter.")]
        logger.info("Player fled from %s", self.enemy.id)
        self.teardown()
        return CombatResult.ok(events, phase=self.phase)

    def teardown(self) -> None:
        """Discard the combat state. Every later command is ignored."""
        self.state = None
        self._log_listeners.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    def _log(self, message: str) -> str:
        if self.state is not None:
            self.state.combat_log.append(message)
        for listener in list(self._log_listeners):
            listener(message)
        return message

    def _decline(self, reason: str) -> CombatResult:
        result = CombatResult.decline(reason, phase=self.phase)
        for event in result.events:
            self._log(event)
        return result

    def _update_intent(self) -> None:
        self.state.enemy_intent = get_enemy_intent(self.enemy, self.state.turn_count)

    def _apply_batch(self, batch: EffectBatchResult) -> list[str]:
        state = self.state
        events: list[str] = []

        state.enemy_health = max(
            0, min(state.enemy_max_health, state.enemy_health + batch.enemy.health_change)
        )
        state.player_defense = max(0, state.player_defense + batch.player.defense_change)

        for effect, result in batch.results:
            target = resolve_target(effect)
            kind = effect.effect_type
            if kind == EffectType.DAMAGE and target != EffectTarget.SELF:
                events.append(self._log(f"You deal {effect.value} damage!"))
            elif kind == EffectType.DEFENSE:
                events.append(self._log(f"You gain {effect.value} defense."))
            elif kind == EffectType.DODGE:
                events.append(self._log("You prepare to dodge the next attack."))
            elif result.message:
                events.append(self._log(result.message))
        return events

    def _execute_intent(self, intent: EnemyIntent | None) -> list[str]:
        if intent is None:
            return []

        if intent.intent_type == IntentType.ATTACK:
            return self._execute_attack(intent.value)
        if intent.intent_type == IntentType.DEFEND:
            return [self._log(f"{self.enemy.name} braces itself.")]
        return [self._log(f"{self.enemy.name} warps the timeline around you...")]

    def _execute_attack(self, damage: int) -> list[str]:
        defense = self.state.player_defense
        actual = max(0, damage - defense)
        blocked = min(damage, defense)

        events = [self._log(f"{self.enemy.name} attacks for {damage} damage!")]
        if blocked > 0:
            events.append(self._log(f"Your defense blocks {blocked} damage."))
        if actual > 0:
            self.game_state.modify_health(-actual)
            events.append(self._log(f"You take {actual} damage."))
        else:
            events.append(self._log("Your defense absorbs the entire attack!"))
        return events

    def _handle_victory(self) -> list[str]:
        self.state.phase = CombatPhase.VICTORY
        self.state.is_player_turn = False
        events = [self._log("Victory! You defeated the enemy!")]

        self.reward = self._generate_reward()
        events.extend(self._apply_reward(self.reward))
        logger.info("Victory against %s on turn %d", self.enemy.id, self.state.turn_count)
        return events

    def _handle_defeat(self) -> list[str]:
        self.state.phase = CombatPhase.DEFEAT
        self.state.is_player_turn = False
        events = [self._log("Defeat! You have been overcome...")]

        # Permadeath: the run is discarded, only meta progression survives.
        self.game_state.reset_game()
        logger.info("Defeated by %s on turn %d", self.enemy.id, self.state.turn_count)
        return events

    def _generate_reward(self) -> CombatReward:
        return CombatReward(
            experience=VICTORY_EXPERIENCE,
            story_clues=["You learned something from this battle"],
        )

    def _apply_reward(self, reward: CombatReward) -> list[str]:
        events: list[str] = []
        if reward.experience:
            level_before = self.game_state.get_player_data().level
            self.game_state.gain_experience(reward.experience)
            events.append(self._log(f"Gained {reward.experience} experience!"))
            level_after = self.game_state.get_player_data().level
            if level_after > level_before:
                events.append(self._log(f"Level up! You reached level {level_after}."))
        for clue in reward.story_clues:
            events.append(self._log(f"Clue: {clue}"))
        for card in reward.cards:
            self.deck.add_card_to_discard(card)
            events.append(self._log(f"{card.name} joins your deck."))
        return events
