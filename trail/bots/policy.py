"""
Player Policy - Interface for automated card play.

A PlayerPolicy looks at a live encounter and returns a decision. Policies
drive the CLI simulator and autoplay; they only ever pick from the
controller's legal actions.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING
import random

from ..engine_core.action import CombatAction, CombatActionType
from ..engine_core.card import Card, EffectType
from ..engine_core.intent import IntentType

if TYPE_CHECKING:
    from ..engine_core.combat import CombatController


@dataclass
class PlayerDecision:
    """
    A decision made by a policy.

    Contains the action to take and an explanation (for logs and debugging).
    """
    action: CombatAction
    explanation: str = ""
    evaluated_actions: int = 0


class PlayerPolicy(ABC):
    """
    Abstract base class for player policies.

    Never returns FLEE unless a subclass decides to; the base contract is
    only that the action comes from legal_actions.
    """

    @abstractmethod
    def select_action(
        self,
        controller: CombatController,
        legal_actions: list[CombatAction],
    ) -> PlayerDecision:
        """
        Select an action from the legal actions.

        Args:
            controller: The encounter being played
            legal_actions: Actions that would take effect right now

        Returns:
            PlayerDecision with the selected action
        """
        pass

    def decide(self, controller: CombatController) -> PlayerDecision | None:
        """Pick an action for the current state, or None outside the player's turn."""
        legal = controller.legal_actions()
        if not legal:
            return None
        return self.select_action(controller, legal)

    def get_name(self) -> str:
        return self.__class__.__name__


class RandomPolicy(PlayerPolicy):
    """
    Random policy - plays a random affordable card, ends the turn when none.

    Used for testing and as a baseline.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        controller: CombatController,
        legal_actions: list[CombatAction],
    ) -> PlayerDecision:
        plays = [a for a in legal_actions if a.action_type == CombatActionType.PLAY_CARD]
        if not plays:
            return PlayerDecision(CombatAction.end_turn(), "No playable cards", len(legal_actions))
        return PlayerDecision(self.rng.choice(plays), "Selected randomly", len(legal_actions))


class GreedyPolicy(PlayerPolicy):
    """
    Greedy policy - scores each playable card for the current turn.

    Priorities:
    - A damage card that finishes the enemy
    - Defense when an attack is telegraphed and not yet covered
    - Healing when below half health
    - Otherwise the most damage per card
    """

    def select_action(
        self,
        controller: CombatController,
        legal_actions: list[CombatAction],
    ) -> PlayerDecision:
        hand = {card.id: card for card in reversed(controller.deck.get_hand())}
        plays = [
            (action, hand[action.card_id])
            for action in legal_actions
            if action.action_type == CombatActionType.PLAY_CARD and action.card_id in hand
        ]
        if not plays:
            return PlayerDecision(CombatAction.end_turn(), "No playable cards", len(legal_actions))

        scored = [(self._score(controller, card), action, card) for action, card in plays]
        best_score, best_action, best_card = max(scored, key=lambda entry: entry[0])
        if best_score <= 0:
            return PlayerDecision(CombatAction.end_turn(), "Nothing worth playing", len(legal_actions))

        return PlayerDecision(
            best_action,
            f"Play {best_card.name} (score {best_score})",
            len(legal_actions),
        )

    def _score(self, controller: CombatController, card: Card) -> int:
        state = controller.state
        player = controller.game_state.get_player_data()
        damage = _total(card, EffectType.DAMAGE)
        defense = _total(card, EffectType.DEFENSE)
        heal = _total(card, EffectType.HEAL)
        draw = _total(card, EffectType.DRAW)

        if damage and damage >= state.enemy_health:
            return 1000 + damage

        score = damage * 2
        intent = state.enemy_intent
        if defense and intent is not None and intent.intent_type == IntentType.ATTACK:
            uncovered = max(0, intent.value - state.player_defense)
            score += min(defense, uncovered) * 3
        if heal and player.health * 2 < player.max_health:
            score += min(heal, player.max_health - player.health) * 2
        if draw and not controller.deck.is_hand_full():
            score += draw * 3
        if any(e.effect_type == EffectType.REWIND for e in card.effects):
            score += 1 if controller.deck.get_draw_pile_count() == 0 else 0
        return score


def _total(card: Card, effect_type: EffectType) -> int:
    return sum(e.value for e in card.effects if e.effect_type == effect_type)
