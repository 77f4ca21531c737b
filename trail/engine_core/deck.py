"""
Deck System - Owns one player's draw pile, hand and discard pile.

Invariants:
- Every card is in exactly one of draw pile, hand, discard pile
- draw/play/discard/reset never create or destroy cards
- The hand never exceeds max_hand_size
- Accessors hand out copies, never the live piles
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import random

from ..config import MAX_HAND_SIZE
from .card import Card, CardEffect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeckSnapshot:
    """Read-only view of a deck, handed to listeners and display code."""
    cards: tuple[Card, ...]
    draw_pile: tuple[Card, ...]
    discard_pile: tuple[Card, ...]
    hand: tuple[Card, ...]
    max_hand_size: int

    @property
    def total(self) -> int:
        return len(self.draw_pile) + len(self.discard_pile) + len(self.hand)


@dataclass
class CardPlayResult:
    """Result of trying to play a card from hand."""
    success: bool
    message: str | None = None
    energy_spent: int = 0
    effects_applied: list[CardEffect] = field(default_factory=list)
    card: Card | None = None

    @classmethod
    def failure(cls, message: str) -> CardPlayResult:
        return cls(success=False, message=message)


DeckListener = Callable[[DeckSnapshot], None]


def fisher_yates_shuffle(pile: list[Card], rng: random.Random) -> None:
    """Shuffle pile in place: swap each index i (last down to 1) with j <= i."""
    for i in range(len(pile) - 1, 0, -1):
        j = rng.randint(0, i)
        pile[i], pile[j] = pile[j], pile[i]


class DeckSystem:
    """
    Deck engine for a single run.

    The top of the draw pile is the end of the list.

    Usage:
        deck = DeckSystem(starter_cards, rng=random.Random(7))
        drawn = deck.draw_cards(5)
        result = deck.play_card(drawn[0].id, current_energy=3)
        if result.success:
            engine.execute_effects(result.effects_applied, context)
    """

    def __init__(
        self,
        initial_cards: list[Card] | None = None,
        max_hand_size: int = MAX_HAND_SIZE,
        rng: random.Random | None = None,
    ):
        if max_hand_size < 1:
            raise ValueError("max_hand_size must be positive")
        self._rng = rng or random.Random()
        self._cards: list[Card] = [card.clone() for card in initial_cards or []]
        self._draw_pile: list[Card] = []
        self._discard_pile: list[Card] = []
        self._hand: list[Card] = []
        self.max_hand_size = max_hand_size
        self._listeners: list[DeckListener] = []
        self._initialize_deck()

    @classmethod
    def create_starter_deck(cls, rng: random.Random | None = None) -> DeckSystem:
        """Create a deck from the starter card catalog."""
        from ..content.starter_deck import create_starter_cards
        return cls(create_starter_cards(), rng=rng)

    def initialize(self, cards: list[Card]) -> None:
        """Replace the deck's cards and shuffle them all into the draw pile."""
        self._cards = [card.clone() for card in cards]
        self._initialize_deck()
        self._notify_listeners()

    def _initialize_deck(self) -> None:
        self._draw_pile = [card.clone() for card in self._cards]
        fisher_yates_shuffle(self._draw_pile, self._rng)
        self._discard_pile = []
        self._hand = []

    # =========================================================================
    # Mutations
    # =========================================================================

    def draw_cards(self, count: int = 1) -> list[Card]:
        """
        Draw up to `count` cards into the hand.

        Reshuffles the discard pile when the draw pile runs out. Stops early,
        without error, when both piles are empty or the hand is full.
        """
        if count < 0:
            raise ValueError("count must be >= 0")

        drawn: list[Card] = []
        for _ in range(count):
            if not self._draw_pile:
                self._reshuffle_discard_pile()
            if not self._draw_pile:
                break
            if len(self._hand) >= self.max_hand_size:
                break

            card = self._draw_pile.pop()
            self._hand.append(card)
            drawn.append(card)

        self._notify_listeners()
        return list(drawn)

    def reshuffle_discard_pile(self) -> int:
        """
        Shuffle the whole discard pile into the draw pile right now.

        Returns the number of cards moved (0 when the discard pile is empty).
        """
        moved = self._reshuffle_discard_pile()
        if moved:
            self._notify_listeners()
        return moved

    def _reshuffle_discard_pile(self) -> int:
        if not self._discard_pile:
            return 0
        moved = len(self._discard_pile)
        self._draw_pile.extend(self._discard_pile)
        self._discard_pile = []
        fisher_yates_shuffle(self._draw_pile, self._rng)
        logger.debug("Reshuffled %d card(s) into the draw pile", moved)
        return moved

    def restore(self, snapshot: DeckSnapshot) -> None:
        """Put the piles and hand back the way `snapshot` saw them."""
        self._draw_pile = [card.clone() for card in snapshot.draw_pile]
        self._discard_pile = [card.clone() for card in snapshot.discard_pile]
        self._hand = [card.clone() for card in snapshot.hand]
        self._notify_listeners()

    def play_card(self, card_id: str, current_energy: int) -> CardPlayResult:
        """
        Move a card from hand to discard if it is affordable.

        Effects are returned, not executed.
        """
        index = self._find_in_hand(card_id)
        if index is None:
            return CardPlayResult.failure("Card not found in hand")

        card = self._hand[index]
        if not card.can_play(current_energy):
            return CardPlayResult.failure(
                f"Not enough energy. Need {card.cost}, have {current_energy}"
            )

        del self._hand[index]
        self._discard_pile.append(card)
        self._notify_listeners()

        return CardPlayResult(
            success=True,
            energy_spent=card.cost,
            effects_applied=list(card.effects),
            card=card.clone(),
        )

    def discard_card(self, card_id: str) -> bool:
        """Move a card from hand to discard outside the play path."""
        index = self._find_in_hand(card_id)
        if index is None:
            return False

        self._discard_pile.append(self._hand.pop(index))
        self._notify_listeners()
        return True

    def add_card_to_discard(self, card: Card) -> None:
        """Add a new card (e.g. a reward) to the discard pile."""
        self._discard_pile.append(card.clone())
        self._notify_listeners()

    def reset_deck(self) -> None:
        """Return to the freshly shuffled starting state."""
        self._initialize_deck()
        self._notify_listeners()

    def _find_in_hand(self, card_id: str) -> int | None:
        for index, card in enumerate(self._hand):
            if card.id == card_id:
                return index
        return None

    # =========================================================================
    # Accessors
    # =========================================================================

    def get_hand(self) -> list[Card]:
        return [card.clone() for card in self._hand]

    def get_draw_pile_count(self) -> int:
        return len(self._draw_pile)

    def get_discard_pile_count(self) -> int:
        return len(self._discard_pile)

    def get_hand_size(self) -> int:
        return len(self._hand)

    def get_deck_state(self) -> DeckSnapshot:
        return DeckSnapshot(
            cards=tuple(card.clone() for card in self._cards),
            draw_pile=tuple(card.clone() for card in self._draw_pile),
            discard_pile=tuple(card.clone() for card in self._discard_pile),
            hand=tuple(card.clone() for card in self._hand),
            max_hand_size=self.max_hand_size,
        )

    def get_total_card_count(self) -> int:
        return len(self._draw_pile) + len(self._discard_pile) + len(self._hand)

    def get_drawable_cards_count(self) -> int:
        return min(
            len(self._draw_pile) + len(self._discard_pile),
            self.max_hand_size - len(self._hand),
        )

    def is_empty(self) -> bool:
        return self.get_total_card_count() == 0

    def is_hand_full(self) -> bool:
        return len(self._hand) >= self.max_hand_size

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: DeckListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: DeckListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify_listeners(self) -> None:
        if not self._listeners:
            return
        snapshot = self.get_deck_state()
        for listener in list(self._listeners):
            listener(snapshot)
