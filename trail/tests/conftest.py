"""
Pytest fixtures for trail tests.
"""

import random

import pytest

from ..engine_core.card import Card, CardEffect, CardType, EffectType
from ..engine_core.combat import CombatController
from ..engine_core.deck import DeckSystem
from ..content.starter_deck import create_starter_cards
from ..session.game_state import GameState
from ..storage import MemoryStorageAdapter, StorageManager


def make_card(card_id: str, cost: int = 1, *effects: CardEffect, **kwargs) -> Card:
    """Build a test card; defaults to a single 5-damage effect."""
    return Card(
        id=card_id,
        name=kwargs.pop("name", card_id.replace("_", " ").title()),
        description=kwargs.pop("description", f"Test card {card_id}"),
        cost=cost,
        effects=list(effects) or [CardEffect(EffectType.DAMAGE, 5)],
        **kwargs,
    )


@pytest.fixture
def rng() -> random.Random:
    """Deterministic RNG."""
    return random.Random(1234)


@pytest.fixture
def starter_cards() -> list[Card]:
    return create_starter_cards()


@pytest.fixture
def starter_deck(starter_cards, rng) -> DeckSystem:
    """The 8-card starter deck, shuffled with a fixed seed."""
    return DeckSystem(starter_cards, rng=rng)


@pytest.fixture
def numbered_cards() -> list[Card]:
    """Ten distinct 1-cost damage cards."""
    return [make_card(f"card_{i}") for i in range(10)]


@pytest.fixture
def memory_storage() -> StorageManager:
    return StorageManager(MemoryStorageAdapter())


@pytest.fixture
def game_state(memory_storage, rng) -> GameState:
    """A fresh run backed by in-memory storage."""
    return GameState(storage=memory_storage, player_id="test_player", rng=rng)


@pytest.fixture
def combat(game_state, rng) -> CombatController:
    """A started encounter against the default (balanced) enemy."""
    controller = CombatController(game_state, enemy_id="test_enemy", rng=rng)
    controller.start()
    return controller


@pytest.fixture
def strike_only_state(memory_storage, rng) -> GameState:
    """A run whose deck is eight 1-cost, 10-damage strikes."""
    cards = [
        make_card("big_strike", 1, CardEffect(EffectType.DAMAGE, 10), card_type=CardType.ATTACK)
        for _ in range(8)
    ]
    return GameState(storage=memory_storage, player_id="striker", starter_cards=cards, rng=rng)
