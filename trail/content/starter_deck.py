"""
Starter Deck - Card definitions every new run begins with.

Deck composition (8 cards):
- 2x Strike (attack)
- 2x Block (defense)
- Dodge, Mend, Insight, Rewind (one each)
"""

from __future__ import annotations

from ..engine_core.card import (
    Card,
    CardCategory,
    CardEffect,
    CardRarity,
    CardType,
    EffectType,
)


STRIKE = Card(
    id="strike",
    name="Strike",
    description="A direct blow.",
    cost=1,
    effects=[CardEffect(EffectType.DAMAGE, 6)],
    category=CardCategory.PHYSICAL,
    card_type=CardType.ATTACK,
    flavor_text="Not every problem needs a clever solution.",
    image_key="card_strike",
)

BLOCK = Card(
    id="block",
    name="Block",
    description="Brace for the next hit.",
    cost=1,
    effects=[CardEffect(EffectType.DEFENSE, 5)],
    category=CardCategory.PHYSICAL,
    card_type=CardType.DEFENSE,
    image_key="card_block",
)

DODGE = Card(
    id="dodge",
    name="Dodge",
    description="Step out of the way.",
    cost=1,
    effects=[CardEffect(EffectType.DODGE, 1)],
    category=CardCategory.PHYSICAL,
    card_type=CardType.DEFENSE,
    image_key="card_dodge",
)

MEND = Card(
    id="heal",
    name="Mend",
    description="Patch yourself up.",
    cost=1,
    effects=[CardEffect(EffectType.HEAL, 8)],
    category=CardCategory.SOCIAL,
    card_type=CardType.UTILITY,
    image_key="card_heal",
)

INSIGHT = Card(
    id="insight",
    name="Temporal Insight",
    description="Glimpse a moment ahead and act on it.",
    cost=2,
    effects=[
        CardEffect(EffectType.DRAW, 2),
        CardEffect(EffectType.DEFENSE, 3),
    ],
    category=CardCategory.MIND,
    card_type=CardType.UTILITY,
    rarity=CardRarity.COMMON,
    flavor_text="You already know how this ends. Mostly.",
    image_key="card_insight",
)

REWIND = Card(
    id="rewind",
    name="Rewind",
    description="Fold the past back into the present.",
    cost=1,
    effects=[CardEffect(EffectType.REWIND, 0)],
    category=CardCategory.TIMECRAFT,
    card_type=CardType.SPECIAL,
    rarity=CardRarity.COMMON,
    image_key="card_rewind",
)


STARTER_CARDS: list[Card] = [
    STRIKE,
    STRIKE,
    BLOCK,
    BLOCK,
    DODGE,
    MEND,
    INSIGHT,
    REWIND,
]


def create_starter_cards() -> list[Card]:
    """Fresh copies of the starter deck, safe to hand to a DeckSystem."""
    return [card.clone() for card in STARTER_CARDS]


def get_card_by_id(card_id: str) -> Card | None:
    for card in STARTER_CARDS:
        if card.id == card_id:
            return card.clone()
    return None
