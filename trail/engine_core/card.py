"""
Card - Playable card value type and its effects.

Cards are immutable by convention: anything that moves a card between
collections that must not alias works on a clone().
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class CardCategory(Enum):
    """Thematic grouping, used for display colors only."""
    TIMECRAFT = "timecraft"
    MIND = "mind"
    SOCIAL = "social"
    PHYSICAL = "physical"


class CardType(Enum):
    """Kind of card."""
    ATTACK = "attack"
    DEFENSE = "defense"
    UTILITY = "utility"
    SPECIAL = "special"


class CardRarity(Enum):
    """Card rarity."""
    BASIC = "basic"
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"


class EffectType(Enum):
    """The closed vocabulary of card effects."""
    DAMAGE = "damage"
    DEFENSE = "defense"
    HEAL = "heal"
    DRAW = "draw"
    DODGE = "dodge"
    REWIND = "rewind"

    @classmethod
    def parse(cls, value: EffectType | str) -> EffectType | str:
        """Return the enum member for value, or the raw string if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return value


class EffectTarget(Enum):
    SELF = "self"
    ENEMY = "enemy"
    BOTH = "both"


CATEGORY_COLORS = {
    CardCategory.TIMECRAFT: "#4A90E2",
    CardCategory.MIND: "#9B59B6",
    CardCategory.SOCIAL: "#E74C3C",
    CardCategory.PHYSICAL: "#27AE60",
}

RARITY_COLORS = {
    CardRarity.BASIC: "#BDC3C7",
    CardRarity.COMMON: "#FFFFFF",
    CardRarity.UNCOMMON: "#2ECC71",
    CardRarity.RARE: "#3498DB",
}


@dataclass(frozen=True)
class CardEffect:
    """
    A single effect on a card.

    `effect_type` is an EffectType for known effects. Content authored for a
    newer engine may carry a type this engine does not know; that string is
    kept as-is so the effect engine can report it instead of crashing.
    """
    effect_type: EffectType | str
    value: int = 0
    target: EffectTarget | None = None
    duration: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "effect_type", EffectType.parse(self.effect_type))
        if isinstance(self.target, str):
            object.__setattr__(self, "target", EffectTarget(self.target))

    @property
    def type_name(self) -> str:
        if isinstance(self.effect_type, EffectType):
            return self.effect_type.value
        return str(self.effect_type)

    @property
    def is_known(self) -> bool:
        return isinstance(self.effect_type, EffectType)

    def describe(self) -> str:
        """Human-readable description of the effect."""
        return describe_effect(self)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type_name, "value": self.value}
        if self.target is not None:
            data["target"] = self.target.value
        if self.duration is not None:
            data["duration"] = self.duration
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CardEffect:
        return cls(
            effect_type=data["type"],
            value=int(data.get("value", 0)),
            target=data.get("target"),
            duration=data.get("duration"),
        )


def pluralize(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


def describe_effect(effect: CardEffect) -> str:
    """Describe what an effect does, for card text and tooltips."""
    value = effect.value
    if effect.effect_type == EffectType.DAMAGE:
        return f"Deal {value} damage"
    if effect.effect_type == EffectType.DEFENSE:
        return f"Gain {value} defense"
    if effect.effect_type == EffectType.HEAL:
        return f"Heal {value} health"
    if effect.effect_type == EffectType.DRAW:
        return f"Draw {value} {pluralize('card', value)}"
    if effect.effect_type == EffectType.DODGE:
        return f"Avoid the next {value} {pluralize('attack', value)}"
    if effect.effect_type == EffectType.REWIND:
        return "Shuffle discard pile into draw pile"
    return effect.type_name


@dataclass
class Card:
    """
    A playable card.

    The same definition may appear several times in a deck, so `id` is not
    unique within a deck. Lookups by id resolve to the first match.
    """
    id: str
    name: str
    description: str
    cost: int
    effects: list[CardEffect] = field(default_factory=list)
    category: CardCategory = CardCategory.PHYSICAL
    card_type: CardType = CardType.ATTACK
    rarity: CardRarity = CardRarity.BASIC
    flavor_text: str | None = None
    image_key: str | None = None

    def clone(self) -> Card:
        """Deep copy of this card."""
        return replace(self, effects=[replace(e) for e in self.effects])

    def can_play(self, current_energy: int) -> bool:
        return current_energy >= self.cost

    def effect_description(self) -> str:
        return ". ".join(describe_effect(e) for e in self.effects)

    def category_color(self) -> str:
        return CATEGORY_COLORS.get(self.category, "#95A5A6")

    def rarity_color(self) -> str:
        return RARITY_COLORS.get(self.rarity, "#BDC3C7")

    def validate(self) -> bool:
        """Check the card is complete: ids and text set, cost >= 0, has effects."""
        if not self.id or not self.name or not self.description:
            return False
        if self.cost < 0:
            return False
        if not self.effects:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "type": self.card_type.value,
            "rarity": self.rarity.value,
            "cost": self.cost,
            "effects": [e.to_dict() for e in self.effects],
            "flavor_text": self.flavor_text,
            "image_key": self.image_key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Card:
        return cls(
            id=data["id"],
            name=data["name"],
            description=data["description"],
            cost=int(data["cost"]),
            effects=[CardEffect.from_dict(e) for e in data.get("effects", [])],
            category=CardCategory(data.get("category", "physical")),
            card_type=CardType(data.get("type", "attack")),
            rarity=CardRarity(data.get("rarity", "basic")),
            flavor_text=data.get("flavor_text"),
            image_key=data.get("image_key"),
        )
