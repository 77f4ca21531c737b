"""
Enemies - Enemy catalog.

Each enemy has an AI archetype (see engine_core.intent.AIType) that decides
how its telegraphed intent changes from turn to turn.
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class EnemyData:
    """Static definition of an enemy."""
    id: str
    name: str
    health: int
    max_health: int
    ai_type: str  # aggressive, defensive, balanced, special
    base_damage: int
    description: str
    flavor_text: tuple[str, ...] = field(default_factory=tuple)


DEFAULT_ENEMY_ID = "test_enemy"


ENEMY_DATA: dict[str, EnemyData] = {
    "test_enemy": EnemyData(
        id="test_enemy",
        name="Temporal Anomaly",
        health=50,
        max_health=50,
        ai_type="balanced",
        base_damage=8,
        description="A ripple in time that manifests as hostile energy",
        flavor_text=(
            "The air shimmers as reality bends around this anomaly.",
            "You feel time itself becoming unstable in its presence.",
            "The temporal distortion seems to react to your presence.",
        ),
    ),
    "weak_enemy": EnemyData(
        id="weak_enemy",
        name="Time Echo",
        health=30,
        max_health=30,
        ai_type="aggressive",
        base_damage=5,
        description="A faint echo of temporal energy, less dangerous but still hostile",
        flavor_text=(
            "A shadowy figure flickers in and out of existence.",
            "This seems to be an echo from another timeline.",
            "The echo grows stronger as you approach.",
        ),
    ),
    "strong_enemy": EnemyData(
        id="strong_enemy",
        name="Temporal Guardian",
        health=80,
        max_health=80,
        ai_type="defensive",
        base_damage=12,
        description="A powerful entity that protects the timeline from interference",
        flavor_text=(
            "An imposing figure materializes, crackling with temporal energy.",
            "This guardian seems determined to prevent timeline disruption.",
            "The guardian's presence makes the air feel heavy with time.",
        ),
    ),
    "paradox_wraith": EnemyData(
        id="paradox_wraith",
        name="Paradox Wraith",
        health=60,
        max_health=60,
        ai_type="special",
        base_damage=9,
        description="A being stitched together from contradictory timelines",
        flavor_text=(
            "Two versions of the same shadow argue over which one is real.",
            "Every fourth heartbeat, the wraith seems to skip ahead of itself.",
        ),
    ),
}


def get_enemy(enemy_id: str) -> EnemyData:
    """Look up an enemy. Unknown ids fall back to the default enemy."""
    return ENEMY_DATA.get(enemy_id, ENEMY_DATA[DEFAULT_ENEMY_ID])


def list_enemies() -> list[EnemyData]:
    return list(ENEMY_DATA.values())
