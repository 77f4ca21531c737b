"""
Combat Actions - Commands, payloads, and results.

Every player-facing combat command (play a card, end the turn, flee) is a
CombatAction applied through CombatController.apply(). Results are always
structured; the controller never raises for a gameplay outcome.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CombatActionType(Enum):
    """Types of combat commands."""
    PLAY_CARD = "play_card"
    END_TURN = "end_turn"
    FLEE = "flee"


@dataclass
class CombatAction:
    """A command for the combat controller."""
    action_type: CombatActionType
    card_id: str | None = None

    @classmethod
    def play_card(cls, card_id: str) -> CombatAction:
        return cls(action_type=CombatActionType.PLAY_CARD, card_id=card_id)

    @classmethod
    def end_turn(cls) -> CombatAction:
        return cls(action_type=CombatActionType.END_TURN)

    @classmethod
    def flee(cls) -> CombatAction:
        return cls(action_type=CombatActionType.FLEE)


@dataclass
class CombatResult:
    """
    Result of applying a combat command.

    - success: the command took effect
    - declined: the command was refused for a gameplay reason (`reason`)
    - ignored: the command arrived out of turn or after the encounter ended
    """
    success: bool
    declined: bool = False
    ignored: bool = False
    reason: str | None = None

    # Log lines produced by this command
    events: list[str] = field(default_factory=list)

    energy_spent: int = 0
    phase: Any | None = None  # CombatPhase after the command

    @classmethod
    def ok(cls, events: list[str] | None = None, energy_spent: int = 0, phase: Any = None) -> CombatResult:
        return cls(success=True, events=events or [], energy_spent=energy_spent, phase=phase)

    @classmethod
    def decline(cls, reason: str, phase: Any = None) -> CombatResult:
        return cls(
            success=False,
            declined=True,
            reason=reason,
            events=[f"Cannot play card: {reason}"],
            phase=phase,
        )

    @classmethod
    def ignore(cls, phase: Any = None) -> CombatResult:
        return cls(success=False, ignored=True, phase=phase)
