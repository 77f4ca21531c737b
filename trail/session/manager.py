"""
Session Manager - Creates and tracks active runs.

A run is one play-through, from a fresh GameState until the player quits
or dies. The manager holds runs in memory; saved progress goes through the
storage layer, never through the manager.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import asyncio
import random
import time
import uuid

from ..config import ENEMY_TURN_DELAY, NEXT_ROUND_DELAY
from ..engine_core.action import CombatResult
from ..engine_core.combat import CombatController, CombatPhase
from .game_loop import CombatLoop
from .game_state import GameState

if TYPE_CHECKING:
    from ..storage.adapter import StorageProvider


class RunStatus(Enum):
    """State of a run."""
    ACTIVE = "active"  # exploring, no encounter running
    IN_COMBAT = "in_combat"
    ENDED = "ended"
    ABANDONED = "abandoned"


@dataclass
class RunSession:
    """
    One active run.

    Contains:
    - The run's GameState (player data, progress, deck)
    - The current combat encounter, if any
    """
    run_id: str
    game_state: GameState
    created_at: float
    rng: random.Random = field(default_factory=random.Random)
    status: RunStatus = RunStatus.ACTIVE
    combat: CombatLoop | None = None
    encounters_won: int = 0
    command_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def is_active(self) -> bool:
        return self.status in {RunStatus.ACTIVE, RunStatus.IN_COMBAT}

    @property
    def controller(self) -> CombatController | None:
        return self.combat.controller if self.combat else None

    def start_combat(
        self,
        enemy_id: str,
        enemy_delay: float = ENEMY_TURN_DELAY,
        round_delay: float = NEXT_ROUND_DELAY,
    ) -> CombatResult:
        """Replace any current encounter with a fresh one and start it."""
        if self.combat is not None:
            self.combat.teardown()
        controller = CombatController(self.game_state, enemy_id=enemy_id, rng=self.rng)
        self.combat = CombatLoop(controller, enemy_delay=enemy_delay, round_delay=round_delay)
        self.status = RunStatus.IN_COMBAT
        return self.combat.start()

    def finish_combat(self) -> None:
        """Drop the encounter once it is over."""
        if self.combat is not None:
            if self.combat.controller.phase == CombatPhase.VICTORY:
                self.encounters_won += 1
            self.combat.teardown()
        self.combat = None
        if self.status == RunStatus.IN_COMBAT:
            self.status = RunStatus.ACTIVE


class SessionManager:
    """
    Manages runs.

    Responsibilities:
    - Create runs with their own GameState
    - Track active runs
    - Clean up ended runs
    """

    def __init__(self, storage: StorageProvider | None = None):
        self.storage = storage
        self._runs: dict[str, RunSession] = {}

    def create_run(
        self,
        player_name: str | None = None,
        player_id: str | None = None,
        seed: int | None = None,
    ) -> RunSession:
        """
        Create a new run.

        Args:
            player_name: Display name (defaults to the stock protagonist)
            player_id: Storage id; generated when omitted
            seed: Seeds shuffles and flavor text for reproducible runs
        """
        rng = random.Random(seed)
        game_state = GameState(storage=self.storage, player_id=player_id, rng=rng)
        if player_name:
            game_state.set_player_data(player_name=player_name)

        run = RunSession(
            run_id=str(uuid.uuid4()),
            game_state=game_state,
            created_at=time.time(),
            rng=rng,
        )
        self._runs[run.run_id] = run
        return run

    def get_run(self, run_id: str) -> RunSession | None:
        return self._runs.get(run_id)

    def end_run(self, run_id: str, reason: str = "completed") -> bool:
        """End a run and drop it from memory. Returns False if unknown."""
        run = self._runs.pop(run_id, None)
        if run is None:
            return False

        if run.combat is not None:
            run.combat.teardown()
            run.combat = None
        run.status = RunStatus.ENDED if reason == "completed" else RunStatus.ABANDONED
        return True

    def list_active_runs(self) -> list[str]:
        return [run_id for run_id, run in self._runs.items() if run.is_active()]

    def cleanup_stale_runs(self, max_age_seconds: int = 3600) -> int:
        """End runs older than max_age_seconds. Returns how many were removed."""
        now = time.time()
        stale = [
            run_id for run_id, run in self._runs.items()
            if now - run.created_at > max_age_seconds
        ]
        for run_id in stale:
            self.end_run(run_id, reason="stale")
        return len(stale)
