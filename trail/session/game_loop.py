"""
Combat Loop - Paced, asyncio-driven turns for one encounter.

The loop:
1. Player plays cards (applied immediately)
2. Player ends the turn
3. After enemy_delay the enemy acts
4. After round_delay the next round begins
5. Repeat until victory, defeat, or teardown

A terminal outcome is persisted once: victory saves the run, defeat clears
the save and records the run in meta progression.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, TYPE_CHECKING
import asyncio
import logging

from ..config import ENEMY_TURN_DELAY, NEXT_ROUND_DELAY
from ..engine_core.action import CombatAction, CombatActionType, CombatResult
from ..engine_core.combat import CombatPhase

if TYPE_CHECKING:
    from ..engine_core.combat import CombatController

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the combat loop."""
    NOT_STARTED = "not_started"
    PLAYER_TURN = "player_turn"
    ENEMY_PENDING = "enemy_pending"  # enemy turn scheduled or resolving
    FINISHED = "finished"  # victory or defeat
    TORN_DOWN = "torn_down"


class CombatLoop:
    """
    The turn driver for one encounter.

    Usage:
        loop = CombatLoop(CombatController(game_state, "weak_enemy"))
        loop.start()
        await loop.play_card("strike")
        await loop.end_turn()       # returns at once, enemy acts later
        await loop.wait_idle()
        ...
        loop.teardown()             # cancels anything still scheduled
    """

    def __init__(
        self,
        controller: CombatController,
        enemy_delay: float = ENEMY_TURN_DELAY,
        round_delay: float = NEXT_ROUND_DELAY,
        on_update: Callable[[CombatResult], None] | None = None,
    ):
        self.controller = controller
        self.game_state = controller.game_state
        self.enemy_delay = enemy_delay
        self.round_delay = round_delay
        self.on_update = on_update

        self._pending: asyncio.Task | None = None
        self._cancelled: list[asyncio.Task] = []
        self._started = False
        self._torn_down = False
        self._outcome_handled = False

    @property
    def state(self) -> LoopState:
        if self._torn_down:
            return LoopState.TORN_DOWN
        if not self._started:
            return LoopState.NOT_STARTED
        if self.controller.phase in (CombatPhase.VICTORY, CombatPhase.DEFEAT):
            return LoopState.FINISHED
        if self._pending is not None:
            return LoopState.ENEMY_PENDING
        return LoopState.PLAYER_TURN

    @property
    def has_pending_turn(self) -> bool:
        return self._pending is not None

    # =========================================================================
    # Commands
    # =========================================================================

    def start(self) -> CombatResult:
        if self._torn_down:
            return CombatResult.ignore(self.controller.phase)
        self._started = True
        return self._publish(self.controller.start())

    async def apply(self, action: CombatAction) -> CombatResult:
        handlers = {
            CombatActionType.PLAY_CARD: lambda: self.play_card(action.card_id or ""),
            CombatActionType.END_TURN: self.end_turn,
            CombatActionType.FLEE: self.flee,
        }
        return await handlers[action.action_type]()

    async def play_card(self, card_id: str) -> CombatResult:
        if self._torn_down or self._pending is not None:
            return CombatResult.ignore(self.controller.phase)
        result = self._publish(self.controller.play_card(card_id))
        await self._handle_outcome()
        return result

    async def end_turn(self) -> CombatResult:
        """
        End the player turn and schedule the enemy's.

        Returns as soon as the turn is handed over. A second call while the
        enemy turn is still pending is ignored.
        """
        if self._torn_down or self._pending is not None:
            return CombatResult.ignore(self.controller.phase)

        result = self._publish(self.controller.end_player_turn())
        if result.success:
            self._pending = asyncio.create_task(self._run_enemy_turn())
        return result

    async def flee(self) -> CombatResult:
        if self._torn_down:
            return CombatResult.ignore(self.controller.phase)
        self._cancel_pending()
        result = self._publish(self.controller.flee())
        self._torn_down = True
        return result

    def teardown(self) -> None:
        """Cancel scheduled work and make the encounter inert."""
        if self._torn_down:
            return
        self._torn_down = True
        self._cancel_pending()
        self.controller.teardown()
        logger.debug("Combat loop torn down")

    async def wait_idle(self) -> None:
        """Wait for the scheduled enemy turn, if any, to finish or be cancelled."""
        cancelled, self._cancelled = self._cancelled, []
        await asyncio.gather(*cancelled, return_exceptions=True)
        while self._pending is not None:
            task = self._pending
            await asyncio.gather(task, return_exceptions=True)
            if self._pending is task:
                self._pending = None

    # =========================================================================
    # Internals
    # =========================================================================

    async def _run_enemy_turn(self) -> None:
        try:
            await asyncio.sleep(self.enemy_delay)
            self._publish(self.controller.resolve_enemy_turn())

            if self.controller.phase == CombatPhase.ENEMY_TURN:
                await asyncio.sleep(self.round_delay)
                self._publish(self.controller.begin_next_round())
            else:
                await self._handle_outcome()
        finally:
            if self._pending is asyncio.current_task():
                self._pending = None

    async def _handle_outcome(self) -> None:
        phase = self.controller.phase
        if self._outcome_handled or phase not in (CombatPhase.VICTORY, CombatPhase.DEFEAT):
            return
        self._outcome_handled = True

        if phase == CombatPhase.VICTORY:
            saved = await self.game_state.save_game()
            logger.info("Victory persisted: %s", saved)
        else:
            cleared = await self.game_state.clear_save()
            recorded = await self.game_state.record_run_end(False)
            logger.info("Defeat persisted: save cleared=%s, run recorded=%s", cleared, recorded)

    def _cancel_pending(self) -> None:
        # No turn is pending once this returns; wait_idle() still reaps the task.
        task, self._pending = self._pending, None
        if task is not None and not task.done():
            task.cancel()
            self._cancelled.append(task)

    def _publish(self, result: CombatResult) -> CombatResult:
        if self.on_update is not None and not result.ignored:
            self.on_update(result)
        return result
