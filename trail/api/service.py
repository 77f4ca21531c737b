"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages runs and their encounters
3. Formats responses

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Encounters run through a CombatLoop with zero delays, so ending a turn
resolves the enemy turn and the next round before the call returns.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Awaitable, Callable
import logging

from .schemas import (
    # Requests
    CreateRunRequest,
    StartCombatRequest,
    PlayCardRequest,
    # Responses
    RunResponse,
    CombatStateResponse,
    CombatActionResponse,
    EnemyListResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    DeckInfo,
    CardInfo,
    CardEffectInfo,
    IntentInfo,
    RewardInfo,
    EnemyInfo,
    # Enums
    ErrorCode,
    RunStatus,
    CombatPhase,
)
from ..content.enemies import list_enemies
from ..engine_core.action import CombatResult
from ..engine_core.card import Card
from ..engine_core.combat import CombatPhase as EnginePhase
from ..engine_core.deck import DeckSystem
from ..session import SessionManager, RunSession, GameState

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        run = service.create_run(CreateRunRequest(seed=7))
        state = service.start_combat(run.run_id, StartCombatRequest(enemy_id="weak_enemy"))
        result = await service.play_card(run.run_id, PlayCardRequest(card_id="strike"))
        result = await service.end_turn(run.run_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # =========================================================================
    # Runs
    # =========================================================================

    def create_run(self, request: CreateRunRequest) -> RunResponse:
        run = self.session_manager.create_run(
            player_name=request.player_name,
            player_id=request.player_id,
            seed=request.seed,
        )
        logger.info("Run %s created for %s", run.run_id, run.game_state.player_id)
        return self._run_to_response(run)

    def get_run(self, run_id: str) -> RunResponse | ErrorResponse:
        run = self.session_manager.get_run(run_id)
        if run is None:
            return _run_not_found(run_id)
        return self._run_to_response(run)

    def end_run(self, run_id: str, reason: str = "completed") -> bool:
        return self.session_manager.end_run(run_id, reason)

    def list_runs(self) -> list[str]:
        return self.session_manager.list_active_runs()

    def list_enemies(self) -> EnemyListResponse:
        return EnemyListResponse(
            enemies=[
                EnemyInfo(
                    enemy_id=enemy.id,
                    name=enemy.name,
                    health=enemy.max_health,
                    ai_type=enemy.ai_type,
                    base_damage=enemy.base_damage,
                    description=enemy.description,
                )
                for enemy in list_enemies()
            ]
        )

    # =========================================================================
    # Combat
    # =========================================================================

    def start_combat(self, run_id: str, request: StartCombatRequest) -> CombatStateResponse | ErrorResponse:
        """Start an encounter, replacing any finished one."""
        run = self.session_manager.get_run(run_id)
        if run is None:
            return _run_not_found(run_id)

        run.finish_combat()
        run.start_combat(request.enemy_id, enemy_delay=0, round_delay=0)
        return self._combat_to_response(run)

    def get_combat_state(self, run_id: str) -> CombatStateResponse | ErrorResponse:
        run = self.session_manager.get_run(run_id)
        if run is None:
            return _run_not_found(run_id)
        if run.combat is None:
            return _no_active_combat(run_id)
        return self._combat_to_response(run)

    async def play_card(self, run_id: str, request: PlayCardRequest) -> CombatActionResponse | ErrorResponse:
        return await self._command(run_id, lambda run: run.combat.play_card(request.card_id))

    async def end_turn(self, run_id: str) -> CombatActionResponse | ErrorResponse:
        async def end_and_resolve(run: RunSession) -> CombatResult:
            result = await run.combat.end_turn()
            await run.combat.wait_idle()
            return result

        return await self._command(run_id, end_and_resolve)

    async def flee(self, run_id: str) -> CombatActionResponse | ErrorResponse:
        return await self._command(run_id, lambda run: run.combat.flee())

    async def _command(
        self,
        run_id: str,
        command: Callable[[RunSession], Awaitable[CombatResult]],
    ) -> CombatActionResponse | ErrorResponse:
        run = self.session_manager.get_run(run_id)
        if run is None:
            return _run_not_found(run_id)

        # One command at a time per run, so each response only sees its own events.
        async with run.command_lock:
            return await self._run_command(run, command)

    async def _run_command(
        self,
        run: RunSession,
        command: Callable[[RunSession], Awaitable[CombatResult]],
    ) -> CombatActionResponse | ErrorResponse:
        run_id = run.run_id
        if run.combat is None:
            return _no_active_combat(run_id)
        if run.controller.phase in (EnginePhase.VICTORY, EnginePhase.DEFEAT):
            return ErrorResponse(
                error="Combat is already over",
                error_code=ErrorCode.COMBAT_OVER,
                details={"run_id": run_id, "phase": run.controller.phase.value},
            )

        # Collect every log line the command produces, including the
        # enemy turn and next round that run after end_turn().
        events: list[str] = []
        run.combat.on_update = lambda result: events.extend(result.events)
        try:
            result = await command(run)
        finally:
            if run.combat is not None:
                run.combat.on_update = None

        combat = None
        if run.controller is not None and run.controller.state is not None:
            combat = self._combat_to_response(run)
        else:
            run.finish_combat()

        return CombatActionResponse(
            run_id=run_id,
            success=result.success,
            declined=result.declined,
            ignored=result.ignored,
            reason=result.reason,
            events=events,
            energy_spent=result.energy_spent,
            combat=combat,
        )

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _run_to_response(self, run: RunSession) -> RunResponse:
        controller = run.controller
        return RunResponse(
            run_id=run.run_id,
            status=RunStatus(run.status.value),
            player=_player_info(run.game_state),
            deck=_deck_info(run.game_state.get_deck_system()),
            in_combat=controller is not None and controller.is_active,
            enemy_id=controller.enemy.id if controller else None,
            encounters_won=run.encounters_won,
            created_at=run.created_at,
        )

    def _combat_to_response(self, run: RunSession) -> CombatStateResponse:
        controller = run.controller
        state = controller.state
        energy = run.game_state.get_player_data().time_energy
        intent = state.enemy_intent
        reward = controller.reward

        return CombatStateResponse(
            run_id=run.run_id,
            enemy_id=controller.enemy.id,
            enemy_name=controller.enemy.name,
            enemy_health=state.enemy_health,
            enemy_max_health=state.enemy_max_health,
            phase=CombatPhase(controller.phase.value),
            turn_count=state.turn_count,
            is_player_turn=state.is_player_turn,
            player_defense=state.player_defense,
            intent=IntentInfo(
                intent_type=intent.intent_type.value,
                value=intent.value,
                description=intent.description,
            ) if intent else None,
            intent_text=controller.get_intent_text(),
            player=_player_info(run.game_state),
            hand=[_card_info(card, energy) for card in controller.deck.get_hand()],
            deck=_deck_info(controller.deck),
            recent_log=controller.get_recent_log(),
            reward=RewardInfo(
                experience=reward.experience,
                story_clues=list(reward.story_clues),
                cards=[card.id for card in reward.cards],
            ) if reward else None,
        )


def _player_info(game_state: GameState) -> PlayerInfo:
    player = game_state.get_player_data()
    return PlayerInfo(
        player_id=player.player_id,
        name=player.player_name,
        health=player.health,
        max_health=player.max_health,
        time_energy=player.time_energy,
        max_time_energy=player.max_time_energy,
        paradox_risk=player.paradox_risk,
        level=player.level,
        experience=player.experience,
        day=player.day,
        location=player.current_location,
    )


def _deck_info(deck: DeckSystem) -> DeckInfo:
    return DeckInfo(
        draw_pile=deck.get_draw_pile_count(),
        discard_pile=deck.get_discard_pile_count(),
        hand_size=deck.get_hand_size(),
        total_cards=deck.get_total_card_count(),
        max_hand_size=deck.max_hand_size,
    )


def _card_info(card: Card, energy: int) -> CardInfo:
    return CardInfo(
        card_id=card.id,
        name=card.name,
        description=card.description,
        cost=card.cost,
        category=card.category.value,
        card_type=card.card_type.value,
        rarity=card.rarity.value,
        effects=[
            CardEffectInfo(
                type=effect.type_name,
                value=effect.value,
                target=effect.target.value if effect.target else None,
            )
            for effect in card.effects
        ],
        effect_text=card.effect_description(),
        playable=card.can_play(energy),
    )


def _run_not_found(run_id: str) -> ErrorResponse:
    return ErrorResponse(
        error="Run not found",
        error_code=ErrorCode.RUN_NOT_FOUND,
        details={"run_id": run_id},
    )


def _no_active_combat(run_id: str) -> ErrorResponse:
    return ErrorResponse(
        error="No active combat",
        error_code=ErrorCode.NO_ACTIVE_COMBAT,
        details={"run_id": run_id},
    )
