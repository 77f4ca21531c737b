"""
Tests for API Pydantic schemas.

Validates that:
- Request models apply defaults and reject bad input
- Error responses carry a machine-readable code
- Combat state serializes enums as plain strings
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    CardInfo,
    CombatActionResponse,
    CombatPhase,
    CombatStateResponse,
    CreateRunRequest,
    DeckInfo,
    ErrorCode,
    ErrorResponse,
    PlayCardRequest,
    PlayerInfo,
    StartCombatRequest,
)


def player_info():
    return PlayerInfo(
        player_id="p1",
        name="Penny",
        health=90,
        max_health=100,
        time_energy=2,
        max_time_energy=3,
        location="phoenix_center",
    )


def deck_info():
    return DeckInfo(draw_pile=3, discard_pile=0, hand_size=5, total_cards=8, max_hand_size=7)


class TestRequests:
    def test_create_run_defaults(self):
        request = CreateRunRequest()
        assert request.player_name is None
        assert request.seed is None

    def test_start_combat_defaults_to_test_enemy(self):
        assert StartCombatRequest().enemy_id == "test_enemy"

    def test_play_card_requires_id(self):
        with pytest.raises(ValidationError):
            PlayCardRequest()
        with pytest.raises(ValidationError):
            PlayCardRequest(card_id="")


class TestResponses:
    def test_error_response(self):
        error = ErrorResponse(
            error="Run not found",
            error_code=ErrorCode.RUN_NOT_FOUND,
            details={"run_id": "abc"},
        )
        data = error.model_dump(mode="json")
        assert data["error_code"] == "RUN_NOT_FOUND"
        assert data["api_version"] == "v1"

    def test_card_cost_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            CardInfo(
                card_id="x", name="X", description="x", cost=-1,
                category="physical", card_type="attack", rarity="basic",
            )

    def test_combat_state_serializes(self):
        state = CombatStateResponse(
            run_id="r1",
            enemy_id="test_enemy",
            enemy_name="Temporal Anomaly",
            enemy_health=50,
            enemy_max_health=50,
            phase=CombatPhase.PLAYER_TURN,
            turn_count=1,
            is_player_turn=True,
            player_defense=0,
            player=player_info(),
            deck=deck_info(),
        )
        data = state.model_dump(mode="json")
        assert data["phase"] == "player_turn"
        assert data["hand"] == []
        assert data["reward"] is None

    def test_action_response_defaults(self):
        response = CombatActionResponse(run_id="r1", success=True)
        assert response.events == []
        assert response.declined is False
        assert response.combat is None
