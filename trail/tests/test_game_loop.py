"""
Tests for the paced combat loop.

Every scenario runs in its own event loop via asyncio.run().
"""

import asyncio

from ..engine_core.action import CombatAction
from ..engine_core.combat import CombatController, CombatPhase
from ..session.game_loop import CombatLoop, LoopState


def make_loop(game_state, enemy_id="test_enemy", delay=0, **kwargs):
    controller = CombatController(game_state, enemy_id=enemy_id)
    return CombatLoop(controller, enemy_delay=delay, round_delay=delay, **kwargs)


class TestTurnFlow:
    def test_start(self, game_state):
        loop = make_loop(game_state)
        assert loop.state is LoopState.NOT_STARTED
        assert loop.start().success
        assert loop.state is LoopState.PLAYER_TURN

    def test_end_turn_schedules_enemy(self, game_state):
        loop = make_loop(game_state)
        loop.start()

        async def scenario():
            result = await loop.end_turn()
            assert result.success
            assert loop.state is LoopState.ENEMY_PENDING
            await loop.wait_idle()

        asyncio.run(scenario())
        assert loop.state is LoopState.PLAYER_TURN
        assert loop.controller.state.turn_count == 2

    def test_enemy_waits_for_delay(self, game_state):
        loop = make_loop(game_state, delay=0.05)
        loop.start()

        async def scenario():
            await loop.end_turn()
            await asyncio.sleep(0)
            assert loop.controller.phase is CombatPhase.ENEMY_TURN
            assert loop.has_pending_turn
            await loop.wait_idle()

        asyncio.run(scenario())
        assert loop.controller.phase is CombatPhase.PLAYER_TURN

    def test_second_end_turn_is_ignored(self, game_state):
        loop = make_loop(game_state)
        loop.start()

        async def scenario():
            await loop.end_turn()
            second = await loop.end_turn()
            await loop.wait_idle()
            return second

        assert asyncio.run(scenario()).ignored
        assert loop.controller.state.turn_count == 2

    def test_cards_ignored_while_enemy_pending(self, game_state):
        loop = make_loop(game_state)
        loop.start()
        card_id = game_state.get_deck_system().get_hand()[0].id

        async def scenario():
            await loop.end_turn()
            result = await loop.play_card(card_id)
            await loop.wait_idle()
            return result

        assert asyncio.run(scenario()).ignored

    def test_apply_dispatches(self, game_state):
        loop = make_loop(game_state)
        loop.start()

        async def scenario():
            await loop.apply(CombatAction.end_turn())
            await loop.wait_idle()

        asyncio.run(scenario())
        assert loop.controller.state.turn_count == 2


class TestTeardown:
    def test_teardown_cancels_pending_enemy_turn(self, game_state):
        loop = make_loop(game_state, enemy_id="strong_enemy", delay=10)
        loop.start()

        async def scenario():
            await loop.end_turn()
            loop.teardown()
            await asyncio.wait_for(loop.wait_idle(), timeout=1)

        asyncio.run(scenario())
        assert loop.state is LoopState.TORN_DOWN
        assert loop.controller.state is None
        assert game_state.get_player_data().health == 100

    def test_teardown_clears_pending_turn_immediately(self, game_state):
        loop = make_loop(game_state, enemy_id="strong_enemy", delay=10)
        loop.start()

        async def scenario():
            await loop.end_turn()
            assert loop.has_pending_turn
            loop.teardown()
            assert not loop.has_pending_turn
            assert loop.state is LoopState.TORN_DOWN
            await asyncio.wait_for(loop.wait_idle(), timeout=1)

        asyncio.run(scenario())

    def test_commands_after_teardown_are_ignored(self, game_state):
        loop = make_loop(game_state)
        loop.start()
        loop.teardown()

        async def scenario():
            return [await loop.end_turn(), await loop.play_card("strike"), await loop.flee()]

        assert all(result.ignored for result in asyncio.run(scenario()))
        assert loop.start().ignored

    def test_flee(self, game_state):
        loop = make_loop(game_state)
        loop.start()
        result = asyncio.run(loop.flee())
        assert result.phase is CombatPhase.ABANDONED
        assert loop.state is LoopState.TORN_DOWN


class TestOutcomes:
    def test_victory_saves_run(self, strike_only_state):
        loop = make_loop(strike_only_state, enemy_id="weak_enemy")
        loop.start()

        async def scenario():
            for _ in range(3):
                await loop.play_card("big_strike")
            return await strike_only_state.has_save_game()

        assert asyncio.run(scenario()) is True
        assert loop.state is LoopState.FINISHED

    def test_defeat_clears_save_and_records_run(self, game_state, memory_storage):
        game_state.set_player_data(health=1, day=3)
        loop = make_loop(game_state, enemy_id="strong_enemy")
        loop.start()

        async def scenario():
            await game_state.save_game()
            await loop.end_turn()
            await loop.wait_idle()
            return (
                await game_state.has_save_game(),
                await memory_storage.load_meta_progression("test_player"),
            )

        has_save, progression = asyncio.run(scenario())
        assert loop.state is LoopState.FINISHED
        assert loop.controller.phase is CombatPhase.DEFEAT
        assert has_save is False
        assert progression.total_runs == 1
        assert progression.successful_runs == 0
        assert progression.highest_day_reached == 3

    def test_outcome_persisted_once(self, game_state, memory_storage):
        game_state.set_player_data(health=1)
        loop = make_loop(game_state, enemy_id="strong_enemy")
        loop.start()

        async def scenario():
            await loop.end_turn()
            await loop.wait_idle()
            await loop._handle_outcome()
            return await memory_storage.load_meta_progression("test_player")

        assert asyncio.run(scenario()).total_runs == 1


class TestUpdates:
    def test_on_update_gets_every_effective_result(self, game_state):
        updates = []
        loop = make_loop(game_state, on_update=updates.append)
        loop.start()

        async def scenario():
            await loop.end_turn()
            await loop.end_turn()
            await loop.wait_idle()

        asyncio.run(scenario())
        # start, end turn, enemy turn, next round; the ignored second end_turn is not published
        assert len(updates) == 4
        assert "You end your turn." in updates[1].events
        assert "Turn 2 begins." in updates[3].events
