"""
Tests for enemy intent selection.
"""

from ..content.enemies import ENEMY_DATA, EnemyData, get_enemy
from ..engine_core.intent import IntentType, get_enemy_intent, scaled_damage


def enemy_with(ai_type: str, base_damage: int = 10) -> EnemyData:
    return EnemyData(
        id=f"{ai_type}_dummy",
        name="Dummy",
        health=10,
        max_health=10,
        ai_type=ai_type,
        base_damage=base_damage,
        description="test",
    )


class TestScaling:
    def test_damage_grows_every_three_turns(self):
        assert scaled_damage(8, 1) == 8
        assert scaled_damage(8, 3) == 9
        assert scaled_damage(8, 6) == 10


class TestBalanced:
    """The default enemy alternates attack and defend."""

    def test_even_turn_attacks(self):
        intent = get_enemy_intent(ENEMY_DATA["test_enemy"], 4)
        assert intent.intent_type is IntentType.ATTACK
        assert intent.value == 9
        assert intent.description == "Temporal Anomaly prepares to attack!"

    def test_odd_turn_defends_at_sixty_percent(self):
        intent = get_enemy_intent(ENEMY_DATA["test_enemy"], 5)
        assert intent.intent_type is IntentType.DEFEND
        assert intent.value == 5

    def test_first_turn_defends(self):
        intent = get_enemy_intent(ENEMY_DATA["test_enemy"], 1)
        assert intent.intent_type is IntentType.DEFEND
        assert intent.value == 4


class TestOtherArchetypes:
    def test_aggressive_quick_strike_on_odd_turns(self):
        enemy = enemy_with("aggressive")
        odd = get_enemy_intent(enemy, 1)
        even = get_enemy_intent(enemy, 2)
        assert odd.intent_type is IntentType.ATTACK and odd.value == 7
        assert odd.description == "Dummy prepares a quick strike!"
        assert even.intent_type is IntentType.ATTACK and even.value == 10

    def test_defensive_defends_every_third_turn(self):
        enemy = enemy_with("defensive")
        assert get_enemy_intent(enemy, 2).intent_type is IntentType.ATTACK
        third = get_enemy_intent(enemy, 3)
        assert third.intent_type is IntentType.DEFEND
        assert third.value == 8

    def test_special_every_fourth_turn(self):
        enemy = enemy_with("special")
        fourth = get_enemy_intent(enemy, 4)
        assert fourth.intent_type is IntentType.SPECIAL
        assert fourth.value == 16
        assert get_enemy_intent(enemy, 5).intent_type is IntentType.ATTACK

    def test_unknown_archetype_attacks(self):
        intent = get_enemy_intent(enemy_with("berserk"), 1)
        assert intent.is_attack
        assert intent.value == 10

    def test_intent_is_deterministic(self):
        enemy = get_enemy("strong_enemy")
        assert get_enemy_intent(enemy, 7) == get_enemy_intent(enemy, 7)


class TestCatalog:
    def test_unknown_id_falls_back_to_default(self):
        assert get_enemy("nope").id == "test_enemy"

    def test_catalog_health_is_full(self):
        for enemy in ENEMY_DATA.values():
            assert enemy.health == enemy.max_health
