"""
Tests for the deck engine.

Tests:
- Card conservation across draw/play/discard/reset
- Hand size cap
- Reshuffle when the draw pile runs out
- Energy gating on play
- The starter deck scenario
"""

import random

import pytest

from ..engine_core.card import CardEffect, EffectType
from ..engine_core.deck import DeckSystem, fisher_yates_shuffle
from .conftest import make_card


class TestShuffle:
    """Tests for the Fisher-Yates shuffle."""

    def test_shuffle_is_a_permutation(self, numbered_cards):
        pile = list(numbered_cards)
        fisher_yates_shuffle(pile, random.Random(3))
        assert sorted(c.id for c in pile) == sorted(c.id for c in numbered_cards)

    def test_same_seed_same_order(self, numbered_cards):
        first = DeckSystem(numbered_cards, rng=random.Random(99))
        second = DeckSystem(numbered_cards, rng=random.Random(99))
        assert [c.id for c in first.get_deck_state().draw_pile] == [
            c.id for c in second.get_deck_state().draw_pile
        ]


class TestDraw:
    """Tests for draw_cards()."""

    def test_draw_moves_cards_to_hand(self, starter_deck):
        drawn = starter_deck.draw_cards(5)
        assert len(drawn) == 5
        assert starter_deck.get_hand_size() == 5
        assert starter_deck.get_draw_pile_count() == 3

    def test_draw_takes_from_top(self, numbered_cards):
        deck = DeckSystem(numbered_cards, rng=random.Random(5))
        top = deck.get_deck_state().draw_pile[-1]
        assert deck.draw_cards(1)[0].id == top.id

    def test_hand_never_exceeds_max(self, numbered_cards):
        deck = DeckSystem(numbered_cards, max_hand_size=4, rng=random.Random(1))
        drawn = deck.draw_cards(10)
        assert len(drawn) == 4
        assert deck.is_hand_full()
        assert deck.draw_cards(1) == []

    def test_draw_from_empty_deck_returns_nothing(self):
        deck = DeckSystem([])
        assert deck.is_empty()
        assert deck.draw_cards(3) == []

    def test_negative_count_is_misuse(self, starter_deck):
        with pytest.raises(ValueError):
            starter_deck.draw_cards(-1)

    def test_invalid_hand_size_is_misuse(self, numbered_cards):
        with pytest.raises(ValueError):
            DeckSystem(numbered_cards, max_hand_size=0)


class TestReshuffle:
    """Tests for reshuffling the discard pile."""

    def test_empty_draw_pile_reshuffles_discard(self, numbered_cards):
        cards = numbered_cards[:4]
        deck = DeckSystem(cards, rng=random.Random(2))
        for card in deck.draw_cards(4):
            assert deck.play_card(card.id, current_energy=10).success
        assert deck.get_draw_pile_count() == 0
        assert deck.get_discard_pile_count() == 4

        drawn = deck.draw_cards(1)
        assert len(drawn) == 1
        assert deck.get_draw_pile_count() == 3
        assert deck.get_discard_pile_count() == 0

    def test_forced_reshuffle_reports_count(self, starter_deck):
        for card in starter_deck.draw_cards(3):
            starter_deck.discard_card(card.id)
        assert starter_deck.reshuffle_discard_pile() == 3
        assert starter_deck.get_draw_pile_count() == 8
        assert starter_deck.reshuffle_discard_pile() == 0

    def test_restore_returns_to_snapshot(self, starter_deck):
        snapshot = starter_deck.get_deck_state()
        seen = []
        starter_deck.add_listener(seen.append)
        starter_deck.draw_cards(4)
        starter_deck.restore(snapshot)

        assert starter_deck.get_hand_size() == 0
        assert starter_deck.get_draw_pile_count() == 8
        assert [c.id for c in starter_deck.get_deck_state().draw_pile] == [c.id for c in snapshot.draw_pile]
        assert seen[-1].hand == ()


class TestPlayCard:
    """Tests for play_card()."""

    def test_play_moves_card_to_discard(self, starter_deck):
        card = starter_deck.draw_cards(1)[0]
        result = starter_deck.play_card(card.id, current_energy=3)
        assert result.success
        assert result.energy_spent == card.cost
        assert result.effects_applied == card.effects
        assert starter_deck.get_hand_size() == 0
        assert starter_deck.get_discard_pile_count() == 1

    def test_missing_card_fails(self, starter_deck):
        starter_deck.draw_cards(2)
        result = starter_deck.play_card("no_such_card", current_energy=3)
        assert not result.success
        assert result.message == "Card not found in hand"
        assert starter_deck.get_hand_size() == 2

    def test_insufficient_energy_fails_without_moving(self):
        deck = DeckSystem([make_card("pricey", 3)])
        deck.draw_cards(1)
        result = deck.play_card("pricey", current_energy=2)
        assert not result.success
        assert result.message == "Not enough energy. Need 3, have 2"
        assert deck.get_hand_size() == 1
        assert deck.get_discard_pile_count() == 0

    def test_duplicate_ids_remove_one(self):
        deck = DeckSystem([make_card("strike"), make_card("strike")])
        deck.draw_cards(2)
        assert deck.play_card("strike", current_energy=3).success
        assert [c.id for c in deck.get_hand()] == ["strike"]


class TestConservation:
    """Total card count is constant across operations."""

    def test_total_is_conserved(self, starter_deck):
        assert starter_deck.get_total_card_count() == 8
        hand = starter_deck.draw_cards(5)
        starter_deck.play_card(hand[0].id, current_energy=3)
        starter_deck.discard_card(hand[1].id)
        starter_deck.draw_cards(10)
        assert starter_deck.get_total_card_count() == 8
        starter_deck.reset_deck()
        assert starter_deck.get_total_card_count() == 8
        assert starter_deck.get_draw_pile_count() == 8

    def test_reward_card_grows_deck(self, starter_deck):
        starter_deck.add_card_to_discard(make_card("reward"))
        assert starter_deck.get_total_card_count() == 9

    def test_accessors_return_copies(self, starter_deck):
        starter_deck.draw_cards(2)
        hand = starter_deck.get_hand()
        hand.clear()
        assert starter_deck.get_hand_size() == 2


class TestListeners:
    """Listeners receive snapshots after each mutation."""

    def test_listener_gets_snapshot(self, starter_deck):
        snapshots = []
        starter_deck.add_listener(snapshots.append)
        starter_deck.draw_cards(2)
        assert snapshots[-1].total == 8
        assert len(snapshots[-1].hand) == 2

        starter_deck.remove_listener(snapshots.append)
        starter_deck.draw_cards(1)
        assert len(snapshots) == 1


class TestStarterScenario:
    """Draw 5 from the 8-card starter deck, play a 2-cost card, over-draw."""

    def test_end_to_end(self, starter_deck):
        starter_deck.draw_cards(5)
        # Make sure the 2-cost card is in hand regardless of shuffle order
        while "insight" not in [c.id for c in starter_deck.get_hand()]:
            starter_deck.reset_deck()
            starter_deck.draw_cards(5)

        assert starter_deck.get_hand_size() == 5
        assert starter_deck.get_draw_pile_count() == 3
        assert starter_deck.get_discard_pile_count() == 0

        result = starter_deck.play_card("insight", current_energy=3)
        assert result.success
        assert result.energy_spent == 2
        assert starter_deck.get_hand_size() == 4
        assert starter_deck.get_discard_pile_count() == 1

        drawn = starter_deck.draw_cards(10)
        assert len(drawn) == 3
        assert starter_deck.get_hand_size() == 7
        assert starter_deck.get_total_card_count() == 8

    def test_drawable_count(self, starter_deck):
        starter_deck.draw_cards(5)
        assert starter_deck.get_drawable_cards_count() == 2

    def test_starter_deck_factory(self):
        deck = DeckSystem.create_starter_deck(rng=random.Random(0))
        cards = deck.get_deck_state().cards
        assert len(cards) == 8
        assert any(card.cost == 2 for card in cards)
        assert all(card.validate() for card in cards)
        assert sum(1 for e in cards if e.id == "strike") == 2
        effect_types = {e.effect_type for card in cards for e in card.effects}
        assert EffectType.REWIND in effect_types
        assert CardEffect(EffectType.DAMAGE, 6) in [e for card in cards for e in card.effects]
