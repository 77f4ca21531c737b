"""
Game State - The run's player data, progress, and deck.

A GameState is an explicitly constructed context object: whoever starts a
run creates one and passes it to the combat controller, the API service,
and the loop. It owns the run's single DeckSystem.

Persistence is best-effort. Every storage failure is logged as a warning
and reported as False; play continues in memory.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import Any, TYPE_CHECKING
import logging
import math
import random
import uuid

from ..config import (
    DEFAULT_CHARACTER_TRAITS,
    DEFAULT_HEALTH,
    DEFAULT_LOCATION,
    DEFAULT_PLAYER_NAME,
    DEFAULT_TIME_ENERGY,
    LEVEL_UP_ENERGY_BONUS,
    LEVEL_UP_HEALTH_BONUS,
    PARADOX_RISK_CAP,
)
from ..content.starter_deck import create_starter_cards
from ..engine_core.deck import CardPlayResult, DeckSystem
from ..storage.schemas import PlayerMetaProgression, PlayerRecord

if TYPE_CHECKING:
    from ..engine_core.card import Card
    from ..storage.adapter import StorageProvider

logger = logging.getLogger(__name__)

DEFAULT_SCENE = "HubScene"


@dataclass
class PlayerData:
    """Player stats for the current run."""
    player_id: str
    player_name: str = DEFAULT_PLAYER_NAME
    health: int = DEFAULT_HEALTH
    max_health: int = DEFAULT_HEALTH
    time_energy: int = DEFAULT_TIME_ENERGY
    max_time_energy: int = DEFAULT_TIME_ENERGY
    paradox_risk: int = 0
    deck_size: int = 0
    current_location: str = DEFAULT_LOCATION
    day: int = 1
    experience: int = 0
    level: int = 1
    character_traits: list[str] = field(default_factory=lambda: list(DEFAULT_CHARACTER_TRAITS))

    def copy(self) -> PlayerData:
        return replace(self, character_traits=list(self.character_traits))

    def clamp(self) -> None:
        """Pull every bounded field back into range."""
        self.max_health = max(0, self.max_health)
        self.max_time_energy = max(0, self.max_time_energy)
        self.health = max(0, min(self.max_health, self.health))
        self.time_energy = max(0, min(self.max_time_energy, self.time_energy))
        self.paradox_risk = max(0, min(PARADOX_RISK_CAP, self.paradox_risk))
        self.deck_size = max(0, self.deck_size)
        self.experience = max(0, self.experience)
        self.day = max(1, self.day)
        self.level = max(1, self.level)


PLAYER_FIELDS = frozenset(f.name for f in fields(PlayerData))


@dataclass
class GameProgress:
    """Where the player is in the story."""
    current_scene: str = DEFAULT_SCENE
    game_flags: dict[str, bool] = field(default_factory=dict)
    visited_locations: list[str] = field(default_factory=list)
    completed_events: list[str] = field(default_factory=list)


def experience_for_next_level(level: int) -> int:
    """Total experience needed to reach level + 1 from `level`."""
    return math.floor(100 * 1.5 ** level)


class GameState:
    """
    Session context for one run.

    Usage:
        state = GameState(storage=StorageManager(MemoryStorageAdapter()))
        state.modify_health(-10)
        result = state.play_card("strike")      # deducts energy on success
        await state.save_game()
    """

    def __init__(
        self,
        storage: StorageProvider | None = None,
        player_id: str | None = None,
        starter_cards: list[Card] | None = None,
        rng: random.Random | None = None,
    ):
        self.storage = storage
        self._starter_cards = [card.clone() for card in starter_cards] if starter_cards else create_starter_cards()
        self._deck = DeckSystem(self._starter_cards, rng=rng)
        self._player = PlayerData(player_id=player_id or f"player_{uuid.uuid4().hex[:8]}")
        self._progress = GameProgress()
        self._sync_deck_size()

        # Stats of the run most recently discarded by reset_game()
        self.last_run: PlayerData | None = None

    @property
    def player_id(self) -> str:
        return self._player.player_id

    # =========================================================================
    # Player data
    # =========================================================================

    def get_player_data(self) -> PlayerData:
        return self._player.copy()

    def set_player_data(self, **changes: Any) -> None:
        """Merge changes into the player data, then clamp."""
        unknown = set(changes) - PLAYER_FIELDS
        if unknown:
            raise ValueError(f"Unknown player fields: {sorted(unknown)}")
        for name, value in changes.items():
            setattr(self._player, name, value)
        self._player.clamp()

    def modify_health(self, amount: int) -> int:
        """Change health by amount (clamped). Returns the new health."""
        self.set_player_data(health=self._player.health + amount)
        return self._player.health

    def modify_time_energy(self, amount: int) -> int:
        self.set_player_data(time_energy=self._player.time_energy + amount)
        return self._player.time_energy

    def modify_paradox_risk(self, amount: int) -> int:
        self.set_player_data(paradox_risk=self._player.paradox_risk + amount)
        return self._player.paradox_risk

    def refill_energy(self) -> None:
        self._player.time_energy = self._player.max_time_energy

    def gain_experience(self, amount: int) -> bool:
        """
        Add experience, levelling up as many times as it allows.

        Each level: max health +10 and a full heal, max energy +1 and a full
        refill. Returns True if at least one level was gained.
        """
        if amount < 0:
            raise ValueError("amount must be >= 0")

        player = self._player
        player.experience += amount
        levelled = False
        while player.experience >= experience_for_next_level(player.level):
            player.level += 1
            player.max_health += LEVEL_UP_HEALTH_BONUS
            player.health = player.max_health
            player.max_time_energy += LEVEL_UP_ENERGY_BONUS
            player.time_energy = player.max_time_energy
            levelled = True
            logger.info("%s reached level %d", player.player_name, player.level)
        return levelled

    # =========================================================================
    # Deck
    # =========================================================================

    def get_deck_system(self) -> DeckSystem:
        return self._deck

    def play_card(self, card_id: str) -> CardPlayResult:
        """Play a card with the current energy. Energy is only spent on success."""
        result = self._deck.play_card(card_id, self._player.time_energy)
        if result.success:
            self.modify_time_energy(-result.energy_spent)
        return result

    def _sync_deck_size(self) -> None:
        self._player.deck_size = self._deck.get_total_card_count()

    # =========================================================================
    # Progress
    # =========================================================================

    @property
    def current_scene(self) -> str:
        return self._progress.current_scene

    @current_scene.setter
    def current_scene(self, scene: str) -> None:
        self._progress.current_scene = scene

    def get_game_flag(self, flag: str) -> bool:
        return self._progress.game_flags.get(flag, False)

    def set_game_flag(self, flag: str, value: bool = True) -> None:
        self._progress.game_flags[flag] = value

    def add_visited_location(self, location: str) -> None:
        if location not in self._progress.visited_locations:
            self._progress.visited_locations.append(location)

    def has_visited_location(self, location: str) -> bool:
        return location in self._progress.visited_locations

    def add_completed_event(self, event: str) -> None:
        if event not in self._progress.completed_events:
            self._progress.completed_events.append(event)

    def has_completed_event(self, event: str) -> bool:
        return event in self._progress.completed_events

    def increment_day(self) -> int:
        self._player.day += 1
        return self._player.day

    def get_game_progress(self) -> GameProgress:
        return GameProgress(
            current_scene=self._progress.current_scene,
            game_flags=dict(self._progress.game_flags),
            visited_locations=list(self._progress.visited_locations),
            completed_events=list(self._progress.completed_events),
        )

    def reset_game(self) -> None:
        """
        Discard the run in memory: default stats, fresh progress, fresh deck.

        The DeckSystem instance is kept so existing references stay valid.
        The saved game is not touched; see clear_save().
        """
        self.last_run = self._player.copy()
        self._player = PlayerData(
            player_id=self._player.player_id,
            player_name=self._player.player_name,
        )
        self._progress = GameProgress()
        self._deck.initialize(self._starter_cards)
        self._sync_deck_size()
        logger.info("Run reset for %s", self.player_id)

    # =========================================================================
    # Persistence
    # =========================================================================

    def to_record(self) -> PlayerRecord:
        self._sync_deck_size()
        player = self._player
        progress = self._progress
        return PlayerRecord(
            player_id=player.player_id,
            player_name=player.player_name,
            health=player.health,
            max_health=player.max_health,
            time_energy=player.time_energy,
            max_time_energy=player.max_time_energy,
            paradox_risk=player.paradox_risk,
            deck_size=player.deck_size,
            current_location=player.current_location,
            day=player.day,
            experience=player.experience,
            level=player.level,
            character_traits=list(player.character_traits),
            current_scene=progress.current_scene,
            game_flags=dict(progress.game_flags),
            visited_locations=list(progress.visited_locations),
            completed_events=list(progress.completed_events),
        )

    def apply_record(self, record: PlayerRecord) -> None:
        data = record.model_dump(include=set(PLAYER_FIELDS))
        self._player = PlayerData(**data)
        self._player.clamp()
        self._progress = GameProgress(
            current_scene=record.current_scene,
            game_flags=dict(record.game_flags),
            visited_locations=list(record.visited_locations),
            completed_events=list(record.completed_events),
        )

    async def save_game(self) -> bool:
        if self.storage is None:
            return False
        try:
            await self.storage.save_player_data(self.player_id, self.to_record())
        except Exception as e:
            logger.warning("Failed to save game for %s: %s", self.player_id, e)
            return False
        return True

    async def load_game(self) -> bool:
        if self.storage is None:
            return False
        try:
            record = await self.storage.load_player_data(self.player_id)
        except Exception as e:
            logger.warning("Failed to load game for %s: %s", self.player_id, e)
            return False
        if record is None:
            return False
        self.apply_record(record)
        return True

    async def has_save_game(self) -> bool:
        if self.storage is None:
            return False
        try:
            return await self.storage.load_player_data(self.player_id) is not None
        except Exception as e:
            logger.warning("Failed to check save for %s: %s", self.player_id, e)
            return False

    async def clear_save(self) -> bool:
        if self.storage is None:
            return False
        try:
            await self.storage.delete_player_data(self.player_id)
        except Exception as e:
            logger.warning("Failed to clear save for %s: %s", self.player_id, e)
            return False
        return True

    async def record_run_end(self, successful: bool) -> bool:
        """
        Fold the finished run into the player's meta progression.

        After a defeat the run has already been reset, so the stats come
        from last_run when it is set.
        """
        if self.storage is None:
            return False
        run = self.last_run or self._player
        progression = PlayerMetaProgression(
            player_id=self.player_id,
            total_runs=1,
            successful_runs=1 if successful else 0,
            highest_day_reached=run.day,
            highest_level_reached=run.level,
            total_score=run.experience,
        )
        try:
            await self.storage.save_meta_progression(self.player_id, progression)
        except Exception as e:
            logger.warning("Failed to record run end for %s: %s", self.player_id, e)
            return False
        self.last_run = None
        return True
