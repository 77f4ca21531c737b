"""
Tests for the storage layer.

Tests:
- File adapter documents, corruption tolerance
- Score ordering and cap
- Meta progression merge
- StorageManager error wrapping and status
"""

import asyncio
import json

import pytest

from ..storage import (
    FileStorageAdapter,
    MemoryStorageAdapter,
    PlayerMetaProgression,
    PlayerRecord,
    PlayerScore,
    StorageError,
    StorageManager,
    create_provider,
)


def make_record(player_id="p1", **overrides):
    data = dict(
        player_id=player_id,
        player_name="Penny",
        health=80,
        max_health=100,
        time_energy=3,
        max_time_energy=3,
        current_location="phoenix_center",
    )
    data.update(overrides)
    return PlayerRecord(**data)


def make_score(score, category="highest_day_reached", player_id="p1"):
    return PlayerScore(player_id=player_id, player_name=player_id, score=score, category=category)


@pytest.fixture
def file_storage(tmp_path):
    storage = FileStorageAdapter(tmp_path / "data", max_scores=3)
    asyncio.run(storage.init())
    return storage


class TestFileAdapter:
    def test_init_creates_documents(self, file_storage):
        assert json.loads(file_storage.player_data_path.read_text()) == {}
        assert json.loads(file_storage.global_scores_path.read_text()) == {"scores": []}
        assert json.loads(file_storage.meta_progression_path.read_text()) == {}

    def test_player_round_trip(self, file_storage):
        async def scenario():
            await file_storage.save_player_data("p1", make_record(health=55))
            return await file_storage.load_player_data("p1")

        record = asyncio.run(scenario())
        assert record.health == 55
        assert record.current_scene == "HubScene"

    def test_player_data_is_keyed_by_id(self, file_storage):
        asyncio.run(file_storage.save_player_data("p1", make_record()))
        document = json.loads(file_storage.player_data_path.read_text())
        assert list(document) == ["p1"]
        assert document["p1"]["player_name"] == "Penny"

    def test_delete(self, file_storage):
        async def scenario():
            await file_storage.save_player_data("p1", make_record())
            await file_storage.delete_player_data("p1")
            await file_storage.delete_player_data("missing")
            return await file_storage.load_player_data("p1")

        assert asyncio.run(scenario()) is None

    def test_corrupt_file_reads_as_empty(self, file_storage):
        file_storage.player_data_path.write_text("{not json")
        assert asyncio.run(file_storage.load_player_data("p1")) is None

    def test_scores_sorted_and_capped(self, file_storage):
        async def scenario():
            for value in (5, 40, 12, 30):
                await file_storage.save_global_score(make_score(value))
            return await file_storage.get_global_scores("highest_day_reached")

        assert [s.score for s in asyncio.run(scenario())] == [40, 30, 12]

    def test_scores_filtered_by_category_and_limit(self, file_storage):
        async def scenario():
            await file_storage.save_global_score(make_score(9, category="game_completion"))
            await file_storage.save_global_score(make_score(7))
            await file_storage.save_global_score(make_score(3))
            return (
                await file_storage.get_global_scores("game_completion"),
                await file_storage.get_global_scores("highest_day_reached", limit=1),
            )

        completion, days = asyncio.run(scenario())
        assert [s.score for s in completion] == [9]
        assert [s.score for s in days] == [7]

    def test_meta_progression_merges(self, file_storage):
        async def scenario():
            await file_storage.save_meta_progression(
                "p1",
                PlayerMetaProgression(
                    player_id="p1", total_runs=1, highest_day_reached=3,
                    cards_unlocked=["strike"], total_score=20,
                ),
            )
            await file_storage.save_meta_progression(
                "p1",
                PlayerMetaProgression(
                    player_id="p1", total_runs=1, successful_runs=1, highest_day_reached=2,
                    cards_unlocked=["rewind", "strike"], total_score=15,
                ),
            )
            return await file_storage.load_meta_progression("p1")

        merged = asyncio.run(scenario())
        assert merged.total_runs == 2
        assert merged.successful_runs == 1
        assert merged.highest_day_reached == 3
        assert merged.cards_unlocked == ["strike", "rewind"]
        assert merged.total_score == 35

    def test_leaderboard_ranks_by_total_score(self, file_storage):
        async def scenario():
            await file_storage.save_meta_progression("a", PlayerMetaProgression(player_id="a", total_score=5))
            await file_storage.save_meta_progression("b", PlayerMetaProgression(player_id="b", total_score=50))
            return await file_storage.get_player_leaderboard()

        board = asyncio.run(scenario())
        assert [s.player_id for s in board] == ["b", "a"]
        assert all(s.category == "overall_total" for s in board)


class TestMemoryAdapter:
    def test_records_are_copied(self):
        storage = MemoryStorageAdapter()
        record = make_record()

        async def scenario():
            await storage.save_player_data("p1", record)
            record.health = 1
            loaded = await storage.load_player_data("p1")
            loaded.health = 2
            return await storage.load_player_data("p1")

        assert asyncio.run(scenario()).health == 80

    def test_cleanup_clears_everything(self):
        storage = MemoryStorageAdapter()

        async def scenario():
            await storage.save_player_data("p1", make_record())
            await storage.save_global_score(make_score(1))
            await storage.cleanup()
            return (
                await storage.load_player_data("p1"),
                await storage.get_global_scores("highest_day_reached"),
            )

        assert asyncio.run(scenario()) == (None, [])


class TestMetaProgressionModel:
    def test_level_floor(self):
        assert PlayerMetaProgression(player_id="p").highest_level_reached == 1

    def test_merge_keeps_stored_id(self):
        stored = PlayerMetaProgression(player_id="p", achievements=["first_win"])
        merged = stored.merged_with(PlayerMetaProgression(player_id="p", achievements=["first_win"]))
        assert merged.achievements == ["first_win"]
        assert merged.player_id == "p"


class FailingInit(MemoryStorageAdapter):
    async def init(self):
        raise OSError("no such volume")


class FailingReads(MemoryStorageAdapter):
    async def load_player_data(self, player_id):
        raise RuntimeError("backend down")

    async def get_global_scores(self, category, limit=10):
        raise RuntimeError("backend down")


class TestStorageManager:
    def test_lazy_init(self):
        manager = StorageManager(MemoryStorageAdapter())
        assert not manager.initialized
        asyncio.run(manager.save_player_data("p1", make_record()))
        assert manager.initialized

    def test_init_failure_raises_storage_error(self):
        manager = StorageManager(FailingInit())
        with pytest.raises(StorageError):
            asyncio.run(manager.init())
        assert not manager.initialized

    def test_backend_errors_are_wrapped(self):
        manager = StorageManager(FailingReads())
        with pytest.raises(StorageError, match="Failed to load player data"):
            asyncio.run(manager.load_player_data("p1"))

    def test_status(self):
        manager = StorageManager(MemoryStorageAdapter())

        async def scenario():
            before = await manager.get_storage_status()
            await manager.init()
            after = await manager.get_storage_status()
            return before, after

        before, after = asyncio.run(scenario())
        assert (before.initialized, before.health) == (False, "not_initialized")
        assert (after.initialized, after.provider, after.health) == (True, "memory", "healthy")

    def test_status_reports_errors(self):
        manager = StorageManager(FailingReads())

        async def scenario():
            await manager.init()
            return await manager.get_storage_status()

        assert asyncio.run(scenario()).health == "error"

    def test_cleanup_resets_initialized(self):
        manager = StorageManager(MemoryStorageAdapter())

        async def scenario():
            await manager.init()
            await manager.cleanup()

        asyncio.run(scenario())
        assert not manager.initialized

    def test_provider_by_name(self, tmp_path):
        assert create_provider("memory").name == "memory"
        assert create_provider("file", tmp_path).data_dir == tmp_path
        assert StorageManager(provider_name="memory").provider_name == "memory"
        with pytest.raises(StorageError):
            create_provider("redis")
