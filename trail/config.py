"""
Configuration - Environment settings and gameplay constants.

Environment variables:
    TRAIL_ENV               development | production
    TRAIL_DATA_DIR          Directory for the file storage adapter
    TRAIL_STORAGE_PROVIDER  file | memory
    ALLOWED_ORIGINS         Comma-separated CORS origins for the API
"""

import os
from pathlib import Path

# Environment configuration
TRAIL_ENV = os.getenv("TRAIL_ENV", "development")
TRAIL_DATA_DIR = Path(os.getenv("TRAIL_DATA_DIR", str(Path.home() / ".parallel_trail" / "data")))
TRAIL_STORAGE_PROVIDER = os.getenv("TRAIL_STORAGE_PROVIDER", "file")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Deck
MAX_HAND_SIZE = 7
OPENING_HAND_SIZE = 5
CARDS_PER_TURN = 1

# Combat pacing (seconds)
ENEMY_TURN_DELAY = 0.5
NEXT_ROUND_DELAY = 1.0
COMBAT_LOG_WINDOW = 5

# Player defaults
DEFAULT_PLAYER_NAME = 'Penelope "Penny" Torres'
DEFAULT_HEALTH = 100
DEFAULT_TIME_ENERGY = 3
DEFAULT_LOCATION = "phoenix_center"
DEFAULT_CHARACTER_TRAITS = ("timeline_aware", "bilingual")
PARADOX_RISK_CAP = 100

# Progression
LEVEL_UP_HEALTH_BONUS = 10
LEVEL_UP_ENERGY_BONUS = 1
VICTORY_EXPERIENCE = 10

# Global scores
MAX_TOP_SCORES = 100
SCORE_CATEGORIES = (
    "highest_day_reached",
    "fastest_completion",
    "most_cards_collected",
    "least_damage_taken",
    "most_successful_combats",
    "game_completion",
)
