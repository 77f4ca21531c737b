"""
Parallel Trail - Roguelike Combat & Deck Engine

A turn-based combat engine for a deck-building roguelike. The engine provides:
- Deck management (draw, hand, discard piles)
- Card effect resolution
- A turn-based combat state machine with telegraphed enemy intents
- Session state and pluggable persistence
"""

__version__ = "0.1.0"
