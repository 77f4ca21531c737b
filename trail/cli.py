"""
Trail CLI - Command-line interface for the engine.

Usage:
    trail enemies                             List the enemy catalog
    trail deck [--seed N]                     Show the starter deck and an opening hand
    trail simulate --enemy ID --seed N        Let a policy play one encounter
    trail serve [--host H] [--port P]         Run the HTTP API
"""

import argparse
import asyncio
import logging
import random
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Parallel Trail - Roguelike Combat & Deck Engine",
        prog="trail",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("enemies", help="List the enemy catalog")

    deck_parser = subparsers.add_parser("deck", help="Show the starter deck")
    deck_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")

    simulate_parser = subparsers.add_parser("simulate", help="Simulate one encounter")
    simulate_parser.add_argument("--enemy", default="test_enemy", help="Enemy id")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for shuffles and flavor")
    simulate_parser.add_argument(
        "--policy", choices=["greedy", "random"], default="greedy", help="Player policy"
    )
    simulate_parser.add_argument("--max-turns", type=int, default=50, help="Give up after this many turns")
    simulate_parser.add_argument("--quiet", "-q", action="store_true", help="Only print the outcome")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "enemies":
        cmd_enemies(args)
    elif args.command == "deck":
        cmd_deck(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_enemies(args):
    """List the enemy catalog."""
    from .content.enemies import DEFAULT_ENEMY_ID, list_enemies

    for enemy in list_enemies():
        marker = " (default)" if enemy.id == DEFAULT_ENEMY_ID else ""
        print(f"{enemy.id}{marker}")
        print(f"  {enemy.name} - {enemy.max_health} HP, {enemy.ai_type}, base damage {enemy.base_damage}")
        print(f"  {enemy.description}")


def cmd_deck(args):
    """Show the starter deck and an opening hand."""
    from .config import OPENING_HAND_SIZE
    from .engine_core.deck import DeckSystem

    deck = DeckSystem.create_starter_deck(rng=random.Random(args.seed))
    snapshot = deck.get_deck_state()

    print(f"Starter deck ({len(snapshot.cards)} cards):")
    for card in snapshot.cards:
        print(f"  [{card.cost}] {card.name:<18} {card.effect_description()}")

    hand = deck.draw_cards(OPENING_HAND_SIZE)
    print(f"\nOpening hand: {', '.join(card.name for card in hand)}")
    print(f"Draw pile: {deck.get_draw_pile_count()}  Discard pile: {deck.get_discard_pile_count()}")


def cmd_simulate(args):
    """Let a policy play one encounter."""
    from .bots import GreedyPolicy, RandomPolicy

    policy = GreedyPolicy() if args.policy == "greedy" else RandomPolicy(seed=args.seed)
    summary = asyncio.run(
        simulate_encounter(args.enemy, seed=args.seed, policy=policy, max_turns=args.max_turns, echo=not args.quiet)
    )

    print(
        f"\nOutcome: {summary['outcome']} after {summary['turns']} turn(s), "
        f"enemy health {summary['enemy_health']}, player health {summary['player_health']}"
    )


async def simulate_encounter(enemy_id, seed=None, policy=None, max_turns=50, echo=False):
    """
    Play one encounter to the end with a policy and no pacing delays.

    Returns a summary dict: outcome, turns, enemy_health, player_health.
    """
    from .bots import GreedyPolicy
    from .engine_core.action import CombatActionType
    from .engine_core.combat import CombatController
    from .session import CombatLoop, GameState

    policy = policy or GreedyPolicy()
    rng = random.Random(seed)
    game_state = GameState(rng=rng)
    controller = CombatController(game_state, enemy_id=enemy_id, rng=rng)

    def print_events(result):
        for event in result.events:
            print(event)

    loop = CombatLoop(controller, enemy_delay=0, round_delay=0, on_update=print_events if echo else None)
    loop.start()

    while controller.is_active and controller.state.turn_count <= max_turns:
        decision = policy.decide(controller)
        if decision is None:
            await loop.wait_idle()
            continue

        result = await loop.apply(decision.action)
        if decision.action.action_type == CombatActionType.PLAY_CARD and not result.success:
            await loop.end_turn()
        await loop.wait_idle()

    summary = {
        "outcome": controller.phase.value,
        "turns": controller.state.turn_count if controller.state else 0,
        "enemy_health": controller.state.enemy_health if controller.state else 0,
        "player_health": (game_state.last_run or game_state.get_player_data()).health,
    }
    loop.teardown()
    return summary


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
