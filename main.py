"""Headless launcher: play one or more episodes and print a summary per game."""

import argparse
from typing import List, Optional

from brains.brain.strategies import Personality
from game_runner import run_multiple_games
from infra.logger import configure_logging, get_logger
from infra.settings import load_settings
from survival.core.types import Difficulty, VisionType
from survival.scenario import Scenario, create_default_scenario


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run survival episodes with a personality brain.")
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.EASY.value,
        help="Map size and starting supplies (default: easy)",
    )
    parser.add_argument(
        "--vision",
        choices=[v.value for v in VisionType],
        default=VisionType.KEEN_EYED.value,
        help="Sight radius preset (default: keen-eyed)",
    )
    parser.add_argument(
        "--personality",
        default=Personality.COLLECTOR.value,
        help="collector, balanced or risk-taking (greedy/explorer/aggressive also accepted)",
    )
    parser.add_argument("--seed", type=int, default=None, help="RNG seed (default: SURVIVAL_SEED or random)")
    parser.add_argument("--max-turns", type=int, default=None, help="Turn cap (default: SURVIVAL_MAX_TURNS)")
    parser.add_argument("--games", type=int, default=1, help="Number of episodes to play (default: 1)")
    parser.add_argument("--scenario", default=None, help="Load a scenario JSON instead of generating one")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--log-file", default=None, help="Also log to this file (relative paths go to storage/logs)")
    parser.add_argument(
        "--save-scenario",
        nargs="?",
        const="",
        default=None,
        help="Save the scenario JSON (optionally to PATH) before playing",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every turn")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()

    # Configure logging once at startup.
    configure_logging(
        level=settings.log_level,
        json=args.json_logs or settings.log_json,
        log_file=args.log_file,
    )
    log = get_logger(__name__)

    seed = args.seed if args.seed is not None else settings.seed
    max_turns = args.max_turns if args.max_turns is not None else settings.max_turns

    if args.scenario:
        scenario = Scenario.load_json(args.scenario)
        if args.max_turns is not None or scenario.max_turns is None:
            scenario.max_turns = max_turns
    else:
        personality = Personality.parse(args.personality)
        scenario = create_default_scenario(
            difficulty=args.difficulty,
            personality=personality.value,
            seed=seed,
            vision_type=args.vision,
            max_turns=max_turns,
        )

    if args.save_scenario is not None:
        scenario.save_json(args.save_scenario or None)

    log.info("Playing %d game(s) of %s", args.games, scenario)
    results = run_multiple_games(scenario, num_games=args.games, verbose=args.verbose)

    print(f"{'Game':<6} {'Result':<8} {'Reason':<14} {'Turns':<7} {'Food':<6} {'Water':<6} {'Gold':<6} {'Lives':<6}")
    print("-" * 64)
    for index, summary in enumerate(results, 1):
        outcome = "WIN" if summary.won else "LOSS"
        print(
            f"{index:<6} {outcome:<8} {summary.reason or '-':<14} {summary.turns:<7} "
            f"{summary.food:<6} {summary.water:<6} {summary.gold:<6} {summary.lives:<6}"
        )
    wins = sum(1 for r in results if r.won)
    print(f"\nWon {wins}/{len(results)} ({100.0 * wins / len(results):.1f}%)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
