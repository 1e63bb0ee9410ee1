#!/usr/bin/env python3
"""Play seeded random games and check every rebuild phase.

Each game fills the board with tiles from a seeded deck, picking cells with
a second PCG32 stream. After every placement the regions the rebuild
visited must be settled and the session score must equal the sum of
rebuild deltas. Any violation, or a rebuild hitting its change limit, is
reported and the script exits non-zero.

Usage (from the repo root):
    python scripts/stress_cascade.py                  # 200 games from seed 0
    python scripts/stress_cascade.py --games 1000 --seed 50
    python scripts/stress_cascade.py --profile --games 20
    python scripts/stress_cascade.py -v --games 1        # log every change
"""

import argparse
import cProfile
import logging
import pstats
import statistics
import sys
import time
from pathlib import Path

# Add the repo root to path so we can import superblocks
SCRIPT_DIR = Path(__file__).resolve().parent
ROOT_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(ROOT_DIR))

from superblocks.cascade import (  # noqa: E402
    CascadeLimitError,
    checked_regions,
)
from superblocks.deck import PCG32  # noqa: E402
from superblocks.model import GameParams  # noqa: E402
from superblocks.priority import select_upgrade  # noqa: E402
from superblocks.rules import candidates_for  # noqa: E402
from superblocks.session import GameSession  # noqa: E402

logger = logging.getLogger("stress_cascade")


def _unsettled(session):
    board = session.board
    regions = checked_regions(session.last_rebuild)
    found = []
    for pos in board.positions():
        tile = board.get(pos)
        if tile is None or pos.region not in regions:
            continue
        target = select_upgrade(tile, candidates_for(tile, pos, board))
        if target is not None:
            found.append((pos, tile, target))
    return found


def play_game(seed, max_changes):
    """Play one game. Returns (score, longest rebuild, problems)."""
    session = GameSession(
        GameParams(seed=seed, max_cascade_changes=max_changes)
    )
    rng = PCG32(seed, 1)
    total = 0
    longest = 0
    problems = []
    while not session.is_full:
        empty = [
            p for p in session.board.positions() if session.tile_at(p) is None
        ]
        pos = empty[rng.next_u32() % len(empty)]
        try:
            session.place_next(pos)
        except CascadeLimitError as e:
            problems.append(f"turn {session.turn}: {e}")
            break
        total += session.last_rebuild.score_delta
        longest = max(longest, session.last_rebuild.num_changes)
        for upos, tile, target in _unsettled(session):
            problems.append(
                f"turn {session.turn}: {upos} {tile.value} could still "
                f"become {target.value}"
            )
        if session.score != total:
            problems.append(
                f"turn {session.turn}: score {session.score} != {total}"
            )
        if problems:
            break
    return session.score, longest, problems


def run_games(args):
    scores = []
    longest = 0
    failures = 0
    start = time.perf_counter()
    for seed in range(args.seed, args.seed + args.games):
        score, game_longest, problems = play_game(seed, args.max_changes)
        scores.append(score)
        longest = max(longest, game_longest)
        if problems:
            failures += 1
            logger.error("Seed %d failed:", seed)
            for problem in problems:
                logger.error("  %s", problem)
    elapsed = time.perf_counter() - start

    print(f"{'Games':<28} {args.games:>10}")
    print(f"{'Failures':<28} {failures:>10}")
    print(f"{'Median score':<28} {statistics.median(scores):>10.1f}")
    print(f"{'Best score':<28} {max(scores):>10}")
    print(f"{'Worst score':<28} {min(scores):>10}")
    print(f"{'Longest rebuild (changes)':<28} {longest:>10}")
    print(f"{'Time per game (ms)':<28} {elapsed * 1000 / args.games:>10.1f}")
    return failures


def main():
    parser = argparse.ArgumentParser(
        description="Stress the rebuild phase with seeded random games"
    )
    parser.add_argument(
        "--games", type=int, default=200, help="Games to play (default: 200)"
    )
    parser.add_argument(
        "--seed", type=int, default=0, help="First seed (default: 0)"
    )
    parser.add_argument(
        "--max-changes",
        type=int,
        default=GameParams().max_cascade_changes,
        help="Change limit per rebuild phase",
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Run under cProfile and print the top 30 functions",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every tile change"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        failures = run_games(args)
        profiler.disable()
        stats = pstats.Stats(profiler)
        stats.sort_stats("cumulative")
        stats.print_stats(30)
    else:
        failures = run_games(args)

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
