#!/usr/bin/env python3
"""
Run Simulation Script for Economy Balancing

Plays seeded Coronata runs at each ascension level with a simple shopping
policy and collects coin and survival statistics, next to the deterministic
balance estimate for the same level. Supports parallel execution.
"""

from __future__ import annotations

import random
import multiprocessing as mp
from dataclasses import dataclass, field

from coronata.controller import GameController
from coronata.models import AscensionState, RunState
from coronata.types import ItemType, RunEventType, MAX_ASCENSION
from coronata.economy import get_item_cost, validate_economy_balance
from coronata.run_flow import get_scaled_score_goal, is_run_complete


# Wander coin rewards are rolled uniformly from this range
WANDER_REWARD_RANGE = (5, 9)


# =============================================================================
# Statistics Data Structures
# =============================================================================


@dataclass
class LevelStats:
    """Statistics for one ascension level."""

    level: int

    runs: int = 0
    victories: int = 0
    total_encounters: int = 0
    total_coins_earned: int = 0
    total_coins_spent: int = 0
    total_items: int = 0
    total_final_coins: int = 0

    # How many runs ended at each trial (6 = finished all trials)
    trial_reached: dict[int, int] = field(default_factory=lambda: {t: 0 for t in range(1, 7)})

    @property
    def win_rate(self) -> float:
        return self.victories / self.runs if self.runs > 0 else 0.0

    @property
    def average_encounters(self) -> float:
        return self.total_encounters / self.runs if self.runs > 0 else 0.0

    @property
    def average_coins_earned(self) -> float:
        return self.total_coins_earned / self.runs if self.runs > 0 else 0.0

    @property
    def average_coins_spent(self) -> float:
        return self.total_coins_spent / self.runs if self.runs > 0 else 0.0

    @property
    def average_items(self) -> float:
        return self.total_items / self.runs if self.runs > 0 else 0.0

    @property
    def average_final_coins(self) -> float:
        return self.total_final_coins / self.runs if self.runs > 0 else 0.0


@dataclass
class RunRecord:
    """What happened in a single simulated run."""

    victory: bool
    encounters: int
    coins_earned: int
    coins_spent: int
    items: int
    final_coins: int
    last_trial: int


# =============================================================================
# Simple Player
# =============================================================================


def shop(controller: GameController, run: RunState) -> tuple[RunState, int]:
    """
    Buy the best affordable Exploit, then the best affordable Blessing.

    Returns:
        Tuple of (run after leaving the trade, coins spent)
    """
    run, config = controller.open_trade(run)
    level = run.flow.ascension_level
    before = run.flow.coins

    for item_type in (ItemType.EXPLOIT, ItemType.BLESSING):
        for tier in reversed(config.available_tiers):
            cost = get_item_cost(item_type, tier, level)
            if cost <= run.flow.coins:
                run, _ = controller.purchase(run, f"{tier.value.lower()}_{item_type.value.lower()}", cost)
                break

    spent = before - run.flow.coins
    run, _ = controller.close_trade(run)
    return run, spent


def run_single_run(
    controller: GameController,
    level: int,
    success_rate: float,
    rng: random.Random,
) -> RunRecord:
    """
    Play one run at ``level``.

    Each encounter succeeds with ``success_rate``, lowered a little for
    every trial already cleared. A failed encounter ends the run.
    """
    ascension = AscensionState(
        current_level=level,
        unlocked_levels=frozenset(range(MAX_ASCENSION + 1)),
    )
    run, _ = controller.start_run(ascension)
    coins_earned = 0
    coins_spent = 0
    victory = True

    while not is_run_complete(run.flow):
        trial = run.flow.current_trial
        chance = max(0.0, success_rate - 0.05 * (trial - 1))
        success = rng.random() < chance

        run, outcome = controller.complete_encounter(run, success, rng)
        if outcome.result is not None:
            coins_earned += outcome.result.coins_awarded
        if not success:
            victory = False
            break

        if run.flow.fortune_swap_due:
            run, _ = controller.fortune_swap(run)

        while run.flow.pending_events:
            match run.flow.pending_events[0]:
                case RunEventType.TRADE:
                    run, spent = shop(controller, run)
                    coins_spent += spent
                case RunEventType.WANDER:
                    before = run.flow.coins
                    run, _ = controller.wander(run, rng.randint(*WANDER_REWARD_RANGE))
                    coins_earned += run.flow.coins - before

    return RunRecord(
        victory=victory,
        encounters=len(run.flow.completed_encounters),
        coins_earned=coins_earned,
        coins_spent=coins_spent,
        items=len(run.items),
        final_coins=run.flow.coins,
        last_trial=min(run.flow.current_trial, 6),
    )


def update_stats_from_run(stats: LevelStats, record: RunRecord) -> None:
    stats.runs += 1
    stats.victories += 1 if record.victory else 0
    stats.total_encounters += record.encounters
    stats.total_coins_earned += record.coins_earned
    stats.total_coins_spent += record.coins_spent
    stats.total_items += record.items
    stats.total_final_coins += record.final_coins
    stats.trial_reached[record.last_trial] += 1


# =============================================================================
# Main Simulation
# =============================================================================


def merge_stats(stats_list: list[LevelStats]) -> dict[int, LevelStats]:
    """Merge per-batch statistics into one LevelStats per level."""
    merged: dict[int, LevelStats] = {}

    for stats in stats_list:
        m = merged.setdefault(stats.level, LevelStats(level=stats.level))
        m.runs += stats.runs
        m.victories += stats.victories
        m.total_encounters += stats.total_encounters
        m.total_coins_earned += stats.total_coins_earned
        m.total_coins_spent += stats.total_coins_spent
        m.total_items += stats.total_items
        m.total_final_coins += stats.total_final_coins
        for trial, count in stats.trial_reached.items():
            m.trial_reached[trial] += count

    return dict(sorted(merged.items()))


def run_level_batch(args: tuple[int, int, int, float, int | None]) -> LevelStats:
    """
    Run a batch of runs at one level (for parallel execution).

    Args:
        args: Tuple of (batch_id, level, num_runs, success_rate, base_seed)
    """
    batch_id, level, num_runs, success_rate, base_seed = args

    # Each batch gets its own seed based on batch_id
    rng = random.Random(None if base_seed is None else base_seed + batch_id)

    controller = GameController(observer=None)
    stats = LevelStats(level=level)
    for _ in range(num_runs):
        update_stats_from_run(stats, run_single_run(controller, level, success_rate, rng))
    return stats


def run_simulation(
    num_runs: int = 1000,
    levels: list[int] | None = None,
    success_rate: float = 0.9,
    seed: int | None = None,
    verbose: bool = True,
    num_workers: int = 1,
) -> dict[int, LevelStats]:
    """
    Run ``num_runs`` runs at every requested level.

    Args:
        num_runs: Runs per level
        levels: Ascension levels to simulate (default: all)
        success_rate: Chance of clearing an encounter in trial 1
        seed: Random seed for reproducibility
        verbose: Print progress updates
        num_workers: Number of parallel workers (1 = sequential)

    Returns:
        LevelStats keyed by level
    """
    if levels is None:
        levels = list(range(MAX_ASCENSION + 1))

    if verbose:
        print(f"Running {num_runs} simulated runs per level at levels {levels}...")
        print(f"Base success rate: {success_rate:.0%}")
        print(f"Workers: {num_workers}")
        print()

    batch_args: list[tuple[int, int, int, float, int | None]] = []
    for level in levels:
        runs_per_worker = num_runs // max(1, num_workers)
        remainder = num_runs % max(1, num_workers)
        for i in range(max(1, num_workers)):
            batch_size = runs_per_worker + (1 if i < remainder else 0)
            batch_args.append((len(batch_args), level, batch_size, success_rate, seed))

    if num_workers <= 1:
        results = []
        for args in batch_args:
            results.append(run_level_batch(args))
            if verbose:
                print(f"  Completed level {args[1]}")
    else:
        with mp.Pool(processes=num_workers) as pool:
            results = pool.map(run_level_batch, batch_args)

    if verbose:
        print("Simulation complete!")
        print()

    return merge_stats(results)


def print_statistics(stats: dict[int, LevelStats]) -> None:
    """Print formatted statistics."""
    print("=" * 80)
    print("RUN STATISTICS BY ASCENSION LEVEL")
    print("=" * 80)
    print()
    print(f"{'Level':>5} {'Runs':>6} {'Win%':>6} {'AvgEnc':>7} {'Earned':>7} {'Spent':>6} {'Items':>6} {'Left':>6}")
    print("-" * 80)
    for level_stats in stats.values():
        print(
            f"{level_stats.level:>5} {level_stats.runs:>6} "
            f"{100*level_stats.win_rate:>5.1f}% "
            f"{level_stats.average_encounters:>7.2f} "
            f"{level_stats.average_coins_earned:>7.1f} "
            f"{level_stats.average_coins_spent:>6.1f} "
            f"{level_stats.average_items:>6.2f} "
            f"{level_stats.average_final_coins:>6.1f}"
        )

    print()
    print("=" * 80)
    print("EXPECTED ECONOMY BY ASCENSION LEVEL")
    print("=" * 80)
    print()
    print(f"{'Level':>5} {'Income':>7} {'Minimal':>8} {'Decent':>7} {'Amazing':>8} {'Goal 5-3':>9}  Balanced")
    print("-" * 80)
    for level in stats:
        balance = validate_economy_balance(level)
        print(
            f"{level:>5} {balance.total_income:>7} {balance.minimal_build_cost:>8} "
            f"{balance.decent_build_cost:>7} {balance.amazing_build_cost:>8} "
            f"{get_scaled_score_goal(5, 3, level):>9}  {'yes' if balance.is_balanced else 'no'}"
        )
        for recommendation in balance.recommendations:
            print(f"        - {recommendation}")

    print()
    print("Runs ending in each trial (6 = all trials cleared):")
    for level_stats in stats.values():
        reached = ", ".join(f"T{t}={n}" for t, n in level_stats.trial_reached.items())
        print(f"  A{level_stats.level}: {reached}")
    print()


def export_csv(stats: dict[int, LevelStats], filename: str) -> None:
    """Export statistics to a CSV file."""
    import csv

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)

        writer.writerow([
            "level",
            "runs",
            "victories",
            "win_rate",
            "avg_encounters",
            "avg_coins_earned",
            "avg_coins_spent",
            "avg_items",
            "avg_final_coins",
            "expected_income",
            "is_balanced",
        ])

        for level_stats in stats.values():
            balance = validate_economy_balance(level_stats.level)
            writer.writerow([
                level_stats.level,
                level_stats.runs,
                level_stats.victories,
                f"{level_stats.win_rate:.4f}",
                f"{level_stats.average_encounters:.2f}",
                f"{level_stats.average_coins_earned:.2f}",
                f"{level_stats.average_coins_spent:.2f}",
                f"{level_stats.average_items:.2f}",
                f"{level_stats.average_final_coins:.2f}",
                balance.total_income,
                balance.is_balanced,
            ])

    print(f"Statistics exported to {filename}")


# =============================================================================
# CLI Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Run Coronata run simulations for economy balancing"
    )
    parser.add_argument(
        "-n", "--num-runs",
        type=int,
        default=1000,
        help="Number of runs to simulate per level (default: 1000)"
    )
    parser.add_argument(
        "-s", "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        help="Number of parallel workers (default: 1)"
    )
    parser.add_argument(
        "--ascension",
        type=int,
        nargs="+",
        choices=range(MAX_ASCENSION + 1),
        default=None,
        metavar="LEVEL",
        help="Ascension levels to simulate (default: all)"
    )
    parser.add_argument(
        "--success-rate",
        type=float,
        default=0.9,
        help="Chance of clearing an encounter in trial 1 (default: 0.9)"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Export results to CSV file"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output"
    )

    args = parser.parse_args()

    stats = run_simulation(
        num_runs=args.num_runs,
        levels=args.ascension,
        success_rate=args.success_rate,
        seed=args.seed,
        verbose=not args.quiet,
        num_workers=args.workers,
    )

    print_statistics(stats)

    if args.csv:
        export_csv(stats, args.csv)


if __name__ == "__main__":
    main()
