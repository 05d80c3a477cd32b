"""
Performance Benchmark
=====================

Measures level generation and full-level autoplay throughput.

Usage:
    python -m tools.benchmark_speed [--levels N] [--runs R] [--physics]
"""

from __future__ import annotations

import argparse
import sys
import time

from latin_drop.latin_core.config_loader import load_config
from latin_drop.latin_core.level import generate_level
from latin_drop.latin_core.session import LevelSession


def benchmark_generation(
    level_index: int,
    num_runs: int = 200,
    seed: int = 42
) -> dict:
    """
    Benchmark puzzle generation for one level.

    Args:
        level_index: Level to generate.
        num_runs: Number of puzzles to build (one seed each).
        seed: First seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()

    # Warmup
    for i in range(5):
        generate_level(level_index, seed + i, config)

    start = time.perf_counter()
    slots = 0
    for i in range(num_runs):
        slots += generate_level(level_index, seed + i, config).slot_count
    elapsed = time.perf_counter() - start

    return {
        "mode": "generate",
        "level": level_index,
        "runs": num_runs,
        "avg_slots": slots / num_runs,
        "elapsed_seconds": elapsed,
        "runs_per_second": num_runs / elapsed,
        "ms_per_run": (elapsed * 1000) / num_runs
    }


def benchmark_autoplay(
    level_index: int,
    num_runs: int = 50,
    seed: int = 42,
    physics: bool = False,
    settle_steps: int = 30
) -> dict:
    """
    Benchmark solving a level through a LevelSession.

    Every token is dropped on its matching slot; with ``physics`` the pool
    is also simulated for ``settle_steps`` ticks after the last drop.

    Returns:
        Dict with timing results.
    """
    config = load_config()

    start = time.perf_counter()
    solved = 0
    for i in range(num_runs):
        level = LevelSession(level_index, seed + i, config, simulate=physics)
        result = None
        for token, slot in zip(level.puzzle.tokens, level.puzzle.slots):
            result = level.drop(token.id, level.resolver.slot_center(slot.index))
        if physics:
            for _ in range(settle_steps):
                level.step()
        if result is not None and result.valid:
            solved += 1
    elapsed = time.perf_counter() - start

    return {
        "mode": "autoplay+physics" if physics else "autoplay",
        "level": level_index,
        "runs": num_runs,
        "solved": solved,
        "elapsed_seconds": elapsed,
        "runs_per_second": num_runs / elapsed,
        "ms_per_run": (elapsed * 1000) / num_runs
    }


def run_all_benchmarks(
    num_levels: int = 8,
    runs: int = 100,
    physics: bool = False
) -> list:
    """Run generation and autoplay benchmarks for levels 1..num_levels."""
    results = []

    print("=" * 60)
    print("LATIN DROP PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for level_index in range(1, num_levels + 1):
        print(f"Benchmarking level {level_index}...")
        result = benchmark_generation(level_index, num_runs=runs)
        results.append(result)
        print(f"  Generate: {result['ms_per_run']:.3f} ms ({result['avg_slots']:.1f} slots avg)")

        result = benchmark_autoplay(level_index, num_runs=max(1, runs // 4), physics=physics)
        results.append(result)
        print(f"  Autoplay: {result['ms_per_run']:.3f} ms ({result['solved']}/{result['runs']} solved)")
        print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Level':>6} {'Runs/s':>12} {'ms/run':>10}")
    print("-" * 50)

    for r in results:
        print(f"{r['mode']:<20} {r['level']:>6} {r['runs_per_second']:>12.1f} {r['ms_per_run']:>10.3f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Latin Drop level generation and play")
    parser.add_argument("--levels", type=int, default=8, help="Benchmark levels 1..N")
    parser.add_argument("--runs", type=int, default=100, help="Generation runs per level")
    parser.add_argument("--physics", action="store_true", help="Simulate the token pool during autoplay")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer runs)")

    args = parser.parse_args()

    runs = 20 if args.quick else args.runs

    run_all_benchmarks(num_levels=args.levels, runs=runs, physics=args.physics)

    return 0


if __name__ == "__main__":
    sys.exit(main())
