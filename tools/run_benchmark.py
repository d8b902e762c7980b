#!/usr/bin/env python3
"""
Tactical Benchmark Runner

Runs the tactical test suite at each difficulty preset to establish
baseline performance metrics, and optionally checks the move generator
with perft from the initial position.

Usage:
    python tools/run_benchmark.py [--difficulties easy,medium,hard] [--perft 3] [--verbose]
"""

import sys
import argparse
import logging
import time
from pathlib import Path

from tqdm import tqdm

sys.path.insert(0, str(Path(__file__).parent.parent))

from xiangqi_engine.board.representation import BoardState
from xiangqi_engine.evaluation.classical import ClassicalEvaluator
from xiangqi_engine.search.config import Difficulty, SearchConfig
from xiangqi_engine.utils.testing import PERFT_INITIAL, perft, run_suite


def format_time(seconds: float) -> str:
    """Format time"""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"


def run_perft(max_depth: int):
    """Count perft leaves from the initial position and compare with known values."""
    print("=" * 80)
    print("PERFT - initial position")
    print("=" * 80)

    ok = True
    for depth in tqdm(range(1, max_depth + 1), desc="perft", unit="depth"):
        start_time = time.time()
        nodes = perft(BoardState.initial(), depth)
        elapsed = time.time() - start_time

        expected = PERFT_INITIAL.get(depth)
        status = "?" if expected is None else ("OK" if nodes == expected else f"FAIL (expected {expected:,})")
        ok = ok and (expected is None or nodes == expected)
        tqdm.write(f"  depth {depth}: {nodes:,} nodes in {format_time(elapsed)}  {status}")

    return ok


def run_benchmark(difficulties: list[Difficulty], verbose: bool = False):
    """
    Run the tactical suite at several presets.

    Args:
        difficulties: Presets to test
        verbose: If True, print detailed results for each position
    """
    evaluator = ClassicalEvaluator()

    print("=" * 80)
    print("TACTICAL BENCHMARK - XiangqiEngine")
    print("=" * 80)
    print("Evaluator: Classical (Material + Piece-Square Tables)")
    print("Search: Iterative Deepening Alpha-Beta + Quiescence + Transposition Table")
    print(f"Presets: {', '.join(d.name for d in difficulties)}")
    print("=" * 80)
    print()

    all_results = []

    for difficulty in difficulties:
        config = SearchConfig.from_difficulty(difficulty)

        print(f"\n{'=' * 80}")
        print(f"{difficulty.name}: depth {config.max_depth}, {config.time_limit_ms}ms, {config.tt_size_mb}MB")
        print("=" * 80)

        start_time = time.time()
        result = run_suite(config, evaluator=evaluator, progress=True, verbose=verbose)
        total_time = time.time() - start_time

        nodes_per_sec = result['total_nodes'] / result['total_time'] if result['total_time'] > 0 else 0
        avg_depth = (
            sum(r.depth for r in result['results']) / len(result['results'])
            if result['results'] else 0
        )

        all_results.append({
            'difficulty': difficulty,
            'score': result['score'],
            'total': result['total'],
            'percentage': result['percentage'],
            'avg_time': result['avg_time'],
            'avg_depth': avg_depth,
            'total_time': total_time,
            'total_nodes': result['total_nodes'],
            'nodes_per_sec': nodes_per_sec,
            'results': result['results'],
        })

        print(f"\nResults at {difficulty.name}:")
        print(f"  Correct: {result['score']}/{result['total']} ({result['percentage']:.1f}%)")
        print(f"  Total time: {format_time(total_time)}")
        print(f"  Avg time per position: {format_time(result['avg_time'])}")
        print(f"  Avg completed depth: {avg_depth:.1f}")
        print(f"  Total nodes: {result['total_nodes']:,}")
        print(f"  Nodes/sec: {nodes_per_sec:,.0f}")

        failed = [r for r in result['results'] if not r.correct]
        if failed and verbose:
            print("\n  Failed positions:")
            for r in failed:
                print(f"    {r.position.id}: Expected {r.position.best_moves}, got {r.found_move}")

    print("\n" + "=" * 80)
    print("SUMMARY TABLE")
    print("=" * 80)
    print(f"{'Preset':<8} {'Correct':<12} {'%':<8} {'Avg Time':<12} {'Avg Depth':<10} {'Nodes/sec':<15}")
    print("-" * 80)

    for r in all_results:
        print(
            f"{r['difficulty'].name:<8} {r['score']}/{r['total']:<10} {r['percentage']:<7.1f}% "
            f"{format_time(r['avg_time']):<12} {r['avg_depth']:<10.1f} {r['nodes_per_sec']:>12,.0f}"
        )

    print("=" * 80)

    position_results = {}
    for r in all_results:
        for pos_result in r['results']:
            position_results.setdefault(pos_result.position.id, []).append(pos_result.correct)

    always_failed = [pos_id for pos_id, results in position_results.items() if not any(results)]
    if always_failed:
        print(f"\nPositions that failed at every preset: {', '.join(sorted(always_failed))}")

    print("\n" + "=" * 80)
    print("Benchmark complete!")
    print("=" * 80)

    return all_results


def main():
    parser = argparse.ArgumentParser(
        description="Run the tactical benchmark at several difficulty presets"
    )
    parser.add_argument(
        "--difficulties",
        type=str,
        default="easy,medium,hard",
        help="Comma-separated list of presets to test (default: easy,medium,hard)"
    )
    parser.add_argument(
        "--perft",
        type=int,
        default=0,
        help="Also run perft from the initial position up to this depth"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print detailed results for each position"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    try:
        difficulties = [Difficulty.from_name(d) for d in args.difficulties.split(",")]
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        if args.perft > 0 and not run_perft(args.perft):
            print("\nPerft mismatch: move generator is broken")
            sys.exit(1)
        run_benchmark(difficulties, verbose=args.verbose)
    except KeyboardInterrupt:
        print("\n\nBenchmark interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\n\nError running benchmark: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
