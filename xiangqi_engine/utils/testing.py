"""
Engine Testing and Benchmarking

This module provides a tactical test suite and benchmarking helpers for
measuring engine strength and speed.

Test Suite:
    Hand-built positions with a single forcing answer each: win a hanging
    piece, or deliver mate in one. Every position has a known set of
    acceptable moves (ICCS notation).

Evaluation Metrics:
    - Correct Moves: Number of positions where engine found a best move
    - Time per Position: Average thinking time
    - Nodes Searched: Total nodes evaluated
    - Depth Reached: Deepest completed iteration

Move Generator Check:
    perft() counts the leaves of the legal move tree; from the initial
    position the counts are 44, 1920, 79666, 3290240.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from xiangqi_engine.board.fen import parse_fen
from xiangqi_engine.board.moves import perft
from xiangqi_engine.evaluation.base import Evaluator
from xiangqi_engine.search.config import SearchConfig
from xiangqi_engine.search.engine import SearchEngine

logger = logging.getLogger(__name__)

PERFT_INITIAL = {1: 44, 2: 1920, 3: 79666, 4: 3290240}


@dataclass
class TestPosition:
    """
    A test position with expected best move(s).

    Attributes:
        fen: Board position in FEN notation
        best_moves: List of acceptable best moves (ICCS format)
        description: Human-readable description of the position
        id: Position identifier (e.g., "XQ.01")
    """
    __test__ = False

    fen: str
    best_moves: List[str]
    description: str = ""
    id: str = ""


@dataclass
class TestResult:
    """
    Result of testing a single position.

    Attributes:
        position: The test position
        found_move: Move the engine found (ICCS format)
        score: Evaluation score for the move
        correct: Whether the engine found a best move
        time_taken: Time spent searching (seconds)
        nodes_searched: Number of nodes evaluated
        depth: Deepest completed iteration
    """
    __test__ = False

    position: TestPosition
    found_move: str
    score: int
    correct: bool
    time_taken: float
    nodes_searched: int = 0
    depth: int = 0


# ============================================================================
# Tactical Test Suite
# ============================================================================

TACTICAL_POSITIONS = [
    TestPosition(
        id="XQ.01",
        fen="4k4/9/9/9/r8/9/9/9/9/R2K5 r 0 1",
        best_moves=["a0a5"],
        description="Red takes the rook that attacks its own"
    ),
    TestPosition(
        id="XQ.02",
        fen="r2k5/9/9/9/9/R8/9/9/9/4K4 b 0 1",
        best_moves=["a9a4"],
        description="Black takes the rook that attacks its own"
    ),
    TestPosition(
        id="XQ.03",
        fen="3k5/RR7/9/9/9/9/9/9/9/4K4 r 0 1",
        best_moves=["a8a9", "b8b9", "b8d8"],
        description="Red mates in one with either rook"
    ),
]


def evaluate_position(
    position: TestPosition,
    config: SearchConfig,
    evaluator: Optional[Evaluator] = None,
    verbose: bool = False,
) -> TestResult:
    """
    Evaluate a single test position.

    Args:
        position: Test position to evaluate
        config: Search limits
        evaluator: Position evaluator (default: ClassicalEvaluator)
        verbose: If True, print detailed output

    Returns:
        TestResult with engine's move and whether it was correct
    """
    if verbose:
        print(f"\nTesting {position.id}: {position.description}")
        print(f"FEN: {position.fen}")
        print(f"Expected moves: {position.best_moves}")

    start_time = time.time()

    try:
        state = parse_fen(position.fen)
        engine = SearchEngine(config=config, evaluator=evaluator)
        best_move = engine.search(state)
        result = engine.last_result

        time_taken = time.time() - start_time
        found_move = best_move.to_iccs() if best_move else ""
        correct = found_move in position.best_moves

        if verbose:
            print(f"Engine found: {found_move or 'none'} (score: {result.score})")
            print(f"Nodes searched: {result.nodes:,}")
            print(f"Depth: {result.depth}")
            print(f"Time: {time_taken:.2f}s")
            print(f"Result: {'✓ CORRECT' if correct else '✗ WRONG'}")

        return TestResult(
            position=position,
            found_move=found_move,
            score=result.score,
            correct=correct,
            time_taken=time_taken,
            nodes_searched=result.nodes,
            depth=result.depth,
        )

    except ValueError as e:
        logger.error(f"Error evaluating position {position.id}: {e}")
        return TestResult(
            position=position,
            found_move="",
            score=0,
            correct=False,
            time_taken=time.time() - start_time,
        )


def run_suite(
    config: SearchConfig,
    evaluator: Optional[Evaluator] = None,
    positions: Optional[List[TestPosition]] = None,
    deterministic: bool = True,
    progress: bool = False,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Run the tactical test suite.

    Args:
        config: Search limits
        evaluator: Position evaluator
        positions: Positions to test (default: TACTICAL_POSITIONS)
        deterministic: Disable random move substitution while testing
        progress: Show a tqdm progress bar
        verbose: If True, print detailed results

    Returns:
        Dictionary with test results:
            - score: Number of correct positions
            - total: Total number of positions
            - percentage: Success percentage
            - results: List of TestResult objects
            - avg_time: Average time per position
            - total_time: Sum of search times
            - total_nodes: Sum of nodes searched
    """
    if positions is None:
        positions = TACTICAL_POSITIONS
    if deterministic:
        config = replace(config, random_move_probability=0.0)

    if verbose:
        print("=" * 70)
        print(f"TACTICAL TEST SUITE ({config.difficulty.name})")
        print("=" * 70)

    results = []
    correct_count = 0
    total_time = 0.0
    total_nodes = 0

    iterator = tqdm(positions, desc=config.difficulty.name, unit="pos") if progress else positions
    for position in iterator:
        result = evaluate_position(position, config, evaluator, verbose=verbose)
        results.append(result)

        if result.correct:
            correct_count += 1

        total_time += result.time_taken
        total_nodes += result.nodes_searched

    avg_time = total_time / len(positions) if positions else 0
    percentage = (correct_count / len(positions) * 100) if positions else 0

    if verbose:
        print("\n" + "=" * 70)
        print("SUMMARY")
        print("=" * 70)
        print(f"Score: {correct_count}/{len(positions)} ({percentage:.1f}%)")
        print(f"Average time: {avg_time:.2f}s")
        print(f"Total time: {total_time:.2f}s")

    return {
        'score': correct_count,
        'total': len(positions),
        'percentage': percentage,
        'results': results,
        'avg_time': avg_time,
        'total_time': total_time,
        'total_nodes': total_nodes,
    }
