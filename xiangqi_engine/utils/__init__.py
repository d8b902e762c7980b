"""
Utilities Module

This module provides utility functions for testing and benchmarking the
engine.

Key Components:
    - Tactical test suite: positions with known best moves
    - Perft: Move generation verification

Testing Methodology:
    Each tactical position has a short forcing answer, so any preset
    should solve all of them; a miss points at a search or move
    generation bug rather than weak play.
"""

from xiangqi_engine.board.moves import perft
from xiangqi_engine.utils.testing import (
    PERFT_INITIAL,
    TACTICAL_POSITIONS,
    TestPosition,
    TestResult,
    evaluate_position,
    run_suite,
)

__all__ = [
    'PERFT_INITIAL',
    'TACTICAL_POSITIONS',
    'TestPosition',
    'TestResult',
    'evaluate_position',
    'run_suite',
    'perft',
]
