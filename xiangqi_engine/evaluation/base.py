"""
Abstract Evaluator Interface

This module defines the abstract base class for all position evaluators.
By defining a common interface, we can swap between evaluators without
modifying the search algorithm.

Key Principles:
    1. Evaluators are stateless
    2. evaluate() always returns a score from Red's perspective
    3. Positive = Red advantage, Negative = Black advantage
    4. Scores are integers and stay well inside the 16-bit range the
       transposition table stores

Convention:
    - Material values: R=900, C=450, N=400, B=200, A=200, P=100, K=10000
    - Return 0 for perfectly equal material
"""

from abc import ABC, abstractmethod

from xiangqi_engine.board.pieces import PIECE_VALUES, Side
from xiangqi_engine.board.representation import Board, BoardState


# Evaluation constants
INFINITY = 30000  # Search window bound, fits in a signed 16-bit score
MATE_SCORE = 20000  # Base score for checkmate


class Evaluator(ABC):
    """
    Abstract base class for position evaluation.

    All evaluator implementations must inherit from this class and implement
    the evaluate() method. This ensures compatibility with the search.

    Methods:
        evaluate(board): Full evaluation in score units
        evaluate_material(board): Material balance only
        is_draw(state): Draw by rule
    """

    @abstractmethod
    def evaluate(self, board: Board) -> int:
        """
        Evaluate a position from Red's perspective.

        Args:
            board: Board to evaluate

        Returns:
            int: Evaluation, positive favours Red
        """
        pass

    def evaluate_material(self, board: Board) -> int:
        """
        Cheap material-only balance (Red minus Black).

        Exactly zero whenever both sides hold identical material.
        """
        score = 0
        for piece in board.squares:
            if piece is None:
                continue
            if piece.side is Side.RED:
                score += PIECE_VALUES[piece.piece_type]
            else:
                score -= PIECE_VALUES[piece.piece_type]
        return score

    def is_draw(self, state: BoardState) -> bool:
        """
        Check if position is a draw by rule.

        Only the no-capture limit is detected here; stalemate is classified
        by the search from the empty move list.
        """
        return state.is_no_capture_draw()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
