"""
Classical Piece-Square Table Evaluation

This module implements the baseline evaluation function:
    1. Material counting (piece values)
    2. Piece-Square Tables (positional bonuses) for pawn, knight,
       cannon and rook

King, advisor and bishop are confined to small regions of their own
half, so they contribute material only.

Evaluation Components:
    - Material: R=900, C=450, N=400, B=200, A=200, P=100, K=10000
    - Position: PST bonus looked up by (rank, file)
"""

import numpy as np

from xiangqi_engine.board.pieces import PIECE_VALUES, PieceType, Side
from xiangqi_engine.board.representation import Board
from xiangqi_engine.evaluation.base import Evaluator

#fmt: off
# ============================================================================
# Piece-Square Tables (PSTs)
# ============================================================================
# Values are from Red's perspective: row 0 = Red's back rank (y=0),
# row 9 = Black's back rank (y=9), column = file x.
# Black pieces read the table at row 9 - y.
# ============================================================================

# Pawn PST: worthless at home, grows after crossing the river and
# toward the centre files near the enemy palace
PAWN_TABLE = np.array([
    [  0,   0,   0,   0,   0,   0,   0,   0,   0],
    [  0,   0,   0,   0,   0,   0,   0,   0,   0],
    [  0,   0,   0,   0,   0,   0,   0,   0,   0],
    [  0,   0,   0,   0,   0,   0,   0,   0,   0],
    [  2,   6,   8,  12,  14,  12,   8,   6,   2],
    [ 10,  20,  30,  40,  50,  40,  30,  20,  10],  # across the river
    [ 20,  40,  60,  80,  90,  80,  60,  40,  20],
    [ 30,  60,  90, 110, 120, 110,  90,  60,  30],
    [ 40,  80, 100, 120, 130, 120, 100,  80,  40],
    [  0,   0,   0,   0,   0,   0,   0,   0,   0],  # unreachable
], dtype=np.int32)

# Knight PST: central squares, weak on the rim
KNIGHT_TABLE = np.array([
    [  0,  10,  20,  30,  30,  30,  20,  10,   0],
    [ 10,  30,  40,  50,  50,  50,  40,  30,  10],
    [ 20,  40,  60,  70,  70,  70,  60,  40,  20],
    [ 30,  50,  70,  80,  80,  80,  70,  50,  30],
    [ 40,  60,  80,  90,  90,  90,  80,  60,  40],
    [ 40,  60,  80,  90,  90,  90,  80,  60,  40],
    [ 30,  50,  70,  80,  80,  80,  70,  50,  30],
    [ 20,  40,  60,  70,  70,  70,  60,  40,  20],
    [ 10,  30,  40,  50,  50,  50,  40,  30,  10],
    [  0,  10,  20,  30,  30,  30,  20,  10,   0],
], dtype=np.int32)

# Cannon PST: central file and the river bank
CANNON_TABLE = np.array([
    [ 10,  10,  10,  20,  30,  20,  10,  10,  10],
    [ 10,  20,  30,  40,  50,  40,  30,  20,  10],
    [ 10,  20,  30,  40,  50,  40,  30,  20,  10],
    [ 10,  30,  40,  50,  60,  50,  40,  30,  10],
    [ 10,  40,  50,  60,  70,  60,  50,  40,  10],
    [ 10,  40,  50,  60,  70,  60,  50,  40,  10],
    [ 10,  30,  40,  50,  60,  50,  40,  30,  10],
    [ 10,  20,  30,  40,  50,  40,  30,  20,  10],
    [ 10,  20,  30,  40,  50,  40,  30,  20,  10],
    [ 10,  10,  10,  20,  30,  20,  10,  10,  10],
], dtype=np.int32)

# Rook PST: open central files, active on the river ranks
ROOK_TABLE = np.array([
    [ 10,  20,  20,  40,  50,  40,  20,  20,  10],
    [ 20,  40,  50,  60,  70,  60,  50,  40,  20],
    [ 20,  40,  50,  60,  70,  60,  50,  40,  20],
    [ 30,  50,  60,  70,  80,  70,  60,  50,  30],
    [ 40,  60,  70,  80,  90,  80,  70,  60,  40],
    [ 40,  60,  70,  80,  90,  80,  70,  60,  40],
    [ 30,  50,  60,  70,  80,  70,  60,  50,  30],
    [ 20,  40,  50,  60,  70,  60,  50,  40,  20],
    [ 20,  40,  50,  60,  70,  60,  50,  40,  20],
    [ 10,  20,  20,  40,  50,  40,  20,  20,  10],
], dtype=np.int32)
#fmt: on


class ClassicalEvaluator(Evaluator):
    """
    Classical evaluation using material and piece-square tables.

    Attributes:
        piece_tables: Dictionary mapping piece types to PST arrays
    """

    def __init__(self):
        """Initialize the classical evaluator with piece-square tables."""
        self.piece_tables = {
            PieceType.PAWN: PAWN_TABLE,
            PieceType.KNIGHT: KNIGHT_TABLE,
            PieceType.CANNON: CANNON_TABLE,
            PieceType.ROOK: ROOK_TABLE,
        }
        # Plain nested lists for the hot path; scalar numpy indexing is slow
        self._lookup = {
            piece_type: table.tolist() for piece_type, table in self.piece_tables.items()
        }

    def position_bonus(self, piece_type: PieceType, side: Side, x: int, y: int) -> int:
        """PST bonus for a piece on (x, y); 0 for kinds without a table."""
        table = self._lookup.get(piece_type)
        if table is None:
            return 0
        row = y if side is Side.RED else 9 - y
        return table[row][x]

    def evaluate(self, board: Board) -> int:
        """
        Evaluate position using material + PST.

        Args:
            board: Board to evaluate

        Returns:
            int: Evaluation (Red's perspective)
        """
        score = 0
        lookup = self._lookup

        for index, piece in enumerate(board.squares):
            if piece is None:
                continue

            piece_type = piece.piece_type
            value = PIECE_VALUES[piece_type]

            table = lookup.get(piece_type)
            if table is not None:
                y, x = divmod(index, 9)
                row = y if piece.side is Side.RED else 9 - y
                value += table[row][x]

            if piece.side is Side.RED:
                score += value
            else:
                score -= value

        return score
