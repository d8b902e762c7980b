"""
Board Module

This module holds the board model and the rules of the game: everything
the search reads from and mutates.

Key Components:
    - Position, Piece, Side, PieceType: immutable value types
    - Board, BoardState: piece placement plus side to move and counters
    - Move and the move generator: pseudo-legal and legal generation,
      check and flying-general detection
    - FEN parsing and Chinese move notation for collaborating layers

Data Flow:
    FEN string → parse_fen() → BoardState → generate_legal() → [Move]
"""

from xiangqi_engine.board.pieces import Piece, PieceType, Position, Side
from xiangqi_engine.board.representation import Board, BoardState
from xiangqi_engine.board.moves import (
    Move,
    generate_legal,
    generate_pseudo_legal,
    is_checkmate,
    is_in_check,
    is_stalemate,
    perft,
)
from xiangqi_engine.board.fen import INITIAL_FEN, parse_fen, to_fen

__all__ = [
    'Piece',
    'PieceType',
    'Position',
    'Side',
    'Board',
    'BoardState',
    'Move',
    'generate_legal',
    'generate_pseudo_legal',
    'is_checkmate',
    'is_in_check',
    'is_stalemate',
    'perft',
    'INITIAL_FEN',
    'parse_fen',
    'to_fen',
]
