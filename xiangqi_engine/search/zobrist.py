"""
Zobrist Hashing

Zobrist hashing assigns a random 64-bit number to every
(side, piece kind, square) combination. A position's hash is the XOR of
the numbers for every occupied square, XORed with one more number when
Black is to move.

Hash components:
    - 2 sides * 7 piece kinds * 90 squares = 1260 random numbers
    - Side to move = 1 random number

Because XOR is its own inverse a move updates the hash in O(1):
    h ^= piece(from) ^ piece(to) ^ captured(to) ^ side

The table is drawn from a fixed seed, so two independently constructed
tables produce identical hashes.

References:
    - Zobrist Hashing: https://www.chessprogramming.org/Zobrist_Hashing
"""

from typing import Optional

import numpy as np

from xiangqi_engine.board.moves import Move
from xiangqi_engine.board.pieces import BOARD_SQUARES, BOARD_WIDTH, Piece, PieceType, Position, Side
from xiangqi_engine.board.representation import Board, BoardState

DEFAULT_SEED = 0xDEADBEEFCAFE1234


class ZobristTable:
    """
    Random constants for hashing positions.

    Attributes:
        seed: Seed the constants were drawn from
        pieces: Nested list [side][piece_type][square] of 64-bit ints
        side_to_move: Constant XORed in when Black is to move
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed = seed
        rng = np.random.default_rng(seed)

        table = rng.integers(
            0,
            np.iinfo(np.uint64).max,
            size=(2, len(PieceType), BOARD_SQUARES),
            dtype=np.uint64,
            endpoint=True,
        )
        # Python ints keep XOR arithmetic unbounded-width and fast
        self.pieces = table.tolist()
        self.side_to_move = int(
            rng.integers(0, np.iinfo(np.uint64).max, dtype=np.uint64, endpoint=True)
        )

    def hash(self, board: Board, current_turn: Side) -> int:
        """
        Compute the full hash of a position.

        Args:
            board: Piece placement
            current_turn: Side to move

        Returns:
            64-bit integer hash
        """
        pieces = self.pieces
        hash_value = 0
        for index, piece in enumerate(board.squares):
            if piece is not None:
                hash_value ^= pieces[piece.side.value][piece.piece_type.value][index]

        if current_turn is Side.BLACK:
            hash_value ^= self.side_to_move

        return hash_value

    def hash_state(self, state: BoardState) -> int:
        return self.hash(state.board, state.current_turn)

    def piece_hash(self, side: Side, piece_type: PieceType, pos: Position) -> int:
        return self.pieces[side.value][piece_type.value][pos.y * BOARD_WIDTH + pos.x]

    def side_hash(self) -> int:
        return self.side_to_move

    def update(self, hash_value: int, move: Move, moving_piece: Piece,
               captured: Optional[Piece] = None) -> int:
        """
        Hash of the position after `move`, derived from the hash before it.

        Args:
            hash_value: Hash before the move
            move: Move being played
            moving_piece: Piece standing on move.from_pos
            captured: Piece standing on move.to_pos, defaults to move.captured

        Returns:
            Hash after the move with the side to move toggled
        """
        if captured is None:
            captured = move.captured

        side = moving_piece.side.value
        kind = moving_piece.piece_type.value
        row = self.pieces[side][kind]

        hash_value ^= row[move.from_pos.y * BOARD_WIDTH + move.from_pos.x]
        hash_value ^= row[move.to_pos.y * BOARD_WIDTH + move.to_pos.x]
        if captured is not None:
            hash_value ^= self.piece_hash(captured.side, captured.piece_type, move.to_pos)
        return hash_value ^ self.side_hash()

    def __repr__(self) -> str:
        return f"ZobristTable(seed={self.seed:#x})"
