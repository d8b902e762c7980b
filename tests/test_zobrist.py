"""
Unit Tests for Zobrist Hashing

Tests for ZobristTable, focusing on:
    - Determinism across independently built tables
    - Side to move changes the hash
    - Incremental updates equal full recomputation, captures included
"""

import pytest

from xiangqi_engine.board import Board, BoardState, Side, generate_legal
from xiangqi_engine.board.fen import parse_fen
from xiangqi_engine.search import ZobristTable


@pytest.fixture(scope="module")
def zobrist():
    return ZobristTable()


class TestZobristTable:
    """Tests for full-position hashing."""

    def test_independent_tables_agree(self, zobrist):
        other = ZobristTable()
        board = Board.initial()
        assert zobrist.hash(board, Side.RED) == other.hash(board, Side.RED)

    def test_different_seed_differs(self, zobrist):
        other = ZobristTable(seed=1)
        board = Board.initial()
        assert zobrist.hash(board, Side.RED) != other.hash(board, Side.RED)

    def test_side_to_move_changes_hash(self, zobrist):
        for fen in [
            "rnbakabnr/9/1c5c1/p1p1p1p1p/9/9/P1P1P1P1P/1C5C1/9/RNBAKABNR r 0 1",
            "3k5/RR7/9/9/9/9/9/9/9/4K4 r 0 1",
        ]:
            board = parse_fen(fen).board
            assert zobrist.hash(board, Side.RED) != zobrist.hash(board, Side.BLACK)

    def test_side_hash_toggles_turn(self, zobrist):
        board = Board.initial()
        red = zobrist.hash(board, Side.RED)
        assert red ^ zobrist.side_hash() == zobrist.hash(board, Side.BLACK)

    def test_hash_fits_64_bits(self, zobrist):
        value = zobrist.hash(Board.initial(), Side.BLACK)
        assert 0 <= value < 2 ** 64

    def test_empty_board_red_to_move_is_zero(self, zobrist):
        assert zobrist.hash(Board.empty(), Side.RED) == 0

    def test_hash_state(self, zobrist):
        state = BoardState.initial()
        assert zobrist.hash_state(state) == zobrist.hash(state.board, Side.RED)


class TestIncrementalUpdate:
    """Incremental updates must match recomputation."""

    def test_every_move_from_start(self, zobrist):
        state = BoardState.initial()
        before = zobrist.hash_state(state)

        for move in generate_legal(state):
            moving = state.board.get(move.from_pos)
            incremental = zobrist.update(before, move, moving)

            previous = state.no_capture_count
            state.apply_move(move)
            assert incremental == zobrist.hash_state(state), f"Mismatch after {move.to_iccs()}"
            state.undo_move(move, previous)

    def test_two_ply_sequence_with_capture(self, zobrist):
        state = BoardState.initial()
        current = zobrist.hash_state(state)

        for iccs in ["h2h9", "i9h9"]:
            move = next(m for m in generate_legal(state) if m.to_iccs() == iccs)
            current = zobrist.update(current, move, state.board.get(move.from_pos))
            state.apply_move(move)
            assert current == zobrist.hash_state(state)

        assert state.current_turn is Side.RED

    def test_transposition_same_hash(self, zobrist):
        """Different move orders reaching one position hash identically."""
        def play(order):
            state = BoardState.initial()
            for iccs in order:
                move = next(m for m in generate_legal(state) if m.to_iccs() == iccs)
                state.apply_move(move)
            return zobrist.hash_state(state)

        assert play(["h2e2", "h9g7", "b0c2", "b9c7"]) == play(["b0c2", "b9c7", "h2e2", "h9g7"])
