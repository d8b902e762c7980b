"""
Unit Tests for FEN Parsing

Tests for parse_fen / to_fen, focusing on:
    - The initial position round trip
    - Side to move and counters
    - Rejection of malformed board fields
"""

import pytest

from xiangqi_engine.board import BoardState, Piece, PieceType, Position, Side
from xiangqi_engine.board.fen import INITIAL_FEN, board_to_fen, initial_state, parse_board, parse_fen, to_fen


class TestParseFen:
    """Tests for parse_fen."""

    def test_initial_fen_matches_initial_state(self):
        assert parse_fen(INITIAL_FEN) == BoardState.initial()
        assert initial_state() == BoardState.initial()

    def test_round_trip(self):
        assert to_fen(parse_fen(INITIAL_FEN)) == INITIAL_FEN

        fen = "3k5/RR7/9/9/9/9/9/9/9/4K4 b 17 42"
        assert to_fen(parse_fen(fen)) == fen

    def test_side_and_counters(self):
        state = parse_fen("4k4/9/9/9/9/9/9/9/9/3K5 b 12 30")

        assert state.current_turn is Side.BLACK
        assert state.no_capture_count == 12
        assert state.round == 30

    def test_missing_fields_default(self):
        state = parse_fen("4k4/9/9/9/9/9/9/9/9/3K5")

        assert state.current_turn is Side.RED
        assert state.no_capture_count == 0
        assert state.round == 1

    def test_w_means_red(self):
        assert parse_fen("4k4/9/9/9/9/9/9/9/9/3K5 w").current_turn is Side.RED

    def test_unparseable_counters_default(self):
        state = parse_fen("4k4/9/9/9/9/9/9/9/9/3K5 r - -")
        assert state.no_capture_count == 0
        assert state.round == 1

    def test_rows_run_from_black_to_red(self):
        board = parse_board("4k4/9/9/9/9/9/9/9/9/3K5")
        assert board.get(Position(4, 9)) == Piece(PieceType.KING, Side.BLACK)
        assert board.get(Position(3, 0)) == Piece(PieceType.KING, Side.RED)


class TestMalformedFen:
    """Malformed strings raise ValueError."""

    @pytest.mark.parametrize("fen", [
        "",
        "4k4/9/9/9/9/9/9/9/3K5 r 0 1",           # nine rows
        "4k4/9/9/9/9/9/9/9/9/3K6 r 0 1",         # ten columns
        "4k4/9/9/9/9/9/9/9/9/3K4 r 0 1",         # eight columns
        "4k4/9/9/9/9/9/9/9/9/3X5 r 0 1",         # unknown piece
    ])
    def test_rejected(self, fen):
        with pytest.raises(ValueError):
            parse_fen(fen)


class TestBoardToFen:
    """Tests for board_to_fen."""

    def test_empty_rows_compress(self):
        state = parse_fen("4k4/9/9/9/9/9/9/9/9/3K5 r 0 1")
        assert board_to_fen(state.board) == "4k4/9/9/9/9/9/9/9/9/3K5"
