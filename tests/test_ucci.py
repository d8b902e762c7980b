"""
Unit Tests for UCCI Interface

Tests for UCCI protocol implementation, focusing on:
    - Command handling: ucci, isready, setoption, position, go, stop, quit
    - Position setup: FEN parsing, ICCS move application
    - Output format: info / bestmove / nobestmove
    - Error handling: invalid FEN, malformed and illegal moves
"""

import builtins

import pytest

from xiangqi_engine.board import BoardState, Piece, PieceType, Position, Side
from xiangqi_engine.board.fen import INITIAL_FEN, parse_fen, to_fen
from xiangqi_engine.search import Difficulty, NodeType
from xiangqi_engine.ucci import UCCIEngine
from xiangqi_engine.ucci.interface import find_legal_move

CHECKMATE_FEN = "3k5/9/9/9/9/9/9/9/3rr4/3K5 r 0 1"


@pytest.fixture
def engine(tmp_path):
    """Create a UCCI engine logging into a temporary directory."""
    return UCCIEngine(debug=False, log_dir=tmp_path)


def wait_for_search(engine):
    if engine.search_thread:
        engine.search_thread.join(timeout=30.0)
        assert not engine.search_thread.is_alive(), "Search thread should finish"


class TestUCCICommands:
    """Tests for UCCI command handling."""

    def test_handle_ucci(self, engine, capsys):
        engine.handle_ucci()

        output = capsys.readouterr().out
        assert "id name XiangqiEngine" in output, "Should include engine name"
        assert "option difficulty" in output
        assert output.strip().endswith("ucciok"), "Should end with ucciok"

    def test_handle_isready(self, engine, capsys):
        engine.handle_isready()
        assert "readyok" in capsys.readouterr().out

    def test_setoption_difficulty(self, engine):
        engine.handle_setoption(["setoption", "difficulty", "easy"])

        assert engine.difficulty is Difficulty.EASY
        assert engine.transposition_table.size_mb == 16

    def test_setoption_bad_difficulty(self, engine):
        with pytest.raises(ValueError):
            engine.handle_setoption(["setoption", "difficulty", "impossible"])

    def test_setoption_hashsize(self, engine):
        engine.handle_setoption(["setoption", "hashsize", "4"])
        assert engine.transposition_table.size_mb == 4

    def test_setoption_newgame(self, engine):
        engine.handle_position(["position", "startpos", "moves", "h2e2"])
        engine.transposition_table.store(12345, score=100, depth=5, node_type=NodeType.EXACT)

        engine.handle_setoption(["setoption", "newgame"])

        assert engine.state == BoardState.initial(), "Board should be reset"
        assert engine.transposition_table.used() == 0, "TT should be cleared"

    def test_handle_quit(self, engine, capsys):
        with pytest.raises(SystemExit):
            engine.handle_quit()
        assert "bye" in capsys.readouterr().out


class TestUCCIPositionSetup:
    """Tests for position setup via UCCI."""

    def test_startpos(self, engine):
        engine.handle_position(["position", "startpos", "moves", "h2e2"])
        engine.handle_position(["position", "startpos"])

        assert to_fen(engine.state) == INITIAL_FEN

    def test_startpos_with_moves(self, engine):
        engine.handle_position(["position", "startpos", "moves", "h2e2", "h9g7"])

        assert engine.state.board.get(Position(4, 2)) == Piece(PieceType.CANNON, Side.RED)
        assert engine.state.board.get(Position(6, 7)) == Piece(PieceType.KNIGHT, Side.BLACK)
        assert engine.state.current_turn is Side.RED
        assert engine.state.round == 2

    def test_fen(self, engine):
        engine.handle_position(["position", "fen", *CHECKMATE_FEN.split()])
        assert engine.state == parse_fen(CHECKMATE_FEN)

    def test_fen_with_moves(self, engine):
        fen = "4k4/9/9/9/r8/9/9/9/9/R2K5 r 0 1"

        engine.handle_position(["position", "fen", *fen.split(), "moves", "a0a5"])

        assert engine.state.board.get(Position(0, 5)) == Piece(PieceType.ROOK, Side.RED)
        assert engine.state.current_turn is Side.BLACK
        assert engine.state.no_capture_count == 0

    def test_invalid_fen_keeps_position(self, engine, capsys):
        engine.handle_position(["position", "startpos", "moves", "h2e2"])
        before = to_fen(engine.state)

        engine.handle_position(["position", "fen", "invalid_fen"])

        assert to_fen(engine.state) == before
        assert "Invalid FEN" in capsys.readouterr().err

    def test_illegal_move_stops_application(self, engine, capsys):
        engine.handle_position(["position", "startpos", "moves", "h2e2", "e9e7", "h9g7"])

        assert engine.state.current_turn is Side.BLACK, "Only h2e2 should be applied"
        assert "Illegal move: e9e7" in capsys.readouterr().err

    def test_malformed_move(self, engine, capsys):
        engine.handle_position(["position", "startpos", "moves", "zz"])

        assert engine.state == BoardState.initial()
        assert "Invalid move format" in capsys.readouterr().err

    def test_find_legal_move_fills_capture(self):
        move = find_legal_move(BoardState.initial(), "h2h9")
        assert move.captured == Piece(PieceType.KNIGHT, Side.BLACK)
        assert find_legal_move(BoardState.initial(), "h2h8") is None


class TestUCCISearch:
    """Tests for go / stop and search output."""

    def test_go_depth(self, engine, capsys):
        engine.handle_position(["position", "startpos"])
        engine.handle_go(["go", "depth", "1"])
        wait_for_search(engine)

        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0].startswith("info depth 1 score ")
        assert lines[-1].startswith("bestmove ")

        iccs = lines[-1].split()[1]
        assert find_legal_move(BoardState.initial(), iccs) is not None

    def test_go_time_sets_limit(self, engine):
        engine.handle_position(["position", "startpos"])
        engine.handle_go(["go", "depth", "1", "time", "1500"])
        wait_for_search(engine)

        assert engine.search_engine.config.time_limit_ms == 1500
        assert engine.search_engine.config.max_depth == 1

    def test_nobestmove_when_mated(self, engine, capsys):
        engine.handle_position(["position", "fen", *CHECKMATE_FEN.split()])
        engine.handle_go(["go", "depth", "2"])
        wait_for_search(engine)

        assert "nobestmove" in capsys.readouterr().out

    def test_search_uses_a_copy(self, engine):
        engine.handle_position(["position", "startpos"])
        engine.handle_go(["go", "depth", "2"])
        wait_for_search(engine)

        assert engine.state == BoardState.initial()

    def test_stop_returns_bestmove(self, engine, capsys):
        engine.handle_position(["position", "startpos"])
        engine.handle_go(["go", "depth", "20", "time", "60000"])

        engine.search_thread.join(timeout=0.5)
        engine.handle_stop()
        wait_for_search(engine)

        assert not engine.searching
        assert "bestmove " in capsys.readouterr().out


class TestUCCILoop:
    """Tests for the stdin command loop."""

    def feed(self, monkeypatch, commands):
        lines = iter(commands)

        def fake_input():
            try:
                return next(lines)
            except StopIteration:
                raise EOFError

        monkeypatch.setattr(builtins, "input", fake_input)

    def test_session_until_eof(self, engine, monkeypatch, capsys):
        self.feed(monkeypatch, ["ucci", "", "isready", "bogus command"])

        engine.run()

        output = capsys.readouterr().out
        assert "ucciok" in output
        assert "readyok" in output

    def test_command_error_reported(self, engine, monkeypatch, capsys):
        self.feed(monkeypatch, ["setoption hashsize lots", "isready"])

        engine.run()

        captured = capsys.readouterr()
        assert "# Error" in captured.err
        assert "readyok" in captured.out, "Loop continues after an error"

    def test_quit_exits(self, engine, monkeypatch):
        self.feed(monkeypatch, ["isready", "quit"])

        with pytest.raises(SystemExit):
            engine.run()
