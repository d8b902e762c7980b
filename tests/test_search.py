"""
Unit Tests for Search Module

Tests for the search engine, focusing on:
    - Returned moves are legal
    - Single-move shortcut and terminal positions
    - Tactics: winning material, mate in one
    - Time control: depth-1 pass always kept, deadline respected
    - Easy preset random substitution
"""

import random
import threading
import time

import pytest

from xiangqi_engine.board import BoardState, Side, generate_legal, is_in_check
from xiangqi_engine.board.fen import parse_fen
from xiangqi_engine.evaluation import ClassicalEvaluator
from xiangqi_engine.evaluation.base import INFINITY, MATE_SCORE
from xiangqi_engine.search import (
    Difficulty,
    SearchConfig,
    SearchEngine,
    SearchResult,
    TranspositionTable,
    find_best_move,
    order_moves,
)
from xiangqi_engine.search.engine import move_coords, score_from_tt, score_to_tt

CHECKMATE_FEN = "3k5/9/9/9/9/9/9/9/3rr4/3K5 r 0 1"
SINGLE_MOVE_FEN = "5k3/9/9/9/4r4/9/9/9/9/3K5 r 0 1"
HANGING_ROOK_FEN = "4k4/9/9/9/r8/9/9/9/9/R2K5 r 0 1"
MATE_IN_ONE_FEN = "3k5/RR7/9/9/9/9/9/9/9/4K4 r 0 1"


def small_config(**overrides):
    values = dict(max_depth=2, time_limit_ms=10000, tt_size_mb=1)
    values.update(overrides)
    return SearchConfig(**values)


class TestSearchEngine:
    """Tests for SearchEngine.search."""

    @pytest.fixture
    def engine(self):
        """Create a shallow deterministic engine."""
        return SearchEngine(config=small_config(), evaluator=ClassicalEvaluator())

    def test_returns_legal_move_from_start(self, engine):
        state = BoardState.initial()

        move = engine.search(state)

        assert move is not None
        assert move in generate_legal(state), f"{move.to_iccs()} is not legal"
        assert engine.nodes_searched > 0
        assert engine.last_result.depth == 2

    def test_search_does_not_modify_state(self, engine):
        state = BoardState.initial()
        engine.search(state)
        assert state == BoardState.initial()

    def test_single_legal_move_shortcut(self, engine):
        state = parse_fen(SINGLE_MOVE_FEN)
        legal = generate_legal(state)
        assert len(legal) == 1

        move = engine.search(state)

        assert move == legal[0]
        assert move.to_iccs() == "d0d1"
        assert engine.nodes_searched == 0, "No tree search for a forced move"
        assert engine.last_result.depth == 0

    def test_no_legal_move_returns_none(self, engine):
        state = parse_fen(CHECKMATE_FEN)

        assert engine.search(state) is None
        assert is_in_check(state.board, state.current_turn), "Caller classifies as checkmate"
        assert engine.last_result.best_move is None

    def test_captures_hanging_rook(self, engine):
        move = engine.search(parse_fen(HANGING_ROOK_FEN))
        assert move.to_iccs() == "a0a5"
        assert engine.last_result.score > 500

    def test_black_to_move(self, engine):
        move = engine.search(parse_fen("r2k5/9/9/9/9/R8/9/9/9/4K4 b 0 1"))
        assert move.to_iccs() == "a9a4"

    def test_mate_in_one(self, engine):
        state = parse_fen(MATE_IN_ONE_FEN)

        move = engine.search(state)

        assert move.to_iccs() in {"a8a9", "b8b9", "b8d8"}, f"Should mate, got {move.to_iccs()}"
        assert engine.last_result.score == MATE_SCORE - 1

        state.apply_move(move)
        assert generate_legal(state) == []
        assert is_in_check(state.board, Side.BLACK)

    def test_cached_mate_score_depends_on_ply(self, engine):
        """A mate cached at one ply is re-scored for the ply it is found at."""
        state = parse_fen(MATE_IN_ONE_FEN)
        zobrist_hash = engine.zobrist.hash_state(state)

        near = engine._alpha_beta(state, 2, -INFINITY, INFINITY, 1, zobrist_hash)
        far = engine._alpha_beta(state, 2, -INFINITY, INFINITY, 5, zobrist_hash)

        fresh = SearchEngine(config=small_config())
        expected = fresh._alpha_beta(state, 2, -INFINITY, INFINITY, 5, zobrist_hash)

        assert near == MATE_SCORE - 2
        assert far == expected == MATE_SCORE - 6

    def test_mate_score_table_conversion(self):
        for ply in (0, 1, 7, 40):
            for score in (MATE_SCORE - 3, -(MATE_SCORE - 3), 250, -250, 0):
                assert score_from_tt(score_to_tt(score, ply), ply) == score
        assert score_to_tt(MATE_SCORE - 3, 2) == MATE_SCORE - 1
        assert score_to_tt(-(MATE_SCORE - 3), 2) == -(MATE_SCORE - 1)
        assert score_to_tt(250, 9) == 250

    def test_deterministic(self):
        state = BoardState.initial()
        first = SearchEngine(config=small_config())
        second = SearchEngine(config=small_config())

        assert first.search(state) == second.search(state)
        assert first.last_result.score == second.last_result.score

    def test_deeper_search_visits_more_nodes(self):
        state = BoardState.initial()
        shallow = SearchEngine(config=small_config(max_depth=1))
        deep = SearchEngine(config=small_config(max_depth=2))

        shallow.search(state)
        deep.search(state)

        assert deep.nodes_searched > shallow.nodes_searched

    def test_on_depth_called_per_completed_depth(self, engine):
        reports = []
        engine.search(BoardState.initial(), on_depth=reports.append)

        assert [r.depth for r in reports] == [1, 2]
        assert all(isinstance(r, SearchResult) for r in reports)

    def test_get_stats(self, engine):
        engine.search(BoardState.initial())
        stats = engine.get_stats()

        assert stats['nodes_searched'] == engine.nodes_searched
        assert stats['depth'] == 2
        assert 0.0 <= stats['tt_hit_rate'] <= 1.0
        assert 0.0 < stats['tt_usage'] <= 1.0

    def test_uses_injected_table(self):
        tt = TranspositionTable(size_mb=1)
        engine = SearchEngine(config=small_config(), transposition_table=tt)
        engine.search(BoardState.initial())

        assert engine.tt is tt
        assert tt.used() > 0
        assert tt.age == 1


class TestTimeControl:
    """Tests for deadline handling."""

    def test_depth_one_kept_when_deadline_tiny(self):
        """Even a 1 ms budget returns the completed depth-1 move."""
        state = BoardState.initial()
        engine = SearchEngine(config=SearchConfig(max_depth=6, time_limit_ms=1, tt_size_mb=1))

        move = engine.search(state)

        assert move in generate_legal(state)
        assert engine.last_result.depth >= 1

    def test_aborted_pass_is_discarded(self):
        state = BoardState.initial()
        engine = SearchEngine(config=SearchConfig(max_depth=20, time_limit_ms=200, tt_size_mb=1))

        engine.search(state)

        assert 1 <= engine.last_result.depth < 20

    def test_stop_from_another_thread(self):
        """stop() ends a long search early with the last completed depth."""
        state = BoardState.initial()
        engine = SearchEngine(config=SearchConfig(max_depth=20, time_limit_ms=60000, tt_size_mb=1))
        result = {}

        worker = threading.Thread(target=lambda: result.update(move=engine.search(state)))
        worker.start()
        time.sleep(0.3)
        engine.stop()
        worker.join(timeout=10.0)

        assert not worker.is_alive(), "Search should return soon after stop()"
        assert result["move"] in generate_legal(state)
        assert engine.last_result.depth >= 1


    def test_stop_before_search_starts(self):
        """A stop issued before search() begins still cuts that search short."""
        state = BoardState.initial()
        engine = SearchEngine(config=SearchConfig(max_depth=20, time_limit_ms=4000, tt_size_mb=1))
        gate = threading.Event()
        result = {}

        def run():
            gate.wait()
            result['move'] = engine.search(state)

        worker = threading.Thread(target=run)
        worker.start()
        engine.stop()
        started = time.perf_counter()
        gate.set()
        worker.join(timeout=10.0)

        assert not worker.is_alive()
        assert time.perf_counter() - started < 1.5
        assert result['move'] in generate_legal(state)
        assert engine.last_result.depth == 1

    def test_stop_request_cleared_after_search(self):
        state = BoardState.initial()
        engine = SearchEngine(config=small_config())

        engine.stop()
        engine.search(state)
        assert engine.last_result.depth == 1

        engine.search(state)
        assert engine.last_result.depth == 2


class TestDifficultyPresets:
    """End-to-end tests for the presets."""

    def test_easy_within_budget(self):
        state = BoardState.initial()
        engine = SearchEngine.from_difficulty(Difficulty.EASY, rng=random.Random(7))

        start = time.perf_counter()
        move = engine.search(state)
        elapsed = time.perf_counter() - start

        assert move in generate_legal(state)
        # Budget plus slack for the uninterruptible depth-1 pass
        assert elapsed < engine.config.time_limit_ms / 1000.0 + 3.0

    def test_random_substitution_returns_legal_move(self):
        state = BoardState.initial()
        config = SearchConfig.from_difficulty(Difficulty.EASY)
        config.random_move_probability = 1.0
        config.max_depth = 1

        legal = generate_legal(state)
        for seed in range(5):
            engine = SearchEngine(config=config, rng=random.Random(seed))
            move = engine.search(state)

            assert engine.last_result.random_substitution
            assert move in legal

    def test_no_substitution_when_probability_zero(self):
        engine = SearchEngine(config=small_config(max_depth=1), rng=random.Random(0))
        engine.search(BoardState.initial())
        assert not engine.last_result.random_substitution

    def test_from_difficulty_sizes_table(self):
        engine = SearchEngine.from_difficulty(Difficulty.EASY)
        assert engine.config.max_depth == 3
        assert engine.tt.size_mb == 16


class TestMoveOrdering:
    """Tests for order_moves."""

    def test_tt_move_first(self):
        state = BoardState.initial()
        moves = generate_legal(state)
        quiet = next(m for m in moves if m.to_iccs() == "h2e2")

        ordered = order_moves(state.board, moves, move_coords(quiet))

        assert ordered[0] == quiet

    def test_captures_before_quiet_moves(self):
        state = BoardState.initial()
        moves = generate_legal(state)

        ordered = order_moves(state.board, moves)

        assert {m.to_iccs() for m in ordered[:2]} == {"b2b9", "h2h9"}
        assert not any(m.is_capture for m in ordered[2:])

    def test_most_valuable_victim_first(self):
        state = parse_fen("4k4/9/9/9/4p4/r3R4/9/9/9/3K5 r 0 1")
        moves = generate_legal(state)

        ordered = order_moves(state.board, moves)

        assert ordered[0].to_iccs() == "e4a4"


class TestFindBestMove:
    """Tests for the find_best_move wrapper."""

    def test_returns_result(self):
        result = find_best_move(parse_fen(HANGING_ROOK_FEN), config=small_config())

        assert isinstance(result, SearchResult)
        assert result.best_move.to_iccs() == "a0a5"
        assert result.nodes > 0

    def test_no_moves(self):
        result = find_best_move(parse_fen(CHECKMATE_FEN), config=small_config())
        assert result.best_move is None

    def test_verbose_prints(self, capsys):
        find_best_move(parse_fen(HANGING_ROOK_FEN), config=small_config(), verbose=True)
        assert "Best move: a0a5" in capsys.readouterr().out
