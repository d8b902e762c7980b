"""
Negamax Search with Alpha-Beta Pruning

This module implements the search engine. Iterative deepening drives a
negamax alpha-beta search backed by a transposition table, with a
capture-only quiescence search at the horizon and a wall-clock deadline.

Key Concepts:
    - Negamax: Scores are always from the side to move; a child's score is
      negated on the way up, with the (alpha, beta) window swapped
    - Alpha-Beta: Skip branches that cannot change the result
    - Iterative Deepening: Search depth 1, 2, ... and keep the move of the
      last fully completed pass
    - Quiescence: Keep resolving captures past the horizon so the static
      evaluation is never taken in the middle of an exchange
    - Move Ordering: Cached best move first, then captures by MVV-LVA

Time Control:
    The deadline is fixed once per search() call. Nodes poll the clock on
    entry and, once it has passed, unwind with their static evaluation.
    The depth-1 pass is never interrupted. A deeper pass that hits the
    deadline is discarded wholesale, and the nodes it cut short store
    nothing in the table.

Algorithm Complexity:
    - Minimax: O(b^d) where b=branching factor (~40), d=depth
    - Alpha-Beta: O(b^(d/2)) with perfect move ordering

References:
    - Negamax: https://www.chessprogramming.org/Negamax
    - Alpha-Beta: https://www.chessprogramming.org/Alpha-Beta
    - Quiescence Search: https://www.chessprogramming.org/Quiescence_Search
    - Iterative Deepening: https://www.chessprogramming.org/Iterative_Deepening
"""

import logging
import math
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from xiangqi_engine.board.moves import Move, generate_legal, is_in_check
from xiangqi_engine.board.pieces import PIECE_VALUES, PieceType, Side
from xiangqi_engine.board.representation import Board, BoardState
from xiangqi_engine.evaluation.base import Evaluator, INFINITY, MATE_SCORE
from xiangqi_engine.evaluation.classical import ClassicalEvaluator
from xiangqi_engine.search.config import Difficulty, SearchConfig
from xiangqi_engine.search.transposition import NodeType, TranspositionTable
from xiangqi_engine.search.zobrist import ZobristTable

logger = logging.getLogger(__name__)

DRAW_SCORE = 0

# Mate scores lie within MAX_PLY of MATE_SCORE
MAX_PLY = 128
MATE_THRESHOLD = MATE_SCORE - MAX_PLY

Coords = Tuple[int, int, int, int]


@dataclass
class SearchResult:
    """Outcome of one search() call."""
    best_move: Optional[Move]
    score: int
    depth: int
    nodes: int
    elapsed_ms: float
    random_substitution: bool = False


def move_coords(move: Move) -> Coords:
    """(from_x, from_y, to_x, to_y) of a move, the form the table stores."""
    return (move.from_pos.x, move.from_pos.y, move.to_pos.x, move.to_pos.y)


def score_to_tt(score: int, ply: int) -> int:
    """Re-base a mate score from distance-to-root to distance-to-node for storage."""
    if score > MATE_THRESHOLD:
        return score + ply
    if score < -MATE_THRESHOLD:
        return score - ply
    return score


def score_from_tt(score: int, ply: int) -> int:
    """Inverse of score_to_tt for an entry probed at `ply`."""
    if score > MATE_THRESHOLD:
        return score - ply
    if score < -MATE_THRESHOLD:
        return score + ply
    return score


def get_piece_value(piece_type: PieceType) -> int:
    """
    Get piece value for move ordering.

    Args:
        piece_type: PieceType.PAWN, PieceType.ROOK, etc.

    Returns:
        Piece value in score units
    """
    return PIECE_VALUES.get(piece_type, 0)


def order_moves(board: Board, moves: List[Move], tt_move: Optional[Coords] = None) -> List[Move]:
    """
    Order moves to improve alpha-beta pruning efficiency.

    Ordering Priority:
        1. The cached best move (from the table or the previous depth)
        2. Captures (MVV-LVA: Most Valuable Victim - Least Valuable Aggressor)
        3. Everything else, in generation order

    Args:
        board: Current board position (moves are not yet played)
        moves: List of legal moves to order
        tt_move: Coordinates of the cached best move, if any

    Returns:
        Sorted list of moves (best moves first)
    """

    def move_score(move: Move) -> int:
        if tt_move is not None and move_coords(move) == tt_move:
            return 1_000_000

        if move.captured is None:
            return 0

        victim_value = get_piece_value(move.captured.piece_type)
        attacker = board.get(move.from_pos)
        attacker_value = get_piece_value(attacker.piece_type) if attacker else 100

        return 10000 + (victim_value - attacker_value // 10)

    # sorted() is stable, so quiet moves keep generation order
    return sorted(moves, key=move_score, reverse=True)


class SearchEngine:
    """
    Iterative-deepening alpha-beta search.

    One instance belongs to one search at a time. To run searches
    concurrently, give each its own engine (and table).

    Attributes:
        config: Depth, time and cache limits
        evaluator: Static evaluation, Red's perspective
        tt: Transposition table
        zobrist: Hash constants
        rng: Source of randomness for random move substitution
        nodes_searched: Nodes visited by the last search
        last_result: SearchResult of the last search, or None
    """

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        evaluator: Optional[Evaluator] = None,
        transposition_table: Optional[TranspositionTable] = None,
        zobrist: Optional[ZobristTable] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config if config is not None else SearchConfig()
        self.evaluator = evaluator if evaluator is not None else ClassicalEvaluator()
        self.tt = (
            transposition_table
            if transposition_table is not None
            else TranspositionTable(self.config.tt_size_mb)
        )
        self.zobrist = zobrist if zobrist is not None else ZobristTable()
        self.rng = rng if rng is not None else random.Random()

        self.nodes_searched = 0
        self.last_result: Optional[SearchResult] = None

        self._deadline = math.inf
        self._enforce_deadline = False
        self._aborted = False
        self._stop_requested = threading.Event()

    @classmethod
    def from_difficulty(cls, difficulty: Difficulty, **kwargs) -> "SearchEngine":
        return cls(config=SearchConfig.from_difficulty(difficulty), **kwargs)

    def stop(self) -> None:
        """
        Expire the current deadline.

        Callable from another thread; the running search finishes its
        depth-1 pass if it is still in it, then returns its best move.
        A stop requested before search() starts applies to that search.
        """
        self._stop_requested.set()
        self._deadline = 0.0

    def search(
        self,
        state: BoardState,
        on_depth: Optional[Callable[[SearchResult], None]] = None,
    ) -> Optional[Move]:
        """
        Find the best move for the side to move.

        Args:
            state: Position to search (not modified)
            on_depth: Called with an interim SearchResult after every
                completed depth

        Returns:
            The best move, or None if the side to move has no legal move
            (checkmate or stalemate; tell them apart with is_in_check)
        """
        try:
            return self._run_search(state, on_depth)
        finally:
            self._stop_requested.clear()

    def _run_search(
        self,
        state: BoardState,
        on_depth: Optional[Callable[[SearchResult], None]],
    ) -> Optional[Move]:
        start = time.perf_counter()
        self.nodes_searched = 0
        self._aborted = False
        self._enforce_deadline = False
        self._deadline = start + self.config.time_limit_ms / 1000.0
        if self._stop_requested.is_set():
            self._deadline = start
        self.tt.new_search()

        moves = generate_legal(state)
        if not moves:
            self.last_result = SearchResult(None, 0, 0, 0, self._elapsed_ms(start))
            logger.debug("No legal moves for %s", state.current_turn.name)
            return None

        if len(moves) == 1:
            self.last_result = SearchResult(moves[0], 0, 0, 0, self._elapsed_ms(start))
            logger.debug("Single legal move %s", moves[0].to_iccs())
            return moves[0]

        logger.debug(
            "Search start: %d moves, max_depth=%d, time_limit=%dms",
            len(moves), self.config.max_depth, self.config.time_limit_ms,
        )

        root_hash = self.zobrist.hash_state(state)
        work = state.copy()

        best_move = moves[0]
        best_score = -INFINITY
        completed_depth = 0

        for depth in range(1, self.config.max_depth + 1):
            if depth > 1:
                if self._stop_requested.is_set() or time.perf_counter() >= self._deadline:
                    break
                self._enforce_deadline = True

            score, move = self._search_root(
                work, moves, depth, root_hash, move_coords(best_move)
            )

            if self._aborted:
                logger.debug("Depth %d aborted at deadline, keeping depth %d", depth, completed_depth)
                break

            best_move, best_score, completed_depth = move, score, depth
            logger.debug(
                "Depth %d: best=%s score=%d nodes=%d",
                depth, best_move.to_iccs(), best_score, self.nodes_searched,
            )
            if on_depth is not None:
                on_depth(SearchResult(
                    best_move, best_score, depth, self.nodes_searched, self._elapsed_ms(start)
                ))

        substituted = False
        probability = self.config.random_move_probability
        if probability > 0.0 and self.rng.random() < probability:
            best_move = self.rng.choice(moves)
            substituted = True
            logger.debug("Random substitution: %s", best_move.to_iccs())

        self.last_result = SearchResult(
            best_move,
            best_score,
            completed_depth,
            self.nodes_searched,
            self._elapsed_ms(start),
            substituted,
        )
        logger.info(
            "Search done: move=%s score=%d depth=%d nodes=%d time=%.0fms",
            best_move.to_iccs(), best_score, completed_depth,
            self.nodes_searched, self.last_result.elapsed_ms,
        )
        return best_move

    def _search_root(
        self,
        state: BoardState,
        moves: List[Move],
        depth: int,
        root_hash: int,
        previous_best: Coords,
    ) -> Tuple[int, Move]:
        """One full-width pass over the root moves, previous best first."""
        alpha = -INFINITY
        beta = INFINITY
        best_move = None
        best_score = -INFINITY

        for move in order_moves(state.board, moves, previous_best):
            child_hash = self.zobrist.update(root_hash, move, state.board.get(move.from_pos))
            previous_count = state.no_capture_count
            state.apply_move(move)
            score = -self._alpha_beta(state, depth - 1, -beta, -alpha, 1, child_hash)
            state.undo_move(move, previous_count)

            if self._aborted:
                break

            if best_move is None or score > best_score:
                best_score = score
                best_move = move
            if score > alpha:
                alpha = score

        if not self._aborted:
            self.tt.store(root_hash, best_score, depth, NodeType.EXACT, move_coords(best_move))

        return best_score, best_move

    def _alpha_beta(
        self,
        state: BoardState,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
        zobrist_hash: int,
    ) -> int:
        """
        Negamax alpha-beta search.

        Args:
            state: Position, played into and restored in place
            depth: Remaining depth
            alpha: Lower bound of the window
            beta: Upper bound of the window
            ply: Distance from the root (for mate distance)
            zobrist_hash: Hash of state

        Returns:
            int: Score from the side to move's perspective
        """
        self.nodes_searched += 1

        if self._enforce_deadline and time.perf_counter() >= self._deadline:
            self._aborted = True
            return self._static_eval(state)

        if self.evaluator.is_draw(state):
            return DRAW_SCORE

        tt_move = None
        entry = self.tt.probe(zobrist_hash)
        if entry is not None:
            tt_move = entry.decode_move()
            if entry.depth >= depth:
                tt_score = score_from_tt(entry.score, ply)
                if entry.node_type is NodeType.EXACT:
                    return tt_score
                if entry.node_type is NodeType.LOWER_BOUND:
                    alpha = max(alpha, tt_score)
                else:
                    beta = min(beta, tt_score)
                if alpha >= beta:
                    return tt_score

        if depth <= 0:
            return self._quiescence(state, alpha, beta, self.config.quiescence_depth)

        moves = generate_legal(state)
        if not moves:
            if is_in_check(state.board, state.current_turn):
                return -(MATE_SCORE - ply)
            return DRAW_SCORE

        best_move = None
        for move in order_moves(state.board, moves, tt_move):
            child_hash = self.zobrist.update(zobrist_hash, move, state.board.get(move.from_pos))
            previous_count = state.no_capture_count
            state.apply_move(move)
            score = -self._alpha_beta(state, depth - 1, -beta, -alpha, ply + 1, child_hash)
            state.undo_move(move, previous_count)

            if self._aborted:
                return alpha

            if score >= beta:
                self.tt.store(
                    zobrist_hash, score_to_tt(beta, ply), depth,
                    NodeType.LOWER_BOUND, move_coords(move),
                )
                return beta
            if score > alpha:
                alpha = score
                best_move = move

        if best_move is not None:
            self.tt.store(
                zobrist_hash, score_to_tt(alpha, ply), depth,
                NodeType.EXACT, move_coords(best_move),
            )
        else:
            self.tt.store(zobrist_hash, score_to_tt(alpha, ply), depth, NodeType.UPPER_BOUND)
        return alpha

    def _quiescence(self, state: BoardState, alpha: int, beta: int, depth: int) -> int:
        """Capture-only negamax with stand pat, capped at `depth` plies."""
        self.nodes_searched += 1

        stand_pat = self._static_eval(state)
        if depth == 0:
            return stand_pat

        if self._enforce_deadline and time.perf_counter() >= self._deadline:
            self._aborted = True
            return stand_pat

        if stand_pat >= beta:
            return beta
        if stand_pat > alpha:
            alpha = stand_pat

        captures = [move for move in generate_legal(state) if move.captured is not None]
        for move in order_moves(state.board, captures):
            previous_count = state.no_capture_count
            state.apply_move(move)
            score = -self._quiescence(state, -beta, -alpha, depth - 1)
            state.undo_move(move, previous_count)

            if self._aborted:
                return alpha

            if score >= beta:
                return beta
            if score > alpha:
                alpha = score

        return alpha

    def _static_eval(self, state: BoardState) -> int:
        score = self.evaluator.evaluate(state.board)
        return score if state.current_turn is Side.RED else -score

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000.0

    def get_stats(self) -> Dict[str, float]:
        """Counters for diagnostics: nodes, table hit rate and occupancy."""
        result = self.last_result
        return {
            'nodes_searched': self.nodes_searched,
            'depth': result.depth if result else 0,
            'elapsed_ms': result.elapsed_ms if result else 0.0,
            'tt_hit_rate': self.tt.hit_rate(),
            'tt_usage': self.tt.usage(),
        }

    def __repr__(self) -> str:
        return (
            f"SearchEngine(difficulty={self.config.difficulty.name}, "
            f"max_depth={self.config.max_depth}, evaluator={self.evaluator!r})"
        )


def find_best_move(
    state: BoardState,
    config: Optional[SearchConfig] = None,
    evaluator: Optional[Evaluator] = None,
    verbose: bool = False,
) -> SearchResult:
    """
    Find the best move in a position with a throwaway engine.

    Args:
        state: Position to search
        config: Search limits (default: Medium preset values)
        evaluator: Position evaluation function
        verbose: If True, print search statistics

    Returns:
        SearchResult; best_move is None when there is no legal move
    """
    engine = SearchEngine(config=config, evaluator=evaluator)
    engine.search(state)
    result = engine.last_result

    if verbose:
        move_text = result.best_move.to_iccs() if result.best_move else "none"
        print(f"Best move: {move_text}, Score: {result.score}")
        print(f"Depth: {result.depth}, Nodes searched: {result.nodes}, Time: {result.elapsed_ms:.0f}ms")

    return result
