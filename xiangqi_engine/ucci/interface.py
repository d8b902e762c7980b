"""
UCCI Protocol Implementation

This module implements the Universal Chinese Chess Interface (UCCI)
protocol for communication between the engine and Xiangqi GUIs.

UCCI Commands Supported:
    - ucci: Identify engine
    - isready: Synchronization check
    - setoption: difficulty, hashsize, newgame
    - position: Set board position (startpos or fen, then ICCS moves)
    - go: Start searching (depth N, time N)
    - stop: Stop searching
    - quit: Shutdown engine

Threading:
    - Main thread: Listen for UCCI commands
    - Search thread: Owns one SearchEngine for the duration of a search
    - Communication: stop() expires the running engine's deadline

References:
    - UCCI Protocol: https://www.xqbase.com/protocol/cchess_ucci.htm
"""

import sys
import threading
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from xiangqi_engine import __version__
from xiangqi_engine.board.fen import parse_fen
from xiangqi_engine.board.moves import Move, generate_legal
from xiangqi_engine.board.representation import BoardState
from xiangqi_engine.evaluation.classical import ClassicalEvaluator
from xiangqi_engine.search.config import Difficulty, SearchConfig
from xiangqi_engine.search.engine import SearchEngine, SearchResult
from xiangqi_engine.search.transposition import TranspositionTable

LOG_DIR = Path.home() / ".xiangqi_engine"


def setup_logger(debug=True, log_dir: Optional[Path] = None):
    """
    Setup file-based logger for UCCI debugging.

    The logger is the package root logger, so search and board modules
    log into the same file.

    Args:
        debug: If True, log at DEBUG level; otherwise INFO level
        log_dir: Directory for engine.log (default: ~/.xiangqi_engine)

    Returns:
        Configured logger instance
    """
    log_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "engine.log"

    logger = logging.getLogger("xiangqi_engine")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    handler = logging.FileHandler(log_file, mode='w')
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def find_legal_move(state: BoardState, text: str) -> Optional[Move]:
    """
    Resolve an ICCS string against the legal moves of a position.

    Returns:
        The matching legal move (with its captured piece filled in), or None

    Raises:
        ValueError: If the string is not a well-formed ICCS move
    """
    wanted = Move.from_iccs(text)
    for move in generate_legal(state):
        if move.from_pos == wanted.from_pos and move.to_pos == wanted.to_pos:
            return move
    return None


class UCCIEngine:
    """
    UCCI-compliant engine interface.

    This class handles all UCCI communication and hands searches to a
    worker thread. Only one search runs at a time.

    Attributes:
        state: Current position
        difficulty: Preset used to build each search's limits
        evaluator: Position evaluation function
        transposition_table: Cache shared by successive searches
        searching: Flag indicating if search is in progress
        search_thread: Background thread for search
        search_engine: Engine owned by the running search, if any

    Methods:
        run: Main UCCI command loop
        handle_ucci: Respond to 'ucci' command
        handle_isready: Respond to 'isready' command
        handle_setoption: Change difficulty, hash size, or start a new game
        handle_position: Set board position
        handle_go: Start search
        handle_stop: Stop search
        handle_quit: Shutdown engine
    """

    def __init__(self, evaluator=None, difficulty: Difficulty = Difficulty.MEDIUM,
                 debug=True, log_dir: Optional[Path] = None):
        """
        Initialize UCCI engine.

        Args:
            evaluator: Position evaluator (default: ClassicalEvaluator)
            difficulty: Initial preset (default: MEDIUM)
            debug: Enable debug logging (default: True)
            log_dir: Directory for the log file (default: ~/.xiangqi_engine)
        """
        self.state = BoardState.initial()
        self.difficulty = difficulty
        self.evaluator = evaluator if evaluator else ClassicalEvaluator()
        self.transposition_table = TranspositionTable(
            SearchConfig.from_difficulty(difficulty).tt_size_mb
        )

        # Search state
        self.searching = False
        self.search_thread: Optional[threading.Thread] = None
        self.search_engine: Optional[SearchEngine] = None

        # Engine info
        self.name = "XiangqiEngine"
        self.version = __version__

        self.logger = setup_logger(debug=debug, log_dir=log_dir)
        self.logger.info("=== XiangqiEngine Started ===")

    def _send(self, line: str):
        print(line)
        sys.stdout.flush()
        self.logger.debug(f"<<< {line}")

    def run(self):
        """
        Main UCCI command loop.

        Listens for commands on stdin and responds on stdout.
        Runs until 'quit' command is received or stdin closes.
        """
        while True:
            try:
                command = input().strip()

                if not command:
                    continue

                self.logger.debug(f">>> {command}")

                tokens = command.split()
                cmd = tokens[0].lower()

                if cmd == "ucci":
                    self.handle_ucci()

                elif cmd == "isready":
                    self.handle_isready()

                elif cmd == "setoption":
                    self.handle_setoption(tokens)

                elif cmd == "position":
                    self.handle_position(tokens)

                elif cmd == "go":
                    self.handle_go(tokens)

                elif cmd == "stop":
                    self.handle_stop()

                elif cmd == "quit":
                    self.handle_quit()
                    break

                else:
                    self.logger.debug(f"Unknown command ignored: {command}")

            except EOFError:
                self.logger.info("EOF received, shutting down")
                break
            except Exception as e:
                self.logger.error(f"Command error: {e}", exc_info=True)
                print(f"# Error: {e}", file=sys.stderr)

    def handle_ucci(self):
        """
        Handle 'ucci' command - identify engine.

        Response:
            id name XiangqiEngine 0.1.0
            option ...
            ucciok
        """
        self.logger.info("Handling: ucci")

        self._send(f"id name {self.name} {self.version}")
        self._send("option difficulty type combo default medium var easy var medium var hard")
        self._send("option hashsize type spin default 32 min 1 max 1024")
        self._send("option newgame type button")
        self._send("ucciok")

    def handle_isready(self):
        """Handle 'isready' command - synchronization."""
        self.logger.info("Handling: isready")
        self._send("readyok")

    def handle_setoption(self, tokens: List[str]):
        """
        Handle 'setoption' command.

        Formats:
            setoption difficulty easy|medium|hard
            setoption hashsize <megabytes>
            setoption newgame

        Raises:
            ValueError: On an unknown preset or a bad hash size
        """
        self.logger.info(f"Handling: setoption {' '.join(tokens[1:])}")

        if len(tokens) < 2:
            self.logger.warning("setoption without a name")
            return

        name = tokens[1].lower()
        value = tokens[2] if len(tokens) > 2 else None

        if name == "difficulty" and value is not None:
            self.difficulty = Difficulty.from_name(value)
            self.transposition_table = TranspositionTable(
                SearchConfig.from_difficulty(self.difficulty).tt_size_mb
            )
            self.logger.info(f"Difficulty set to {self.difficulty.name}")

        elif name == "hashsize" and value is not None:
            self.transposition_table = TranspositionTable(int(value))
            self.logger.info(f"Hash size set to {value} MB")

        elif name == "newgame":
            self.state = BoardState.initial()
            self.transposition_table.clear()
            self.logger.info("New game: board and transposition table reset")

        else:
            self.logger.debug(f"Unknown option ignored: {name}")

    def handle_position(self, tokens: List[str]):
        """
        Handle 'position' command - set board position.

        Formats:
            position startpos
            position startpos moves h2e2 h9g7
            position fen <FEN string>
            position fen <FEN string> moves h2e2

        Args:
            tokens: Command tokens (e.g., ['position', 'startpos', 'moves', 'h2e2'])
        """
        self.logger.info(f"Handling: position {' '.join(tokens[1:])}")

        if len(tokens) < 2:
            self.logger.warning("Position command with insufficient arguments")
            return

        if tokens[1] == "startpos":
            state = BoardState.initial()
            move_index = 2
        elif tokens[1] == "fen":
            try:
                move_index = tokens.index("moves")
            except ValueError:
                move_index = len(tokens)
            fen = " ".join(tokens[2:move_index])

            try:
                state = parse_fen(fen)
                self.logger.debug(f"Set position from FEN: {fen}")
            except ValueError as e:
                self.logger.error(f"Invalid FEN: {e}")
                print(f"# Invalid FEN: {e}", file=sys.stderr)
                return
        else:
            self.logger.warning(f"Unknown position type: {tokens[1]}")
            return

        if move_index < len(tokens) and tokens[move_index] == "moves":
            moves_applied = []
            for move_str in tokens[move_index + 1:]:
                try:
                    move = find_legal_move(state, move_str)
                except ValueError as e:
                    self.logger.error(f"Invalid move format: {move_str} - {e}")
                    print(f"# Invalid move format: {move_str} - {e}", file=sys.stderr)
                    break
                if move is None:
                    self.logger.error(f"Illegal move: {move_str}")
                    print(f"# Illegal move: {move_str}", file=sys.stderr)
                    break
                state.apply_move(move)
                moves_applied.append(move_str)

            if moves_applied:
                self.logger.debug(f"Applied moves: {' '.join(moves_applied)}")

        self.state = state
        self.logger.info(f"Position updated: {self.state!r}")

    def handle_go(self, tokens: List[str]):
        """
        Handle 'go' command - start search.

        Formats:
            go                (preset depth and time)
            go depth 5
            go time 2000      (search for at most 2 seconds)
            go depth 5 time 2000

        Args:
            tokens: Command tokens (e.g., ['go', 'depth', '5'])
        """
        self.logger.info(f"Handling: go {' '.join(tokens[1:])}")

        if self.search_thread and self.search_thread.is_alive():
            self.logger.warning("go received while searching; stopping previous search")
            self.handle_stop()

        overrides = {}

        i = 1
        while i < len(tokens):
            if tokens[i] == "depth" and i + 1 < len(tokens):
                overrides["max_depth"] = int(tokens[i + 1])
                i += 2
            elif tokens[i] in ("time", "movetime") and i + 1 < len(tokens):
                overrides["time_limit_ms"] = int(tokens[i + 1])
                i += 2
            else:
                i += 1

        config = replace(SearchConfig.from_difficulty(self.difficulty), **overrides)

        self.search_engine = SearchEngine(
            config=config,
            evaluator=self.evaluator,
            transposition_table=self.transposition_table,
        )

        self.logger.info(
            f"Starting search thread with depth={config.max_depth}, time={config.time_limit_ms}ms"
        )

        # The search thread owns its own copy of the position
        state_copy = self.state.copy()

        self.searching = True
        self.search_thread = threading.Thread(
            target=self._search_thread,
            args=(self.search_engine, state_copy),
        )
        self.search_thread.start()

    def _report_depth(self, result: SearchResult):
        self._send(
            f"info depth {result.depth} score {result.score} nodes {result.nodes} "
            f"time {int(result.elapsed_ms)} pv {result.best_move.to_iccs()}"
        )

    def _search_thread(self, engine: SearchEngine, state: BoardState):
        """
        Background thread for search.

        Output:
            info depth X score Y nodes Z time T pv <move>
            bestmove <move> | nobestmove
        """
        try:
            best_move = engine.search(state, on_depth=self._report_depth)
            result = engine.last_result

            self.logger.info(
                f"Search complete: best_move={best_move.to_iccs() if best_move else 'None'}, "
                f"score={result.score}, depth={result.depth}, nodes={result.nodes}, "
                f"time={result.elapsed_ms:.0f}ms"
            )

            if best_move is not None:
                self._send(f"bestmove {best_move.to_iccs()}")
            else:
                self._send("nobestmove")

        except Exception as e:
            self.logger.error(f"Search error: {e}", exc_info=True)
            print(f"# Search error: {e}", file=sys.stderr)

            legal_moves = generate_legal(state)
            if legal_moves:
                fallback_move = legal_moves[0].to_iccs()
                self.logger.warning(f"Using fallback move: {fallback_move}")
                self._send(f"bestmove {fallback_move}")
            else:
                self._send("nobestmove")

        finally:
            self.searching = False
            self.logger.debug("Search thread finished")

    def handle_stop(self):
        """
        Handle 'stop' command - stop ongoing search.

        Expires the running engine's deadline and waits for the search
        thread, which still reports the best move found so far.
        """
        self.logger.info("Handling: stop")

        if self.search_engine is not None:
            self.search_engine.stop()

        if self.search_thread and self.search_thread.is_alive():
            self.logger.debug("Waiting for search thread to finish (timeout=5.0s)")
            self.search_thread.join(timeout=5.0)
            if self.search_thread.is_alive():
                self.logger.warning("Search thread did not finish within timeout")

    def handle_quit(self):
        """Handle 'quit' command - shutdown engine."""
        self.logger.info("Handling: quit - shutting down engine")

        if self.search_thread and self.search_thread.is_alive():
            self.logger.debug("Waiting for search thread to complete before quitting")
            self.search_thread.join()

        self._send("bye")
        self.logger.info("=== XiangqiEngine Stopped ===")
        sys.exit(0)


def main():
    """Console entry point: run the UCCI loop on stdin/stdout."""
    engine = UCCIEngine()
    engine.run()
