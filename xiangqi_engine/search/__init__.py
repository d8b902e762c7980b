"""
Search Module

This module implements the game-tree search: iterative-deepening negamax
with alpha-beta pruning and quiescence, backed by a transposition table
keyed by Zobrist hashes.

Key Components:
    - SearchEngine: Iterative deepening driver with time control
    - find_best_move: One-shot convenience wrapper
    - SearchConfig / Difficulty: Depth, time and cache presets
    - TranspositionTable: Fixed-size cache of search results
    - ZobristTable: Deterministic position hashing
"""

from xiangqi_engine.search.config import Difficulty, SearchConfig
from xiangqi_engine.search.engine import SearchEngine, SearchResult, find_best_move, order_moves
from xiangqi_engine.search.transposition import NodeType, TTEntry, TranspositionTable, decode_move, encode_move
from xiangqi_engine.search.zobrist import ZobristTable

__all__ = [
    'Difficulty',
    'SearchConfig',
    'SearchEngine',
    'SearchResult',
    'find_best_move',
    'order_moves',
    'NodeType',
    'TTEntry',
    'TranspositionTable',
    'encode_move',
    'decode_move',
    'ZobristTable',
]
