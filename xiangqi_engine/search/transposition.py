"""
Transposition Table

This module implements a transposition table (TT) - a fixed-size hash table
that caches search results so positions reached through different move
orders are not searched twice, and so the best move found at one depth can
be tried first at the next.

Layout:
    One numpy structured array, one slot per entry, no chaining:
        key    u32  upper 32 bits of the Zobrist hash (collision guard)
        score  i16  clamped search score
        depth  u8   remaining depth the score was computed at
        kind   u8   NodeType
        move   u16  packed best move (0 = none)
        age    u8   search generation that wrote the entry
        used   bool slot holds an entry

    Slot index = hash % capacity.

Replacement Policy:
    - Empty slot: always write
    - Occupied slot: replace if the stored entry belongs to an older
      search generation, or if the new depth >= stored depth

Move Encoding (16 bits, one nibble per coordinate):
    from_y << 12 | from_x << 8 | to_y << 4 | to_x

References:
    - Transposition Table: https://www.chessprogramming.org/Transposition_Table
"""

from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

ENTRY_DTYPE = np.dtype([
    ('key', np.uint32),
    ('score', np.int16),
    ('depth', np.uint8),
    ('kind', np.uint8),
    ('move', np.uint16),
    ('age', np.uint8),
    ('used', np.bool_),
])

SCORE_MIN = int(np.iinfo(np.int16).min)
SCORE_MAX = int(np.iinfo(np.int16).max)
DEPTH_MAX = int(np.iinfo(np.uint8).max)

DEFAULT_SIZE_MB = 64


class NodeType(Enum):
    """
    Type of node in search tree.

    This determines how we can use the cached value:
        - EXACT: The exact evaluation (all moves searched)
        - LOWER_BOUND: Beta cutoff occurred (eval >= stored score)
        - UPPER_BOUND: No move raised alpha (eval <= stored score)
    """
    EXACT = 0
    LOWER_BOUND = 1
    UPPER_BOUND = 2


def encode_move(from_x: int, from_y: int, to_x: int, to_y: int) -> int:
    """Pack four board coordinates (each 0..15) into 16 bits."""
    return ((from_y & 0xF) << 12) | ((from_x & 0xF) << 8) | ((to_y & 0xF) << 4) | (to_x & 0xF)


def decode_move(packed: int) -> Optional[Tuple[int, int, int, int]]:
    """
    Unpack a 16-bit move.

    Returns:
        (from_x, from_y, to_x, to_y), or None for the empty encoding 0
    """
    if packed == 0:
        return None
    return (
        (packed >> 8) & 0xF,
        (packed >> 12) & 0xF,
        packed & 0xF,
        (packed >> 4) & 0xF,
    )


class TTEntry:
    """
    Entry read back from the transposition table.

    Attributes:
        key: Upper 32 bits of the position hash
        score: Clamped search score
        depth: Search depth of this entry
        node_type: EXACT, LOWER_BOUND, or UPPER_BOUND
        best_move: Packed best move (0 = none)
        age: Search generation that stored it
    """

    __slots__ = ("key", "score", "depth", "node_type", "best_move", "age")

    def __init__(
        self,
        key: int,
        score: int,
        depth: int,
        node_type: NodeType,
        best_move: int = 0,
        age: int = 0,
    ):
        self.key = key
        self.score = score
        self.depth = depth
        self.node_type = node_type
        self.best_move = best_move
        self.age = age

    def decode_move(self) -> Optional[Tuple[int, int, int, int]]:
        return decode_move(self.best_move)

    def __repr__(self) -> str:
        return (
            f"TTEntry(key={self.key:#010x}, depth={self.depth}, "
            f"score={self.score}, type={self.node_type.name}, "
            f"move={self.decode_move()}, age={self.age})"
        )


class TranspositionTable:
    """
    Fixed-capacity cache of search results.

    Not safe for concurrent use: one in-flight search owns the table.

    Attributes:
        size_mb: Byte budget in megabytes
        capacity: Number of slots
        age: Current search generation (0..255, wraps)
        hits: Probes that returned an entry
        probes: Total probes
    """

    def __init__(self, size_mb: int = DEFAULT_SIZE_MB):
        """
        Initialize transposition table.

        Args:
            size_mb: Memory budget in megabytes (default 64)

        Raises:
            ValueError: If size_mb is not positive
        """
        if size_mb <= 0:
            raise ValueError(f"size_mb must be positive, got {size_mb}")

        self.size_mb = size_mb
        self.capacity = (size_mb * 1024 * 1024) // ENTRY_DTYPE.itemsize
        self.entries = np.zeros(self.capacity, dtype=ENTRY_DTYPE)
        self.age = 0
        self.hits = 0
        self.probes = 0

    def index(self, zobrist_hash: int) -> int:
        return zobrist_hash % self.capacity

    @staticmethod
    def verification_key(zobrist_hash: int) -> int:
        return (zobrist_hash >> 32) & 0xFFFFFFFF

    def probe(self, zobrist_hash: int) -> Optional[TTEntry]:
        """
        Look up a position.

        Args:
            zobrist_hash: 64-bit hash of the position

        Returns:
            TTEntry if the slot holds an entry with a matching key, else None
        """
        self.probes += 1

        slot = self.entries[zobrist_hash % self.capacity]
        if not slot['used'] or int(slot['key']) != self.verification_key(zobrist_hash):
            return None

        self.hits += 1
        return TTEntry(
            key=int(slot['key']),
            score=int(slot['score']),
            depth=int(slot['depth']),
            node_type=NodeType(int(slot['kind'])),
            best_move=int(slot['move']),
            age=int(slot['age']),
        )

    def store(
        self,
        zobrist_hash: int,
        score: int,
        depth: int,
        node_type: NodeType,
        best_move: Optional[Tuple[int, int, int, int]] = None,
    ) -> bool:
        """
        Store a search result.

        Args:
            zobrist_hash: 64-bit hash of the position
            score: Search score, clamped to 16 bits
            depth: Remaining depth the score was computed at
            node_type: EXACT, LOWER_BOUND, or UPPER_BOUND
            best_move: (from_x, from_y, to_x, to_y) or None

        Returns:
            True if the entry was written
        """
        index = zobrist_hash % self.capacity
        slot = self.entries[index]
        depth = min(max(depth, 0), DEPTH_MAX)

        if slot['used'] and int(slot['age']) == self.age and depth < int(slot['depth']):
            return False

        packed = encode_move(*best_move) if best_move is not None else 0
        self.entries[index] = (
            self.verification_key(zobrist_hash),
            min(max(score, SCORE_MIN), SCORE_MAX),
            depth,
            node_type.value,
            packed,
            self.age,
            True,
        )
        return True

    def new_search(self) -> None:
        """Advance the generation; call once per independent top-level search."""
        self.age = (self.age + 1) & 0xFF

    def clear(self) -> None:
        """Clear all entries and statistics."""
        self.entries.fill(0)
        self.hits = 0
        self.probes = 0

    def used(self) -> int:
        return int(np.count_nonzero(self.entries['used']))

    def hit_rate(self) -> float:
        """Fraction of probes that found an entry."""
        return self.hits / self.probes if self.probes else 0.0

    def usage(self) -> float:
        """Fraction of slots occupied."""
        return self.used() / self.capacity

    def get_stats(self) -> Dict[str, int | float]:
        """Get statistics about transposition table usage."""
        return {
            'size_mb': self.size_mb,
            'entries': self.capacity,
            'used': self.used(),
            'hits': self.hits,
            'probes': self.probes,
            'hit_rate': self.hit_rate(),
            'usage': self.usage(),
        }

    def __repr__(self) -> str:
        return (
            f"TranspositionTable(size_mb={self.size_mb}, used={self.used()}, "
            f"hit_rate={self.hit_rate() * 100:.1f}%)"
        )
