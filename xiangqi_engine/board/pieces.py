"""
Pieces, Sides and Board Coordinates

This module defines the small immutable value types every other component
reads: which side a piece belongs to, which of the seven kinds it is, and
where on the 9x10 board it stands.

Board Orientation:
    - x = file, 0..8 from Red's left to Red's right
    - y = rank, 0..9 from Red's back rank to Black's back rank
    - Red (first to move) owns ranks 0-4, Black owns ranks 5-9
    - The river runs between rank 4 and rank 5
    - Square index = y * 9 + x

Piece Kinds:
    King (帥/將), Advisor (仕/士), Bishop (相/象), Knight (傌/馬),
    Rook (俥/車), Cannon (炮/砲), Pawn (兵/卒)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

BOARD_WIDTH = 9
BOARD_HEIGHT = 10
BOARD_SQUARES = BOARD_WIDTH * BOARD_HEIGHT


class Side(Enum):
    """The two players. Red moves first and sits at the bottom."""

    RED = 0
    BLACK = 1

    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.RED else Side.RED

    def to_fen_char(self) -> str:
        return "r" if self is Side.RED else "b"

    @staticmethod
    def from_fen_char(c: str) -> Optional["Side"]:
        if c in ("r", "R", "w", "W"):
            return Side.RED
        if c in ("b", "B"):
            return Side.BLACK
        return None


class PieceType(Enum):
    """
    The seven piece kinds.

    The enum value doubles as the row index into per-kind lookup tables
    (Zobrist constants, piece-square tables).
    """

    KING = 0
    ADVISOR = 1
    BISHOP = 2
    KNIGHT = 3
    ROOK = 4
    CANNON = 5
    PAWN = 6

    @property
    def value_cp(self) -> int:
        """Base material value used by the evaluator and move ordering."""
        return PIECE_VALUES[self]

    def to_fen_char(self, side: Side) -> str:
        c = _FEN_CHARS[self]
        return c.upper() if side is Side.RED else c


# Material values (centipawn-like units)
PIECE_VALUES = {
    PieceType.KING: 10000,
    PieceType.ROOK: 900,
    PieceType.CANNON: 450,
    PieceType.KNIGHT: 400,
    PieceType.BISHOP: 200,
    PieceType.ADVISOR: 200,
    PieceType.PAWN: 100,
}

_FEN_CHARS = {
    PieceType.KING: "k",
    PieceType.ADVISOR: "a",
    PieceType.BISHOP: "b",
    PieceType.KNIGHT: "n",
    PieceType.ROOK: "r",
    PieceType.CANNON: "c",
    PieceType.PAWN: "p",
}

_FEN_TO_TYPE = {c: t for t, c in _FEN_CHARS.items()}

_DISPLAY_CHARS = {
    (PieceType.KING, Side.RED): "帥",
    (PieceType.KING, Side.BLACK): "將",
    (PieceType.ADVISOR, Side.RED): "仕",
    (PieceType.ADVISOR, Side.BLACK): "士",
    (PieceType.BISHOP, Side.RED): "相",
    (PieceType.BISHOP, Side.BLACK): "象",
    (PieceType.KNIGHT, Side.RED): "傌",
    (PieceType.KNIGHT, Side.BLACK): "馬",
    (PieceType.ROOK, Side.RED): "俥",
    (PieceType.ROOK, Side.BLACK): "車",
    (PieceType.CANNON, Side.RED): "炮",
    (PieceType.CANNON, Side.BLACK): "砲",
    (PieceType.PAWN, Side.RED): "兵",
    (PieceType.PAWN, Side.BLACK): "卒",
}


@dataclass(frozen=True)
class Piece:
    """
    A piece is just its (kind, side) pair.

    Two pieces with the same kind and side are interchangeable; there is
    no identity beyond that.
    """

    piece_type: PieceType
    side: Side

    @property
    def value(self) -> int:
        return PIECE_VALUES[self.piece_type]

    def to_fen_char(self) -> str:
        return self.piece_type.to_fen_char(self.side)

    @staticmethod
    def from_fen_char(c: str) -> Optional["Piece"]:
        """Parse a FEN letter (upper case = Red). Returns None if unknown."""
        piece_type = _FEN_TO_TYPE.get(c.lower())
        if piece_type is None:
            return None
        side = Side.RED if c.isupper() else Side.BLACK
        return Piece(piece_type, side)

    def display_char(self) -> str:
        return _DISPLAY_CHARS[(self.piece_type, self.side)]

    def __repr__(self) -> str:
        return f"Piece({self.piece_type.name}, {self.side.name})"


@dataclass(frozen=True)
class Position:
    """
    A square on the board.

    Construction validates the range and raises ValueError for squares off
    the board. Internal code obtains positions through from_index() and
    offset(), which hand out the cached instances below.
    """

    x: int
    y: int

    def __post_init__(self):
        if not (0 <= self.x < BOARD_WIDTH and 0 <= self.y < BOARD_HEIGHT):
            raise ValueError(f"Position out of range: ({self.x}, {self.y})")

    def is_valid(self) -> bool:
        return 0 <= self.x < BOARD_WIDTH and 0 <= self.y < BOARD_HEIGHT

    def is_red_side(self) -> bool:
        return self.y < 5

    def is_black_side(self) -> bool:
        return self.y >= 5

    def is_own_side(self, side: Side) -> bool:
        """True if the square lies on `side`'s half of the river."""
        return self.y < 5 if side is Side.RED else self.y >= 5

    def is_in_palace(self, side: Side) -> bool:
        if not 3 <= self.x <= 5:
            return False
        if side is Side.RED:
            return self.y <= 2
        return self.y >= 7

    def offset(self, dx: int, dy: int) -> Optional["Position"]:
        """Return the square (dx, dy) away, or None if it is off the board."""
        nx = self.x + dx
        ny = self.y + dy
        if 0 <= nx < BOARD_WIDTH and 0 <= ny < BOARD_HEIGHT:
            return _POSITIONS[ny * BOARD_WIDTH + nx]
        return None

    def to_index(self) -> int:
        return self.y * BOARD_WIDTH + self.x

    @staticmethod
    def from_index(index: int) -> Optional["Position"]:
        if 0 <= index < BOARD_SQUARES:
            return _POSITIONS[index]
        return None

    def __repr__(self) -> str:
        return f"Position({self.x}, {self.y})"

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


_POSITIONS = tuple(
    Position(i % BOARD_WIDTH, i // BOARD_WIDTH) for i in range(BOARD_SQUARES)
)

ALL_POSITIONS = _POSITIONS
