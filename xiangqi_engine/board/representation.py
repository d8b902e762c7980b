"""
Board and Game-State Representation

The board is a dense list of 90 optional pieces indexed by y * 9 + x.
Mutation goes through three primitives only: get(), set() and
move_piece(). A captured piece simply disappears by being overwritten.

BoardState wraps a Board with the side to move and the two counters the
rest of the system needs:
    - no_capture_count: plies since the last capture (draw by inactivity)
    - round: full-move number, incremented after Black moves

Initial Layout (Red at the bottom):
    y=9  r n b a k a b n r
    y=8  . . . . . . . . .
    y=7  . c . . . . . c .
    y=6  p . p . p . p . p
    y=5  . . . . . . . . .      (river)
    y=4  . . . . . . . . .
    y=3  P . P . P . P . P
    y=2  . C . . . . . C .
    y=1  . . . . . . . . .
    y=0  R N B A K A B N R
"""

from typing import TYPE_CHECKING, List, Optional, Tuple

from xiangqi_engine.board.pieces import (
    ALL_POSITIONS,
    BOARD_HEIGHT,
    BOARD_SQUARES,
    BOARD_WIDTH,
    Piece,
    PieceType,
    Position,
    Side,
)

if TYPE_CHECKING:
    from xiangqi_engine.board.moves import Move

# 60 full rounds (120 plies) without a capture is a draw
NO_CAPTURE_DRAW_PLIES = 120

BACK_RANK = [
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ADVISOR,
    PieceType.KING,
    PieceType.ADVISOR,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
]


class Board:
    """
    9x10 grid of optional pieces.

    Attributes:
        squares: List of 90 entries, Piece or None, indexed by y * 9 + x
    """

    __slots__ = ("squares",)

    def __init__(self, squares: Optional[List[Optional[Piece]]] = None):
        if squares is None:
            squares = [None] * BOARD_SQUARES
        elif len(squares) != BOARD_SQUARES:
            raise ValueError(
                f"Board needs {BOARD_SQUARES} squares, got {len(squares)}"
            )
        self.squares = squares

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def initial(cls) -> "Board":
        """Create the standard starting layout."""
        board = cls()

        for x, piece_type in enumerate(BACK_RANK):
            board.set(Position(x, 0), Piece(piece_type, Side.RED))
            board.set(Position(x, 9), Piece(piece_type, Side.BLACK))

        for x in (1, 7):
            board.set(Position(x, 2), Piece(PieceType.CANNON, Side.RED))
            board.set(Position(x, 7), Piece(PieceType.CANNON, Side.BLACK))

        for x in range(0, BOARD_WIDTH, 2):
            board.set(Position(x, 3), Piece(PieceType.PAWN, Side.RED))
            board.set(Position(x, 6), Piece(PieceType.PAWN, Side.BLACK))

        return board

    def get(self, pos: Position) -> Optional[Piece]:
        return self.squares[pos.y * BOARD_WIDTH + pos.x]

    def set(self, pos: Position, piece: Optional[Piece]) -> None:
        self.squares[pos.y * BOARD_WIDTH + pos.x] = piece

    def move_piece(self, from_pos: Position, to_pos: Position) -> Optional[Piece]:
        """
        Move whatever stands on from_pos to to_pos without checking rules.

        Returns:
            The piece previously on to_pos (the capture), or None
        """
        squares = self.squares
        src = from_pos.y * BOARD_WIDTH + from_pos.x
        dst = to_pos.y * BOARD_WIDTH + to_pos.x
        captured = squares[dst]
        squares[dst] = squares[src]
        squares[src] = None
        return captured

    def copy(self) -> "Board":
        return Board(self.squares[:])

    def find_king(self, side: Side) -> Optional[Position]:
        for index, piece in enumerate(self.squares):
            if (
                piece is not None
                and piece.piece_type is PieceType.KING
                and piece.side is side
            ):
                return ALL_POSITIONS[index]
        return None

    def pieces(self, side: Side) -> List[Tuple[Position, Piece]]:
        """All (position, piece) pairs for one side, in index order."""
        return [
            (ALL_POSITIONS[i], piece)
            for i, piece in enumerate(self.squares)
            if piece is not None and piece.side is side
        ]

    def all_pieces(self) -> List[Tuple[Position, Piece]]:
        return [
            (ALL_POSITIONS[i], piece)
            for i, piece in enumerate(self.squares)
            if piece is not None
        ]

    def kings_facing(self) -> bool:
        """
        Flying-general test: both kings on one file with nothing between.

        Returns False if either king is missing.
        """
        red_king = self.find_king(Side.RED)
        black_king = self.find_king(Side.BLACK)
        if red_king is None or black_king is None:
            return False
        if red_king.x != black_king.x:
            return False

        squares = self.squares
        x = red_king.x
        for y in range(red_king.y + 1, black_king.y):
            if squares[y * BOARD_WIDTH + x] is not None:
                return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.squares == other.squares

    def __str__(self) -> str:
        rows = []
        for y in range(BOARD_HEIGHT - 1, -1, -1):
            row = []
            for x in range(BOARD_WIDTH):
                piece = self.squares[y * BOARD_WIDTH + x]
                row.append(piece.to_fen_char() if piece else ".")
            rows.append(" ".join(row))
        return "\n".join(rows)

    def __repr__(self) -> str:
        return f"Board({len(self.all_pieces())} pieces)"


class BoardState:
    """
    A board plus the side to move and the game counters.

    Owned by one writer at a time. The search copies it per explored node,
    so no instance is ever shared across the recursion stack.

    Attributes:
        board: Piece placement
        current_turn: Side to move
        no_capture_count: Plies since the last capture
        round: Full-move number (starts at 1)
    """

    __slots__ = ("board", "current_turn", "no_capture_count", "round")

    def __init__(
        self,
        board: Board,
        current_turn: Side = Side.RED,
        no_capture_count: int = 0,
        round: int = 1,
    ):
        self.board = board
        self.current_turn = current_turn
        self.no_capture_count = no_capture_count
        self.round = round

    @classmethod
    def initial(cls) -> "BoardState":
        return cls(Board.initial(), Side.RED)

    @classmethod
    def from_board(cls, board: Board, current_turn: Side) -> "BoardState":
        return cls(board, current_turn)

    def copy(self) -> "BoardState":
        return BoardState(
            self.board.copy(), self.current_turn, self.no_capture_count, self.round
        )

    def switch_turn(self) -> None:
        self.current_turn = self.current_turn.opponent()
        if self.current_turn is Side.RED:
            self.round += 1

    def apply_move(self, move: "Move") -> Optional[Piece]:
        """
        Play a move in place and hand the turn to the opponent.

        Returns:
            The captured piece, or None
        """
        captured = self.board.move_piece(move.from_pos, move.to_pos)
        if captured is not None:
            self.no_capture_count = 0
        else:
            self.no_capture_count += 1
        self.switch_turn()
        return captured

    def undo_move(self, move: "Move", previous_no_capture_count: int) -> None:
        """
        Reverse apply_move() using the capture recorded on the move.

        Args:
            move: The move that was applied (its `captured` field must be
                the piece that stood on the destination, if any)
            previous_no_capture_count: Counter value before the move
        """
        if self.current_turn is Side.RED:
            self.round -= 1
        self.current_turn = self.current_turn.opponent()
        self.board.move_piece(move.to_pos, move.from_pos)
        self.board.set(move.to_pos, move.captured)
        self.no_capture_count = previous_no_capture_count

    def is_no_capture_draw(self) -> bool:
        return self.no_capture_count >= NO_CAPTURE_DRAW_PLIES

    def __eq__(self, other) -> bool:
        if not isinstance(other, BoardState):
            return NotImplemented
        return (
            self.board == other.board
            and self.current_turn is other.current_turn
            and self.no_capture_count == other.no_capture_count
            and self.round == other.round
        )

    def __repr__(self) -> str:
        return (
            f"BoardState(turn={self.current_turn.name}, "
            f"no_capture={self.no_capture_count}, round={self.round})"
        )
