"""
Move Generation and Rule Checking

Pseudo-legal generation dispatches on piece kind through a single table;
legal generation then replays every candidate on a scratch copy of the
board and drops the ones that leave the mover's king attacked or the two
kings facing each other on an open file (flying general).

Movement Rules:
    - King: one step orthogonally, confined to the palace
    - Advisor: one step diagonally, confined to the palace
    - Bishop: two steps diagonally, blocked by a piece on the "eye"
      square between, may not cross the river
    - Knight: L-shape, blocked by a piece on the "leg" square next to it
      in the direction of the long leg
    - Rook: slides orthogonally, captures the first enemy piece met
    - Cannon: slides orthogonally to empty squares; captures only by
      jumping exactly one piece (the "screen")
    - Pawn: one step forward; after crossing the river also one step
      sideways

All functions are pure with respect to their inputs.

Reference:
    https://www.xqbase.com/protocol/cchess_move.htm
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from xiangqi_engine.board.pieces import Piece, PieceType, Position, Side
from xiangqi_engine.board.representation import Board, BoardState

ORTHOGONAL = ((0, 1), (0, -1), (1, 0), (-1, 0))
DIAGONAL = ((1, 1), (1, -1), (-1, 1), (-1, -1))

# (destination offset, leg offset)
KNIGHT_STEPS = (
    ((1, 2), (0, 1)),
    ((2, 1), (1, 0)),
    ((2, -1), (1, 0)),
    ((1, -2), (0, -1)),
    ((-1, -2), (0, -1)),
    ((-2, -1), (-1, 0)),
    ((-2, 1), (-1, 0)),
    ((-1, 2), (0, 1)),
)

ICCS_FILES = "abcdefghi"


@dataclass(frozen=True)
class Move:
    """
    A move from one square to another.

    Attributes:
        from_pos: Origin square
        to_pos: Destination square
        captured: Piece standing on to_pos when the move was generated.
            Recorded so undo can restore the board exactly.
    """

    from_pos: Position
    to_pos: Position
    captured: Optional[Piece] = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def to_iccs(self) -> str:
        """Coordinate string, e.g. "h2e2" (file letter + rank digit, twice)."""
        return (
            f"{ICCS_FILES[self.from_pos.x]}{self.from_pos.y}"
            f"{ICCS_FILES[self.to_pos.x]}{self.to_pos.y}"
        )

    @staticmethod
    def from_iccs(text: str) -> "Move":
        """
        Parse an ICCS coordinate string. The captured field is left empty;
        match against generate_legal() to recover it.

        Raises:
            ValueError: If the string is not four valid coordinates
        """
        text = text.strip().lower()
        if len(text) != 4:
            raise ValueError(f"Invalid ICCS move: {text!r}")
        try:
            fx = ICCS_FILES.index(text[0])
            tx = ICCS_FILES.index(text[2])
            fy = int(text[1])
            ty = int(text[3])
        except ValueError:
            raise ValueError(f"Invalid ICCS move: {text!r}") from None
        return Move(Position(fx, fy), Position(tx, ty))

    def __str__(self) -> str:
        return f"{self.from_pos} -> {self.to_pos}"


# ============================================================================
# Pseudo-legal generation
# ============================================================================


def _try_add(board: Board, from_pos: Position, to_pos: Position, side: Side,
             moves: List[Move]) -> None:
    target = board.get(to_pos)
    if target is None:
        moves.append(Move(from_pos, to_pos))
    elif target.side is not side:
        moves.append(Move(from_pos, to_pos, target))


def _king_moves(board: Board, pos: Position, side: Side, moves: List[Move]) -> None:
    for dx, dy in ORTHOGONAL:
        to = pos.offset(dx, dy)
        if to is not None and to.is_in_palace(side):
            _try_add(board, pos, to, side, moves)


def _advisor_moves(board: Board, pos: Position, side: Side, moves: List[Move]) -> None:
    for dx, dy in DIAGONAL:
        to = pos.offset(dx, dy)
        if to is not None and to.is_in_palace(side):
            _try_add(board, pos, to, side, moves)


def _bishop_moves(board: Board, pos: Position, side: Side, moves: List[Move]) -> None:
    for dx, dy in DIAGONAL:
        eye = pos.offset(dx, dy)
        if eye is None or board.get(eye) is not None:
            continue
        to = pos.offset(2 * dx, 2 * dy)
        if to is not None and to.is_own_side(side):
            _try_add(board, pos, to, side, moves)


def _knight_moves(board: Board, pos: Position, side: Side, moves: List[Move]) -> None:
    for (dx, dy), (lx, ly) in KNIGHT_STEPS:
        leg = pos.offset(lx, ly)
        if leg is None or board.get(leg) is not None:
            continue
        to = pos.offset(dx, dy)
        if to is not None:
            _try_add(board, pos, to, side, moves)


def _rook_moves(board: Board, pos: Position, side: Side, moves: List[Move]) -> None:
    for dx, dy in ORTHOGONAL:
        to = pos.offset(dx, dy)
        while to is not None:
            target = board.get(to)
            if target is None:
                moves.append(Move(pos, to))
            else:
                if target.side is not side:
                    moves.append(Move(pos, to, target))
                break
            to = to.offset(dx, dy)


def _cannon_moves(board: Board, pos: Position, side: Side, moves: List[Move]) -> None:
    for dx, dy in ORTHOGONAL:
        screened = False
        to = pos.offset(dx, dy)
        while to is not None:
            target = board.get(to)
            if not screened:
                if target is None:
                    moves.append(Move(pos, to))
                else:
                    screened = True
            elif target is not None:
                if target.side is not side:
                    moves.append(Move(pos, to, target))
                break
            to = to.offset(dx, dy)


def _pawn_moves(board: Board, pos: Position, side: Side, moves: List[Move]) -> None:
    forward = 1 if side is Side.RED else -1
    to = pos.offset(0, forward)
    if to is not None:
        _try_add(board, pos, to, side, moves)

    if not pos.is_own_side(side):
        for dx in (-1, 1):
            to = pos.offset(dx, 0)
            if to is not None:
                _try_add(board, pos, to, side, moves)


_GENERATORS: Dict[PieceType, Callable[[Board, Position, Side, List[Move]], None]] = {
    PieceType.KING: _king_moves,
    PieceType.ADVISOR: _advisor_moves,
    PieceType.BISHOP: _bishop_moves,
    PieceType.KNIGHT: _knight_moves,
    PieceType.ROOK: _rook_moves,
    PieceType.CANNON: _cannon_moves,
    PieceType.PAWN: _pawn_moves,
}


def generate_piece_moves(board: Board, pos: Position, piece: Piece) -> List[Move]:
    """Pseudo-legal moves for the single piece standing on pos."""
    moves: List[Move] = []
    _GENERATORS[piece.piece_type](board, pos, piece.side, moves)
    return moves


def generate_pseudo_legal(board: Board, side: Side) -> List[Move]:
    """
    Generate every move obeying piece movement rules, ignoring king safety.

    Args:
        board: Position to generate from
        side: Side whose pieces move

    Returns:
        List of moves, captures carrying the captured piece
    """
    moves: List[Move] = []
    for pos, piece in board.pieces(side):
        _GENERATORS[piece.piece_type](board, pos, side, moves)
    return moves


def generate_legal(state: BoardState) -> List[Move]:
    """
    Generate the fully legal moves for the side to move.

    Each pseudo-legal move is replayed on a scratch copy of the board and
    rejected if it leaves the mover in check or the kings facing.

    Returns:
        List of legal moves. Empty means checkmate or stalemate; use
        is_in_check() to tell them apart.
    """
    side = state.current_turn
    scratch = state.board.copy()
    legal: List[Move] = []

    for move in generate_pseudo_legal(state.board, side):
        captured = scratch.move_piece(move.from_pos, move.to_pos)
        if not is_in_check(scratch, side) and not scratch.kings_facing():
            legal.append(move)
        scratch.move_piece(move.to_pos, move.from_pos)
        scratch.set(move.to_pos, captured)

    return legal


# ============================================================================
# Attack detection
# ============================================================================


def is_in_check(board: Board, side: Side) -> bool:
    """
    Check whether `side`'s king is attacked by any enemy piece.

    A board without that king counts as not in check.
    """
    king_pos = board.find_king(side)
    if king_pos is None:
        return False

    for pos, piece in board.pieces(side.opponent()):
        if can_attack(board, pos, piece, king_pos):
            return True
    return False


def can_attack(board: Board, from_pos: Position, piece: Piece, target: Position) -> bool:
    """
    Whether `piece` standing on from_pos attacks the target square.

    Kings never attack here; facing kings are handled by
    Board.kings_facing().
    """
    piece_type = piece.piece_type
    dx = target.x - from_pos.x
    dy = target.y - from_pos.y

    if piece_type is PieceType.ROOK:
        return can_rook_attack(board, from_pos, target)

    if piece_type is PieceType.CANNON:
        return can_cannon_attack(board, from_pos, target)

    if piece_type is PieceType.KNIGHT:
        adx, ady = abs(dx), abs(dy)
        if not ((adx == 1 and ady == 2) or (adx == 2 and ady == 1)):
            return False
        if adx == 2:
            leg = from_pos.offset(1 if dx > 0 else -1, 0)
        else:
            leg = from_pos.offset(0, 1 if dy > 0 else -1)
        return board.get(leg) is None

    if piece_type is PieceType.PAWN:
        forward = 1 if piece.side is Side.RED else -1
        if dx == 0 and dy == forward:
            return True
        crossed = not from_pos.is_own_side(piece.side)
        return crossed and dy == 0 and abs(dx) == 1

    if piece_type is PieceType.BISHOP:
        if abs(dx) != 2 or abs(dy) != 2:
            return False
        eye = from_pos.offset(dx // 2, dy // 2)
        return board.get(eye) is None

    if piece_type is PieceType.ADVISOR:
        return abs(dx) == 1 and abs(dy) == 1 and target.is_in_palace(piece.side)

    return False


def _ray_step(from_pos: Position, target: Position):
    if from_pos.x == target.x:
        return 0, (1 if target.y > from_pos.y else -1)
    return (1 if target.x > from_pos.x else -1), 0


def can_rook_attack(board: Board, from_pos: Position, target: Position) -> bool:
    """Straight line with nothing in between."""
    if from_pos == target or (from_pos.x != target.x and from_pos.y != target.y):
        return False

    dx, dy = _ray_step(from_pos, target)
    current = from_pos.offset(dx, dy)
    while current is not None:
        if current == target:
            return True
        if board.get(current) is not None:
            return False
        current = current.offset(dx, dy)
    return False


def can_cannon_attack(board: Board, from_pos: Position, target: Position) -> bool:
    """Straight line with exactly one piece (the screen) in between."""
    if from_pos == target or (from_pos.x != target.x and from_pos.y != target.y):
        return False

    dx, dy = _ray_step(from_pos, target)
    screened = False
    current = from_pos.offset(dx, dy)
    while current is not None:
        if current == target:
            return screened
        if board.get(current) is not None:
            if screened:
                return False
            screened = True
        current = current.offset(dx, dy)
    return False


# ============================================================================
# Terminal classification
# ============================================================================


def is_checkmate(state: BoardState) -> bool:
    """Side to move is in check and has no legal move."""
    if not is_in_check(state.board, state.current_turn):
        return False
    return not generate_legal(state)


def is_stalemate(state: BoardState) -> bool:
    """Side to move is not in check but has no legal move."""
    if is_in_check(state.board, state.current_turn):
        return False
    return not generate_legal(state)


def perft(state: BoardState, depth: int) -> int:
    """
    Count leaf nodes of the legal move tree to the given depth.

    Standard values from the initial position: 44, 1920, 79666, 3290240.
    """
    if depth <= 0:
        return 1

    moves = generate_legal(state)
    if depth == 1:
        return len(moves)

    total = 0
    for move in moves:
        previous = state.no_capture_count
        state.apply_move(move)
        total += perft(state, depth - 1)
        state.undo_move(move, previous)
    return total
