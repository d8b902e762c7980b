"""
FEN Parsing and Formatting

Xiangqi FEN layout:
    <board> <side to move> <no-capture plies> <round>

    rnbakabnr/9/1c5c1/p1p1p1p1p/9/9/P1P1P1P1P/1C5C1/9/RNBAKABNR r 0 1

Rows are listed from Black's back rank (y=9) down to Red's (y=0). Digits
count empty squares. Upper case letters are Red pieces, lower case Black:
    k king, a advisor, b bishop, n knight, r rook, c cannon, p pawn

Only the board field is mandatory; missing fields default to Red to move,
0 plies without capture and round 1.

This is the validation boundary: malformed strings raise ValueError here
so the search never sees an ill-formed position.
"""

from xiangqi_engine.board.pieces import BOARD_HEIGHT, BOARD_WIDTH, Piece, Position, Side
from xiangqi_engine.board.representation import Board, BoardState

INITIAL_FEN = "rnbakabnr/9/1c5c1/p1p1p1p1p/9/9/P1P1P1P1P/1C5C1/9/RNBAKABNR r 0 1"


def parse_board(board_str: str) -> Board:
    """
    Parse the piece-placement field.

    Raises:
        ValueError: Wrong row count, wrong column count or unknown piece
    """
    rows = board_str.split("/")
    if len(rows) != BOARD_HEIGHT:
        raise ValueError(f"Expected {BOARD_HEIGHT} rows, got {len(rows)}")

    board = Board.empty()
    for row_idx, row in enumerate(rows):
        y = BOARD_HEIGHT - 1 - row_idx
        x = 0
        for c in row:
            if x >= BOARD_WIDTH:
                raise ValueError(f"Row {row_idx} has too many columns")
            if c.isdigit():
                x += int(c)
                continue
            piece = Piece.from_fen_char(c)
            if piece is None:
                raise ValueError(f"Invalid piece character: {c!r}")
            board.set(Position(x, y), piece)
            x += 1

        if x != BOARD_WIDTH:
            raise ValueError(f"Row {row_idx} has {x} columns, expected {BOARD_WIDTH}")

    return board


def parse_fen(fen: str) -> BoardState:
    """
    Parse a full FEN string into a BoardState.

    Unparseable counters fall back to their defaults.

    Raises:
        ValueError: If the string is empty or the board field is malformed
    """
    parts = fen.split()
    if not parts:
        raise ValueError("Empty FEN string")

    board = parse_board(parts[0])

    current_turn = Side.RED
    if len(parts) > 1:
        current_turn = Side.from_fen_char(parts[1][0]) or Side.RED

    no_capture_count = _parse_int(parts[2], 0) if len(parts) > 2 else 0
    round_number = _parse_int(parts[3], 1) if len(parts) > 3 else 1

    return BoardState(board, current_turn, no_capture_count, round_number)


def _parse_int(text: str, default: int) -> int:
    try:
        return int(text)
    except ValueError:
        return default


def board_to_fen(board: Board) -> str:
    """Format the piece-placement field."""
    rows = []
    for y in range(BOARD_HEIGHT - 1, -1, -1):
        row = ""
        empty = 0
        for x in range(BOARD_WIDTH):
            piece = board.get(Position(x, y))
            if piece is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += piece.to_fen_char()
        if empty:
            row += str(empty)
        rows.append(row)
    return "/".join(rows)


def to_fen(state: BoardState) -> str:
    return (
        f"{board_to_fen(state.board)} {state.current_turn.to_fen_char()} "
        f"{state.no_capture_count} {state.round}"
    )


def initial_state() -> BoardState:
    return parse_fen(INITIAL_FEN)
